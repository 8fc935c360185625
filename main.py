"""Stundenplan-Allokationen: Haupt-CLI.

Verwendung:
  python main.py persist                  Speicher neu sortieren/deduplizieren
  python main.py persist --input neu.json Neue Allokationen zusammenführen
  python main.py persist --replace --input neu.json
                                          Speicher durch neue Allokationen ersetzen
  python main.py conflicts                Doppelbelegungen anzeigen
  python main.py validate                 Integritätsprüfung des Speichers
  python main.py generate <blueprint.json> --teacher-map map.json
                                          Allokationen aus Blueprint erzeugen
  python main.py config init              Standard-Konfiguration anlegen
  python main.py config show              Konfiguration anzeigen
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def _setup_logging(level: str, show_time: bool = False) -> None:
    """Leitet alle Modul-Logger über Rich auf die Konsole."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=show_time, show_path=False)],
        force=True,
    )


def _load_config_or_abort():
    """Lädt die Konfiguration (ohne Datei: Defaults) oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        return mgr, mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _abort(message: str) -> None:
    console.print(f"[red bold]Fehler:[/red bold] {message}")
    sys.exit(1)


def _open_data(data_dir: Optional[str]):
    """Config + Stammdaten + Speicher-Handle für einen Befehl."""
    from data.loader import ReferenceDataLoader, DataLoadError
    from persistence import JsonAllocationStore

    mgr, config = _load_config_or_abort()
    loader = ReferenceDataLoader(config.data, Path(data_dir) if data_dir else None)
    try:
        reference_data = loader.load()
    except DataLoadError as e:
        _abort(str(e))
    store = JsonAllocationStore(loader.allocations_path, loader.backup_dir)
    return config, reference_data, store


def _read_store(store):
    from data.loader import parse_allocations, DataLoadError
    from persistence import StorageError

    try:
        return parse_allocations(store.read(), str(store.path))
    except (StorageError, DataLoadError) as e:
        _abort(str(e))


def _print_persist_summary(summary) -> None:
    lines = [
        f"[bold]Modus:[/bold] {summary.mode.value}",
        f"[bold]Allokationen:[/bold] {summary.total}",
        f"[bold]Entfernte Duplikate:[/bold] {summary.dropped_duplicates}",
        f"[bold]Backup:[/bold] {summary.backup_path.name if summary.backup_path else '—'}",
    ]
    console.print(Panel("\n".join(lines), title="Persistenz", border_style="green"))
    if summary.departments:
        console.print(f"[dim]Fachbereiche: {', '.join(summary.departments)}[/dim]")


def _persist(reference_data, store, incoming, replace: bool) -> None:
    from persistence import (
        AllocationPersistence, AllocationValidationError, PersistMode, StorageError,
    )

    mode = PersistMode.REPLACE if replace else PersistMode.MERGE
    try:
        summary = AllocationPersistence(reference_data).persist(incoming, mode, store)
    except AllocationValidationError as e:
        _abort(f"{e}\nDer Speicher wurde nicht verändert.")
    except StorageError as e:
        _abort(str(e))
    _print_persist_summary(summary)


# ─── PERSIST ──────────────────────────────────────────────────────────────────

@click.command("persist")
@click.option("--replace", is_flag=True, default=False,
              help="Bestehende Allokationen ersetzen statt zusammenführen.")
@click.option("--input", "input_path", type=click.Path(exists=True, path_type=Path),
              default=None, help="JSON-Datei mit neuen Allokationen.")
@click.option("--data-dir", default=None, help="Datenverzeichnis (überschreibt Config).")
def cmd_persist(replace: bool, input_path: Optional[Path], data_dir: Optional[str]):
    """Speichert Allokationen sortiert und dedupliziert (Standard: Merge)."""
    from data.loader import load_allocation_records, DataLoadError

    if replace and input_path is None:
        _abort("--replace ohne --input würde alle Allokationen löschen.")

    config, reference_data, store = _open_data(data_dir)
    incoming = []
    if input_path is not None:
        try:
            incoming = load_allocation_records(input_path)
        except DataLoadError as e:
            _abort(str(e))
        console.print(f"[bold]Neue Allokationen:[/bold] {len(incoming)} aus {input_path}")

    _persist(reference_data, store, incoming, replace)


# ─── CONFLICTS ────────────────────────────────────────────────────────────────

@click.command("conflicts")
@click.option("--semester", default=None, help="Nur Einträge dieses Semesters prüfen.")
@click.option("--data-dir", default=None, help="Datenverzeichnis (überschreibt Config).")
def cmd_conflicts(semester: Optional[str], data_dir: Optional[str]):
    """Zeigt Lehrkraft- und Raum-Doppelbelegungen im Speicher an."""
    from analysis.conflict_detector import ConflictDetector

    config, reference_data, store = _open_data(data_dir)
    allocations = _read_store(store)
    entries = allocations
    if semester:
        entries = [a for a in allocations if a.semester_id == semester]
        console.print(f"[bold]Semester {semester}:[/bold] {len(entries)} Einträge")

    # Geprüft wird immer gegen alle Semester
    report = ConflictDetector(reference_data).detect(entries, allocations)
    report.print_rich(reference_data)


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.option("--data-dir", default=None, help="Datenverzeichnis (überschreibt Config).")
def cmd_validate(data_dir: Optional[str]):
    """Integritätsprüfung: Konflikte, Tage, Perioden, Referenzen, Räume."""
    from analysis.integrity_validator import IntegrityValidator

    config, reference_data, store = _open_data(data_dir)
    console.print(f"\n{reference_data.summary()}\n")
    allocations = _read_store(store)

    report = IntegrityValidator(reference_data, config.validation).validate(allocations)
    report.print_rich()

    sys.exit(0 if report.is_valid else 1)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.argument("blueprint", type=click.Path(exists=True, path_type=Path))
@click.option("--teacher-map", required=True, type=click.Path(exists=True, path_type=Path),
              help="JSON: Fachkürzel → Lehrkraft-ID.")
@click.option("--room-overrides", default=None, type=click.Path(exists=True, path_type=Path),
              help="JSON: Raum-Ausnahmen je Fach/Tag/Periode (z.B. Labore).")
@click.option("--semester", default="sem1", show_default=True, help="Semester-ID der Einträge.")
@click.option("--output", "-o", default=None, type=click.Path(path_type=Path),
              help="Erzeugte Allokationen als JSON speichern.")
@click.option("--persist", "do_persist", is_flag=True, default=False,
              help="Erzeugte Allokationen direkt in den Speicher übernehmen.")
@click.option("--replace", is_flag=True, default=False,
              help="Mit --persist: Speicher ersetzen statt zusammenführen.")
@click.option("--data-dir", default=None, help="Datenverzeichnis (überschreibt Config).")
def cmd_generate(blueprint: Path, teacher_map: Path, room_overrides: Optional[Path],
                 semester: str, output: Optional[Path], do_persist: bool, replace: bool,
                 data_dir: Optional[str]):
    """Erzeugt Allokationen aus einem Fachbereichs-Blueprint."""
    from data.blueprint import (
        BlueprintError, BlueprintGenerator, load_blueprint,
        load_room_overrides, load_subject_teacher_map,
    )
    from persistence import JsonAllocationStore, StorageError

    try:
        gen = BlueprintGenerator(
            load_blueprint(blueprint),
            load_subject_teacher_map(teacher_map),
            semester,
            load_room_overrides(room_overrides) if room_overrides else [],
        )
        result = gen.generate()
    except BlueprintError as e:
        _abort(str(e))

    gen.print_summary(result)
    if result.duplicate_ids:
        _abort("Doppelte IDs im Blueprint, nichts gespeichert.")

    if output is not None:
        try:
            JsonAllocationStore(output).write([e.to_record() for e in result.entries])
        except StorageError as e:
            _abort(str(e))
        console.print(f"[green]✓[/green] Allokationen gespeichert: {output}")

    if do_persist:
        config, reference_data, store = _open_data(data_dir)
        _persist(reference_data, store, result.entries, replace)


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anlegen oder anzeigen."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False, help="Bestehende Config überschreiben.")
def config_init(force: bool):
    """Legt die Standard-Konfiguration an (config/app_config.yaml)."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Mit [bold]--force[/bold] wird sie überschrieben."
        )
        return
    mgr.save(default_app_config())


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()

    source = "Standardwerte" if mgr.first_run_check() else str(mgr.DEFAULT_CONFIG)
    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]  |  Quelle: {source}",
        title="Konfiguration",
        border_style="cyan",
    ))

    d = config.data
    table = Table(title="Datendateien", box=box.ROUNDED)
    table.add_column("Eintrag", style="bold cyan")
    table.add_column("Datei")
    table.add_row("Verzeichnis", d.data_dir)
    table.add_row("Allokationen", d.allocations_file)
    table.add_row("Fächer", d.subjects_file)
    table.add_row("Fachbereiche", d.departments_file)
    table.add_row("Lehrkräfte", d.teachers_file)
    table.add_row("Räume", d.rooms_file)
    table.add_row("Zeitslots", d.timeslots_file)
    table.add_row("Tage", d.days_file)
    table.add_row("Semester", d.semesters_file)
    table.add_row("Backups", d.backup_dir or "(neben Allokationen)")
    console.print(table)

    v = config.validation
    console.print(
        f"\n[bold]Tage:[/bold] {', '.join(v.allowed_days)}\n"
        f"[bold]Perioden:[/bold] {', '.join(map(str, v.allowed_periods))}"
    )
    for dept_id, periods in v.period_restrictions.items():
        console.print(f"[bold]Fachbereich {dept_id}:[/bold] nur Perioden "
                      f"{', '.join(map(str, periods))}")
    console.print(f"[bold]Log-Level:[/bold] {config.logging.level.value}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Ausgaben anzeigen.")
def cli(verbose: bool):
    """Stundenplan-Allokationen: Konfliktprüfung und Persistenz.

    Starten Sie mit: python main.py config init
    """
    from config.manager import ConfigManager
    try:
        log_config = ConfigManager().load_or_default().logging
        level, show_time = log_config.level.value, log_config.show_time
    except ValueError:
        # Fehlermeldung folgt im jeweiligen Befehl
        level, show_time = "INFO", False
    _setup_logging("DEBUG" if verbose else level, show_time)


def main():
    """Einstiegspunkt."""
    cli()


# Befehle registrieren
cli.add_command(cmd_persist)
cli.add_command(cmd_conflicts)
cli.add_command(cmd_validate)
cli.add_command(cmd_generate)
cli.add_command(cmd_config)


if __name__ == "__main__":
    main()
