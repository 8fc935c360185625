"""Erzeugt Allokationen aus einem Fachbereichs-Blueprint.

Der Blueprint beschreibt je Fachbereich die Fächer mit Wochentagen
(1=Montag … 7=Sonntag), Periode und Zeitslot. Daraus entsteht pro Fach
und Tag eine Allokation mit stabiler ID ``{subjectCode}-{tag}-{periode}``
(kleingeschrieben), sodass wiederholte Läufe dieselben IDs liefern und
beim Merge nicht doppelt gespeichert werden.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from data.loader import read_json_file, DataLoadError
from models.allocation import Allocation
from models.base import RecordModel
from models.day import day_name

logger = logging.getLogger(__name__)


class BlueprintError(Exception):
    """Fehler beim Laden oder Auswerten eines Blueprints."""


class BlueprintSubject(RecordModel):
    """Ein Fach im Blueprint mit seinen Unterrichtstagen."""

    subject_id: str
    subject_code: str
    days: list[int]          # 1=Montag … 7=Sonntag
    period: int
    time_slot_id: str


class DepartmentBlueprint(RecordModel):
    """Blueprint eines Fachbereichs (Standardraum + Fächer)."""

    department: str
    department_id: str
    room_id: Optional[str] = None
    allocations: list[BlueprintSubject] = []


class RoomOverride(RecordModel):
    """Abweichender Raum für ein Fach an einem bestimmten Tag/Periode (z.B. Labore)."""

    subject_code: str
    day: str                 # "Monday"
    period: int
    room_id: str


class GenerationResult(BaseModel):
    """Ergebnis eines Generator-Laufs inkl. Prüfzahlen."""

    entries: list[Allocation]
    subjects_processed: int
    duplicate_ids: list[str]
    without_teacher: int
    without_room: int
    entries_by_department: dict[str, int]


def make_stable_id(subject_code: str, day_number: int, period: int) -> str:
    """"CS-101", 1, 3 → "cs-101-monday-3"."""
    return f"{subject_code}-{day_name(day_number) or 'Unknown'}-{period}".lower()


class BlueprintGenerator:
    """Erzeugt Allokationen aus Blueprint, Fach→Lehrkraft-Zuordnung und Raum-Ausnahmen."""

    def __init__(
        self,
        blueprint: list[DepartmentBlueprint],
        subject_teacher_map: dict[str, str],
        semester_id: str,
        room_overrides: Optional[list[RoomOverride]] = None,
    ) -> None:
        self.blueprint = blueprint
        self.subject_teacher_map = subject_teacher_map
        self.semester_id = semester_id
        self._overrides = {
            (o.subject_code, o.day, o.period): o.room_id for o in (room_overrides or [])
        }

    def _resolve_room(self, dept: DepartmentBlueprint, subject: BlueprintSubject,
                      day: str) -> Optional[str]:
        override = self._overrides.get((subject.subject_code, day, subject.period))
        return override or dept.room_id

    def generate(self) -> GenerationResult:
        """Erzeugt alle Allokationen (Reihenfolge wie im Blueprint)."""
        entries: list[Allocation] = []
        subjects_processed = 0

        for dept in self.blueprint:
            logger.debug(f"Fachbereich {dept.department} ({dept.department_id}): "
                         f"{len(dept.allocations)} Fächer")
            for subject in dept.allocations:
                subjects_processed += 1
                teacher_id = self.subject_teacher_map.get(subject.subject_code)
                if not teacher_id:
                    logger.warning(f"Keine Lehrkraft für Fach {subject.subject_code}")

                for day_number in subject.days:
                    day = day_name(day_number)
                    if day is None:
                        raise BlueprintError(
                            f"Fach {subject.subject_code}: ungültiger Tag {day_number} "
                            f"(erlaubt 1-7)."
                        )
                    entries.append(Allocation(
                        id=make_stable_id(subject.subject_code, day_number, subject.period),
                        semester_id=self.semester_id,
                        subject_id=subject.subject_id,
                        teacher_id=teacher_id,
                        time_slot_id=subject.time_slot_id,
                        day=day,
                        room=self._resolve_room(dept, subject, day),
                        departmentId=dept.department_id,
                        period=subject.period,
                        subjectCode=subject.subject_code,
                    ))

        id_counts = Counter(e.id for e in entries)
        duplicates = sorted(i for i, n in id_counts.items() if n > 1)
        if duplicates:
            logger.error(f"{len(duplicates)} doppelte Eintrags-IDs: {', '.join(duplicates)}")

        by_department: Counter = Counter()
        for e in entries:
            by_department[(e.model_extra or {}).get("departmentId", "")] += 1

        return GenerationResult(
            entries=entries,
            subjects_processed=subjects_processed,
            duplicate_ids=duplicates,
            without_teacher=sum(1 for e in entries if not e.teacher_id),
            without_room=sum(1 for e in entries if not e.room),
            entries_by_department=dict(by_department),
        )

    def print_summary(self, result: GenerationResult) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Allokationen aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        names = {d.department_id: d.department for d in self.blueprint}
        console = Console()
        table = Table(title="Erzeugte Allokationen", box=box.ROUNDED)
        table.add_column("Fachbereich", style="bold cyan")
        table.add_column("Einträge", justify="right")
        for dept_id, count in result.entries_by_department.items():
            table.add_row(f"{names.get(dept_id, dept_id)} ({dept_id})", str(count))
        table.add_row("[bold]Gesamt[/bold]", f"[bold]{len(result.entries)}[/bold]")
        console.print(table)

        if result.duplicate_ids:
            console.print(f"[red]✗ {len(result.duplicate_ids)} doppelte IDs[/red]")
        if result.without_teacher:
            console.print(f"[yellow]⚠ {result.without_teacher} Einträge ohne Lehrkraft[/yellow]")
        if result.without_room:
            console.print(f"[yellow]⚠ {result.without_room} Einträge ohne Raum[/yellow]")


# ─── Laden ────────────────────────────────────────────────────────────────────

def _read(path: Path) -> Any:
    try:
        return read_json_file(path)
    except DataLoadError as e:
        raise BlueprintError(str(e)) from e


def load_blueprint(path: Path) -> list[DepartmentBlueprint]:
    raw = _read(path)
    if not isinstance(raw, list):
        raise BlueprintError(f"{path}: Blueprint muss eine Liste von Fachbereichen sein.")
    try:
        return [DepartmentBlueprint.model_validate(d) for d in raw]
    except ValidationError as e:
        raise BlueprintError(f"{path}: Blueprint ungültig: {e}") from e


def load_subject_teacher_map(path: Path) -> dict[str, str]:
    """Akzeptiert ``{"subjectTeacherMap": {...}}`` oder ein flaches Dict."""
    raw = _read(path)
    if isinstance(raw, dict) and isinstance(raw.get("subjectTeacherMap"), dict):
        raw = raw["subjectTeacherMap"]
    if not isinstance(raw, dict):
        raise BlueprintError(f"{path}: Erwartet Zuordnung Fachkürzel → Lehrkraft-ID.")
    return {str(k): str(v) for k, v in raw.items() if v}


def load_room_overrides(path: Path) -> list[RoomOverride]:
    """Akzeptiert eine Liste oder ``{"roomOverrides"|"chemistryRoomAssignments": [...]}``."""
    raw = _read(path)
    if isinstance(raw, dict):
        raw = raw.get("roomOverrides", raw.get("chemistryRoomAssignments"))
    if not isinstance(raw, list):
        raise BlueprintError(f"{path}: Erwartet eine Liste von Raum-Ausnahmen.")
    try:
        return [RoomOverride.model_validate(o) for o in raw]
    except ValidationError as e:
        raise BlueprintError(f"{path}: Raum-Ausnahmen ungültig: {e}") from e
