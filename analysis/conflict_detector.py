"""Konflikterkennung: Doppelbelegungen von Lehrkräften und Räumen.

Zwei Einträge kollidieren, wenn sie dieselbe Lehrkraft (bzw. denselben
Raum) im selben Zeitslot am selben Tag belegen. Das Semester ist
NICHT Teil des Schlüssels: eine Lehrkraft kann nicht gleichzeitig
in Semester 1 und Semester 3 unterrichten.

Einträge ohne Lehrkraft bzw. ohne Raum nehmen an der jeweiligen
Konfliktart nie teil.
"""

import logging
from collections import defaultdict
from typing import Iterable, Literal, Optional, Sequence

from pydantic import BaseModel

from config.defaults import UNASSIGNED_LABEL, UNKNOWN_LABEL, UNKNOWN_SEMESTER_LABEL
from models.allocation import Allocation
from models.reference_data import ReferenceData

logger = logging.getLogger(__name__)

ConflictKind = Literal["teacher", "room"]


class Conflict(BaseModel):
    """Eine Doppelbelegung (berechnet, nie gespeichert)."""

    kind: ConflictKind
    time_slot_id: str
    day: str
    resource: str          # teacherId bzw. Raum-Schlüssel
    entry_ids: list[str]   # alle beteiligten Einträge, in Eingabe-Reihenfolge


class ConflictReport(BaseModel):
    """Ergebnis der Konfliktprüfung über eine Menge von Einträgen."""

    conflicts: list[Conflict] = []

    @property
    def teacher_conflicts(self) -> list[Conflict]:
        return [c for c in self.conflicts if c.kind == "teacher"]

    @property
    def room_conflicts(self) -> list[Conflict]:
        return [c for c in self.conflicts if c.kind == "room"]

    @property
    def is_valid(self) -> bool:
        return not self.conflicts

    def print_rich(self, reference_data: Optional[ReferenceData] = None) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ KEINE KONFLIKTE[/bold green]"
            if self.is_valid
            else "[bold red]✗ KONFLIKTE GEFUNDEN[/bold red]"
        )
        lines = [
            status,
            f"Lehrkraft-Konflikte: {len(self.teacher_conflicts)} | "
            f"Raum-Konflikte: {len(self.room_conflicts)}",
        ]
        console.print(Panel("\n".join(lines), title="Konfliktprüfung", border_style="cyan"))

        if not self.conflicts:
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=9)
        table.add_column("Tag", width=10)
        table.add_column("Slot", width=8)
        table.add_column("Ressource", width=16)
        table.add_column("Einträge")

        for c in self.conflicts:
            resource = c.resource
            if reference_data is not None:
                if c.kind == "teacher":
                    teacher = reference_data.teacher(c.resource)
                    resource = teacher.name if teacher else c.resource
                else:
                    room = reference_data.room(c.resource)
                    resource = room.name if room else c.resource
            color = "red" if c.kind == "teacher" else "yellow"
            table.add_row(
                f"[{color}]{c.kind.upper()}[/{color}]",
                c.day,
                c.time_slot_id,
                resource,
                ", ".join(c.entry_ids),
            )
        console.print(table)


class ConflictingEntry(BaseModel):
    """Ein kollidierender Eintrag mit aufgelösten Anzeigenamen."""

    entry_id: str
    subject_name: str
    teacher_name: str
    room_name: str
    day_name: str
    department_name: str
    semester_label: str


class GroupConflictDetails(BaseModel):
    """Konflikte einer Gruppe (gleiches Fach + Lehrkraft über mehrere Tage)."""

    teacher_conflicts: list[ConflictingEntry] = []
    room_conflicts: list[ConflictingEntry] = []

    @property
    def has_conflicts(self) -> bool:
        return bool(self.teacher_conflicts or self.room_conflicts)


class ConflictDetector:
    """Prüft Einträge bzw. Gruppen von Einträgen auf Doppelbelegungen."""

    def __init__(self, reference_data: ReferenceData):
        self.ref = reference_data

    # ── Gruppen-Prüfung ───────────────────────────────────────────────────────

    def _group_conflicts(
        self, group: Sequence[Allocation], universe: Iterable[Allocation]
    ) -> tuple[list[Allocation], list[Allocation]]:
        """Kandidaten aus universe, die mit der Gruppe kollidieren.

        Referenz ist der erste Eintrag der Gruppe; verglichen wird gegen
        alle Tage der Gruppe.
        """
        if not group:
            return [], []

        first = group[0]
        # ohne Zeitslot keine Doppelbelegung
        if not first.time_slot_id:
            return [], []
        group_ids = {e.id for e in group}
        current_days = {self.ref.canonical_day(e.day) for e in group} - {None}
        first_room = self.ref.room_key(first)

        teacher_conflicts: list[Allocation] = []
        room_conflicts: list[Allocation] = []
        for candidate in universe:
            if candidate.id in group_ids:
                continue
            if candidate.time_slot_id != first.time_slot_id:
                continue
            candidate_day = self.ref.canonical_day(candidate.day)
            if candidate_day is None or candidate_day not in current_days:
                continue
            if first.teacher_id and candidate.teacher_id == first.teacher_id:
                teacher_conflicts.append(candidate)
            if first_room and self.ref.room_key(candidate) == first_room:
                room_conflicts.append(candidate)
        return teacher_conflicts, room_conflicts

    def has_conflicts(
        self, group: Sequence[Allocation], universe: Iterable[Allocation]
    ) -> bool:
        """True wenn mindestens ein Lehrkraft- oder Raumkonflikt besteht."""
        teacher_conflicts, room_conflicts = self._group_conflicts(group, universe)
        return bool(teacher_conflicts or room_conflicts)

    def describe_conflicts(
        self, group: Sequence[Allocation], universe: Iterable[Allocation]
    ) -> GroupConflictDetails:
        """Strukturierte Konfliktdetails mit aufgelösten Namen.

        Die Formatierung als Text ist Sache der Anzeige-Schicht.
        """
        teacher_conflicts, room_conflicts = self._group_conflicts(group, universe)
        return GroupConflictDetails(
            teacher_conflicts=[self.resolve_entry(e) for e in teacher_conflicts],
            room_conflicts=[self.resolve_entry(e) for e in room_conflicts],
        )

    def resolve_entry(self, entry: Allocation) -> ConflictingEntry:
        """Löst die Fremdschlüssel eines Eintrags in Anzeigenamen auf.

        Nicht auflösbare Referenzen erzeugen eine Warnung und fallen auf
        die rohe ID bzw. "Unknown"/"Unassigned" zurück.
        """
        ref = self.ref

        subject = ref.subject(entry.subject_id)
        if subject is None:
            logger.warning(f"Eintrag {entry.id}: Fach nicht gefunden: {entry.subject_id}")
            subject_name = entry.subject_id or UNKNOWN_LABEL
        else:
            subject_name = subject.name

        if not entry.teacher_id:
            teacher_name = UNASSIGNED_LABEL
        else:
            teacher = ref.teacher(entry.teacher_id)
            if teacher is None:
                logger.warning(f"Eintrag {entry.id}: Lehrkraft nicht gefunden: {entry.teacher_id}")
            teacher_name = teacher.name if teacher else entry.teacher_id

        if not entry.has_room:
            room_name = UNASSIGNED_LABEL
        else:
            room = ref.allocation_room(entry)
            room_name = room.name if room else (entry.room or entry.room_id)

        department = ref.department_for_subject(entry.subject_id)
        if department is None and subject is not None:
            logger.warning(
                f"Eintrag {entry.id}: Fachbereich nicht gefunden für Fach "
                f"{entry.subject_id}: {subject.department_id}"
            )

        semester = ref.semester(entry.semester_id)
        return ConflictingEntry(
            entry_id=entry.id,
            subject_name=subject_name,
            teacher_name=teacher_name,
            room_name=room_name,
            day_name=ref.canonical_day(entry.day) or UNKNOWN_LABEL,
            department_name=department.name if department else UNKNOWN_LABEL,
            semester_label=semester.label if semester else UNKNOWN_SEMESTER_LABEL,
        )

    # ── Gesamt-Prüfung ────────────────────────────────────────────────────────

    def detect(
        self,
        entries: Sequence[Allocation],
        universe: Optional[Iterable[Allocation]] = None,
    ) -> ConflictReport:
        """Findet alle Doppelbelegungen, an denen ``entries`` beteiligt sind.

        Geprüft wird gegen ``entries`` + ``universe`` (je ID zählt das erste
        Vorkommen). Ohne universe werden nur die Einträge untereinander geprüft.
        """
        pool: dict[str, Allocation] = {}
        for e in list(entries) + list(universe or []):
            pool.setdefault(e.id, e)
        subject_ids = {e.id for e in entries}

        by_teacher: dict[tuple, list[str]] = defaultdict(list)
        by_room: dict[tuple, list[str]] = defaultdict(list)
        for e in pool.values():
            day = self.ref.canonical_day(e.day)
            if not e.time_slot_id or not day:
                continue
            if e.teacher_id:
                by_teacher[(e.teacher_id, e.time_slot_id, day)].append(e.id)
            room_key = self.ref.room_key(e)
            if room_key:
                by_room[(room_key, e.time_slot_id, day)].append(e.id)

        conflicts: list[Conflict] = []
        for kind, buckets in (("teacher", by_teacher), ("room", by_room)):
            for (resource, time_slot_id, day), ids in buckets.items():
                if len(ids) > 1 and subject_ids.intersection(ids):
                    conflicts.append(Conflict(
                        kind=kind,
                        time_slot_id=time_slot_id,
                        day=day,
                        resource=resource,
                        entry_ids=ids,
                    ))

        if conflicts:
            logger.info(
                f"Konfliktprüfung: {len(conflicts)} Konflikt(e) "
                f"in {len(pool)} Einträgen"
            )
        return ConflictReport(conflicts=conflicts)


def detect_conflicts(
    entries: Sequence[Allocation],
    universe: Optional[Iterable[Allocation]],
    reference_data: ReferenceData,
) -> ConflictReport:
    """Kurzform für ``ConflictDetector(reference_data).detect(entries, universe)``."""
    return ConflictDetector(reference_data).detect(entries, universe)
