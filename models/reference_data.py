"""ReferenceData: Stammdaten als ID-Lookup-Tabellen (Pydantic v2).

Reine Transformation bereits gelesener Datensätze; das Lesen der Dateien
übernimmt ``data.loader``. Fehlende Fremdschlüssel führen nie zu einem
Fehler – die Lookups liefern dann ``None``.
"""

from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel, PrivateAttr

from data.room_lookup import build_room_lookup_map, lookup_room, normalize_room_name
from models.allocation import Allocation
from models.day import DAY_ORDER, Day
from models.department import Department
from models.room import Room
from models.semester import Semester
from models.subject import Subject
from models.teacher import Teacher
from models.timeslot import TimeSlot

T = TypeVar("T", bound=BaseModel)


def _index(records: Iterable[T]) -> dict[str, T]:
    # Doppelte IDs in der Eingabe: der letzte Datensatz gewinnt
    return {r.id: r for r in records}


def _parse(model: type[T], records: Iterable[Any]) -> list[T]:
    return [r if isinstance(r, model) else model.model_validate(r) for r in records]


class ReferenceData(BaseModel):
    """Vollständiger Stammdatensatz: Fächer, Fachbereiche, Lehrkräfte, Räume, Slots."""

    subjects: list[Subject] = []
    departments: list[Department] = []
    teachers: list[Teacher] = []
    rooms: list[Room] = []
    time_slots: list[TimeSlot] = []
    days: list[Day] = []
    semesters: list[Semester] = []

    _subject_map: dict[str, Subject] = PrivateAttr(default_factory=dict)
    _department_map: dict[str, Department] = PrivateAttr(default_factory=dict)
    _teacher_map: dict[str, Teacher] = PrivateAttr(default_factory=dict)
    _room_map: dict[str, Room] = PrivateAttr(default_factory=dict)
    _room_lookup: dict[str, Room] = PrivateAttr(default_factory=dict)
    _time_slot_map: dict[str, TimeSlot] = PrivateAttr(default_factory=dict)
    _day_map: dict[str, Day] = PrivateAttr(default_factory=dict)
    _semester_map: dict[str, Semester] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._subject_map = _index(self.subjects)
        self._department_map = _index(self.departments)
        self._teacher_map = _index(self.teachers)
        self._room_map = _index(self.rooms)
        self._room_lookup = build_room_lookup_map(self.rooms)
        self._time_slot_map = _index(self.time_slots)
        self._day_map = _index(self.days)
        self._semester_map = _index(self.semesters)

    @classmethod
    def from_records(
        cls,
        subjects: Iterable[Any] = (),
        departments: Iterable[Any] = (),
        teachers: Iterable[Any] = (),
        rooms: Iterable[Any] = (),
        time_slots: Iterable[Any] = (),
        days: Iterable[Any] = (),
        semesters: Iterable[Any] = (),
    ) -> "ReferenceData":
        """Baut die Lookup-Tabellen aus rohen Dicts (JSON) oder fertigen Modellen."""
        return cls(
            subjects=_parse(Subject, subjects),
            departments=_parse(Department, departments),
            teachers=_parse(Teacher, teachers),
            rooms=_parse(Room, rooms),
            time_slots=_parse(TimeSlot, time_slots),
            days=_parse(Day, days),
            semesters=_parse(Semester, semesters),
        )

    # ─── Einfache Lookups ───

    def subject(self, subject_id: Optional[str]) -> Optional[Subject]:
        return self._subject_map.get(subject_id) if subject_id else None

    def department(self, department_id: Optional[str]) -> Optional[Department]:
        return self._department_map.get(department_id) if department_id else None

    def teacher(self, teacher_id: Optional[str]) -> Optional[Teacher]:
        return self._teacher_map.get(teacher_id) if teacher_id else None

    def room(self, room_id: Optional[str]) -> Optional[Room]:
        return self._room_map.get(room_id) if room_id else None

    def time_slot(self, time_slot_id: Optional[str]) -> Optional[TimeSlot]:
        return self._time_slot_map.get(time_slot_id) if time_slot_id else None

    def day(self, day_id: Optional[str]) -> Optional[Day]:
        return self._day_map.get(day_id) if day_id else None

    def semester(self, semester_id: Optional[str]) -> Optional[Semester]:
        return self._semester_map.get(semester_id) if semester_id else None

    # ─── Abgeleitete Lookups ───

    def department_for_subject(self, subject_id: Optional[str]) -> Optional[Department]:
        """subjectId → Subject → departmentId → Department."""
        subject = self.subject(subject_id)
        if subject is None:
            return None
        return self.department(subject.department_id)

    def find_room(self, name_or_id: Optional[str]) -> Optional[Room]:
        """Raum über ID oder (normierten) Namen suchen."""
        if not name_or_id:
            return None
        room = self.room(name_or_id)
        if room:
            return room
        return lookup_room(name_or_id, self._room_lookup).room

    def allocation_room(self, allocation: Allocation) -> Optional[Room]:
        """Raum-Entität einer Allokation (roomId vor Raumname)."""
        return self.room(allocation.room_id) or self.find_room(allocation.room)

    def room_key(self, allocation: Allocation) -> Optional[str]:
        """Vergleichsschlüssel für Raumkonflikte; None = kein Raum zugewiesen.

        roomId, sonst die ID des über den Namen gefundenen Raums, sonst der
        normierte Raumname.
        """
        if allocation.room_id:
            return allocation.room_id
        if not allocation.room:
            return None
        room = self.find_room(allocation.room)
        if room:
            return room.id
        return normalize_room_name(allocation.room) or None

    def canonical_day(self, value: Optional[str]) -> Optional[str]:
        """Kanonische Tagesdarstellung: Wochentag-Name.

        Eine Day-ID wird über die Day-Stammdaten aufgelöst; bekannte
        Wochentag-Namen und unbekannte Werte bleiben unverändert.
        """
        if not value:
            return None
        if value in DAY_ORDER:
            return value
        day = self.day(value)
        if day:
            return day.name
        return value

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        lines = [
            f"Fachbereiche: {len(self._department_map)}",
            f"Fächer: {len(self._subject_map)}",
            f"Lehrkräfte: {len(self._teacher_map)}",
            f"Räume: {len(self._room_map)}",
            f"Zeitslots: {len(self._time_slot_map)}",
            f"Tage: {len(self._day_map)}",
            f"Semester: {len(self._semester_map)}",
        ]
        return "\n".join(lines)
