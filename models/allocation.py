"""Datenmodell für eine Allokation / einen Stundenplan-Eintrag (Pydantic v2)."""

from typing import Optional

from pydantic import AliasChoices, Field

from models.base import RecordModel

# Pflichtfelder beim Speichern (teacherId nur hier Pflicht, siehe Konfliktprüfung)
REQUIRED_FIELDS: tuple[str, ...] = (
    "id", "subjectId", "teacherId", "timeSlotId", "day", "semesterId",
)


class Allocation(RecordModel):
    """Ein Stundenplan-Eintrag: Fach × Lehrkraft × Zeitslot × Tag × Raum × Semester.

    Bis auf ``id`` sind alle Felder optional, damit auch unvollständige
    Datensätze geladen, sortiert und dedupliziert werden können. Die
    Pflichtfeld-Prüfung übernimmt der VALIDATE-Schritt der Persistenz.
    """

    id: str                                  # "cs-101-monday-3"
    subject_id: Optional[str] = None
    teacher_id: Optional[str] = None         # None = noch keine Lehrkraft
    time_slot_id: Optional[str] = None
    # Kanonisch: Wochentag-Name. Ältere Datensätze liefern eine "dayId".
    day: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("day", "dayId"),
    )
    room: Optional[str] = None               # Freitext-Raumname ("R-44")
    room_id: Optional[str] = None
    semester_id: Optional[str] = None

    def missing_fields(self, required: tuple[str, ...] = REQUIRED_FIELDS) -> list[str]:
        """Liste der leeren Pflichtfelder (camelCase-Namen)."""
        record = self.model_dump(by_alias=True)
        missing = []
        for field in required:
            value = record.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(field)
        return missing

    @property
    def has_teacher(self) -> bool:
        return bool(self.teacher_id)

    @property
    def has_room(self) -> bool:
        return bool(self.room_id or self.room)
