"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from typing import Optional

from pydantic import field_validator

from models.base import RecordModel


class Teacher(RecordModel):
    """Repräsentiert eine einzelne Lehrkraft."""

    id: str                               # "t70"
    name: str                             # "Dr. Ayesha Khan"
    short_name: Optional[str] = None
    department_id: Optional[str] = None
    designation: Optional[str] = None     # "Lecturer", "Assistant Professor"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @property
    def display_name(self) -> str:
        """Kurzname falls vorhanden, sonst voller Name."""
        return self.short_name or self.name
