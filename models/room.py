"""Datenmodell für einen Raum (Pydantic v2)."""

from typing import Optional

from models.base import RecordModel


class Room(RecordModel):
    """Repräsentiert einen Hörsaal oder Laborraum."""

    id: str                  # "r44"
    name: str                # "R-44", "B12", "4A"
    capacity: Optional[int] = None
    type: Optional[str] = None            # "lecture", "lab"
    building: Optional[str] = None
    primary_department_id: Optional[str] = None
    available_for_other_departments: Optional[bool] = None
