"""Datenmodell für einen Fachbereich (Pydantic v2)."""

from typing import Optional

from models.base import RecordModel


class Department(RecordModel):
    """Repräsentiert einen Fachbereich ("Chemistry", "Computer Science")."""

    id: str
    name: str
    short_name: Optional[str] = None
