"""Datenmodell für ein Fach / eine Lehrveranstaltung (Pydantic v2)."""

from typing import Optional

from models.base import RecordModel


class Subject(RecordModel):
    """Repräsentiert ein Fach eines Fachbereichs."""

    id: str
    name: str
    code: Optional[str] = None            # "CS-101"
    short_name: Optional[str] = None
    credit_hours: Optional[int] = None
    department_id: Optional[str] = None   # Fremdschlüssel → Department
    semester_id: Optional[str] = None
    semester_level: Optional[int] = None
    is_core: Optional[bool] = None
