"""Datenmodell für ein Semester (Pydantic v2)."""

import re
from typing import Optional

from models.base import RecordModel


class Semester(RecordModel):
    """Ein Semester ("Semester 3", "BS Sem 5")."""

    id: str
    name: str
    is_active: Optional[bool] = None

    @property
    def label(self) -> str:
        """Anzeige-Label: "Semester N" wenn der Name eine Zahl enthält."""
        match = re.search(r"\d+", self.name)
        if match:
            return f"Semester {match.group(0)}"
        return self.name
