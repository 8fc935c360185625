"""Fehlertypen der Allokations-Persistenz.

Nicht auflösbare Referenzen und doppelte IDs sind KEINE Fehler: sie werden
über Fallback-Werte bzw. Deduplizierung aufgelöst und nur geloggt.
"""

from pathlib import Path
from typing import Optional


class AllocationError(Exception):
    """Basisklasse aller Persistenz-Fehler."""


class AllocationValidationError(AllocationError):
    """Eine Allokation ist beim Speichern unvollständig; es wird nichts geschrieben."""

    def __init__(self, allocation_id: Optional[str], missing_fields: list[str]):
        self.allocation_id = allocation_id
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Ungültige Allokation {allocation_id or '<ohne id>'}: "
            f"fehlende Felder {', '.join(self.missing_fields)}"
        )


class StorageError(AllocationError):
    """Lesen, Sichern oder Schreiben des Allokations-Speichers fehlgeschlagen."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)
