"""Gemeinsame Basis für alle Stammdaten-Modelle (Pydantic v2).

Die JSON-Dateien der Stundenplan-Verwaltung verwenden camelCase-Schlüssel
("departmentId", "timeSlotId"). Intern arbeiten die Modelle mit snake_case,
beim Schreiben werden wieder die Original-Schlüssel verwendet.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """Basis-Datensatz: camelCase-Aliase, unbekannte Felder bleiben erhalten."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        # IDs kommen je nach Quelle als Zahl (Datenbank) oder String (JSON)
        coerce_numbers_to_str=True,
    )

    def to_record(self) -> dict:
        """Serialisiert in der ursprünglichen Form (nur gesetzte Felder)."""
        return self.model_dump(by_alias=True, exclude_unset=True)
