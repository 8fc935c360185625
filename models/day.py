"""Datenmodell für einen Wochentag (Pydantic v2)."""

from typing import Optional

from models.base import RecordModel

# Feste Reihenfolge der Wochentage für die Sortierung
DAY_ORDER: dict[str, int] = {
    "Monday": 1,
    "Tuesday": 2,
    "Wednesday": 3,
    "Thursday": 4,
    "Friday": 5,
    "Saturday": 6,
    "Sunday": 7,
}

DAY_NAMES: list[str] = list(DAY_ORDER)


def day_name(day_number: int) -> Optional[str]:
    """1 → "Monday", …, 7 → "Sunday"; unbekannte Nummer → None."""
    if 1 <= day_number <= len(DAY_NAMES):
        return DAY_NAMES[day_number - 1]
    return None


class Day(RecordModel):
    """Ein Unterrichtstag."""

    id: str
    name: str                        # "Monday"
    short_name: Optional[str] = None
    day_code: Optional[int] = None
    is_active: Optional[bool] = None
