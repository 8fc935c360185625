"""Datenmodell für einen Zeitslot im Tagesraster."""

from typing import Optional

from models.base import RecordModel


class TimeSlot(RecordModel):
    """Repräsentiert eine Unterrichtsstunde (Periode) im Tagesraster.

    Der Wochentag ist NICHT Teil des Zeitslots; er steht an der Allokation.
    """

    id: str                       # "ts3"
    period: Optional[int] = None  # 1-basiert, 1. Stunde = 1
    start: Optional[str] = None   # "HH:MM"
    end: Optional[str] = None

    def __str__(self) -> str:
        if self.start and self.end:
            return f"Periode {self.period} ({self.start}-{self.end})"
        return f"Periode {self.period}"
