"""Sortierung von Allokationen: Fachbereich → Raum → Tag → Periode.

Die Sortierschlüssel werden pro Allokation einmal berechnet (ENRICH),
zum Sortieren benutzt (SORT) und vor dem Speichern wieder verworfen
(CLEAN). Nicht auflösbare Werte bekommen Sentinels, die hinter allen
echten Werten einsortiert werden.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import NamedTuple, Sequence

from pyuca import Collator

from config.defaults import UNASSIGNED_ROOM_SORT, UNKNOWN_DEPARTMENT_SORT, UNKNOWN_ORDER
from models.allocation import Allocation
from models.day import DAY_ORDER
from models.reference_data import ReferenceData

logger = logging.getLogger(__name__)


class SortKey(NamedTuple):
    """Abgeleiteter Sortierschlüssel (nur während der Sortierung)."""

    department_name: str
    room: str
    day_order: int
    period: int


@dataclass
class EnrichedAllocation:
    allocation: Allocation
    sort_key: SortKey


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # DUCET-Tabelle wird einmal pro Prozess geladen
    return Collator()


def collation_key(value: str) -> tuple:
    """Unicode-Sortierschlüssel (UCA): "Ökologie" steht vor "Physik"."""
    return _collator().sort_key(value)


def _text_key(value: str, sentinel: str) -> tuple:
    # Sentinel immer zuletzt; bei Gleichstand entscheidet die Originalschreibweise
    if value == sentinel:
        return (1, (), "")
    return (0, collation_key(value), value)


def compare_key(key: SortKey) -> tuple:
    """Vergleichbares Tupel zu einem SortKey."""
    return (
        _text_key(key.department_name, UNKNOWN_DEPARTMENT_SORT),
        _text_key(key.room, UNASSIGNED_ROOM_SORT),
        key.day_order,
        key.period,
    )


def build_sort_key(allocation: Allocation, reference_data: ReferenceData) -> SortKey:
    """Berechnet den Sortierschlüssel einer Allokation."""
    subject = reference_data.subject(allocation.subject_id)
    department = reference_data.department_for_subject(allocation.subject_id)
    if subject is None:
        logger.warning(f"Fach nicht gefunden: {allocation.subject_id}")
    elif department is None:
        logger.warning(
            f"Fachbereich nicht gefunden für Fach {allocation.subject_id}: "
            f"{subject.department_id}"
        )

    time_slot = reference_data.time_slot(allocation.time_slot_id)
    period = time_slot.period if time_slot and time_slot.period is not None else UNKNOWN_ORDER
    day = reference_data.canonical_day(allocation.day)

    return SortKey(
        department_name=department.name if department else UNKNOWN_DEPARTMENT_SORT,
        room=allocation.room or allocation.room_id or UNASSIGNED_ROOM_SORT,
        day_order=DAY_ORDER.get(day, UNKNOWN_ORDER) if day else UNKNOWN_ORDER,
        period=period,
    )


def enrich_allocations(
    allocations: Sequence[Allocation], reference_data: ReferenceData
) -> list[EnrichedAllocation]:
    return [EnrichedAllocation(a, build_sort_key(a, reference_data)) for a in allocations]


def sort_enriched(enriched: Sequence[EnrichedAllocation]) -> list[EnrichedAllocation]:
    """Stabile aufsteigende Sortierung; Gleichstände behalten die Eingabe-Reihenfolge."""
    return sorted(enriched, key=lambda e: compare_key(e.sort_key))


def clean_allocations(enriched: Sequence[EnrichedAllocation]) -> list[Allocation]:
    """Verwirft die Sortierschlüssel."""
    return [e.allocation for e in enriched]


def sort_allocations(
    allocations: Sequence[Allocation], reference_data: ReferenceData
) -> list[Allocation]:
    """Sortiert nach (Fachbereich, Raum, Wochentag, Periode). Idempotent."""
    return clean_allocations(sort_enriched(enrich_allocations(allocations, reference_data)))
