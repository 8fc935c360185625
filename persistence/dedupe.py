"""Zusammenführen zweier Allokations-Mengen ohne doppelte IDs."""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from models.allocation import Allocation

logger = logging.getLogger(__name__)


@dataclass
class DedupeResult:
    """Ergebnis der Deduplizierung."""

    merged: list[Allocation]
    dropped_count: int = 0
    dropped_ids: list[str] = field(default_factory=list)


def dedupe(existing: Sequence[Allocation], incoming: Sequence[Allocation]) -> DedupeResult:
    """Hängt incoming an existing an und behält je ID das erste Vorkommen.

    Bei gleicher ID gewinnt also die bestehende Allokation. Doppelte IDs
    sind kein Fehler, sondern werden entfernt und gezählt.
    """
    seen: set[str] = set()
    merged: list[Allocation] = []
    dropped: list[str] = []

    for allocation in [*existing, *incoming]:
        if allocation.id in seen:
            logger.warning(f"Entferne doppelte Allokation: {allocation.id}")
            dropped.append(allocation.id)
            continue
        seen.add(allocation.id)
        merged.append(allocation)

    logger.info(f"{len(dropped)} Duplikat(e) entfernt")
    return DedupeResult(merged=merged, dropped_count=len(dropped), dropped_ids=dropped)
