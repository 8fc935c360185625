"""Persistenz-Koordinator: Backup → Laden → Merge/Replace → Sortieren → Prüfen → Schreiben.

Jeder Schritt ist eine eigene Methode und einzeln testbar; ``persist``
führt sie unter dem Lock des Speichers der Reihe nach aus:

    BACKUP → LOAD_EXISTING → MERGE_OR_REPLACE → ENRICH → SORT
           → VALIDATE → CLEAN → WRITE

Schlägt VALIDATE fehl, wird nichts geschrieben; der bisherige Speicher
bleibt byte-genau erhalten.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ValidationError

from config.defaults import UNKNOWN_LABEL
from models.allocation import REQUIRED_FIELDS, Allocation
from models.reference_data import ReferenceData
from persistence.dedupe import dedupe
from persistence.errors import AllocationValidationError, StorageError
from persistence.sorter import (
    EnrichedAllocation,
    clean_allocations,
    collation_key,
    enrich_allocations,
    sort_enriched,
)
from persistence.store import AllocationStore

logger = logging.getLogger(__name__)


class PersistMode(str, Enum):
    MERGE = "merge"      # bestehende Allokationen + neue, Duplikate entfernt
    REPLACE = "replace"  # nur die neuen Allokationen, bestehende verworfen


class PersistSummary(BaseModel):
    """Zusammenfassung eines Speicherlaufs."""

    total: int
    departments: list[str]          # sortiert, ohne Duplikate
    mode: PersistMode
    dropped_duplicates: int = 0
    backup_path: Optional[Path] = None


def _to_allocation(record: Any) -> Allocation:
    if isinstance(record, Allocation):
        return record
    try:
        return Allocation.model_validate(record)
    except ValidationError as e:
        record_id = record.get("id") if isinstance(record, dict) else None
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise AllocationValidationError(record_id, fields or ["id"]) from e


class AllocationPersistence:
    """Speichert Allokations-Mengen deterministisch sortiert und dedupliziert."""

    def __init__(self, reference_data: ReferenceData,
                 required_fields: tuple[str, ...] = REQUIRED_FIELDS):
        self.ref = reference_data
        self.required_fields = required_fields

    # ── Einzelne Schritte ─────────────────────────────────────────────────────

    def create_backup(self, store: AllocationStore) -> Optional[Path]:
        return store.backup()

    def load_existing(self, store: AllocationStore) -> list[Allocation]:
        """Liest den bestehenden Speicher (leer wenn keiner existiert)."""
        records = store.read()
        try:
            return [Allocation.model_validate(r) for r in records]
        except ValidationError as e:
            raise StorageError(f"Bestehende Allokationen ungültig: {store!r} ({e})") from e

    def merge_or_replace(
        self,
        existing: Sequence[Allocation],
        incoming: Sequence[Allocation],
        mode: PersistMode,
    ) -> tuple[list[Allocation], int]:
        """Gibt die neue Gesamtmenge und die Zahl entfernter Duplikate zurück."""
        if mode == PersistMode.REPLACE:
            logger.info("Replace-Modus: nur die übergebenen Allokationen werden gespeichert")
            # Auch im Replace-Modus darf keine ID doppelt vorkommen
            result = dedupe([], incoming)
        else:
            logger.info("Merge-Modus: Zusammenführen mit bestehenden Allokationen")
            result = dedupe(existing, incoming)
        return result.merged, result.dropped_count

    def enrich(self, allocations: Sequence[Allocation]) -> list[EnrichedAllocation]:
        return enrich_allocations(allocations, self.ref)

    def sort(self, enriched: Sequence[EnrichedAllocation]) -> list[EnrichedAllocation]:
        return sort_enriched(enriched)

    def validate(self, enriched: Sequence[EnrichedAllocation]) -> None:
        """Bricht beim ersten unvollständigen Datensatz ab."""
        for item in enriched:
            missing = item.allocation.missing_fields(self.required_fields)
            if missing:
                raise AllocationValidationError(item.allocation.id, missing)

    def clean(self, enriched: Sequence[EnrichedAllocation]) -> list[Allocation]:
        return clean_allocations(enriched)

    def write(self, store: AllocationStore, allocations: Sequence[Allocation]) -> None:
        store.write([a.to_record() for a in allocations])

    def summarize(
        self,
        allocations: Sequence[Allocation],
        mode: PersistMode,
        dropped: int = 0,
        backup_path: Optional[Path] = None,
    ) -> PersistSummary:
        departments = set()
        for a in allocations:
            dept = self.ref.department_for_subject(a.subject_id)
            departments.add(dept.name if dept else UNKNOWN_LABEL)
        return PersistSummary(
            total=len(allocations),
            departments=sorted(departments, key=collation_key),
            mode=mode,
            dropped_duplicates=dropped,
            backup_path=backup_path,
        )

    # ── Gesamtablauf ──────────────────────────────────────────────────────────

    def persist(
        self,
        incoming: Sequence[Any],
        mode: PersistMode | str,
        store: AllocationStore,
    ) -> PersistSummary:
        """Speichert incoming im gewählten Modus und gibt eine Zusammenfassung zurück.

        Raises:
            AllocationValidationError: Datensatz ohne Pflichtfeld; nichts geschrieben.
            StorageError: Backup, Lesen oder Schreiben fehlgeschlagen.
        """
        mode = PersistMode(mode)
        new_allocations = [_to_allocation(r) for r in incoming]
        logger.info(f"Starte Allokations-Persistenz ({mode.value}, {len(new_allocations)} neu)")

        with store.lock():
            backup_path = self.create_backup(store)
            existing = self.load_existing(store) if mode == PersistMode.MERGE else []
            allocations, dropped = self.merge_or_replace(existing, new_allocations, mode)
            enriched = self.sort(self.enrich(allocations))
            self.validate(enriched)
            cleaned = self.clean(enriched)
            self.write(store, cleaned)

        summary = self.summarize(cleaned, mode, dropped, backup_path)
        logger.info(
            f"Persistenz abgeschlossen: {summary.total} Allokation(en), "
            f"{len(summary.departments)} Fachbereich(e)"
        )
        return summary
