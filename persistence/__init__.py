"""Persistenz-Modul: Deduplizierung, Sortierung und Speichern von Allokationen."""

from .errors import AllocationError, AllocationValidationError, StorageError
from .store import AllocationStore, JsonAllocationStore
from .dedupe import DedupeResult, dedupe
from .sorter import SortKey, EnrichedAllocation, sort_allocations
from .coordinator import AllocationPersistence, PersistMode, PersistSummary

__all__ = [
    "AllocationError",
    "AllocationValidationError",
    "StorageError",
    "AllocationStore",
    "JsonAllocationStore",
    "DedupeResult",
    "dedupe",
    "SortKey",
    "EnrichedAllocation",
    "sort_allocations",
    "AllocationPersistence",
    "PersistMode",
    "PersistSummary",
]
