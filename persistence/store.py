"""Allokations-Speicher: JSON-Datei mit Backup und atomarem Schreiben.

Der Speicher-Handle wird vom Aufrufer erzeugt und an die Persistenz
übergeben. Schreiben erfolgt über eine temporäre Datei im selben
Verzeichnis + ``os.replace``: eine halb geschriebene allocations.json
kann es nicht geben.
"""

import json
import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Protocol

from persistence.errors import StorageError

logger = logging.getLogger(__name__)

# Ein Lock je Speicherpfad (prozessweit)
_store_locks: dict[Path, threading.RLock] = {}
_registry_lock = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = path.resolve()
    with _registry_lock:
        if key not in _store_locks:
            _store_locks[key] = threading.RLock()
        return _store_locks[key]


class AllocationStore(Protocol):
    """Schnittstelle eines Allokations-Speichers."""

    def exists(self) -> bool: ...

    def read(self) -> list[dict]: ...

    def backup(self) -> Optional[Path]: ...

    def write(self, records: list[dict]) -> None: ...

    def lock(self): ...


class JsonAllocationStore:
    """Allokationen als flache JSON-Liste (2 Leerzeichen Einrückung)."""

    BACKUP_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%f"

    def __init__(self, path: Path, backup_dir: Optional[Path] = None):
        self.path = Path(path)
        self.backup_dir = Path(backup_dir) if backup_dir else self.path.parent

    def __repr__(self) -> str:
        return f"JsonAllocationStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.exists()

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Kritischer Abschnitt: Backup bis Schreiben nie parallel auf demselben Speicher."""
        lock = _lock_for(self.path)
        with lock:
            yield

    # ─── Lesen ───

    def read(self) -> list[dict]:
        """Liest alle Datensätze; ohne Datei → leere Liste."""
        if not self.path.exists():
            return []
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Allokationen nicht lesbar: {self.path} ({e})", self.path) from e
        try:
            raw = json.loads(content.lstrip("\ufeff"))
        except json.JSONDecodeError as e:
            raise StorageError(f"Allokations-Datei ist kein gültiges JSON: {self.path} ({e})",
                               self.path) from e
        if not isinstance(raw, list):
            raise StorageError(f"Allokations-Datei enthält keine Liste: {self.path}", self.path)
        return raw

    # ─── Backup ───

    def backup_path(self, now: Optional[datetime] = None) -> Path:
        """Backup-Pfad mit sortierbarem Zeitstempel im Namen."""
        now = now or datetime.now(timezone.utc)
        ts = now.strftime(self.BACKUP_TIMESTAMP_FORMAT)
        return self.backup_dir / f"{self.path.stem}.backup.{ts}{self.path.suffix}"

    def backup(self, now: Optional[datetime] = None) -> Optional[Path]:
        """Kopiert den bestehenden Speicher; ohne Speicher → None (kein Fehler)."""
        if not self.path.exists():
            logger.info(f"Kein bestehender Speicher für ein Backup: {self.path.name}")
            return None
        target = self.backup_path(now)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.path, target)
        except OSError as e:
            raise StorageError(f"Backup fehlgeschlagen: {self.path} → {target} ({e})",
                               self.path) from e
        logger.info(f"Backup erstellt: {target.name}")
        return target

    def list_backups(self) -> list[Path]:
        """Alle Backups dieses Speichers, älteste zuerst."""
        pattern = f"{self.path.stem}.backup.*{self.path.suffix}"
        return sorted(self.backup_dir.glob(pattern))

    # ─── Schreiben ───

    @staticmethod
    def serialize(records: list[dict]) -> str:
        """Deterministische Serialisierung für diff-freundliche Dateien."""
        return json.dumps(records, indent=2, ensure_ascii=False) + "\n"

    def write(self, records: list[dict]) -> None:
        """Überschreibt den Speicher vollständig (alles oder nichts)."""
        content = self.serialize(records)
        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent,
                prefix=f".{self.path.name}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Schreiben fehlgeschlagen: {self.path} ({e})", self.path) from e
        logger.info(f"{len(records)} Allokation(en) gespeichert: {self.path.name}")
