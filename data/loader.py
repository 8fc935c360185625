"""Lädt Stammdaten und Allokationen aus den JSON-Dateien der Verwaltung.

Die Dateien werden von der Web-Oberfläche gepflegt und enthalten teils ein
UTF-8-BOM. Fehlt eine Stammdaten-Datei, wird mit einer leeren Liste
weitergearbeitet (Warnung im Log); kaputtes JSON ist dagegen ein Fehler.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from config.schema import DataFilesConfig
from models.allocation import Allocation
from models.reference_data import ReferenceData

logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Fehler beim Lesen oder Validieren einer Datendatei."""


def read_json_file(path: Path) -> Any:
    """Liest eine JSON-Datei (BOM wird entfernt)."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DataLoadError(f"Datei nicht lesbar: {path} ({e})") from e
    try:
        return json.loads(content.lstrip("\ufeff"))
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Ungültiges JSON in {path}: {e}") from e


def extract_allocation_records(raw: Any, source: str = "<data>") -> list[dict]:
    """Akzeptiert eine reine Liste oder ein Objekt mit 'timetableEntries'/'allocations'."""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        for key in ("timetableEntries", "allocations"):
            if isinstance(raw.get(key), list):
                return raw[key]
    raise DataLoadError(
        f"{source}: Erwartet Liste von Allokationen oder Objekt mit "
        f"'timetableEntries'/'allocations'."
    )


def parse_allocations(records: list[Any], source: str = "<data>") -> list[Allocation]:
    """Rohe Dicts → Allocation-Modelle (Fehlermeldung nennt den Index)."""
    allocations: list[Allocation] = []
    for index, record in enumerate(records):
        if isinstance(record, Allocation):
            allocations.append(record)
            continue
        try:
            allocations.append(Allocation.model_validate(record))
        except ValidationError as e:
            raise DataLoadError(
                f"{source}: Allokation #{index} ungültig: {e}"
            ) from e
    return allocations


def load_allocation_records(path: Path) -> list[Allocation]:
    """Lädt Allokationen aus einer Datei (z.B. einem Generator-Ergebnis)."""
    raw = read_json_file(path)
    return parse_allocations(extract_allocation_records(raw, str(path)), str(path))


class ReferenceDataLoader:
    """Liest alle Stammdaten-Dateien eines Datenverzeichnisses."""

    def __init__(self, files: DataFilesConfig, data_dir: Path | None = None):
        self.files = files
        self.data_dir = Path(data_dir) if data_dir is not None else Path(files.data_dir)

    def _read_list(self, filename: str) -> list[Any]:
        path = self.data_dir / filename
        if not path.exists():
            logger.warning(f"Stammdaten-Datei fehlt, verwende leere Liste: {path}")
            return []
        raw = read_json_file(path)
        if not isinstance(raw, list):
            raise DataLoadError(f"{path}: Erwartet eine JSON-Liste.")
        return raw

    def load(self) -> ReferenceData:
        """Lädt und validiert alle Stammdaten."""
        f = self.files
        try:
            data = ReferenceData.from_records(
                subjects=self._read_list(f.subjects_file),
                departments=self._read_list(f.departments_file),
                teachers=self._read_list(f.teachers_file),
                rooms=self._read_list(f.rooms_file),
                time_slots=self._read_list(f.timeslots_file),
                days=self._read_list(f.days_file),
                semesters=self._read_list(f.semesters_file),
            )
        except ValidationError as e:
            raise DataLoadError(f"Stammdaten in {self.data_dir} ungültig: {e}") from e
        logger.debug(f"Stammdaten geladen aus {self.data_dir}")
        return data

    @property
    def allocations_path(self) -> Path:
        return self.data_dir / self.files.allocations_file

    @property
    def backup_dir(self) -> Path | None:
        if self.files.backup_dir:
            return Path(self.files.backup_dir)
        return None
