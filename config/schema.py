from pydantic import BaseModel, Field, field_validator
from typing import Optional
from enum import Enum


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ─── DATENDATEIEN ───

class DataFilesConfig(BaseModel):
    """Lage der JSON-Datendateien.

    Alle Dateinamen sind relativ zu ``data_dir``. Die Allokations-Datei
    ist der einzige Speicher, in den geschrieben wird.
    """
    # Verzeichnis mit allen JSON-Dateien
    data_dir: str = Field("data",
        description="Verzeichnis mit den JSON-Datendateien")
    # Allokations-Speicher (wird von 'persist' überschrieben)
    allocations_file: str = Field("allocations.json",
        description="Allokations-Speicher")
    subjects_file: str = "subjects.json"
    departments_file: str = "departments.json"
    teachers_file: str = "teachers.json"
    rooms_file: str = "rooms.json"
    timeslots_file: str = "timeslots.json"
    days_file: str = "days.json"
    semesters_file: str = "semesters.json"
    # Verzeichnis für Backups; None = neben dem Allokations-Speicher
    backup_dir: Optional[str] = Field(None,
        description="Backup-Verzeichnis (leer = neben allocations.json)")


# ─── PRÜFREGELN ───

class ValidationRulesConfig(BaseModel):
    """Regeln für die Integritätsprüfung ('validate')."""
    # Erlaubte Unterrichtstage
    allowed_days: list[str] = Field(
        default=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
        description="Erlaubte Unterrichtstage")
    # Erlaubte Perioden (Stunden) im Tagesraster
    allowed_periods: list[int] = Field(
        default=[1, 2, 3, 4, 5, 6, 7],
        description="Erlaubte Perioden")
    # Pro Fachbereich eingeschränkte Perioden (departmentId → Perioden)
    period_restrictions: dict[str, list[int]] = Field(
        default_factory=dict,
        description="Periodenbeschränkung je Fachbereich (z.B. Labor-Fächer)")
    # Räume, die in den Stammdaten vorhanden sein müssen
    required_rooms: list[str] = Field(
        default_factory=list,
        description="Pflicht-Räume (Namen, werden normalisiert gesucht)")

    @field_validator("allowed_periods")
    @classmethod
    def periods_positive(cls, v: list[int]) -> list[int]:
        if any(p < 1 for p in v):
            raise ValueError("Perioden sind 1-basiert (>= 1).")
        return sorted(set(v))


# ─── LOGGING ───

class LoggingConfig(BaseModel):
    """Logging-Ausgabe der CLI."""
    level: LogLevel = Field(LogLevel.INFO,
        description="Log-Level (DEBUG, INFO, WARNING, ERROR)")
    # Zeitstempel in der Konsole anzeigen
    show_time: bool = False


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration der Allokations-Werkzeuge."""
    # Name der Einrichtung (nur Anzeige)
    institution_name: str = Field("Government College",
        description="Name der Einrichtung")
    data: DataFilesConfig = Field(default_factory=DataFilesConfig)
    validation: ValidationRulesConfig = Field(default_factory=ValidationRulesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
