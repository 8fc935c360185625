from config.schema import (
    AppConfig,
    DataFilesConfig,
    LoggingConfig,
    ValidationRulesConfig,
)

# Sentinels für nicht auflösbare Referenzen. "ZZ_" sortiert hinter alle echten Namen.
UNKNOWN_DEPARTMENT_SORT = "ZZ_Unknown"
UNASSIGNED_ROOM_SORT = "ZZ_Unassigned"
UNKNOWN_ORDER = 99

# Anzeige-Fallbacks
UNKNOWN_LABEL = "Unknown"
UNASSIGNED_LABEL = "Unassigned"
UNKNOWN_SEMESTER_LABEL = "Unknown Semester"


def default_validation_rules() -> ValidationRulesConfig:
    """Standard-Prüfregeln der Hochschule.

    Unterricht Montag bis Samstag, Perioden 1-7.
    Labor-Fächer der Chemie (Fachbereich "d2") nur in den Perioden 3-6,
    da die Labore vormittags anderweitig belegt sind.
    """
    return ValidationRulesConfig(
        allowed_days=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
        allowed_periods=[1, 2, 3, 4, 5, 6, 7],
        period_restrictions={"d2": [3, 4, 5, 6]},
        required_rooms=[],
    )


def default_app_config() -> AppConfig:
    """Vollständige Default-Konfiguration (Daten unter ./data)."""
    return AppConfig(
        institution_name="Government College",
        data=DataFilesConfig(),
        validation=default_validation_rules(),
        logging=LoggingConfig(),
    )
