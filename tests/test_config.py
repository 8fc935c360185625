"""Tests für das Konfigurationssystem."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.schema import AppConfig, DataFilesConfig, LogLevel, ValidationRulesConfig
from config.defaults import (
    UNASSIGNED_ROOM_SORT,
    UNKNOWN_DEPARTMENT_SORT,
    default_app_config,
    default_validation_rules,
)
from config.manager import ConfigManager


def _manager(tmp_path: Path) -> ConfigManager:
    mgr = ConfigManager()
    mgr.CONFIG_DIR = tmp_path
    mgr.DEFAULT_CONFIG = tmp_path / "app_config.yaml"
    return mgr


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_app_config_valid(self):
        config = default_app_config()
        assert config.data.data_dir == "data"
        assert config.data.allocations_file == "allocations.json"
        assert config.data.backup_dir is None
        assert config.logging.level == LogLevel.INFO

    def test_default_rules(self):
        """Montag bis Samstag, Perioden 1-7, Chemie nur 3-6."""
        rules = default_validation_rules()
        assert rules.allowed_days[0] == "Monday"
        assert "Sunday" not in rules.allowed_days
        assert rules.allowed_periods == [1, 2, 3, 4, 5, 6, 7]
        assert rules.period_restrictions == {"d2": [3, 4, 5, 6]}

    def test_sentinels_sort_after_names(self):
        assert UNKNOWN_DEPARTMENT_SORT.startswith("ZZ_")
        assert UNASSIGNED_ROOM_SORT.startswith("ZZ_")


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_periods_sorted_and_unique(self):
        rules = ValidationRulesConfig(allowed_periods=[3, 1, 3, 2])
        assert rules.allowed_periods == [1, 2, 3]

    def test_period_zero_raises(self):
        with pytest.raises(ValidationError):
            ValidationRulesConfig(allowed_periods=[0, 1])

    def test_invalid_log_level_raises(self):
        with pytest.raises(ValidationError):
            AppConfig.model_validate({"logging": {"level": "LOUD"}})

    def test_partial_config_uses_defaults(self):
        config = AppConfig.model_validate({"data": {"data_dir": "/srv/timetable"}})
        assert config.data.data_dir == "/srv/timetable"
        assert config.data.rooms_file == DataFilesConfig().rooms_file
        assert config.validation.allowed_periods == [1, 2, 3, 4, 5, 6, 7]


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren (vollständiger Roundtrip)."""
        config = default_app_config().model_copy(update={"institution_name": "Test College"})
        mgr = _manager(tmp_path)

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load(mgr.DEFAULT_CONFIG)
        assert loaded.institution_name == "Test College"
        assert loaded.validation.period_restrictions == {"d2": [3, 4, 5, 6]}
        assert loaded == config

    def test_saved_yaml_has_section_comments(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        mgr.save(default_app_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert "Stundenplan-Allokationen" in text
        assert "─── Prüfregeln ───" in text

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "nonexistent.yaml"
        assert mgr.first_run_check() is True

    def test_first_run_check_with_file(self, tmp_path: Path):
        """first_run_check gibt False zurück wenn Config existiert."""
        mgr = _manager(tmp_path)
        mgr.save(default_app_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_or_default_without_file(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        assert mgr.load_or_default() == default_app_config()

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        mgr.DEFAULT_CONFIG.write_text("validation:\n  allowed_periods: [0]\n", encoding="utf-8")
        with pytest.raises(ValueError):
            mgr.load()
