"""Tests for app configuration (F3).

Tests the configuration loading, defaults and environment override.
"""

from pathlib import Path

import pytest

from schoolbook.config.app_config import (
    AppConfig,
    CONFIG_FILE,
    DB_PATH_ENV,
    ReportConfig,
    _get_defaults,
    _parse_config,
    load_app_config,
)
from schoolbook.utils.validators import ConfigError


class TestLoadAppConfig:
    """Tests for load_app_config function."""

    def test_load_config(self):
        """Returns an AppConfig."""
        config = load_app_config()
        assert isinstance(config, AppConfig)

    def test_config_is_cached(self):
        """Second call returns the cached object."""
        assert load_app_config() is load_app_config()

    def test_force_reload(self):
        """force_reload builds a new object."""
        first = load_app_config()
        assert load_app_config(force_reload=True) is not first

    def test_report_defaults(self):
        """Report settings match the shipped defaults."""
        config = load_app_config()
        assert isinstance(config.reports, ReportConfig)
        assert config.reports.missing_mark == "-"
        assert config.reports.average_decimals == 2
        assert config.reports.default_range_days == 30

    def test_env_overrides_db_path(self, monkeypatch, tmp_path):
        """SCHOOLBOOK_DB wins over the configured path."""
        target = tmp_path / "other.db"
        monkeypatch.setenv(DB_PATH_ENV, str(target))

        config = load_app_config(force_reload=True)

        assert config.database.path == target

    def test_defaults_without_file(self, monkeypatch, tmp_path):
        """Falls back to built-in defaults when no config file exists."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(DB_PATH_ENV, raising=False)

        config = load_app_config(force_reload=True)

        assert config.database.path == Path("data/school.db")


class TestParseConfig:
    """Tests for _parse_config."""

    def test_partial_sections_use_defaults(self, monkeypatch):
        """Missing keys fall back to defaults."""
        monkeypatch.delenv(DB_PATH_ENV, raising=False)
        config = _parse_config({"reports": {"missing_mark": "."}})

        assert config.reports.missing_mark == "."
        assert config.reports.average_decimals == 2
        assert config.database.path == Path(_get_defaults()["database"]["path"])

    def test_empty_document(self, monkeypatch):
        monkeypatch.delenv(DB_PATH_ENV, raising=False)
        config = _parse_config({})
        assert config.reports.default_range_days == 30


class TestConfigErrors:
    """Malformed configuration surfaces as ConfigError."""

    def test_malformed_yaml(self, monkeypatch, tmp_path):
        """A YAML syntax error is reported as ConfigError."""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / CONFIG_FILE
        config_file.parent.mkdir(parents=True)
        config_file.write_text("reports: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_app_config(force_reload=True)

    @pytest.mark.parametrize(
        "reports",
        [{"average_decimals": "two"}, {"default_range_days": [30]}, "not a mapping"],
    )
    def test_bad_reports_section(self, reports):
        with pytest.raises(ConfigError):
            _parse_config({"reports": reports})

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigError):
            _parse_config(["reports"])


class TestConfigFile:
    """Tests for config file existence."""

    def test_config_file_exists(self):
        """Config file exists."""
        assert CONFIG_FILE.exists(), f"Missing: {CONFIG_FILE}"
