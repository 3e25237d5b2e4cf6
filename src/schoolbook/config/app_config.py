"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults when the file is absent. The database
path can be overridden with the SCHOOLBOOK_DB environment variable.

Usage:
    from schoolbook.config.app_config import load_app_config

    config = load_app_config()
    db_path = config.database.path
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from schoolbook.utils.validators import ConfigError

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")

DB_PATH_ENV = "SCHOOLBOOK_DB"


@dataclass
class DatabaseConfig:
    """Location of the SQLite database file."""

    path: Path = Path("data/school.db")


@dataclass
class ReportConfig:
    """Presentation defaults for reports."""

    missing_mark: str = "-"
    average_decimals: int = 2
    default_range_days: int = 30


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    reports: ReportConfig = field(default_factory=ReportConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {
            "path": "data/school.db",
        },
        "reports": {
            "missing_mark": "-",
            "average_decimals": 2,
            "default_range_days": 30,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object.

    Raises:
        ConfigError: If a section is not a mapping or a number is not an integer
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")

    defaults = _get_defaults()

    try:
        db_data = data.get("database") or {}
        db_path = os.environ.get(DB_PATH_ENV) or db_data.get(
            "path", defaults["database"]["path"]
        )
        database = DatabaseConfig(path=Path(db_path))

        report_data = data.get("reports") or {}
        report_defaults = defaults["reports"]
        reports = ReportConfig(
            missing_mark=str(report_data.get("missing_mark", report_defaults["missing_mark"])),
            average_decimals=int(
                report_data.get("average_decimals", report_defaults["average_decimals"])
            ),
            default_range_days=int(
                report_data.get("default_range_days", report_defaults["default_range_days"])
            ),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config {CONFIG_FILE}: {e}") from e

    return AppConfig(database=database, reports=reports)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.

    Raises:
        ConfigError: If the config file is unreadable or malformed
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        try:
            data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {CONFIG_FILE}: {e}") from e
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
