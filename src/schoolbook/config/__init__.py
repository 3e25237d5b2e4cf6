"""Configuration package for schoolbook."""

from schoolbook.config.app_config import (
    AppConfig,
    DatabaseConfig,
    ReportConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "ReportConfig",
    "clear_config_cache",
    "load_app_config",
]
