"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var
from .errors import ConfigurationError, InvalidSettingError
from .logging import configure_logging
from .storage import DatabaseConfig, get_database_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidSettingError",
    "configure_logging",
    "get_database_config",
    "optional_env_var",
]
