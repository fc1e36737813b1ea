"""Database location settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

DATABASE_URI_ENV_VAR: Final[str] = "DATABASE_URI"
DATA_DIR_ENV_VAR: Final[str] = "FIELDFLOW_DATA_DIR"
DEFAULT_DB_FILENAME: Final[str] = "fieldflow.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def data_dir() -> Path:
    """``FIELDFLOW_DATA_DIR``, else ``fieldflow`` under the XDG data home."""

    configured = optional_env_var(DATA_DIR_ENV_VAR)
    if configured is not None:
        return Path(configured).expanduser().resolve()
    base = os.getenv("XDG_DATA_HOME")
    base_path = Path(base) if base else Path.home() / ".local" / "share"
    return (base_path / "fieldflow").expanduser().resolve()


def get_database_config() -> DatabaseConfig:
    uri = optional_env_var(DATABASE_URI_ENV_VAR)
    if uri is not None:
        return DatabaseConfig(uri=uri)
    directory = data_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{directory / DEFAULT_DB_FILENAME}")
