"""Shared logging helpers for fieldflow."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import InvalidSettingError

LOG_LEVEL_ENV_VAR = "FIELDFLOW_LOG_LEVEL"


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the level
    defaults to ``FIELDFLOW_LOG_LEVEL`` (or INFO) and the format is terse enough for
    CLI output. Pass ``force=True`` to reconfigure during tests or specialised entry
    points.
    """

    logging.basicConfig(
        level=level if level is not None else resolve_log_level(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


def resolve_log_level() -> int:
    name = optional_env_var(LOG_LEVEL_ENV_VAR)
    if name is None:
        return logging.INFO
    levels = logging.getLevelNamesMapping()
    level = levels.get(name.upper())
    if level is None:
        raise InvalidSettingError(LOG_LEVEL_ENV_VAR, name, sorted(levels))
    return level
