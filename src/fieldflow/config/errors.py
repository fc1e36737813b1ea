"""Errors raised while reading fieldflow settings from the environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class InvalidSettingError(ConfigurationError):
    """An environment variable holds a value outside its accepted choices."""

    def __init__(self, env_var: str, value: str, choices: Iterable[str]) -> None:
        self.env_var = env_var
        self.value = value
        self.choices = tuple(choices)
        super().__init__(
            f"Unknown value for {env_var}: {value!r} (expected {', '.join(self.choices)})"
        )
