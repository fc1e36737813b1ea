from __future__ import annotations

import logging

import pytest

from fieldflow.config import ConfigurationError, InvalidSettingError, optional_env_var
from fieldflow.config.enrichment import get_enrichment_config
from fieldflow.config.flow_map import AUTHORITY_RULE_ENV_VAR, get_flow_map_config
from fieldflow.config.logging import LOG_LEVEL_ENV_VAR, resolve_log_level
from fieldflow.domain.enrichment import DEFAULT_FIELD_SELECTION
from fieldflow.domain.flow_map import DEFAULT_LAYOUT
from fieldflow.domain.model import AuthorityRule


def test_optional_env_var_strips_and_blanks_to_none(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PADDED_VAR", "  value ")
    monkeypatch.setenv("BLANK_VAR", " ")

    assert optional_env_var("PADDED_VAR") == "value"
    assert optional_env_var("BLANK_VAR") is None
    assert optional_env_var("FIELDFLOW_UNSET_VAR") is None


def test_flow_map_config_defaults() -> None:
    config = get_flow_map_config()

    assert config.authority_rule is AuthorityRule.FIRST_SEEN
    assert config.layout is DEFAULT_LAYOUT


def test_flow_map_config_reads_authority_rule(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(AUTHORITY_RULE_ENV_VAR, "SEEDED_REFERENCE")

    assert get_flow_map_config().authority_rule is AuthorityRule.SEEDED_REFERENCE


def test_flow_map_config_rejects_unknown_rule(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(AUTHORITY_RULE_ENV_VAR, "symmetric")

    with pytest.raises(InvalidSettingError, match="first_seen, seeded_reference") as exc:
        get_flow_map_config()

    assert exc.value.env_var == AUTHORITY_RULE_ENV_VAR
    assert exc.value.value == "symmetric"
    assert isinstance(exc.value, ConfigurationError)


def test_resolve_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_log_level() == logging.INFO

    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "debug")
    assert resolve_log_level() == logging.DEBUG

    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "chatty")
    with pytest.raises(InvalidSettingError) as exc:
        resolve_log_level()
    assert "WARNING" in exc.value.choices


def test_enrichment_config_defaults() -> None:
    assert get_enrichment_config().default_selection is DEFAULT_FIELD_SELECTION
