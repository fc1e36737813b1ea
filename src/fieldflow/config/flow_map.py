"""Flow-graph configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from fieldflow.domain.flow_map import DEFAULT_LAYOUT, LayoutConfig
from fieldflow.domain.model import AuthorityRule

from .env import optional_env_var
from .errors import InvalidSettingError

AUTHORITY_RULE_ENV_VAR = "FIELDFLOW_AUTHORITY_RULE"


@dataclass(frozen=True, slots=True)
class FlowMapConfig:
    authority_rule: AuthorityRule = AuthorityRule.FIRST_SEEN
    layout: LayoutConfig = DEFAULT_LAYOUT


def get_flow_map_config() -> FlowMapConfig:
    raw = optional_env_var(AUTHORITY_RULE_ENV_VAR)
    if raw is None:
        return FlowMapConfig()
    try:
        rule = AuthorityRule(raw.lower())
    except ValueError as exc:
        raise InvalidSettingError(
            AUTHORITY_RULE_ENV_VAR, raw, (rule.value for rule in AuthorityRule)
        ) from exc
    return FlowMapConfig(authority_rule=rule)
