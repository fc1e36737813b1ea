"""Shared fixtures for flow-map document adapter tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

FIXTURES = Path(__file__).resolve().parents[2] / "data" / "flow_map"


@pytest.fixture
def flow_map_envelope() -> dict[str, Any]:
    with (FIXTURES / "document.json").open(encoding="utf-8") as handle:
        return json.load(handle)


@pytest.fixture
def flow_map_document(flow_map_envelope: dict[str, Any]) -> dict[str, Any]:
    return flow_map_envelope["data"]
