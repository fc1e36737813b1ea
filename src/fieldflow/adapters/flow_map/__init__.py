"""JSON flow-map document adapter."""

from __future__ import annotations

from .schema import FlowMapEnvelope, FlowMapPayload
from .translator import parse_flow_map, translate_flow_map

__all__ = ["FlowMapEnvelope", "FlowMapPayload", "parse_flow_map", "translate_flow_map"]
