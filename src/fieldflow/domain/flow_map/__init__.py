"""Field-lineage resolution and flow-graph construction."""

from __future__ import annotations

from .assembly import assemble_flow_map
from .authority import (
    AuthorityResolution,
    SourceEntityAuthority,
    fold_authorities,
    fold_authority,
    resolve_authority,
)
from .builder import build_flow_graph, entity_node_id, group_node_id, source_node_id
from .cache import FlowGraphCache
from .layout import DEFAULT_LAYOUT, LayoutConfig, order_sources, stroke_width
from .registry import FieldDefinition, FieldRegistry, default_registry, registry_relationships

__all__ = [
    "DEFAULT_LAYOUT",
    "AuthorityResolution",
    "FieldDefinition",
    "FieldRegistry",
    "FlowGraphCache",
    "LayoutConfig",
    "SourceEntityAuthority",
    "assemble_flow_map",
    "build_flow_graph",
    "default_registry",
    "entity_node_id",
    "fold_authorities",
    "fold_authority",
    "group_node_id",
    "order_sources",
    "registry_relationships",
    "resolve_authority",
    "source_node_id",
    "stroke_width",
]
