"""Public domain model surface."""

from __future__ import annotations

from fieldflow.domain.model.enums import (
    CANONICAL_ENTITY_ORDER,
    Authority,
    AuthorityAggregate,
    AuthorityRule,
    ColumnCategory,
    EdgeKind,
    EnrichmentField,
    EntityType,
    ExternalSource,
    FieldType,
    LineageSourceType,
    NodeKind,
    ReferenceStorage,
    RelationshipType,
)
from fieldflow.domain.model.graph import Edge, FlowGraph, Node, Position
from fieldflow.domain.model.lineage import EnrichmentChange
from fieldflow.domain.model.mapping import (
    EntityField,
    EntityNode,
    FieldGroup,
    FieldRef,
    FieldSource,
    FlowMapDocument,
    FlowMapStats,
    ReferenceConfig,
    Relationship,
    SourceRecord,
    TabRef,
)
from fieldflow.domain.model.sources import ACTIVE_STATUS, ColumnMapping, DataSource, TabMapping
from fieldflow.domain.model.staff import DirectorySnapshot, ExternalIdMapping, StaffProfile

__all__ = [  # noqa: RUF022
    # mapping
    "FieldSource",
    "ReferenceConfig",
    "EntityField",
    "FieldGroup",
    "EntityNode",
    "TabRef",
    "SourceRecord",
    "FieldRef",
    "Relationship",
    "FlowMapStats",
    "FlowMapDocument",
    # graph
    "Position",
    "Node",
    "Edge",
    "FlowGraph",
    # sources
    "ACTIVE_STATUS",
    "DataSource",
    "TabMapping",
    "ColumnMapping",
    # staff
    "StaffProfile",
    "ExternalIdMapping",
    "DirectorySnapshot",
    # lineage
    "EnrichmentChange",
    # enums
    "CANONICAL_ENTITY_ORDER",
    "Authority",
    "AuthorityAggregate",
    "AuthorityRule",
    "ColumnCategory",
    "EdgeKind",
    "EnrichmentField",
    "EntityType",
    "ExternalSource",
    "FieldType",
    "LineageSourceType",
    "NodeKind",
    "ReferenceStorage",
    "RelationshipType",
]
