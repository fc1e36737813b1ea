"""Project a resolved flow-map document into a positioned node/edge graph."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, assert_never

from fieldflow.domain.model import (
    AuthorityRule,
    Edge,
    EdgeKind,
    EntityType,
    FlowGraph,
    Node,
    NodeKind,
    RelationshipType,
)

from .authority import resolve_authority
from .layout import (
    DEFAULT_LAYOUT,
    LayoutConfig,
    layout_entities,
    layout_groups,
    layout_sources,
    order_sources,
    stroke_width,
)

if TYPE_CHECKING:
    from collections.abc import Collection

    from fieldflow.domain.model import (
        EntityNode,
        FlowMapDocument,
        Position,
        Relationship,
        SourceRecord,
    )

    from .authority import AuthorityResolution

log = getLogger(__name__)


def entity_label(entity_type: EntityType) -> str:
    match entity_type:
        case EntityType.PARTNER:
            return "Partners"
        case EntityType.STAFF:
            return "Staff"
        case EntityType.ASIN:
            return "ASINs"
        case _:
            assert_never(entity_type)


def source_node_id(source_id: str) -> str:
    return f"source-{source_id}"


def entity_node_id(entity_type: EntityType) -> str:
    return f"entity-{entity_type.value}"


def group_node_id(entity_type: EntityType, group_name: str) -> str:
    return f"group-{entity_type.value}-{group_name}"


def build_flow_graph(
    document: FlowMapDocument,
    *,
    expanded: Collection[EntityType] = frozenset(),
    resolution: AuthorityResolution | None = None,
    rule: AuthorityRule = AuthorityRule.FIRST_SEEN,
    layout: LayoutConfig = DEFAULT_LAYOUT,
) -> FlowGraph:
    """Build the flow-map graph for ``document``.

    ``expanded`` holds the entity types whose field groups should be emitted as
    nested nodes. A precomputed ``resolution`` may be passed in; otherwise it is
    resolved from the document with ``rule``.
    """

    if not document.entities:
        return FlowGraph()

    if resolution is None:
        resolution = resolve_authority(document.entities, rule=rule)

    nodes: list[Node] = []
    edges: list[Edge] = []

    sorted_sources = order_sources(document.sources, resolution)
    for source, position in zip(
        sorted_sources, layout_sources(len(sorted_sources), layout=layout), strict=True
    ):
        nodes.append(_source_node(source, position, resolution))

    entity_positions = layout_entities(document.entities, expanded=expanded, layout=layout)
    for entity_type, position in entity_positions.items():
        entity = document.entity(entity_type)
        if entity is None:
            continue
        is_expanded = entity_type in expanded
        nodes.append(_entity_node(entity, position, document, resolution, expanded=is_expanded))
        if is_expanded:
            nodes.extend(_group_nodes(entity, position, layout=layout))

    edges.extend(_mapping_edges(document.sources, resolution, present=entity_positions.keys()))
    edges.extend(_reference_edges(document.relationships, present=entity_positions.keys()))

    return FlowGraph(nodes=tuple(nodes), edges=tuple(edges))


def _source_node(
    source: SourceRecord,
    position: Position,
    resolution: AuthorityResolution,
) -> Node:
    primary = resolution.primary_entity(source.id)
    data: dict[str, Any] = {
        "sourceId": source.id,
        "name": source.name,
        "type": source.type,
        "tabCount": len(source.tabs),
        "primaryEntity": primary.value if primary is not None else None,
        "tabs": [
            {
                "id": tab.id,
                "tabName": tab.tab_name,
                "primaryEntity": tab.primary_entity.value if tab.primary_entity else None,
                "columnCount": tab.column_count,
                "mappedCount": tab.mapped_count,
            }
            for tab in source.tabs
        ],
    }
    return Node(id=source_node_id(source.id), kind=NodeKind.SOURCE, position=position, data=data)


def _entity_node(
    entity: EntityNode,
    position: Position,
    document: FlowMapDocument,
    resolution: AuthorityResolution,
    *,
    expanded: bool,
) -> Node:
    names = {source.id: source.name for source in document.sources}
    feeding = [
        {
            "sourceId": pair.source_id,
            "sourceName": names.get(pair.source_id, pair.source_id),
            "authority": pair.authority.value,
            "mappedFieldCount": pair.mapped_field_count,
        }
        for pair in resolution.pairs
        if pair.entity_type is entity.type
    ]
    data: dict[str, Any] = {
        "entityType": entity.type.value,
        "label": entity_label(entity.type),
        "fieldCount": entity.field_count,
        "mappedFieldCount": entity.mapped_field_count,
        "groups": [
            {
                "name": group.name,
                "fieldCount": group.field_count,
                "mappedFieldCount": group.mapped_field_count,
            }
            for group in entity.groups
        ],
        "sources": feeding,
        "isExpanded": expanded,
    }
    return Node(
        id=entity_node_id(entity.type), kind=NodeKind.ENTITY, position=position, data=data
    )


def _group_nodes(
    entity: EntityNode,
    entity_position: Position,
    *,
    layout: LayoutConfig,
) -> list[Node]:
    parent_id = entity_node_id(entity.type)
    positions = layout_groups(entity_position, len(entity.groups), layout=layout)
    return [
        Node(
            id=group_node_id(entity.type, group.name),
            kind=NodeKind.GROUP,
            position=position,
            parent_id=parent_id,
            data={
                "entityType": entity.type.value,
                "groupName": group.name,
                "fieldCount": group.field_count,
                "mappedFieldCount": group.mapped_field_count,
                "parentEntityId": parent_id,
            },
        )
        for group, position in zip(entity.groups, positions, strict=True)
    ]


def _mapping_edges(
    sources: tuple[SourceRecord, ...],
    resolution: AuthorityResolution,
    *,
    present: Collection[EntityType],
) -> list[Edge]:
    edges: list[Edge] = []
    for source in sources:
        for pair in resolution.for_source(source.id):
            if pair.entity_type not in present:
                continue
            edges.append(
                Edge(
                    id=f"mapping-{source.id}-{pair.entity_type.value}",
                    kind=EdgeKind.MAPPING,
                    source=source_node_id(source.id),
                    target=entity_node_id(pair.entity_type),
                    weight=pair.mapped_field_count,
                    data={
                        "sourceId": source.id,
                        "sourceName": source.name,
                        "entityType": pair.entity_type.value,
                        "mappedFieldCount": pair.mapped_field_count,
                        "authority": pair.authority.value,
                        "strokeWidth": stroke_width(pair.mapped_field_count),
                    },
                )
            )
    return edges


def _reference_edges(
    relationships: tuple[Relationship, ...],
    *,
    present: Collection[EntityType],
) -> list[Edge]:
    edges: list[Edge] = []
    seen: set[frozenset[EntityType]] = set()
    for relationship in relationships:
        origin = _known_entity(relationship.origin.entity)
        target = _known_entity(relationship.target.entity)
        if origin is None or target is None or origin not in present or target not in present:
            log.debug(
                "Dropping relationship %s.%s -> %s.%s: entity not in graph",
                relationship.origin.entity,
                relationship.origin.field,
                relationship.target.entity,
                relationship.target.field,
            )
            continue
        pair = frozenset((origin, target))
        if pair in seen:
            continue
        seen.add(pair)
        edges.append(
            Edge(
                id=f"ref-{origin.value}-{target.value}",
                kind=EdgeKind.REFERENCE,
                source=entity_node_id(origin),
                target=entity_node_id(target),
                weight=1,
                data={
                    "fromEntity": origin.value,
                    "toEntity": target.value,
                    "fieldName": relationship.origin.field,
                    "matchField": relationship.target.field,
                    "referenceType": _reference_kind(relationship.type),
                    "relationshipType": relationship.type.value,
                },
            )
        )
    return edges


def _reference_kind(relationship_type: RelationshipType) -> str:
    match relationship_type:
        case RelationshipType.JUNCTION:
            return "junction"
        case RelationshipType.REFERENCE:
            return "direct"
        case _:
            assert_never(relationship_type)


def _known_entity(value: object) -> EntityType | None:
    if isinstance(value, EntityType):
        return value
    try:
        return EntityType(str(value))
    except ValueError:
        return None
