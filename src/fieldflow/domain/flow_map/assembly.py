"""Assemble the flow-map document from persisted source configuration.

Combines data sources, tab mappings and column mappings with the field registry
into the ``FlowMapDocument`` consumed by authority resolution and graph building.
All rows are expected to be fetched up front in three batched queries.
"""

from __future__ import annotations

from collections import defaultdict
from logging import getLogger
from typing import TYPE_CHECKING, Final, assert_never

from fieldflow.domain.model import (
    CANONICAL_ENTITY_ORDER,
    ColumnCategory,
    EntityField,
    EntityNode,
    EntityType,
    FieldGroup,
    FieldSource,
    FlowMapDocument,
    FlowMapStats,
    SourceRecord,
    TabRef,
)

from .registry import default_registry, registry_relationships

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fieldflow.domain.model import ColumnMapping, DataSource, TabMapping

    from .registry import FieldDefinition, FieldRegistry

log = getLogger(__name__)

IGNORED_CATEGORIES: Final[frozenset[ColumnCategory]] = frozenset(
    {ColumnCategory.SKIP, ColumnCategory.WEEKLY, ColumnCategory.COMPUTED}
)


def assemble_flow_map(
    sources: Sequence[DataSource],
    tabs: Sequence[TabMapping],
    columns: Sequence[ColumnMapping],
    *,
    registry: FieldRegistry | None = None,
) -> FlowMapDocument:
    """Build the flow-map document; ``sources`` keep their given order.

    Inactive sources are left out along with everything they map.
    """

    active_sources = [source for source in sources if source.is_active]
    field_registry = registry if registry is not None else default_registry()

    tabs_by_source: dict[str, list[TabMapping]] = defaultdict(list)
    for tab in tabs:
        tabs_by_source[tab.data_source_id].append(tab)

    columns_by_tab: dict[str, list[ColumnMapping]] = defaultdict(list)
    for column in columns:
        columns_by_tab[column.tab_mapping_id].append(column)

    known_fields = {
        entity_type: {definition.name for definition in definitions}
        for entity_type, definitions in field_registry.items()
    }
    sources_by_field: dict[tuple[EntityType, str], list[FieldSource]] = defaultdict(list)

    for source in active_sources:
        for tab in tabs_by_source.get(source.id, ()):
            for column in columns_by_tab.get(tab.id, ()):
                if not column.target_field or column.category in IGNORED_CATEGORIES:
                    continue
                entity_type = _target_entity(column, tab)
                if entity_type is None:
                    continue
                if column.target_field not in known_fields.get(entity_type, set()):
                    log.debug(
                        "Ignoring column %r of %s/%s: %s has no field %r",
                        column.source_column,
                        source.name,
                        tab.tab_name,
                        entity_type,
                        column.target_field,
                    )
                    continue
                sources_by_field[(entity_type, column.target_field)].append(
                    FieldSource(
                        source_id=source.id,
                        source_name=source.name,
                        tab_name=tab.tab_name,
                        source_column=column.source_column,
                        authority=column.authority,
                    )
                )

    entities = tuple(
        _entity_node(entity_type, field_registry.get(entity_type, ()), sources_by_field)
        for entity_type in CANONICAL_ENTITY_ORDER
    )
    source_records = tuple(
        _source_record(source, tabs_by_source.get(source.id, []), columns_by_tab)
        for source in active_sources
    )
    stats = FlowMapStats(
        total_fields=sum(entity.field_count for entity in entities),
        mapped_fields=sum(entity.mapped_field_count for entity in entities),
        total_sources=len(source_records),
        total_tabs=sum(len(record.tabs) for record in source_records),
    )
    return FlowMapDocument(
        entities=entities,
        sources=source_records,
        relationships=registry_relationships(field_registry),
        stats=stats,
    )


def _target_entity(column: ColumnMapping, tab: TabMapping) -> EntityType | None:
    category = column.category
    if category is None:
        return tab.primary_entity
    match category:
        case ColumnCategory.PARTNER:
            return EntityType.PARTNER
        case ColumnCategory.STAFF:
            return EntityType.STAFF
        case ColumnCategory.ASIN:
            return EntityType.ASIN
        case ColumnCategory.SKIP | ColumnCategory.WEEKLY | ColumnCategory.COMPUTED:
            return None
        case _:
            assert_never(category)


def _entity_node(
    entity_type: EntityType,
    definitions: Sequence[FieldDefinition],
    sources_by_field: dict[tuple[EntityType, str], list[FieldSource]],
) -> EntityNode:
    grouped: dict[str, list[EntityField]] = {}
    for definition in definitions:
        grouped.setdefault(definition.group, []).append(
            EntityField(
                name=definition.name,
                label=definition.label,
                type=definition.type,
                is_key=definition.is_key,
                sources=tuple(sources_by_field.get((entity_type, definition.name), ())),
                reference=definition.reference,
            )
        )
    groups = tuple(FieldGroup(name=name, fields=tuple(fields)) for name, fields in grouped.items())
    return EntityNode.from_groups(entity_type, groups)


def _source_record(
    source: DataSource,
    tabs: Sequence[TabMapping],
    columns_by_tab: dict[str, list[ColumnMapping]],
) -> SourceRecord:
    refs: list[TabRef] = []
    for tab in tabs:
        columns = columns_by_tab.get(tab.id, [])
        mapped = sum(
            1
            for column in columns
            if column.target_field and column.category is not ColumnCategory.SKIP
        )
        refs.append(
            TabRef(
                id=tab.id,
                tab_name=tab.tab_name,
                primary_entity=tab.primary_entity,
                column_count=len(columns),
                mapped_count=mapped,
            )
        )
    return SourceRecord(id=source.id, name=source.name, type=source.type, tabs=tuple(refs))
