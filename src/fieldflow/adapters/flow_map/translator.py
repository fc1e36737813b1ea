"""Translate flow-map payloads into domain documents."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, cast

from fieldflow.domain.model import (
    EntityField,
    EntityNode,
    EntityType,
    FieldGroup,
    FieldRef,
    FieldSource,
    FlowMapDocument,
    FlowMapStats,
    ReferenceConfig,
    Relationship,
    RelationshipType,
    SourceRecord,
    TabRef,
)

from .schema import FlowMapEnvelope, FlowMapPayload, normalize_entity

if TYPE_CHECKING:
    from .schema import (
        EntityPayload,
        FieldPayload,
        FieldRefPayload,
        RelationshipPayload,
        SourcePayload,
    )

log = getLogger(__name__)


def parse_flow_map(raw: object) -> FlowMapDocument:
    """Validate a decoded JSON value (bare document or ``{"data": ...}``) and translate it."""

    if isinstance(raw, Mapping) and "data" in cast(Mapping[str, object], raw):
        payload = FlowMapEnvelope.model_validate(raw).data
    else:
        payload = FlowMapPayload.model_validate(raw)
    return translate_flow_map(payload)


def translate_flow_map(payload: FlowMapPayload) -> FlowMapDocument:
    entities = tuple(_translate_entity(entity) for entity in payload.entities)
    sources = tuple(_translate_source(source) for source in payload.sources)
    relationships = tuple(
        relationship
        for relationship in (_translate_relationship(item) for item in payload.relationships)
        if relationship is not None
    )
    if payload.stats is not None:
        stats = FlowMapStats(
            total_fields=payload.stats.total_fields,
            mapped_fields=payload.stats.mapped_fields,
            total_sources=payload.stats.total_sources,
            total_tabs=payload.stats.total_tabs,
        )
    else:
        stats = FlowMapStats(
            total_fields=sum(entity.field_count for entity in entities),
            mapped_fields=sum(entity.mapped_field_count for entity in entities),
            total_sources=len(sources),
            total_tabs=sum(len(source.tabs) for source in sources),
        )
    return FlowMapDocument(
        entities=entities,
        sources=sources,
        relationships=relationships,
        stats=stats,
    )


def _translate_entity(payload: EntityPayload) -> EntityNode:
    groups = tuple(
        FieldGroup(name=group.name, fields=tuple(_translate_field(field) for field in group.fields))
        for group in payload.groups
    )
    derived = EntityNode.from_groups(payload.type, groups)
    return EntityNode(
        type=payload.type,
        field_count=(
            payload.field_count if payload.field_count is not None else derived.field_count
        ),
        mapped_field_count=(
            payload.mapped_field_count
            if payload.mapped_field_count is not None
            else derived.mapped_field_count
        ),
        groups=groups,
    )


def _translate_field(payload: FieldPayload) -> EntityField:
    reference = None
    if payload.reference is not None:
        reference = ReferenceConfig(
            entity=payload.reference.entity,
            match_field=payload.reference.match_field,
            storage=payload.reference.storage,
            junction_table=payload.reference.junction_table,
            junction_role=payload.reference.junction_role,
        )
    return EntityField(
        name=payload.name,
        label=payload.label,
        type=payload.type,
        is_key=payload.is_key,
        sources=tuple(
            FieldSource(
                source_id=source.source_id,
                source_name=source.source_name,
                tab_name=source.tab_name,
                source_column=source.source_column,
                authority=source.authority,
            )
            for source in payload.sources
        ),
        reference=reference,
    )


def _translate_source(payload: SourcePayload) -> SourceRecord:
    return SourceRecord(
        id=payload.id,
        name=payload.name,
        type=payload.type,
        tabs=tuple(
            TabRef(
                id=tab.id,
                tab_name=tab.tab_name,
                primary_entity=tab.primary_entity,
                column_count=tab.column_count,
                mapped_count=tab.mapped_count,
            )
            for tab in payload.tabs
        ),
    )


def _translate_relationship(payload: RelationshipPayload) -> Relationship | None:
    origin = _field_ref(payload.origin)
    target = _field_ref(payload.target)
    if origin is None or target is None:
        log.debug(
            "Dropping relationship %s.%s -> %s.%s: unknown entity",
            payload.origin.entity,
            payload.origin.field,
            payload.target.entity,
            payload.target.field,
        )
        return None
    return Relationship(
        origin=origin,
        target=target,
        type=RelationshipType(payload.type),
        junction_table=payload.junction_table,
        junction_role=payload.junction_role,
    )


def _field_ref(payload: FieldRefPayload) -> FieldRef | None:
    entity = normalize_entity(payload.entity)
    if not isinstance(entity, EntityType):
        return None
    return FieldRef(entity=entity, field=payload.field)
