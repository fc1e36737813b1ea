"""Field/source mapping model consumed by authority resolution and graph building.

Everything here is derived data: it is recomputed for every flow-map request and
never persisted. Instances are frozen and hashable so one document can be shared
and used as a cache key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import (
        Authority,
        EntityType,
        FieldType,
        ReferenceStorage,
        RelationshipType,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldSource:
    """One (field, source) mapping: which column of which tab feeds a field."""

    source_id: str
    source_name: str
    tab_name: str
    source_column: str
    authority: Authority


@dataclass(frozen=True, slots=True, kw_only=True)
class ReferenceConfig:
    entity: EntityType
    match_field: str
    storage: ReferenceStorage
    junction_table: str | None = None
    junction_role: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityField:
    name: str
    label: str
    type: FieldType
    is_key: bool = False
    sources: tuple[FieldSource, ...] = ()
    reference: ReferenceConfig | None = None

    @property
    def is_mapped(self) -> bool:
        return len(self.sources) > 0

    def supplied_by(self, source_id: str) -> bool:
        return any(source.source_id == source_id for source in self.sources)


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldGroup:
    name: str
    fields: tuple[EntityField, ...] = ()

    @property
    def field_count(self) -> int:
        return len(self.fields)

    @property
    def mapped_field_count(self) -> int:
        return sum(1 for field in self.fields if field.is_mapped)


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityNode:
    """One entity type with its grouped fields and mapping coverage."""

    type: EntityType
    field_count: int
    mapped_field_count: int
    groups: tuple[FieldGroup, ...] = ()

    def __post_init__(self) -> None:
        if not 0 <= self.mapped_field_count <= self.field_count:
            raise ValueError(
                f"mapped_field_count must be within [0, {self.field_count}] "
                f"for {self.type}, got {self.mapped_field_count}"
            )

    @classmethod
    def from_groups(cls, entity_type: EntityType, groups: tuple[FieldGroup, ...]) -> EntityNode:
        return cls(
            type=entity_type,
            field_count=sum(group.field_count for group in groups),
            mapped_field_count=sum(group.mapped_field_count for group in groups),
            groups=groups,
        )

    @property
    def fields(self) -> tuple[EntityField, ...]:
        return tuple(field for group in self.groups for field in group.fields)


@dataclass(frozen=True, slots=True, kw_only=True)
class TabRef:
    id: str
    tab_name: str
    primary_entity: EntityType | None = None
    column_count: int = 0
    mapped_count: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceRecord:
    """One external system (spreadsheet, form, API) and its tabs."""

    id: str
    name: str
    type: str
    tabs: tuple[TabRef, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldRef:
    entity: EntityType
    field: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Relationship:
    """Entity-to-entity cross-reference declared by a reference field."""

    origin: FieldRef
    target: FieldRef
    type: RelationshipType
    junction_table: str | None = None
    junction_role: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class FlowMapStats:
    total_fields: int = 0
    mapped_fields: int = 0
    total_sources: int = 0
    total_tabs: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class FlowMapDocument:
    """Input contract of the flow-map: entities, sources, relationships and stats."""

    entities: tuple[EntityNode, ...] = ()
    sources: tuple[SourceRecord, ...] = ()
    relationships: tuple[Relationship, ...] = ()
    stats: FlowMapStats = FlowMapStats()

    def __post_init__(self) -> None:
        types = [entity.type for entity in self.entities]
        if len(set(types)) != len(types):
            raise ValueError(f"entity types must be unique, got {[str(t) for t in types]}")

    def entity(self, entity_type: EntityType) -> EntityNode | None:
        return next((entity for entity in self.entities if entity.type is entity_type), None)
