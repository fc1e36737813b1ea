"""Pydantic models describing the JSON flow-map document."""

from __future__ import annotations

from typing import Final, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fieldflow.domain.model import Authority, EntityType, FieldType, ReferenceStorage

ENTITY_ALIASES: Final[dict[str, EntityType]] = {
    "partner": EntityType.PARTNER,
    "partners": EntityType.PARTNER,
    "staff": EntityType.STAFF,
    "asin": EntityType.ASIN,
    "asins": EntityType.ASIN,
}


def normalize_entity(value: object) -> object:
    """Map singular and plural entity names onto ``EntityType`` values."""

    if isinstance(value, str):
        return ENTITY_ALIASES.get(value.strip().lower(), value)
    return value


class FlowMapBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class FieldSourcePayload(FlowMapBaseModel):
    source_id: str = Field(alias="sourceId")
    source_name: str = Field(alias="sourceName")
    tab_name: str = Field(alias="tabName")
    source_column: str = Field(alias="sourceColumn")
    authority: Authority


class ReferencePayload(FlowMapBaseModel):
    entity: EntityType
    match_field: str = Field(alias="matchField")
    storage: ReferenceStorage
    junction_table: str | None = Field(default=None, alias="junctionTable")
    junction_role: str | None = Field(default=None, alias="junctionRole")

    normalize_entity_name = field_validator("entity", mode="before")(normalize_entity)


class FieldPayload(FlowMapBaseModel):
    name: str
    label: str
    type: FieldType
    is_mapped: bool | None = Field(default=None, alias="isMapped")
    is_key: bool = Field(default=False, alias="isKey")
    sources: list[FieldSourcePayload] = Field(default_factory=list["FieldSourcePayload"])
    reference: ReferencePayload | None = None

    @model_validator(mode="after")
    def _check_mapped_flag(self) -> Self:
        if self.is_mapped is not None and self.is_mapped != bool(self.sources):
            raise ValueError(
                f"field {self.name!r}: isMapped={self.is_mapped} but has "
                f"{len(self.sources)} sources"
            )
        return self


class FieldGroupPayload(FlowMapBaseModel):
    name: str
    fields: list[FieldPayload] = Field(default_factory=list["FieldPayload"])


class EntityPayload(FlowMapBaseModel):
    type: EntityType
    field_count: int | None = Field(default=None, alias="fieldCount", ge=0)
    mapped_field_count: int | None = Field(default=None, alias="mappedFieldCount", ge=0)
    groups: list[FieldGroupPayload] = Field(default_factory=list["FieldGroupPayload"])

    normalize_type_name = field_validator("type", mode="before")(normalize_entity)


class TabPayload(FlowMapBaseModel):
    id: str
    tab_name: str = Field(alias="tabName")
    primary_entity: EntityType | None = Field(default=None, alias="primaryEntity")
    column_count: int = Field(default=0, alias="columnCount")
    mapped_count: int = Field(default=0, alias="mappedCount")

    normalize_entity_name = field_validator("primary_entity", mode="before")(normalize_entity)


class SourcePayload(FlowMapBaseModel):
    id: str
    name: str
    type: str
    tabs: list[TabPayload] = Field(default_factory=list["TabPayload"])


class FieldRefPayload(FlowMapBaseModel):
    # Left as a plain string: relationships to unknown entities are dropped, not rejected.
    entity: str
    field: str


class RelationshipPayload(FlowMapBaseModel):
    origin: FieldRefPayload = Field(alias="from")
    target: FieldRefPayload = Field(alias="to")
    type: Literal["reference", "junction"]
    junction_table: str | None = Field(default=None, alias="junctionTable")
    junction_role: str | None = Field(default=None, alias="junctionRole")


class StatsPayload(FlowMapBaseModel):
    total_fields: int = Field(default=0, alias="totalFields")
    mapped_fields: int = Field(default=0, alias="mappedFields")
    total_sources: int = Field(default=0, alias="totalSources")
    total_tabs: int = Field(default=0, alias="totalTabs")


class FlowMapPayload(FlowMapBaseModel):
    entities: list[EntityPayload] = Field(default_factory=list["EntityPayload"])
    sources: list[SourcePayload] = Field(default_factory=list["SourcePayload"])
    relationships: list[RelationshipPayload] = Field(
        default_factory=list["RelationshipPayload"]
    )
    stats: StatsPayload | None = None

    @model_validator(mode="after")
    def _check_unique_entities(self) -> Self:
        seen: set[EntityType] = set()
        for entity in self.entities:
            if entity.type in seen:
                raise ValueError(f"entity {entity.type.value!r} is listed more than once")
            seen.add(entity.type)
        return self


class FlowMapEnvelope(FlowMapBaseModel):
    """API responses wrap the document as ``{"success": true, "data": {...}}``."""

    data: FlowMapPayload
