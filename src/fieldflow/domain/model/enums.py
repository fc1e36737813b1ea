"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class EntityType(StrEnum):
    """Business object types whose fields can be fed by external sources."""

    PARTNER = "partner"
    STAFF = "staff"
    ASIN = "asin"


# Canonical top-to-bottom order of the entity column.
CANONICAL_ENTITY_ORDER: Final[tuple[EntityType, ...]] = (
    EntityType.PARTNER,
    EntityType.STAFF,
    EntityType.ASIN,
)


class Authority(StrEnum):
    """Authority a source holds over one field it supplies."""

    SOURCE_OF_TRUTH = "source_of_truth"
    REFERENCE = "reference"


class AuthorityAggregate(StrEnum):
    """Authority of a source over an entity, folded across its fields."""

    SOURCE_OF_TRUTH = "source_of_truth"
    REFERENCE = "reference"
    MIXED = "mixed"


class AuthorityRule(StrEnum):
    """Fold rule used when aggregating field authorities per (source, entity)."""

    FIRST_SEEN = "first_seen"
    SEEDED_REFERENCE = "seeded_reference"


class FieldType(StrEnum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    REFERENCE = "reference"
    ARRAY = "array"


class ReferenceStorage(StrEnum):
    DIRECT = "direct"
    JUNCTION = "junction"


class RelationshipType(StrEnum):
    REFERENCE = "reference"
    JUNCTION = "junction"


class ColumnCategory(StrEnum):
    """Category assigned to a mapped spreadsheet column."""

    PARTNER = "partner"
    STAFF = "staff"
    ASIN = "asin"
    WEEKLY = "weekly"
    COMPUTED = "computed"
    SKIP = "skip"


class NodeKind(StrEnum):
    SOURCE = "source"
    ENTITY = "entity"
    GROUP = "group"


class EdgeKind(StrEnum):
    MAPPING = "mapping"
    REFERENCE = "reference"


class LineageSourceType(StrEnum):
    GOOGLE_SHEET = "google_sheet"
    API = "api"
    APP = "app"
    MANUAL = "manual"


class ExternalSource(StrEnum):
    """Namespaces of external ids linked to entities."""

    GOOGLE_WORKSPACE_USER = "google_workspace_user"
    SLACK_USER = "slack_user"


class EnrichmentField(StrEnum):
    """Fields an enrichment run may write."""

    AVATAR_URL = "avatar_url"
    TITLE = "title"
    PHONE = "phone"
    DIRECTORY_SNAPSHOT = "directory_snapshot"
