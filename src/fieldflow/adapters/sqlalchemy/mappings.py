"""SQLAlchemy table metadata for flow-map configuration, staff and lineage."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)

from fieldflow.domain.model import (
    Authority,
    ColumnCategory,
    EntityType,
    ExternalSource,
    LineageSourceType,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
ENUM_LENGTH = 32


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum(enum_cls: type[StrEnum]) -> Enum:
    return Enum(
        enum_cls,
        native_enum=False,
        length=ENUM_LENGTH,
        values_callable=lambda members: [member.value for member in members],
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Source configuration ----------------------------------------------------------

data_source_table = Table(
    "data_source",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("type", String, nullable=False),
    Column("status", String, nullable=False, default="active"),
    Column("created_at", UTCDateTime(), nullable=True),
)

tab_mapping_table = Table(
    "tab_mapping",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("data_source_id", String, ForeignKey("data_source.id"), nullable=False),
    Column("tab_name", String, nullable=False),
    Column("primary_entity", _enum(EntityType), nullable=True),
    Column("status", String, nullable=False, default="active"),
    Index("ix_tab_mapping_data_source_id", "data_source_id"),
)

column_mapping_table = Table(
    "column_mapping",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("tab_mapping_id", String, ForeignKey("tab_mapping.id"), nullable=False),
    Column("source_column", String, nullable=False),
    Column("authority", _enum(Authority), nullable=False),
    Column("category", _enum(ColumnCategory), nullable=True),
    Column("target_field", String, nullable=True),
    Column("is_key", Boolean, nullable=False, default=False),
    Index("ix_column_mapping_tab_mapping_id", "tab_mapping_id"),
)

# Staff enrichment ----------------------------------------------------------------

staff_table = Table(
    "staff",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("full_name", String, nullable=False),
    Column("email", String, nullable=True),
    Column("avatar_url", String, nullable=True),
    Column("title", String, nullable=True),
    Column("phone", String, nullable=True),
    Column("source_data", JSON, nullable=False, default=dict),
)

entity_external_id_table = Table(
    "entity_external_id",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("entity_type", _enum(EntityType), nullable=False),
    Column("entity_id", UUIDColumnType, nullable=False),
    Column("source", _enum(ExternalSource), nullable=False),
    Column("external_id", String, nullable=False),
    Column("external_metadata", JSON, nullable=False, default=dict),
    UniqueConstraint("entity_type", "source", "external_id"),
    Index("ix_entity_external_id_source", "entity_type", "source"),
)

directory_snapshot_table = Table(
    "directory_snapshot",
    mapper_registry.metadata,
    Column("google_user_id", String, primary_key=True),
    Column("primary_email", String, nullable=False),
    Column("full_name", String, nullable=True),
    Column("given_name", String, nullable=True),
    Column("family_name", String, nullable=True),
    Column("org_unit_path", String, nullable=True),
    Column("is_admin", Boolean, nullable=False, default=False),
    Column("is_delegated_admin", Boolean, nullable=False, default=False),
    Column("is_suspended", Boolean, nullable=False, default=False),
    Column("is_deleted", Boolean, nullable=False, default=False),
    Column("title", String, nullable=True),
    Column("phone", String, nullable=True),
    Column("thumbnail_photo_url", String, nullable=True),
    Column("aliases", JSON, nullable=False, default=list),
    Column("non_editable_aliases", JSON, nullable=False, default=list),
    Column("creation_time", UTCDateTime(), nullable=True),
    Column("last_login_time", UTCDateTime(), nullable=True),
    Column("department", String, nullable=True),
    Column("cost_center", String, nullable=True),
    Column("location", String, nullable=True),
    Column("manager_email", String, nullable=True),
    Column("last_seen_at", UTCDateTime(), nullable=True),
)

field_lineage_table = Table(
    "field_lineage",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("entity_type", _enum(EntityType), nullable=False),
    Column("entity_id", UUIDColumnType, nullable=False),
    Column("field_name", String, nullable=False),
    Column("source_type", _enum(LineageSourceType), nullable=False),
    Column("source_ref", String, nullable=False),
    Column("previous_value", String, nullable=True),
    Column("new_value", String, nullable=True),
    Column("changed_at", UTCDateTime(), nullable=False),
    Column("sync_run_id", String, nullable=True),
    Index("ix_field_lineage_entity", "entity_type", "entity_id", "changed_at"),
)


def create_all_tables(engine: Engine) -> None:
    """Create every table directly from metadata, bypassing migrations."""

    log.debug("Creating %s tables", len(mapper_registry.metadata.tables))
    mapper_registry.metadata.create_all(engine)
