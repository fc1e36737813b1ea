"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Final

from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from fieldflow.adapters.sqlalchemy.mappings import (
    column_mapping_table,
    data_source_table,
    directory_snapshot_table,
    entity_external_id_table,
    field_lineage_table,
    staff_table,
    tab_mapping_table,
)
from fieldflow.domain.model import (
    ACTIVE_STATUS,
    ColumnMapping,
    DataSource,
    DirectorySnapshot,
    EnrichmentChange,
    ExternalIdMapping,
    StaffProfile,
    TabMapping,
)
from fieldflow.domain.ports import FlowMapUnavailableError, PersistenceError

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator, Sequence
    from uuid import UUID

    from sqlalchemy import Row
    from sqlalchemy.orm import Session

    from fieldflow.domain.model import EntityType, ExternalSource

STAFF_WRITABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {"avatar_url", "title", "phone", "source_data"}
)


@contextmanager
def _translate_errors(
    message: str, error_cls: type[PersistenceError] = PersistenceError
) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise error_cls(message) from exc


class SqlAlchemyFlowMapRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_sources(self) -> list[DataSource]:
        stmt = (
            select(data_source_table)
            .where(data_source_table.c.status == ACTIVE_STATUS)
            .order_by(data_source_table.c.created_at, data_source_table.c.id)
        )
        with _translate_errors("Failed to fetch data sources", FlowMapUnavailableError):
            rows = self.session.execute(stmt).all()
        return [
            DataSource(
                id=row.id,
                name=row.name,
                type=row.type,
                status=row.status,
                created_at=row.created_at,
            )
            for row in rows
        ]

    def list_tabs(self, source_ids: Collection[str]) -> list[TabMapping]:
        if not source_ids:
            return []
        stmt = (
            select(tab_mapping_table)
            .where(tab_mapping_table.c.data_source_id.in_(list(source_ids)))
            .order_by(tab_mapping_table.c.tab_name, tab_mapping_table.c.id)
        )
        with _translate_errors("Failed to fetch tab mappings", FlowMapUnavailableError):
            rows = self.session.execute(stmt).all()
        return [
            TabMapping(
                id=row.id,
                data_source_id=row.data_source_id,
                tab_name=row.tab_name,
                primary_entity=row.primary_entity,
                status=row.status,
            )
            for row in rows
        ]

    def list_columns(self, tab_ids: Collection[str]) -> list[ColumnMapping]:
        if not tab_ids:
            return []
        stmt = (
            select(column_mapping_table)
            .where(column_mapping_table.c.tab_mapping_id.in_(list(tab_ids)))
            .order_by(column_mapping_table.c.id)
        )
        with _translate_errors("Failed to fetch column mappings", FlowMapUnavailableError):
            rows = self.session.execute(stmt).all()
        return [
            ColumnMapping(
                tab_mapping_id=row.tab_mapping_id,
                source_column=row.source_column,
                authority=row.authority,
                category=row.category,
                target_field=row.target_field,
                is_key=row.is_key,
            )
            for row in rows
        ]

    def add_source(self, source: DataSource) -> None:
        with _translate_errors(f"Failed to add data source {source.id}"):
            self.session.execute(
                insert(data_source_table).values(
                    id=source.id,
                    name=source.name,
                    type=source.type,
                    status=source.status,
                    created_at=source.created_at,
                )
            )

    def add_tab(self, tab: TabMapping) -> None:
        with _translate_errors(f"Failed to add tab mapping {tab.id}"):
            self.session.execute(
                insert(tab_mapping_table).values(
                    id=tab.id,
                    data_source_id=tab.data_source_id,
                    tab_name=tab.tab_name,
                    primary_entity=tab.primary_entity,
                    status=tab.status,
                )
            )

    def add_columns(self, columns: Sequence[ColumnMapping]) -> None:
        if not columns:
            return
        rows = [
            {
                "tab_mapping_id": column.tab_mapping_id,
                "source_column": column.source_column,
                "authority": column.authority,
                "category": column.category,
                "target_field": column.target_field,
                "is_key": column.is_key,
            }
            for column in columns
        ]
        with _translate_errors("Failed to add column mappings"):
            self.session.execute(insert(column_mapping_table), rows)


class SqlAlchemyStaffRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, staff_id: UUID) -> StaffProfile | None:
        stmt = select(staff_table).where(staff_table.c.id == staff_id)
        with _translate_errors(f"Failed to load staff record {staff_id}"):
            row = self.session.execute(stmt).one_or_none()
        if row is None:
            return None
        return StaffProfile(
            id=row.id,
            full_name=row.full_name,
            email=row.email,
            avatar_url=row.avatar_url,
            title=row.title,
            phone=row.phone,
            source_data=dict(row.source_data or {}),
        )

    def add(self, staff: StaffProfile) -> None:
        with _translate_errors(f"Failed to add staff record {staff.id}"):
            self.session.execute(
                insert(staff_table).values(
                    id=staff.id,
                    full_name=staff.full_name,
                    email=staff.email,
                    avatar_url=staff.avatar_url,
                    title=staff.title,
                    phone=staff.phone,
                    source_data=staff.source_data,
                )
            )

    def update_fields(self, staff_id: UUID, updates: dict[str, Any]) -> None:
        unknown = set(updates) - STAFF_WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Staff fields not writable: {sorted(unknown)}")
        if not updates:
            return
        stmt = update(staff_table).where(staff_table.c.id == staff_id).values(**updates)
        with _translate_errors(f"Failed to update staff record {staff_id}"):
            self.session.execute(stmt)


class SqlAlchemyExternalIdRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, mapping: ExternalIdMapping) -> None:
        with _translate_errors(f"Failed to add external id {mapping.external_id}"):
            self.session.execute(
                insert(entity_external_id_table).values(
                    entity_type=mapping.entity_type,
                    entity_id=mapping.entity_id,
                    source=mapping.source,
                    external_id=mapping.external_id,
                    external_metadata=mapping.metadata,
                )
            )

    def list_by_source(
        self, entity_type: EntityType, source: ExternalSource
    ) -> list[ExternalIdMapping]:
        stmt = (
            select(entity_external_id_table)
            .where(entity_external_id_table.c.entity_type == entity_type)
            .where(entity_external_id_table.c.source == source)
            .order_by(entity_external_id_table.c.id)
        )
        with _translate_errors(f"Failed to fetch {source} mappings"):
            rows = self.session.execute(stmt).all()
        return [
            ExternalIdMapping(
                entity_type=row.entity_type,
                entity_id=row.entity_id,
                source=row.source,
                external_id=row.external_id,
                metadata=dict(row.external_metadata or {}),
            )
            for row in rows
        ]


class SqlAlchemyDirectorySnapshotRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, snapshot: DirectorySnapshot) -> None:
        values = snapshot.directory_payload()
        values.update(
            aliases=list(snapshot.aliases),
            non_editable_aliases=list(snapshot.non_editable_aliases),
            creation_time=snapshot.creation_time,
            last_login_time=snapshot.last_login_time,
            last_seen_at=snapshot.last_seen_at,
        )
        with _translate_errors(f"Failed to add snapshot {snapshot.google_user_id}"):
            self.session.execute(insert(directory_snapshot_table).values(**values))

    def get_many(self, google_user_ids: Collection[str]) -> dict[str, DirectorySnapshot]:
        if not google_user_ids:
            return {}
        stmt = select(directory_snapshot_table).where(
            directory_snapshot_table.c.google_user_id.in_(list(google_user_ids))
        )
        with _translate_errors("Failed to fetch directory snapshots"):
            rows = self.session.execute(stmt).all()
        return {row.google_user_id: _snapshot_from_row(row) for row in rows}


class SqlAlchemyFieldLineageRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add_many(self, changes: Sequence[EnrichmentChange]) -> None:
        if not changes:
            return
        rows = [
            {
                "entity_type": change.entity_type,
                "entity_id": change.entity_id,
                "field_name": change.field_name,
                "source_type": change.source_type,
                "source_ref": change.source_ref,
                "previous_value": change.previous_value,
                "new_value": change.new_value,
                "changed_at": change.changed_at,
                "sync_run_id": change.sync_run_id,
            }
            for change in changes
        ]
        with _translate_errors(f"Failed to insert {len(rows)} lineage rows"):
            self.session.execute(insert(field_lineage_table), rows)

    def list_for_entity(self, entity_type: EntityType, entity_id: UUID) -> list[EnrichmentChange]:
        """Lineage rows for one entity, newest first."""

        stmt = (
            select(field_lineage_table)
            .where(field_lineage_table.c.entity_type == entity_type)
            .where(field_lineage_table.c.entity_id == entity_id)
            .order_by(field_lineage_table.c.changed_at.desc(), field_lineage_table.c.id.desc())
        )
        with _translate_errors(f"Failed to fetch lineage for {entity_type} {entity_id}"):
            rows = self.session.execute(stmt).all()
        return [
            EnrichmentChange(
                entity_type=row.entity_type,
                entity_id=row.entity_id,
                field_name=row.field_name,
                source_type=row.source_type,
                source_ref=row.source_ref,
                previous_value=row.previous_value,
                new_value=row.new_value,
                changed_at=row.changed_at,
                sync_run_id=row.sync_run_id,
            )
            for row in rows
        ]


def _snapshot_from_row(row: Row[Any]) -> DirectorySnapshot:
    return DirectorySnapshot(
        google_user_id=row.google_user_id,
        primary_email=row.primary_email,
        full_name=row.full_name,
        given_name=row.given_name,
        family_name=row.family_name,
        org_unit_path=row.org_unit_path,
        is_admin=bool(row.is_admin),
        is_delegated_admin=bool(row.is_delegated_admin),
        is_suspended=bool(row.is_suspended),
        is_deleted=bool(row.is_deleted),
        title=row.title,
        phone=row.phone,
        thumbnail_photo_url=row.thumbnail_photo_url,
        aliases=tuple(row.aliases or ()),
        non_editable_aliases=tuple(row.non_editable_aliases or ()),
        creation_time=row.creation_time,
        last_login_time=row.last_login_time,
        department=row.department,
        cost_center=row.cost_center,
        location=row.location,
        manager_email=row.manager_email,
        last_seen_at=row.last_seen_at,
    )
