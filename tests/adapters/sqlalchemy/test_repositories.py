from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text

from fieldflow.adapters.sqlalchemy.repositories import (
    SqlAlchemyDirectorySnapshotRepository,
    SqlAlchemyExternalIdRepository,
    SqlAlchemyFieldLineageRepository,
    SqlAlchemyFlowMapRepository,
    SqlAlchemyStaffRepository,
)
from fieldflow.domain.model import (
    Authority,
    ColumnCategory,
    ColumnMapping,
    DataSource,
    DirectorySnapshot,
    EnrichmentChange,
    EntityType,
    ExternalIdMapping,
    ExternalSource,
    LineageSourceType,
    TabMapping,
)
from fieldflow.domain.ports import FlowMapUnavailableError, PersistenceError
from tests.helpers.enrichment import make_mapping, make_snapshot, make_staff

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

NOW = datetime(2026, 5, 1, 10, 0, tzinfo=UTC)


def _seed_flow_map(repository: SqlAlchemyFlowMapRepository) -> None:
    repository.add_source(
        DataSource(id="hr", name="HR Roster", type="google_sheet", created_at=NOW)
    )
    repository.add_source(
        DataSource(
            id="master", name="Master", type="google_sheet", created_at=NOW - timedelta(days=1)
        )
    )
    repository.add_tab(
        TabMapping(
            id="master-clients",
            data_source_id="master",
            tab_name="Clients",
            primary_entity=EntityType.PARTNER,
        )
    )
    repository.add_tab(TabMapping(id="hr-staff", data_source_id="hr", tab_name="Staff"))
    repository.add_columns(
        [
            ColumnMapping(
                tab_mapping_id="master-clients",
                source_column="Brand",
                authority=Authority.SOURCE_OF_TRUTH,
                category=ColumnCategory.PARTNER,
                target_field="brand_name",
                is_key=True,
            ),
            ColumnMapping(
                tab_mapping_id="hr-staff",
                source_column="Name",
                authority=Authority.REFERENCE,
                target_field="full_name",
            ),
        ]
    )


def test_flow_map_repository_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyFlowMapRepository(sqlite_session)
    _seed_flow_map(repository)
    sqlite_session.commit()

    sources = repository.list_sources()
    tabs = repository.list_tabs([source.id for source in sources])
    columns = repository.list_columns([tab.id for tab in tabs])

    assert [source.id for source in sources] == ["master", "hr"]
    assert sources[0].created_at == NOW - timedelta(days=1)
    assert {tab.id: tab.primary_entity for tab in tabs} == {
        "master-clients": EntityType.PARTNER,
        "hr-staff": None,
    }
    brand = next(column for column in columns if column.source_column == "Brand")
    assert brand.authority is Authority.SOURCE_OF_TRUTH
    assert brand.category is ColumnCategory.PARTNER
    assert brand.is_key
    name = next(column for column in columns if column.source_column == "Name")
    assert name.category is None


def test_flow_map_repository_lists_only_active_sources(sqlite_session: Session) -> None:
    repository = SqlAlchemyFlowMapRepository(sqlite_session)
    _seed_flow_map(repository)
    repository.add_source(
        DataSource(
            id="legacy", name="Legacy", type="google_sheet", status="inactive", created_at=NOW
        )
    )
    sqlite_session.commit()

    assert [source.id for source in repository.list_sources()] == ["master", "hr"]


def test_flow_map_batched_reads_short_circuit_on_empty_input(sqlite_session: Session) -> None:
    repository = SqlAlchemyFlowMapRepository(sqlite_session)

    assert repository.list_tabs([]) == []
    assert repository.list_columns([]) == []


def test_flow_map_read_failure_raises_unavailable(sqlite_session: Session) -> None:
    sqlite_session.execute(text("DROP TABLE column_mapping"))
    repository = SqlAlchemyFlowMapRepository(sqlite_session)

    with pytest.raises(FlowMapUnavailableError):
        repository.list_columns(["any-tab"])


def test_staff_update_fields(sqlite_session: Session) -> None:
    repository = SqlAlchemyStaffRepository(sqlite_session)
    staff = make_staff()
    repository.add(staff)

    repository.update_fields(
        staff.id, {"title": "Engineer", "source_data": {"google_workspace": {"a": 1}}}
    )

    loaded = repository.get(staff.id)
    assert loaded is not None
    assert loaded.title == "Engineer"
    assert loaded.source_data == {"google_workspace": {"a": 1}}
    assert repository.get(uuid.uuid4()) is None


def test_staff_update_rejects_unknown_fields(sqlite_session: Session) -> None:
    repository = SqlAlchemyStaffRepository(sqlite_session)

    with pytest.raises(ValueError, match="full_name"):
        repository.update_fields(uuid.uuid4(), {"full_name": "Someone Else"})


def test_external_ids_filter_by_entity_and_source(sqlite_session: Session) -> None:
    repository = SqlAlchemyExternalIdRepository(sqlite_session)
    ada = make_staff()
    repository.add(make_mapping(ada, "g-ada"))
    repository.add(
        ExternalIdMapping(
            entity_type=EntityType.STAFF,
            entity_id=ada.id,
            source=ExternalSource.SLACK_USER,
            external_id="U123",
            metadata={"team": "T1"},
        )
    )

    google = repository.list_by_source(EntityType.STAFF, ExternalSource.GOOGLE_WORKSPACE_USER)
    slack_rows = repository.list_by_source(EntityType.STAFF, ExternalSource.SLACK_USER)

    assert [(row.entity_id, row.external_id) for row in google] == [(ada.id, "g-ada")]
    assert slack_rows[0].metadata == {"team": "T1"}


def test_external_id_duplicate_raises_persistence_error(sqlite_session: Session) -> None:
    repository = SqlAlchemyExternalIdRepository(sqlite_session)
    mapping = make_mapping(make_staff(), "g-dup")
    repository.add(mapping)

    with pytest.raises(PersistenceError):
        repository.add(mapping)


def test_snapshot_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyDirectorySnapshotRepository(sqlite_session)
    snapshot = DirectorySnapshot(
        google_user_id="g-1",
        primary_email="ada@example.com",
        full_name="Ada Example",
        aliases=("ada.e@example.com",),
        is_admin=True,
        last_login_time=NOW,
    )
    repository.add(snapshot)
    repository.add(make_snapshot("g-2"))

    loaded = repository.get_many(["g-1", "g-missing"])

    assert set(loaded) == {"g-1"}
    assert loaded["g-1"] == snapshot
    assert repository.get_many([]) == {}


def test_lineage_rows_are_listed_newest_first(sqlite_session: Session) -> None:
    repository = SqlAlchemyFieldLineageRepository(sqlite_session)
    staff_id = uuid.uuid4()

    def change(field_name: str, changed_at: datetime) -> EnrichmentChange:
        return EnrichmentChange(
            entity_type=EntityType.STAFF,
            entity_id=staff_id,
            field_name=field_name,
            source_type=LineageSourceType.API,
            source_ref=f"Google Workspace → Directory Snapshot → {field_name}",
            previous_value=None,
            new_value="value",
            changed_at=changed_at,
            sync_run_id="run-1",
        )

    older = change("title", NOW - timedelta(hours=1))
    newer = change("phone", NOW)
    repository.add_many([older, newer])
    repository.add_many([])

    rows = repository.list_for_entity(EntityType.STAFF, staff_id)

    assert rows == [newer, older]
    assert repository.list_for_entity(EntityType.STAFF, uuid.uuid4()) == []
