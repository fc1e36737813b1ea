"""Reusable fakes and factories for staff enrichment tests."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Literal

from fieldflow.domain.model import (
    DirectorySnapshot,
    EntityType,
    ExternalIdMapping,
    ExternalSource,
    StaffProfile,
)
from fieldflow.domain.ports import PersistenceError

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence

    from fieldflow.domain.model import EnrichmentChange


def make_staff(
    full_name: str = "Ada Example",
    *,
    staff_id: uuid.UUID | None = None,
    avatar_url: str | None = None,
    title: str | None = None,
    phone: str | None = None,
    source_data: dict[str, Any] | None = None,
) -> StaffProfile:
    return StaffProfile(
        id=staff_id or uuid.uuid4(),
        full_name=full_name,
        email=f"{full_name.split()[0].lower()}@example.com",
        avatar_url=avatar_url,
        title=title,
        phone=phone,
        source_data=source_data or {},
    )


def make_snapshot(
    google_user_id: str = "g-1",
    *,
    title: str | None = "Engineer",
    phone: str | None = "555-2222",
    thumbnail_photo_url: str | None = "http://x/a.png",
    is_suspended: bool = False,
    is_deleted: bool = False,
) -> DirectorySnapshot:
    return DirectorySnapshot(
        google_user_id=google_user_id,
        primary_email=f"{google_user_id}@example.com",
        full_name="Ada Example",
        title=title,
        phone=phone,
        thumbnail_photo_url=thumbnail_photo_url,
        is_suspended=is_suspended,
        is_deleted=is_deleted,
        department="Engineering",
    )


def make_mapping(staff: StaffProfile, google_user_id: str) -> ExternalIdMapping:
    return ExternalIdMapping(
        entity_type=EntityType.STAFF,
        entity_id=staff.id,
        source=ExternalSource.GOOGLE_WORKSPACE_USER,
        external_id=google_user_id,
    )


class FakeStaffRepository:
    def __init__(self, initial: Iterable[StaffProfile] = ()) -> None:
        self.records = {staff.id: staff for staff in initial}
        self.fail_on_get: set[uuid.UUID] = set()
        self.fail_on_update: set[uuid.UUID] = set()
        self.update_calls: list[tuple[uuid.UUID, dict[str, Any]]] = []

    def get(self, staff_id: uuid.UUID) -> StaffProfile | None:
        if staff_id in self.fail_on_get:
            raise PersistenceError(f"cannot load {staff_id}")
        return self.records.get(staff_id)

    def add(self, staff: StaffProfile) -> None:
        self.records[staff.id] = staff

    def update_fields(self, staff_id: uuid.UUID, updates: dict[str, Any]) -> None:
        if staff_id in self.fail_on_update:
            raise PersistenceError(f"cannot update {staff_id}")
        self.update_calls.append((staff_id, dict(updates)))
        self.records[staff_id] = replace(self.records[staff_id], **updates)


class FakeExternalIdRepository:
    def __init__(self, initial: Iterable[ExternalIdMapping] = ()) -> None:
        self.mappings = list(initial)
        self.fail = False

    def add(self, mapping: ExternalIdMapping) -> None:
        self.mappings.append(mapping)

    def list_by_source(
        self, entity_type: EntityType, source: ExternalSource
    ) -> list[ExternalIdMapping]:
        if self.fail:
            raise PersistenceError("cannot list mappings")
        return [
            mapping
            for mapping in self.mappings
            if mapping.entity_type is entity_type and mapping.source is source
        ]


class FakeDirectorySnapshotRepository:
    def __init__(self, initial: Iterable[DirectorySnapshot] = ()) -> None:
        self.snapshots = {snapshot.google_user_id: snapshot for snapshot in initial}
        self.get_many_calls = 0

    def add(self, snapshot: DirectorySnapshot) -> None:
        self.snapshots[snapshot.google_user_id] = snapshot

    def get_many(self, google_user_ids: Collection[str]) -> dict[str, DirectorySnapshot]:
        self.get_many_calls += 1
        return {
            user_id: self.snapshots[user_id]
            for user_id in google_user_ids
            if user_id in self.snapshots
        }


class FakeFieldLineageRepository:
    def __init__(self) -> None:
        self.rows: list[EnrichmentChange] = []
        self.fail = False

    def add_many(self, changes: Sequence[EnrichmentChange]) -> None:
        if self.fail:
            raise PersistenceError("lineage table unavailable")
        self.rows.extend(changes)

    def list_for_entity(
        self, entity_type: EntityType, entity_id: uuid.UUID
    ) -> list[EnrichmentChange]:
        matching = [
            row
            for row in self.rows
            if row.entity_type is entity_type and row.entity_id == entity_id
        ]
        return sorted(matching, key=lambda row: row.changed_at, reverse=True)


@dataclass(slots=True)
class FakeEnrichmentRepositories:
    staff: FakeStaffRepository = field(default_factory=FakeStaffRepository)
    external_ids: FakeExternalIdRepository = field(default_factory=FakeExternalIdRepository)
    snapshots: FakeDirectorySnapshotRepository = field(
        default_factory=FakeDirectorySnapshotRepository
    )
    lineage: FakeFieldLineageRepository = field(default_factory=FakeFieldLineageRepository)


class FakeEnrichmentUnitOfWork:
    """Unit of work sharing one set of in-memory repositories across instances."""

    def __init__(self, repositories: FakeEnrichmentRepositories) -> None:
        self.repositories = repositories
        self.commits = 0
        self.rollbacks = 0

    def __enter__(self) -> FakeEnrichmentUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: object | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


@dataclass(slots=True)
class FakeEnrichmentStore:
    """Repositories plus a factory that hands out units of work over them."""

    repositories: FakeEnrichmentRepositories = field(default_factory=FakeEnrichmentRepositories)
    units: list[FakeEnrichmentUnitOfWork] = field(
        default_factory=list["FakeEnrichmentUnitOfWork"]
    )

    def add_mapped_staff(self, staff: StaffProfile, snapshot: DirectorySnapshot | None) -> None:
        google_user_id = snapshot.google_user_id if snapshot is not None else f"g-{staff.id}"
        self.repositories.staff.add(staff)
        self.repositories.external_ids.add(make_mapping(staff, google_user_id))
        if snapshot is not None:
            self.repositories.snapshots.add(snapshot)

    def __call__(self) -> FakeEnrichmentUnitOfWork:
        unit = FakeEnrichmentUnitOfWork(self.repositories)
        self.units.append(unit)
        return unit


if TYPE_CHECKING:
    from fieldflow.domain.ports import EnrichmentUnitOfWork

    _uow_check: EnrichmentUnitOfWork = FakeEnrichmentUnitOfWork(FakeEnrichmentRepositories())
