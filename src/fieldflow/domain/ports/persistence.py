"""Ports for reading and persisting flow-map configuration and staff data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from uuid import UUID

    from fieldflow.domain.model import (
        ColumnMapping,
        DataSource,
        DirectorySnapshot,
        EnrichmentChange,
        EntityType,
        ExternalIdMapping,
        ExternalSource,
        StaffProfile,
        TabMapping,
    )


class PersistenceError(RuntimeError):
    """Raised by adapters when a storage operation fails."""


class FlowMapUnavailableError(PersistenceError):
    """Raised when the flow-map configuration cannot be fetched."""


@runtime_checkable
class FlowMapRepository(Protocol):
    """Read access to the data sources and their tab and column mappings."""

    def list_sources(self) -> Sequence[DataSource]:
        """Active data sources, oldest first."""
        ...

    def list_tabs(self, source_ids: Collection[str]) -> Sequence[TabMapping]: ...

    def list_columns(self, tab_ids: Collection[str]) -> Sequence[ColumnMapping]: ...


@runtime_checkable
class StaffRepository(Protocol):
    """Persistence contract for the staff fields enrichment touches."""

    def get(self, staff_id: UUID) -> StaffProfile | None: ...

    def add(self, staff: StaffProfile) -> None: ...

    def update_fields(self, staff_id: UUID, updates: dict[str, Any]) -> None: ...


@runtime_checkable
class ExternalIdRepository(Protocol):
    def add(self, mapping: ExternalIdMapping) -> None: ...

    def list_by_source(
        self, entity_type: EntityType, source: ExternalSource
    ) -> Sequence[ExternalIdMapping]: ...


@runtime_checkable
class DirectorySnapshotRepository(Protocol):
    def add(self, snapshot: DirectorySnapshot) -> None: ...

    def get_many(self, google_user_ids: Collection[str]) -> dict[str, DirectorySnapshot]: ...


@runtime_checkable
class FieldLineageRepository(Protocol):
    """Append-only store of accepted field writes."""

    def add_many(self, changes: Sequence[EnrichmentChange]) -> None: ...

    def list_for_entity(
        self, entity_type: EntityType, entity_id: UUID
    ) -> Sequence[EnrichmentChange]: ...
