"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    DirectorySnapshotRepository,
    ExternalIdRepository,
    FieldLineageRepository,
    FlowMapRepository,
    FlowMapUnavailableError,
    PersistenceError,
    StaffRepository,
)
from .unit_of_work import (
    EnrichmentRepositories,
    EnrichmentUnitOfWork,
    FlowMapRepositories,
    FlowMapUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "DirectorySnapshotRepository",
    "EnrichmentRepositories",
    "EnrichmentUnitOfWork",
    "ExternalIdRepository",
    "FieldLineageRepository",
    "FlowMapRepositories",
    "FlowMapRepository",
    "FlowMapUnavailableError",
    "FlowMapUnitOfWork",
    "PersistenceError",
    "RepositoryCollection",
    "StaffRepository",
    "UnitOfWork",
]
