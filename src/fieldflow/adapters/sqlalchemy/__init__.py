"""SQLAlchemy adapter package for fieldflow."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry
from .repositories import (
    SqlAlchemyDirectorySnapshotRepository,
    SqlAlchemyExternalIdRepository,
    SqlAlchemyFieldLineageRepository,
    SqlAlchemyFlowMapRepository,
    SqlAlchemyStaffRepository,
)
from .unit_of_work import (
    SqlAlchemyEnrichmentUnitOfWork,
    SqlAlchemyFlowMapUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyDirectorySnapshotRepository",
    "SqlAlchemyEnrichmentUnitOfWork",
    "SqlAlchemyExternalIdRepository",
    "SqlAlchemyFieldLineageRepository",
    "SqlAlchemyFlowMapRepository",
    "SqlAlchemyFlowMapUnitOfWork",
    "SqlAlchemyStaffRepository",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "startup",
]
