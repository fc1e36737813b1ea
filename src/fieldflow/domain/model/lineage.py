"""Append-only provenance records for enriched fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from .enums import EntityType, LineageSourceType


@dataclass(frozen=True, slots=True, kw_only=True)
class EnrichmentChange:
    """Audit row for one accepted field write; never mutated once created."""

    entity_type: EntityType
    entity_id: UUID
    field_name: str
    source_type: LineageSourceType
    source_ref: str
    previous_value: str | None
    new_value: str | None
    changed_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    sync_run_id: str | None = None
