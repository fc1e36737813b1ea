"""Persisted source configuration: data sources, their tabs and column mappings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import Authority, ColumnCategory, EntityType

ACTIVE_STATUS: Final[str] = "active"


@dataclass(frozen=True, slots=True, kw_only=True)
class DataSource:
    id: str
    name: str
    type: str
    status: str = ACTIVE_STATUS
    created_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_STATUS


@dataclass(frozen=True, slots=True, kw_only=True)
class TabMapping:
    id: str
    data_source_id: str
    tab_name: str
    primary_entity: EntityType | None = None
    status: str = ACTIVE_STATUS


@dataclass(frozen=True, slots=True, kw_only=True)
class ColumnMapping:
    """One spreadsheet column and the entity field it feeds (if any)."""

    tab_mapping_id: str
    source_column: str
    authority: Authority
    category: ColumnCategory | None = None
    target_field: str | None = None
    is_key: bool = False
