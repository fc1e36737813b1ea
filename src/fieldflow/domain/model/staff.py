"""Staff records and the external directory data used to enrich them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from .enums import EntityType, ExternalSource


@dataclass(frozen=True, slots=True, kw_only=True)
class StaffProfile:
    """Current values of the staff fields an enrichment run may touch."""

    id: UUID
    full_name: str
    email: str | None = None
    avatar_url: str | None = None
    title: str | None = None
    phone: str | None = None
    source_data: dict[str, Any] = field(default_factory=dict["str", "Any"])


@dataclass(frozen=True, slots=True, kw_only=True)
class ExternalIdMapping:
    """Link between an internal entity and its id in an external system."""

    entity_type: EntityType
    entity_id: UUID
    source: ExternalSource
    external_id: str
    metadata: dict[str, Any] = field(default_factory=dict["str", "Any"])


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectorySnapshot:
    """Point-in-time copy of one Google Workspace directory user."""

    google_user_id: str
    primary_email: str
    full_name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    org_unit_path: str | None = None
    is_admin: bool = False
    is_delegated_admin: bool = False
    is_suspended: bool = False
    is_deleted: bool = False
    title: str | None = None
    phone: str | None = None
    thumbnail_photo_url: str | None = None
    aliases: tuple[str, ...] = ()
    non_editable_aliases: tuple[str, ...] = ()
    creation_time: datetime | None = None
    last_login_time: datetime | None = None
    department: str | None = None
    cost_center: str | None = None
    location: str | None = None
    manager_email: str | None = None
    last_seen_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return not (self.is_suspended or self.is_deleted)

    def directory_payload(self) -> dict[str, Any]:
        """JSON-compatible provenance payload stored under ``source_data``."""

        return {
            "google_user_id": self.google_user_id,
            "primary_email": self.primary_email,
            "full_name": self.full_name,
            "given_name": self.given_name,
            "family_name": self.family_name,
            "org_unit_path": self.org_unit_path,
            "is_admin": self.is_admin,
            "is_delegated_admin": self.is_delegated_admin,
            "is_suspended": self.is_suspended,
            "is_deleted": self.is_deleted,
            "title": self.title,
            "phone": self.phone,
            "thumbnail_photo_url": self.thumbnail_photo_url,
            "aliases": list(self.aliases),
            "non_editable_aliases": list(self.non_editable_aliases),
            "creation_time": _isoformat(self.creation_time),
            "last_login_time": _isoformat(self.last_login_time),
            "department": self.department,
            "cost_center": self.cost_center,
            "location": self.location,
            "manager_email": self.manager_email,
            "last_seen_at": _isoformat(self.last_seen_at),
        }


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
