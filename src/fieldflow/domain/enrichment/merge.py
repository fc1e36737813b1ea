"""Merge a directory snapshot into a staff record.

The merge is a pure function of ``(record, snapshot, selection)``: it decides
which fields may be written and returns the update set together with the field
changes to record as lineage. Persisting either is up to the caller.

Rules:

* ``avatar_url`` is always evaluated and written only while the record has none.
* ``title`` and ``phone`` are written only when selected, currently empty and
  non-empty in the snapshot. Existing values are never overwritten.
* ``directory_snapshot`` deep-merges the snapshot payload into
  ``source_data["google_workspace"]``. It counts as a change only if the
  canonical JSON of the merged blob differs from the original.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final, cast

from fieldflow.domain.model import EnrichmentField

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from fieldflow.domain.model import DirectorySnapshot, StaffProfile

    from .selection import FieldSelection

SOURCE_DATA_NAMESPACE: Final[str] = "google_workspace"
SNAPSHOT_KEY: Final[str] = "directory_snapshot"
SOURCE_REF_PREFIX: Final[str] = "Google Workspace → Directory Snapshot"


class SkipReason(StrEnum):
    MISSING_SNAPSHOT = "missing_snapshot"
    INACTIVE_SNAPSHOT = "inactive_snapshot"
    RECORD_UNAVAILABLE = "record_unavailable"
    NOTHING_TO_WRITE = "nothing_to_write"
    WRITE_FAILED = "write_failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldChange:
    """One accepted field write, kept for the lineage trail."""

    field: EnrichmentField
    previous: str | None
    new: str | None
    source_ref: str


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeOutcome:
    updates: dict[str, Any] = field(default_factory=dict["str", "Any"])
    changes: tuple[FieldChange, ...] = ()
    source_data_changed: bool = False
    skip_reason: SkipReason | None = None

    @property
    def enriched(self) -> bool:
        return self.skip_reason is None

    @classmethod
    def skipped(cls, reason: SkipReason) -> MergeOutcome:
        return cls(skip_reason=reason)


def source_ref(column: str) -> str:
    return f"{SOURCE_REF_PREFIX} → {column}"


def snapshot_skip_reason(snapshot: DirectorySnapshot | None) -> SkipReason | None:
    """Check the snapshot preconditions, in order, before the record is loaded."""

    if snapshot is None:
        return SkipReason.MISSING_SNAPSHOT
    if not snapshot.is_active:
        return SkipReason.INACTIVE_SNAPSHOT
    return None


def merge_snapshot(
    record: StaffProfile | None,
    snapshot: DirectorySnapshot | None,
    *,
    selection: FieldSelection,
    synced_at: datetime,
) -> MergeOutcome:
    reason = snapshot_skip_reason(snapshot)
    if reason is not None:
        return MergeOutcome.skipped(reason)
    if record is None:
        return MergeOutcome.skipped(SkipReason.RECORD_UNAVAILABLE)
    snapshot = cast("DirectorySnapshot", snapshot)

    updates: dict[str, Any] = {}
    changes: list[FieldChange] = []

    def fill(
        target: EnrichmentField, current: str | None, incoming: str | None, column: str
    ) -> None:
        if _is_empty(current) and not _is_empty(incoming):
            updates[target.value] = incoming
            changes.append(
                FieldChange(
                    field=target, previous=current, new=incoming, source_ref=source_ref(column)
                )
            )

    fill(
        EnrichmentField.AVATAR_URL,
        record.avatar_url,
        snapshot.thumbnail_photo_url,
        "thumbnail_photo_url",
    )
    if selection.includes(EnrichmentField.TITLE):
        fill(EnrichmentField.TITLE, record.title, snapshot.title, "title")
    if selection.includes(EnrichmentField.PHONE):
        fill(EnrichmentField.PHONE, record.phone, snapshot.phone, "phone")

    source_data_changed = False
    if selection.includes(EnrichmentField.DIRECTORY_SNAPSHOT):
        merged = merge_directory_payload(record.source_data, snapshot, synced_at=synced_at)
        if merged is not None:
            updates["source_data"] = merged
            source_data_changed = True

    if not updates:
        return MergeOutcome.skipped(SkipReason.NOTHING_TO_WRITE)
    return MergeOutcome(
        updates=updates,
        changes=tuple(changes),
        source_data_changed=source_data_changed,
    )


def merge_directory_payload(
    source_data: Mapping[str, Any],
    snapshot: DirectorySnapshot,
    *,
    synced_at: datetime,
) -> dict[str, Any] | None:
    """Return the merged ``source_data`` blob, or ``None`` when nothing would change.

    ``synced_at`` is only stamped into a payload that actually differs, so a
    re-run with an unchanged snapshot stays a no-op.
    """

    incoming = {SOURCE_DATA_NAMESPACE: {SNAPSHOT_KEY: snapshot.directory_payload()}}
    merged = deep_merge(source_data, incoming)
    if canonical_json(merged) == canonical_json(source_data):
        return None
    merged[SOURCE_DATA_NAMESPACE][SNAPSHOT_KEY]["synced_at"] = synced_at.isoformat()
    return merged


def deep_merge(base: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``incoming`` into a copy of ``base``; nested objects merge, anything else replaces."""

    result: dict[str, Any] = dict(base)
    for key, value in incoming.items():
        current = result.get(key)
        if _is_object(current) and _is_object(value):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def canonical_json(value: object) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def _is_object(value: object) -> bool:
    return isinstance(value, dict)


def _is_empty(value: str | None) -> bool:
    return value is None or not value.strip()
