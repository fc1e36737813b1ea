"""Run a directory enrichment pass over every mapped staff member."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from fieldflow.domain.model import EnrichmentField, EntityType, ExternalSource
from fieldflow.domain.ports import PersistenceError

from .lineage import LineageRecorder
from .merge import MergeOutcome, SkipReason, merge_snapshot, snapshot_skip_reason
from .selection import DEFAULT_FIELD_SELECTION

if TYPE_CHECKING:
    from collections.abc import Callable

    from fieldflow.domain.model import DirectorySnapshot, ExternalIdMapping
    from fieldflow.domain.ports import EnrichmentUnitOfWork

    from .selection import FieldSelection

log = getLogger(__name__)

NO_MAPPINGS_MESSAGE = "No staff to Google Workspace mappings found. Run auto-match first."


@dataclass(slots=True)
class EnrichmentRunResult:
    selected_fields: list[str]
    total_mappings: int = 0
    enriched: int = 0
    skipped: int = 0
    source_snapshot_updates: int = 0
    fields_updated: dict[str, int] = field(
        default_factory=lambda: {
            EnrichmentField.TITLE.value: 0,
            EnrichmentField.PHONE.value: 0,
            EnrichmentField.AVATAR_URL.value: 0,
        }
    )
    skip_reasons: dict[SkipReason, int] = field(default_factory=dict["SkipReason", "int"])
    lineage_written: int = 0
    lineage_failed: bool = False
    message: str | None = None

    def count_skip(self, reason: SkipReason) -> None:
        self.skipped += 1
        self.skip_reasons[reason] = self.skip_reasons.get(reason, 0) + 1

    def count_enriched(self, outcome: MergeOutcome) -> None:
        self.enriched += 1
        if outcome.source_data_changed:
            self.source_snapshot_updates += 1
        for change in outcome.changes:
            self.fields_updated[change.field.value] += 1

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "enriched": self.enriched,
            "skipped": self.skipped,
            "total_mappings": self.total_mappings,
            "fields_updated": dict(self.fields_updated),
            "source_snapshot_updates": self.source_snapshot_updates,
            "selected_fields": list(self.selected_fields),
            "lineage_written": self.lineage_written,
            "lineage_failed": self.lineage_failed,
        }
        if self.message is not None:
            payload["message"] = self.message
        return payload


def enrich_staff_from_directory(
    *,
    unit_of_work_factory: Callable[[], EnrichmentUnitOfWork],
    selection: FieldSelection = DEFAULT_FIELD_SELECTION,
    clock: Callable[[], datetime] | None = None,
    sync_run_id: str | None = None,
) -> EnrichmentRunResult:
    """Enrich staff records from their Google Workspace directory snapshots.

    Mappings and snapshots are fetched once up front; a failure there propagates.
    Each record is then merged and written in its own unit of work, so a failed
    record is counted as skipped without affecting the others. Lineage for all
    enriched records is written last and only ever reported, never raised.

    Concurrent runs are not serialised per staff member; callers that run more
    than one pass at a time must lock around this function themselves.
    """

    now = clock or (lambda: datetime.now(tz=UTC))
    result = EnrichmentRunResult(selected_fields=selection.as_list())

    mappings, snapshots = _load_mappings_and_snapshots(unit_of_work_factory)
    result.total_mappings = len(mappings)
    if not mappings:
        result.message = NO_MAPPINGS_MESSAGE
        log.info("No staff directory mappings to enrich")
        return result

    recorder = LineageRecorder(sync_run_id=sync_run_id)
    for mapping in mappings:
        snapshot = snapshots.get(mapping.external_id)
        reason = snapshot_skip_reason(snapshot)
        if reason is not None:
            log.debug("Skipping staff %s: %s", mapping.entity_id, reason)
            result.count_skip(reason)
            continue

        changed_at = now()
        outcome = _enrich_one(unit_of_work_factory, mapping, snapshot, selection, changed_at)
        if outcome.skip_reason is not None:
            result.count_skip(outcome.skip_reason)
            continue

        result.count_enriched(outcome)
        recorder.record(mapping.entity_id, outcome.changes, changed_at=changed_at)

    lineage = recorder.flush(unit_of_work_factory)
    result.lineage_written = lineage.written
    result.lineage_failed = lineage.failed

    log.info(
        "Enriched %s of %s mapped staff (%s skipped, %s snapshot updates)",
        result.enriched,
        result.total_mappings,
        result.skipped,
        result.source_snapshot_updates,
    )
    return result


def _load_mappings_and_snapshots(
    unit_of_work_factory: Callable[[], EnrichmentUnitOfWork],
) -> tuple[list[ExternalIdMapping], dict[str, DirectorySnapshot]]:
    with unit_of_work_factory() as uow:
        mappings = list(
            uow.repositories.external_ids.list_by_source(
                EntityType.STAFF, ExternalSource.GOOGLE_WORKSPACE_USER
            )
        )
        if not mappings:
            return mappings, {}
        snapshots = uow.repositories.snapshots.get_many(
            {mapping.external_id for mapping in mappings}
        )
    return mappings, snapshots


def _enrich_one(
    unit_of_work_factory: Callable[[], EnrichmentUnitOfWork],
    mapping: ExternalIdMapping,
    snapshot: DirectorySnapshot | None,
    selection: FieldSelection,
    synced_at: datetime,
) -> MergeOutcome:
    try:
        with unit_of_work_factory() as uow:
            try:
                record = uow.repositories.staff.get(mapping.entity_id)
            except PersistenceError:
                log.exception("Failed to load staff record %s", mapping.entity_id)
                return MergeOutcome.skipped(SkipReason.RECORD_UNAVAILABLE)
            if record is None:
                log.error("Staff record %s not found", mapping.entity_id)
            outcome = merge_snapshot(record, snapshot, selection=selection, synced_at=synced_at)
            if not outcome.enriched:
                return outcome
            uow.repositories.staff.update_fields(mapping.entity_id, outcome.updates)
            uow.commit()
    except PersistenceError:
        log.exception("Failed to enrich staff %s", mapping.entity_id)
        return MergeOutcome.skipped(SkipReason.WRITE_FAILED)
    return outcome
