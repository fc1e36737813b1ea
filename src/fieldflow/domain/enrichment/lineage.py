"""Best-effort lineage recording and lineage read helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from fieldflow.domain.model import EnrichmentChange, EntityType, LineageSourceType
from fieldflow.domain.ports import PersistenceError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime
    from uuid import UUID

    from fieldflow.domain.ports import EnrichmentUnitOfWork

    from .merge import FieldChange

log = getLogger(__name__)

SOURCE_REF_SEPARATOR = " → "


@dataclass(frozen=True, slots=True)
class LineageWriteResult:
    written: int = 0
    failed: bool = False


@dataclass(slots=True)
class LineageRecorder:
    """Collects field changes during a run and writes them in one batch.

    A failed write is logged and reported through ``LineageWriteResult``; the
    field writes it describes have already been committed and stay as they are.
    """

    entity_type: EntityType = EntityType.STAFF
    source_type: LineageSourceType = LineageSourceType.API
    sync_run_id: str | None = None
    _pending: list[EnrichmentChange] = field(default_factory=list["EnrichmentChange"])

    @property
    def pending(self) -> tuple[EnrichmentChange, ...]:
        return tuple(self._pending)

    def record(
        self,
        entity_id: UUID,
        changes: Iterable[FieldChange],
        *,
        changed_at: datetime,
    ) -> None:
        for change in changes:
            self._pending.append(
                EnrichmentChange(
                    entity_type=self.entity_type,
                    entity_id=entity_id,
                    field_name=change.field.value,
                    source_type=self.source_type,
                    source_ref=change.source_ref,
                    previous_value=change.previous,
                    new_value=change.new,
                    changed_at=changed_at,
                    sync_run_id=self.sync_run_id,
                )
            )

    def flush(self, unit_of_work_factory: Callable[[], EnrichmentUnitOfWork]) -> LineageWriteResult:
        if not self._pending:
            return LineageWriteResult()

        batch = list(self._pending)
        try:
            with unit_of_work_factory() as uow:
                uow.repositories.lineage.add_many(batch)
                uow.commit()
        except PersistenceError:
            log.exception("Failed to write %s field lineage rows", len(batch))
            return LineageWriteResult(failed=True)

        self._pending.clear()
        log.debug("Wrote %s field lineage rows", len(batch))
        return LineageWriteResult(written=len(batch))


@dataclass(frozen=True, slots=True)
class SourceRefParts:
    sheet_name: str | None = None
    tab_name: str | None = None
    column_name: str | None = None


def parse_source_ref(value: str | None) -> SourceRefParts:
    """Split ``"Sheet → Tab → Column"`` into its parts; missing parts are ``None``."""

    if not value:
        return SourceRefParts()
    parts = [part.strip() for part in value.split(SOURCE_REF_SEPARATOR)]
    padded = [*parts, "", "", ""][:3]
    return SourceRefParts(
        sheet_name=padded[0] or None,
        tab_name=padded[1] or None,
        column_name=padded[2] or None,
    )


def latest_lineage_by_field(rows: Iterable[EnrichmentChange]) -> dict[str, EnrichmentChange]:
    """Keep the most recent row per field; ``rows`` are ordered newest first."""

    latest: dict[str, EnrichmentChange] = {}
    for row in rows:
        latest.setdefault(row.field_name, row)
    return latest
