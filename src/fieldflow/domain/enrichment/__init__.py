"""Directory enrichment of staff records and its lineage trail."""

from __future__ import annotations

from .lineage import (
    LineageRecorder,
    LineageWriteResult,
    SourceRefParts,
    latest_lineage_by_field,
    parse_source_ref,
)
from .merge import (
    FieldChange,
    MergeOutcome,
    SkipReason,
    deep_merge,
    merge_directory_payload,
    merge_snapshot,
    snapshot_skip_reason,
    source_ref,
)
from .runner import EnrichmentRunResult, enrich_staff_from_directory
from .selection import (
    DEFAULT_FIELD_SELECTION,
    FieldSelection,
    SelectionParseError,
    SelectionResult,
    parse_field_selection,
)

__all__ = [
    "DEFAULT_FIELD_SELECTION",
    "EnrichmentRunResult",
    "FieldChange",
    "FieldSelection",
    "LineageRecorder",
    "LineageWriteResult",
    "MergeOutcome",
    "SelectionParseError",
    "SelectionResult",
    "SkipReason",
    "SourceRefParts",
    "deep_merge",
    "enrich_staff_from_directory",
    "latest_lineage_by_field",
    "merge_directory_payload",
    "merge_snapshot",
    "parse_field_selection",
    "snapshot_skip_reason",
    "source_ref",
]
