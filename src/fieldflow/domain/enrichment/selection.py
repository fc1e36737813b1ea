"""Field selection for enrichment runs.

Parsing never raises at the call site: ``parse_field_selection`` returns a
``SelectionResult`` carrying either a selection or the parse error, and callers
choose the fallback explicitly with ``unwrap_or``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from fieldflow.domain.model import EnrichmentField


@dataclass(frozen=True, slots=True)
class FieldSelection:
    fields: frozenset[EnrichmentField]

    def includes(self, field: EnrichmentField) -> bool:
        return field in self.fields

    def as_list(self) -> list[str]:
        return sorted(field.value for field in self.fields)


DEFAULT_FIELD_SELECTION: Final[FieldSelection] = FieldSelection(
    frozenset(
        {
            EnrichmentField.TITLE,
            EnrichmentField.PHONE,
            EnrichmentField.DIRECTORY_SNAPSHOT,
        }
    )
)


class SelectionParseError(ValueError):
    """Describes why a selection request could not be parsed."""


@dataclass(frozen=True, slots=True)
class SelectionResult:
    selection: FieldSelection | None = None
    error: SelectionParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: FieldSelection) -> FieldSelection:
        if self.selection is None:
            return default
        return self.selection


def parse_field_selection(payload: object) -> SelectionResult:
    """Parse ``{"fields": [...]}``; a bare list of field names is accepted too.

    An explicit empty list is a valid, empty selection.
    """

    if isinstance(payload, Mapping):
        raw = payload.get("fields")
        if raw is None:
            return SelectionResult(error=SelectionParseError("no 'fields' in request"))
    else:
        raw = payload

    if isinstance(raw, str | bytes) or not isinstance(raw, list | tuple | set | frozenset):
        return SelectionResult(
            error=SelectionParseError(f"'fields' must be a list, got {type(raw).__name__}")
        )

    fields: set[EnrichmentField] = set()
    for item in raw:
        if isinstance(item, EnrichmentField):
            fields.add(item)
            continue
        if not isinstance(item, str):
            return SelectionResult(error=SelectionParseError(f"invalid field entry: {item!r}"))
        try:
            fields.add(EnrichmentField(item.strip()))
        except ValueError:
            return SelectionResult(error=SelectionParseError(f"unknown field: {item!r}"))
    return SelectionResult(selection=FieldSelection(frozenset(fields)))
