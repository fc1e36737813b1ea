"""Enrichment run defaults."""

from __future__ import annotations

from dataclasses import dataclass

from fieldflow.domain.enrichment import DEFAULT_FIELD_SELECTION, FieldSelection


@dataclass(frozen=True, slots=True)
class EnrichmentConfig:
    default_selection: FieldSelection = DEFAULT_FIELD_SELECTION


def get_enrichment_config() -> EnrichmentConfig:
    return EnrichmentConfig()
