"""Deterministic layout for the flow-map graph.

Positions are computed in one top-to-bottom pass: expanding an entity pushes
every entity below it down, so entity positions cannot be computed independently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fieldflow.domain.model import CANONICAL_ENTITY_ORDER, Position

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from fieldflow.domain.model import EntityNode, EntityType, SourceRecord

    from .authority import AuthorityResolution

MIN_STROKE_WIDTH = 1.5
MAX_STROKE_WIDTH = 4.0
STROKE_WIDTH_PER_FIELD = 0.3


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    source_x: float = 0
    entity_x: float = 420
    source_gap: float = 130
    entity_gap: float = 200
    group_gap: float = 70
    group_offset_x: float = 20
    group_start_y: float = 120
    top_margin: float = 50
    expanded_margin: float = 40


DEFAULT_LAYOUT = LayoutConfig()


def stroke_width(mapped_field_count: int) -> float:
    """Edge stroke width for a mapping edge; monotonic and saturating."""

    width = MIN_STROKE_WIDTH + STROKE_WIDTH_PER_FIELD * mapped_field_count
    return max(MIN_STROKE_WIDTH, min(MAX_STROKE_WIDTH, width))


def layout_entities(
    entities: Sequence[EntityNode],
    *,
    expanded: Collection[EntityType],
    layout: LayoutConfig = DEFAULT_LAYOUT,
) -> dict[EntityType, Position]:
    """Place present entities in canonical order, carrying the y offset forward."""

    by_type = {entity.type: entity for entity in entities}
    positions: dict[EntityType, Position] = {}
    current_y = layout.top_margin
    for entity_type in CANONICAL_ENTITY_ORDER:
        entity = by_type.get(entity_type)
        if entity is None:
            continue
        positions[entity_type] = Position(layout.entity_x, current_y)
        if entity_type in expanded:
            current_y += (
                layout.group_start_y
                + len(entity.groups) * layout.group_gap
                + layout.expanded_margin
            )
        else:
            current_y += layout.entity_gap
    return positions


def layout_groups(
    entity_position: Position,
    group_count: int,
    *,
    layout: LayoutConfig = DEFAULT_LAYOUT,
) -> list[Position]:
    return [
        Position(
            entity_position.x + layout.group_offset_x,
            entity_position.y + layout.group_start_y + index * layout.group_gap,
        )
        for index in range(group_count)
    ]


def layout_sources(
    count: int,
    *,
    layout: LayoutConfig = DEFAULT_LAYOUT,
) -> list[Position]:
    return [
        Position(layout.source_x, layout.top_margin + index * layout.source_gap)
        for index in range(count)
    ]


def order_sources(
    sources: Sequence[SourceRecord],
    resolution: AuthorityResolution,
) -> list[SourceRecord]:
    """Sort sources by the canonical index of their primary entity.

    Aligning each source with the entity it feeds most reduces edge crossings.
    The sort is stable; sources feeding nothing go last.
    """

    def primary_index(source: SourceRecord) -> int:
        primary = resolution.primary_entity(source.id)
        if primary is None:
            return len(CANONICAL_ENTITY_ORDER)
        return CANONICAL_ENTITY_ORDER.index(primary)

    return sorted(sources, key=primary_index)
