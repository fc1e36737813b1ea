"""Explicit memo cache for flow graphs.

Graph construction is referentially transparent, so a graph can be reused for
as long as its inputs are unchanged. Entries expire after ``ttl_seconds`` and
``invalidate()`` drops everything (call it when mappings change). The cache is
an ordinary object handed to callers; there is no module-level instance.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from fieldflow.domain.model import AuthorityRule

from .builder import build_flow_graph
from .layout import DEFAULT_LAYOUT, LayoutConfig

if TYPE_CHECKING:
    from collections.abc import Callable, Collection

    from fieldflow.domain.model import EntityType, FlowGraph, FlowMapDocument

log = getLogger(__name__)

type CacheKey = tuple[FlowMapDocument, frozenset[EntityType], AuthorityRule, LayoutConfig]


@dataclass(slots=True)
class _Entry:
    graph: FlowGraph
    stored_at: float


@dataclass(slots=True)
class FlowGraphCache:
    ttl_seconds: float | None = 300.0
    max_entries: int = 32
    clock: Callable[[], float] = time.monotonic
    hits: int = 0
    misses: int = 0
    _entries: dict[CacheKey, _Entry] = field(
        default_factory=dict["CacheKey", "_Entry"], repr=False
    )

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_build(
        self,
        document: FlowMapDocument,
        *,
        expanded: Collection[EntityType] = frozenset(),
        rule: AuthorityRule = AuthorityRule.FIRST_SEEN,
        layout: LayoutConfig = DEFAULT_LAYOUT,
    ) -> FlowGraph:
        key: CacheKey = (document, frozenset(expanded), rule, layout)
        now = self.clock()
        entry = self._entries.get(key)
        if entry is not None and not self._expired(entry, now):
            self.hits += 1
            return entry.graph

        self.misses += 1
        graph = build_flow_graph(document, expanded=expanded, rule=rule, layout=layout)
        self._entries.pop(key, None)
        self._entries[key] = _Entry(graph=graph, stored_at=now)
        self._evict_overflow()
        return graph

    def invalidate(self) -> None:
        if self._entries:
            log.debug("Invalidating %s cached flow graphs", len(self._entries))
        self._entries.clear()

    def _expired(self, entry: _Entry, now: float) -> bool:
        if self.ttl_seconds is None:
            return False
        return now - entry.stored_at >= self.ttl_seconds

    def _evict_overflow(self) -> None:
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
