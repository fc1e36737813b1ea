"""Positioned flow-graph artifacts handed to the rendering client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .enums import EdgeKind, NodeKind


@dataclass(frozen=True, slots=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True, slots=True, kw_only=True)
class Node:
    id: str
    kind: NodeKind
    position: Position
    data: Mapping[str, Any] = field(default_factory=dict["str", "Any"])
    parent_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
            "position": {"x": self.position.x, "y": self.position.y},
            "data": dict(self.data),
        }
        if self.parent_id is not None:
            payload["parentId"] = self.parent_id
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class Edge:
    id: str
    kind: EdgeKind
    source: str
    target: str
    weight: float
    data: Mapping[str, Any] = field(default_factory=dict["str", "Any"])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
            "data": dict(self.data),
        }


@dataclass(frozen=True, slots=True)
class FlowGraph:
    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def node(self, node_id: str) -> Node | None:
        return next((node for node in self.nodes if node.id == node_id), None)

    def edge(self, edge_id: str) -> Edge | None:
        return next((edge for edge in self.edges if edge.id == edge_id), None)

    def nodes_of(self, kind: NodeKind) -> tuple[Node, ...]:
        return tuple(node for node in self.nodes if node.kind is kind)

    def edges_of(self, kind: EdgeKind) -> tuple[Edge, ...]:
        return tuple(edge for edge in self.edges if edge.kind is kind)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
