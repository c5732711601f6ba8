"""Data models for the model dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GraphNode:
    unique_id: str
    name: str


@dataclass
class ModelGraph:
    participants: list[GraphNode] = field(default_factory=list)
    parent_of: dict[str, list[str]] = field(default_factory=dict)  # child -> [parents]
    children_of: dict[str, list[str]] = field(default_factory=dict)  # parent -> [children]

    @property
    def edge_count(self) -> int:
        return sum(len(parents) for parents in self.parent_of.values())
