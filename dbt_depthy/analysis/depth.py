"""Depth engine: longest-path depth for every model via Kahn-style propagation."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Mapping
from typing import Iterable, Iterator

from dbt_depthy.models import ManifestNode
from dbt_depthy.analysis.dependency_graph import ModelGraphBuilder
from dbt_depthy.analysis.graph_models import ModelGraph

logger = logging.getLogger(__name__)

# Depth of a participant that was never dequeued (only happens on cyclic input)
UNRESOLVED_DEPTH = 0


def compute_depths(graph: ModelGraph) -> dict[str, int]:
    """Return ``{unique_id: depth}`` for every participant in ``graph``.

    Roots (no participating parent) get depth 1 and every other model gets
    ``1 + max(parent depths)``. Children are only released from the queue
    once all of their parents have contributed, so the maximum is taken over
    finished values and the result is the longest path, not the shortest.

    Participants on or downstream of a cycle never reach in-degree zero and
    are left at ``UNRESOLVED_DEPTH``.
    """
    in_degree: dict[str, int] = {}
    depths: dict[str, int] = {}

    for node in graph.participants:
        parents = graph.parent_of.get(node.unique_id, [])
        in_degree[node.unique_id] = len(parents)
        depths[node.unique_id] = 1 if not parents else UNRESOLVED_DEPTH

    queue = deque(
        node.unique_id for node in graph.participants
        if in_degree[node.unique_id] == 0
    )

    while queue:
        current = queue.popleft()
        current_depth = depths[current]
        for child in graph.children_of.get(current, []):
            depths[child] = max(depths[child], current_depth + 1)
            in_degree[child] -= 1
            if in_degree[child] == 0:
                queue.append(child)

    unresolved = [uid for uid, remaining in in_degree.items() if remaining > 0]
    if unresolved:
        logger.warning(
            "%d model(s) could not be ordered (cycle or missing parent), depth left at %d: %s",
            len(unresolved), UNRESOLVED_DEPTH, ", ".join(unresolved[:10]),
        )

    return depths


class DepthTable(Mapping):
    """Read-only ``name``/``unique_id`` -> depth lookup.

    Each model is stored under both keys. When two models share a short
    name, the one populated last owns the name key.
    """

    def __init__(self, entries: Mapping[str, int] | None = None, model_count: int = 0):
        self._entries: dict[str, int] = dict(entries or {})
        self.model_count = model_count

    @classmethod
    def from_graph(cls, graph: ModelGraph) -> DepthTable:
        depths = compute_depths(graph)
        entries: dict[str, int] = {}
        for node in graph.participants:
            depth = depths[node.unique_id]
            entries[node.name] = depth
            entries[node.unique_id] = depth
        return cls(entries, model_count=len(graph.participants))

    def __getitem__(self, key: str) -> int:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DepthTable(models={self.model_count}, keys={len(self._entries)})"

    def get_depth(self, name: str) -> int | None:
        return _lookup(self._entries, name)

    @property
    def max_depth(self) -> int:
        return max(self._entries.values(), default=0)


EMPTY_TABLE = DepthTable()


def build_depth_table(
    nodes: Iterable[ManifestNode],
    parent_map: Mapping[str, object] | None,
    participating_kind: str = "model",
) -> DepthTable:
    """Build the graph and compute a fresh table in one call."""
    graph = ModelGraphBuilder(participating_kind).build(nodes, parent_map)
    return DepthTable.from_graph(graph)


def get_depth(table: Mapping[str, int], name: str) -> int | None:
    """Two-tier lookup over any name/id keyed mapping."""
    return _lookup(table, name)


def _lookup(entries: Mapping[str, int], name: str) -> int | None:
    """Exact key first, then the first key ending in ``.<name>``."""
    depth = entries.get(name)
    if depth is not None:
        return depth

    suffix = f".{name}"
    for key, value in entries.items():
        if key.endswith(suffix):
            return value

    return None
