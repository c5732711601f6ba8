"""Model graph builder: filters manifest nodes to models and wires parent/child edges."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from dbt_depthy.models import ManifestNode
from dbt_depthy.analysis.graph_models import GraphNode, ModelGraph

logger = logging.getLogger(__name__)


class ModelGraphBuilder:
    """Build the participating-node graph the depth engine walks."""

    def __init__(self, participating_kind: str = "model"):
        self.participating_kind = participating_kind
        self._id_prefix = f"{participating_kind}."

    def build(
        self,
        nodes: Iterable[ManifestNode],
        parent_map: Mapping[str, object] | None,
    ) -> ModelGraph:
        graph = ModelGraph()
        parent_map = parent_map or {}

        # Step 1: Keep participating nodes, in input order
        for node in nodes:
            if node.resource_type == self.participating_kind:
                graph.participants.append(GraphNode(unique_id=node.unique_id, name=node.name))

        # Step 2: Parents, filtered by identifier prefix
        for node in graph.participants:
            parents = self._retained_parents(parent_map.get(node.unique_id))
            graph.parent_of[node.unique_id] = parents

            # Step 3: Reverse edges
            for parent_id in parents:
                graph.children_of.setdefault(parent_id, []).append(node.unique_id)
            graph.children_of.setdefault(node.unique_id, [])

        logger.debug(
            "Built model graph: %d participants, %d edges",
            len(graph.participants), graph.edge_count,
        )
        return graph

    def _retained_parents(self, raw_parents: object) -> list[str]:
        if not isinstance(raw_parents, (list, tuple)):
            return []
        return [
            parent for parent in raw_parents
            if isinstance(parent, str) and parent.startswith(self._id_prefix)
        ]


def build_graph(
    nodes: Iterable[ManifestNode],
    parent_map: Mapping[str, object] | None,
    participating_kind: str = "model",
) -> ModelGraph:
    """Convenience wrapper around :class:`ModelGraphBuilder`."""
    return ModelGraphBuilder(participating_kind).build(nodes, parent_map)
