from dbt_depthy.analysis.dependency_graph import ModelGraphBuilder, build_graph
from dbt_depthy.analysis.depth import DepthTable, build_depth_table, compute_depths, get_depth
from dbt_depthy.analysis.graph_models import GraphNode, ModelGraph

__all__ = [
    "DepthTable",
    "GraphNode",
    "ModelGraph",
    "ModelGraphBuilder",
    "build_depth_table",
    "build_graph",
    "compute_depths",
    "get_depth",
]
