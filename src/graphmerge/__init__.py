"""
graphmerge
==========

Graph data and algorithm engine for a multi-panel graph editor.

Graphs are immutable values; every operation returns a new graph.
On top of the value model sit:
- structural validation per graph type (cycles, duplicates, connectivity)
- diffing against an approved baseline
- three-way merge with deletion propagation and upstream scoping
- DAG path tags with upstream exclusion propagation

Public API:
- Graph, Node, Edge
- validate_edge_add
- compute_diff
- merge_graphs
- compute_path_tags, propagate_exclusions
- GraphPanel
"""

from graphmerge.graph.graph_schema import Graph, Node, Edge
from graphmerge.graph.graph_constraints import validate_edge_add
from graphmerge.diff.diff_engine import compute_diff
from graphmerge.merge.merge_engine import merge_graphs
from graphmerge.tracking.path_tags import compute_path_tags
from graphmerge.tracking.exclusions import propagate_exclusions
from graphmerge.session.panel import GraphPanel

__all__ = [
    "Graph",
    "Node",
    "Edge",
    "validate_edge_add",
    "compute_diff",
    "merge_graphs",
    "compute_path_tags",
    "propagate_exclusions",
    "GraphPanel",
]

__version__ = "0.1.0"
