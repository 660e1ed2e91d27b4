"""
Graph subsystem for graphmerge.

Defines the immutable graph value model and the structural rules
every editing operation is checked against:
- value types and primitive operations
- graph types and templates
- edge-add validation, cycle and connectivity checks
"""

from graphmerge.graph.graph_schema import Node, Edge, Graph, node_key, edge_key
from graphmerge.graph.graph_store import (
    create_graph,
    create_node,
    create_edge,
    add_node,
    add_edge,
    remove_node,
    remove_edge,
    update_node_props,
    update_edge_props,
    get_ancestor_subgraph,
)
from graphmerge.graph.graph_template import GRAPH_TYPES, GraphType, Template
from graphmerge.graph.graph_constraints import (
    ValidationResult,
    validate_edge_add,
    has_cycle,
    is_connected,
)

__all__ = [
    "Node",
    "Edge",
    "Graph",
    "node_key",
    "edge_key",
    "create_graph",
    "create_node",
    "create_edge",
    "add_node",
    "add_edge",
    "remove_node",
    "remove_edge",
    "update_node_props",
    "update_edge_props",
    "get_ancestor_subgraph",
    "GRAPH_TYPES",
    "GraphType",
    "Template",
    "ValidationResult",
    "validate_edge_add",
    "has_cycle",
    "is_connected",
]
