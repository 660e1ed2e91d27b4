from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from graphmerge.graph.graph_schema import Edge, Graph, Node
from graphmerge.graph.graph_store import induced_subgraph, upstream_labels


def merge_graphs(
    target: Graph,
    incoming: Graph,
    base: Optional[Graph] = None,
) -> Graph:
    """
    Combine ``incoming`` into ``target`` (last writer wins).

    - Existing elements take incoming's props wholesale; new ones are
      inserted.
    - With ``base``: anything in ``base`` but absent from ``incoming`` was
      removed upstream and is deleted. Target-only elements never seen in
      ``base`` are left alone.
    - Edges left without an endpoint are pruned.
    """
    nodes: Dict[str, Node] = {n.key: n for n in target.nodes}
    edges: Dict[str, Edge] = {e.key: e for e in target.edges}

    for node in incoming.nodes:
        existing = nodes.get(node.key)
        nodes[node.key] = (existing or node).with_props(node.props)

    for edge in incoming.edges:
        existing = edges.get(edge.key)
        edges[edge.key] = (existing or edge).with_props(edge.props)

    deleted_nodes = deleted_edges = 0
    if base is not None:
        incoming_node_keys = {n.key for n in incoming.nodes}
        incoming_edge_keys = {e.key for e in incoming.edges}

        for node in base.nodes:
            if node.key not in incoming_node_keys and nodes.pop(node.key, None):
                deleted_nodes += 1

        for edge in base.edges:
            if edge.key not in incoming_edge_keys and edges.pop(edge.key, None):
                deleted_edges += 1

    merged_edges = tuple(
        e for e in edges.values() if e.source in nodes and e.target in nodes
    )

    logging.getLogger("graphmerge.merge").info(
        "merged nodes=%s edges=%s; deleted nodes=%s edges=%s; pruned dangling=%s",
        len(nodes),
        len(merged_edges),
        deleted_nodes,
        deleted_edges,
        len(edges) - len(merged_edges),
    )

    return Graph(nodes=tuple(nodes.values()), edges=merged_edges)


def filter_upstream_subgraph(
    graph: Graph,
    scope_node_ids: Optional[Iterable[str]],
) -> Graph:
    """
    Restrict ``graph`` to the scope nodes and everything upstream of them.

    An empty or missing scope returns ``graph`` itself.
    """
    scope = list(scope_node_ids or [])
    if not scope:
        return graph
    return induced_subgraph(graph, upstream_labels(graph, scope))


def scoped_merge(
    target: Graph,
    incoming: Graph,
    base: Optional[Graph] = None,
    scope_node_ids: Optional[Iterable[str]] = None,
) -> Graph:
    """
    Merge only the part of ``incoming`` upstream of the scope.

    The deletion baseline goes through the same scope filter as the
    incoming graph; an unfiltered baseline would delete every out-of-scope
    element it contains.
    """
    scope = list(scope_node_ids or [])
    scoped_incoming = filter_upstream_subgraph(incoming, scope)
    scoped_base = filter_upstream_subgraph(base, scope) if base is not None else None
    return merge_graphs(target, scoped_incoming, scoped_base)
