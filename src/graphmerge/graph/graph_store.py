from __future__ import annotations

import logging
from dataclasses import replace
from typing import AbstractSet, Dict, Iterable, List, Optional, Set

import networkx as nx

from graphmerge.graph.graph_schema import Edge, Graph, Node

UNSET = object()


# -------------------- Construction --------------------


def create_graph() -> Graph:
    return Graph()


def create_node(
    label: str,
    props: Optional[Dict[str, str]] = None,
    type: Optional[str] = None,
) -> Node:
    return Node.create(label, props, type)


def create_edge(
    source: str,
    target: str,
    props: Optional[Dict[str, str]] = None,
    type: Optional[str] = None,
) -> Edge:
    return Edge.create(source, target, props, type)


# -------------------- Lookup --------------------


def find_node(graph: Graph, label: str) -> Optional[Node]:
    for node in graph.nodes:
        if node.label == label:
            return node
    return None


def find_edge(graph: Graph, source: str, target: str) -> Optional[Edge]:
    for edge in graph.edges:
        if edge.source == source and edge.target == target:
            return edge
    return None


def node_labels(graph: Graph) -> List[str]:
    return [n.label for n in graph.nodes]


def is_empty(graph: Graph) -> bool:
    return not graph.nodes and not graph.edges


def graphs_equal(a: Graph, b: Graph) -> bool:
    """
    Structural equality, order sensitive (same nodes and edges in the
    same sequence with identical fields).
    """
    return a == b


# -------------------- Mutation (returns new graphs) --------------------


def add_node(graph: Graph, node: Node) -> Graph:
    """
    Append ``node``. The caller guarantees its label is not already taken;
    no uniqueness check is made here.
    """
    return Graph(
        nodes=graph.nodes + (node.with_props(node.props),),
        edges=graph.edges,
    )


def add_edge(graph: Graph, edge: Edge) -> Graph:
    """
    Append ``edge``. Both endpoints must already be nodes of ``graph`` and
    the pair must be new; callers check this (see ``GraphPanel.add_edge``
    and ``validate_edge_add``) before calling.
    """
    return Graph(
        nodes=graph.nodes,
        edges=graph.edges + (edge.with_props(edge.props),),
    )


def remove_node(graph: Graph, label: str) -> Graph:
    return Graph(
        nodes=tuple(n for n in graph.nodes if n.label != label),
        edges=tuple(e for e in graph.edges if not e.touches(label)),
    )


def remove_edge(graph: Graph, source: str, target: str) -> Graph:
    return Graph(
        nodes=graph.nodes,
        edges=tuple(
            e for e in graph.edges if not (e.source == source and e.target == target)
        ),
    )


def update_node_props(
    graph: Graph,
    label: str,
    props: Dict[str, str],
    type=UNSET,
) -> Graph:
    """
    Replace the props of ``label``. Passing ``type`` also replaces the
    node type (``None`` clears it).
    """

    def _update(node: Node) -> Node:
        if node.label != label:
            return node
        updated = node.with_props(props)
        if type is not UNSET:
            updated = replace(updated, type=type)
        return updated

    return Graph(nodes=tuple(_update(n) for n in graph.nodes), edges=graph.edges)


def update_edge_props(
    graph: Graph,
    source: str,
    target: str,
    props: Dict[str, str],
    type=UNSET,
) -> Graph:
    def _update(edge: Edge) -> Edge:
        if edge.source != source or edge.target != target:
            return edge
        updated = edge.with_props(props)
        if type is not UNSET:
            updated = replace(updated, type=type)
        return updated

    return Graph(nodes=graph.nodes, edges=tuple(_update(e) for e in graph.edges))


# -------------------- Traversal --------------------


def to_networkx(graph: Graph) -> nx.DiGraph:
    """
    Directed networkx view of ``graph``. Edges whose endpoints are not
    nodes of the graph are skipped.
    """
    g = nx.DiGraph()
    labels = set()
    for node in graph.nodes:
        g.add_node(node.label, data=node)
        labels.add(node.label)

    for edge in graph.edges:
        if edge.source not in labels or edge.target not in labels:
            logging.getLogger("graphmerge.graph").warning(
                "skipping dangling edge %s", edge.key
            )
            continue
        g.add_edge(edge.source, edge.target, data=edge)
    return g


def upstream_labels(graph: Graph, seeds: Iterable[str]) -> Set[str]:
    """
    Labels reachable from any seed by walking edges backwards
    (target -> source), seeds included.
    """
    g = to_networkx(graph)
    collected: Set[str] = set()
    for seed in seeds:
        if seed not in g or seed in collected:
            continue
        collected.add(seed)
        collected.update(nx.ancestors(g, seed))
    return collected


def induced_subgraph(graph: Graph, labels: AbstractSet[str]) -> Graph:
    return Graph(
        nodes=tuple(n for n in graph.nodes if n.label in labels),
        edges=tuple(
            e for e in graph.edges if e.source in labels and e.target in labels
        ),
    )


def get_ancestor_subgraph(graph: Graph, root_label: str) -> Graph:
    """
    Subgraph made of ``root_label`` and every node with a path to it.

    Used for branch selection and branch copy.
    """
    return induced_subgraph(graph, upstream_labels(graph, [root_label]))
