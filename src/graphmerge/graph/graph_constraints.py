from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Union

import networkx as nx

from graphmerge.graph.graph_schema import Graph
from graphmerge.graph.graph_store import remove_edge, remove_node, to_networkx
from graphmerge.graph.graph_template import GraphType, get_graph_type


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a user-triggered structural check.

    ``error`` is meant to be shown to the user verbatim.
    """

    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "ValidationResult":
        return cls(ok=False, error=error)


# ---------------------------------------------------------------------
# Cycle simulation for a single edge addition
# ---------------------------------------------------------------------


def _would_create_directed_cycle(graph: Graph, source: str, target: str) -> bool:
    # source is reachable from target => source->target closes a loop
    visited: Set[str] = set()
    queue = deque([target])
    while queue:
        current = queue.popleft()
        if current == source:
            return True
        if current in visited:
            continue
        visited.add(current)
        for edge in graph.edges:
            if edge.source == current and edge.target not in visited:
                queue.append(edge.target)
    return False


def _would_create_undirected_cycle(graph: Graph, source: str, target: str) -> bool:
    visited: Set[str] = set()
    queue = deque([source])
    while queue:
        current = queue.popleft()
        if current == target:
            return True
        if current in visited:
            continue
        visited.add(current)
        for edge in graph.edges:
            if edge.source == current and edge.target not in visited:
                queue.append(edge.target)
            if edge.target == current and edge.source not in visited:
                queue.append(edge.source)
    return False


def would_create_cycle(graph: Graph, source: str, target: str, directed: bool) -> bool:
    if directed:
        return _would_create_directed_cycle(graph, source, target)
    return _would_create_undirected_cycle(graph, source, target)


def has_duplicate_undirected_edge(graph: Graph, source: str, target: str) -> bool:
    return any(
        (e.source == source and e.target == target)
        or (e.source == target and e.target == source)
        for e in graph.edges
    )


def validate_edge_add(
    graph: Graph,
    source: str,
    target: str,
    graph_type: Union[str, GraphType, None],
) -> ValidationResult:
    """
    Check whether ``source -> target`` may be added under ``graph_type``.

    Unknown graph types impose no constraint.
    """
    info = get_graph_type(graph_type)
    if info is None:
        return ValidationResult.success()

    if source == target:
        return ValidationResult.failure("Self-loops are not allowed")

    if not info.directed and has_duplicate_undirected_edge(graph, source, target):
        return ValidationResult.failure(f"Edge {source}–{target} already exists")

    if info.directed and any(
        e.source == source and e.target == target for e in graph.edges
    ):
        return ValidationResult.failure(f"Edge {source}→{target} already exists")

    if info.acyclic and would_create_cycle(graph, source, target, info.directed):
        return ValidationResult.failure(
            f"Adding this edge would create a cycle ({info.label} must be acyclic)"
        )

    return ValidationResult.success()


# ---------------------------------------------------------------------
# Whole-graph checks
# ---------------------------------------------------------------------


def _has_directed_cycle(graph: Graph) -> bool:
    children: Dict[str, List[str]] = {n.label: [] for n in graph.nodes}
    for edge in graph.edges:
        if edge.source in children and edge.target in children:
            children[edge.source].append(edge.target)

    visited: Set[str] = set()
    on_stack: Set[str] = set()

    for root in children:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        stack = [(root, iter(children[root]))]
        while stack:
            node, pending = stack[-1]
            child = next(pending, None)
            if child is None:
                on_stack.discard(node)
                stack.pop()
                continue
            if child in on_stack:
                return True
            if child not in visited:
                visited.add(child)
                on_stack.add(child)
                stack.append((child, iter(children[child])))
    return False


def _has_undirected_cycle(graph: Graph) -> bool:
    parent: Dict[str, str] = {n.label: n.label for n in graph.nodes}

    def find(x: str) -> str:
        root = x
        while parent[root] != root:
            root = parent[root]
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    for edge in graph.edges:
        if edge.source not in parent or edge.target not in parent:
            continue
        root_a = find(edge.source)
        root_b = find(edge.target)
        if root_a == root_b:
            return True
        parent[root_a] = root_b
    return False


def has_cycle(graph: Graph, directed: bool) -> bool:
    """
    Full-graph cycle detection, used after operations that bypass
    per-edge validation (merges, pastes).
    """
    if directed:
        return _has_directed_cycle(graph)
    return _has_undirected_cycle(graph)


def is_connected(graph: Graph) -> bool:
    """
    Connectivity with every edge treated as bidirectional. The empty
    graph counts as connected.
    """
    if not graph.nodes:
        return True
    return nx.is_weakly_connected(to_networkx(graph))


def would_disconnect_on_node_remove(graph: Graph, label: str) -> bool:
    reduced = remove_node(graph, label)
    return len(reduced.nodes) > 1 and not is_connected(reduced)


def would_disconnect_on_edge_remove(graph: Graph, source: str, target: str) -> bool:
    return not is_connected(remove_edge(graph, source, target))
