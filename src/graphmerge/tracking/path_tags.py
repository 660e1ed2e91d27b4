from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Optional, Sequence, Set

from graphmerge.graph.graph_schema import Graph

PathTag = Dict[str, str]
PathTags = Dict[str, List[PathTag]]

DEFAULT_DESCRIPTOR_WARNING_THRESHOLD = 512


def serialize_tag(tag: PathTag, special_type_ids: Sequence[str]) -> str:
    """
    Canonical key for ``tag``: one slot per special type, in order,
    joined by ``|``. A missing entry is an empty slot.
    """
    return "|".join(tag.get(type_id) or "" for type_id in special_type_ids)


def format_path_tag(tag: PathTag, special_type_ids: Sequence[str]) -> str:
    parts = [tag[type_id] for type_id in special_type_ids if tag.get(type_id)]
    if not parts:
        return "(any)"
    return f"({', '.join(parts)})"


def leaves_first_order(graph: Graph) -> List[str]:
    """
    Kahn's algorithm driven by out-degree: sinks first, then every node
    whose children have all been emitted. Nodes stuck on a cycle are
    appended at the end in graph order.
    """
    labels = [n.label for n in graph.nodes]
    known = set(labels)
    out_degree: Dict[str, int] = {label: 0 for label in labels}
    parents: Dict[str, List[str]] = {label: [] for label in labels}
    for edge in graph.edges:
        if edge.source in known and edge.target in known:
            out_degree[edge.source] += 1
            parents[edge.target].append(edge.source)

    queue = deque(label for label in labels if out_degree[label] == 0)
    order: List[str] = []
    processed: Set[str] = set()

    while queue:
        label = queue.popleft()
        if label in processed:
            continue
        processed.add(label)
        order.append(label)
        for parent in parents[label]:
            out_degree[parent] -= 1
            if out_degree[parent] == 0:
                queue.append(parent)

    order.extend(label for label in labels if label not in processed)
    return order


def _dedupe(descriptors: List[PathTag], special_type_ids: Sequence[str]) -> List[PathTag]:
    seen: Set[str] = set()
    unique: List[PathTag] = []
    for descriptor in descriptors:
        key = serialize_tag(descriptor, special_type_ids)
        if key in seen:
            continue
        seen.add(key)
        unique.append(descriptor)
    return unique


def compute_path_tags(
    graph: Graph,
    special_type_ids: Optional[Sequence[str]],
    *,
    warning_threshold: Optional[int] = DEFAULT_DESCRIPTOR_WARNING_THRESHOLD,
) -> PathTags:
    """
    Tag every edge with the descriptors reachable through its target.

    A descriptor maps special type ids to the label of the node of that
    type found on one downstream path. Sinks of a special type start a
    descriptor ``{type: label}``, other sinks the wildcard ``{}``. Inner
    nodes union their children's descriptors and, if their own type is
    special, stamp themselves into every one of them.

    Returns an empty mapping when there are no special types.
    """
    if not special_type_ids:
        return {}

    special = list(special_type_ids)
    nodes = {n.label: n for n in graph.nodes}
    children: Dict[str, List[str]] = {label: [] for label in nodes}
    for edge in graph.edges:
        if edge.source in nodes and edge.target in nodes:
            children[edge.source].append(edge.target)

    descriptors_by_node: Dict[str, List[PathTag]] = {}

    for label in leaves_first_order(graph):
        node = nodes[label]
        own_type = node.type if node.type in special else None

        if not children[label]:
            descriptors = [{own_type: label}] if own_type else [{}]
        else:
            collected: List[PathTag] = []
            for child in children[label]:
                collected.extend(descriptors_by_node.get(child, [{}]))
            if own_type:
                # a node's own type overrides whatever its subtree set
                collected = [{**d, own_type: label} for d in collected]
            descriptors = _dedupe(collected, special)

        if warning_threshold is not None and len(descriptors) > warning_threshold:
            logging.getLogger("graphmerge.tracking").warning(
                "node %s carries %s path descriptors (threshold=%s)",
                label,
                len(descriptors),
                warning_threshold,
            )

        descriptors_by_node[label] = descriptors

    return {
        edge.key: [dict(d) for d in descriptors_by_node.get(edge.target, [{}])]
        for edge in graph.edges
    }
