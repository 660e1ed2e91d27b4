from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from graphmerge.graph.graph_schema import Edge, Graph, split_edge_key
from graphmerge.tracking.path_tags import (
    DEFAULT_DESCRIPTOR_WARNING_THRESHOLD,
    PathTags,
    compute_path_tags,
    serialize_tag,
)

DirectExclusions = Mapping[str, Iterable[str]]
EffectiveExclusions = Dict[str, Set[str]]


def _as_tag_list(tags: Iterable[str]) -> List[str]:
    if isinstance(tags, str):
        return [tags]
    return list(dict.fromkeys(tags))


def propagate_exclusions(
    graph: Graph,
    direct_exclusions: DirectExclusions,
    path_tags: PathTags,
    special_type_ids: Sequence[str],
) -> EffectiveExclusions:
    """
    Expand user exclusions upstream.

    A tag excluded on ``u→v`` is also excluded on every parent edge
    ``w→u`` whose own tags include it, and so on towards the roots.
    Tags only travel across edges that carry them.
    """
    effective: EffectiveExclusions = {}
    for key, tags in direct_exclusions.items():
        tag_set = set(_as_tag_list(tags))
        if tag_set:
            effective[key] = tag_set

    if not path_tags:
        return effective

    parent_edges: Dict[str, List[Edge]] = {n.label: [] for n in graph.nodes}
    edge_sources: Dict[str, str] = {}
    for edge in graph.edges:
        edge_sources[edge.key] = edge.source
        if edge.target in parent_edges:
            parent_edges[edge.target].append(edge)

    queue: Deque[Tuple[str, FrozenSet[str]]] = deque(
        (edge_sources.get(key) or split_edge_key(key)[0], frozenset(tags))
        for key, tags in effective.items()
    )

    visited: Set[Tuple[str, Tuple[str, ...]]] = set()
    while queue:
        node, tags = queue.popleft()
        state = (node, tuple(sorted(tags)))
        if state in visited:
            continue
        visited.add(state)

        for edge in parent_edges.get(node, []):
            edge_tags = path_tags.get(edge.key)
            if not edge_tags:
                continue
            carried = {serialize_tag(t, special_type_ids) for t in edge_tags}
            matching = tags & carried
            if not matching:
                continue
            effective.setdefault(edge.key, set()).update(matching)
            queue.append((edge.source, frozenset(matching)))

    return effective


def is_node_fully_excluded(
    graph: Graph,
    node_label: str,
    path_tags: PathTags,
    effective_exclusions: Mapping[str, Set[str]],
    special_type_ids: Sequence[str],
) -> bool:
    """
    True when ``node_label`` has outgoing edges and every tag on every
    one of them is excluded. Sinks are never fully excluded.
    """
    outgoing = [e for e in graph.edges if e.source == node_label]
    if not outgoing:
        return False

    for edge in outgoing:
        excluded = effective_exclusions.get(edge.key, set())
        for tag in path_tags.get(edge.key, []):
            if serialize_tag(tag, special_type_ids) not in excluded:
                return False
    return True


def merge_exclusions(
    target_exclusions: DirectExclusions,
    source_exclusions: Optional[DirectExclusions],
    source_tracked: bool,
) -> Dict[str, List[str]]:
    """
    Combine direct exclusion sets for a merge or paste.

    Exclusions from an untracked source have no tag context to be read
    against and are dropped.
    """
    result = {key: _as_tag_list(tags) for key, tags in target_exclusions.items()}
    if not source_tracked or not source_exclusions:
        return result

    for key, tags in source_exclusions.items():
        result[key] = _as_tag_list(result.get(key, []) + _as_tag_list(tags))
    return result


def prune_stale_exclusions(
    direct_exclusions: DirectExclusions,
    path_tags: PathTags,
    special_type_ids: Sequence[str],
) -> Dict[str, List[str]]:
    """
    Drop direct exclusions whose tag no longer appears on their edge.
    """
    pruned: Dict[str, List[str]] = {}
    for key, tags in direct_exclusions.items():
        live = {serialize_tag(t, special_type_ids) for t in path_tags.get(key, [])}
        kept = [t for t in _as_tag_list(tags) if t in live]
        if kept:
            pruned[key] = kept
    return pruned


def relevant_exclusions(
    direct_exclusions: DirectExclusions,
    subgraph: Graph,
) -> Dict[str, List[str]]:
    keys = {e.key for e in subgraph.edges}
    return {
        key: _as_tag_list(tags)
        for key, tags in direct_exclusions.items()
        if key in keys
    }


# ---------------------------------------------------------------------
# Derived tracking state
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class TrackingState:
    """
    Everything derived from ``(graph, direct exclusions, special types)``.

    ``direct`` is the garbage-collected direct set; it is the only part
    that should be persisted.
    """

    path_tags: PathTags = field(default_factory=dict)
    direct: Dict[str, List[str]] = field(default_factory=dict)
    effective: EffectiveExclusions = field(default_factory=dict)

    def fully_excluded_nodes(
        self,
        graph: Graph,
        special_type_ids: Sequence[str],
    ) -> List[str]:
        return [
            n.label
            for n in graph.nodes
            if is_node_fully_excluded(
                graph, n.label, self.path_tags, self.effective, special_type_ids
            )
        ]


def compute_tracking_state(
    graph: Graph,
    direct_exclusions: DirectExclusions,
    special_type_ids: Sequence[str],
    *,
    warning_threshold: Optional[int] = DEFAULT_DESCRIPTOR_WARNING_THRESHOLD,
) -> TrackingState:
    """
    Recompute tags, propagate, drop stale direct exclusions, then
    propagate again from the cleaned set. Propagating only once leaves
    effective exclusions derived from exclusions that no longer exist.
    """
    path_tags = compute_path_tags(
        graph, special_type_ids, warning_threshold=warning_threshold
    )
    first_pass = propagate_exclusions(graph, direct_exclusions, path_tags, special_type_ids)
    direct = prune_stale_exclusions(direct_exclusions, path_tags, special_type_ids)
    effective = propagate_exclusions(graph, direct, path_tags, special_type_ids)

    dropped = sum(len(_as_tag_list(v)) for v in direct_exclusions.values()) - sum(
        len(v) for v in direct.values()
    )
    if dropped:
        logging.getLogger("graphmerge.tracking").info(
            "dropped %s stale exclusions; effective edges %s -> %s",
            dropped,
            len(first_pass),
            len(effective),
        )

    return TrackingState(path_tags=path_tags, direct=direct, effective=effective)
