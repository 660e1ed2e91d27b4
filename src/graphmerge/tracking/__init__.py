"""
Path tracking for directed acyclic graphs.

Edges are tagged with the special-typed descendants they lead to;
user exclusions of those tags travel upstream through shared tags.
All state here is derived from (graph, direct exclusions, special
types) and recomputed on demand.
"""

from graphmerge.tracking.path_tags import (
    PathTag,
    compute_path_tags,
    format_path_tag,
    leaves_first_order,
    serialize_tag,
)
from graphmerge.tracking.exclusions import (
    TrackingState,
    compute_tracking_state,
    is_node_fully_excluded,
    merge_exclusions,
    propagate_exclusions,
    prune_stale_exclusions,
    relevant_exclusions,
)

__all__ = [
    "PathTag",
    "compute_path_tags",
    "format_path_tag",
    "leaves_first_order",
    "serialize_tag",
    "TrackingState",
    "compute_tracking_state",
    "is_node_fully_excluded",
    "merge_exclusions",
    "propagate_exclusions",
    "prune_stale_exclusions",
    "relevant_exclusions",
]
