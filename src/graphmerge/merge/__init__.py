"""
Merge subsystem: last-writer-wins combination of graphs with optional
baseline-driven deletion and upstream scoping.
"""

from graphmerge.merge.merge_engine import (
    merge_graphs,
    filter_upstream_subgraph,
    scoped_merge,
)

__all__ = [
    "merge_graphs",
    "filter_upstream_subgraph",
    "scoped_merge",
]
