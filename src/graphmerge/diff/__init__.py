"""
Diff subsystem: element-level comparison of a graph against its baseline.
"""

from graphmerge.diff.diff_engine import (
    DiffEntry,
    compute_diff,
    format_diff_summary,
    format_grouped_diff_summary,
)

__all__ = [
    "DiffEntry",
    "compute_diff",
    "format_diff_summary",
    "format_grouped_diff_summary",
]
