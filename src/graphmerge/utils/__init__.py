"""
Utility functions for graphmerge.

Low-level helpers only; no graph semantics live here.
"""

from graphmerge.utils.history import iso_timestamp, push_bounded

__all__ = [
    "iso_timestamp",
    "push_bounded",
]
