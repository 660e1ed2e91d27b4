"""
Configuration layer for graphmerge.

Configuration is:
- Explicit (passed, not global)
- Typed (frozen dataclasses)
- Defaulted to the editor's interactive limits
"""

from graphmerge.config.settings import (
    HistoryConfig,
    TrackingConfig,
    GraphMergeConfig,
)

__all__ = [
    "HistoryConfig",
    "TrackingConfig",
    "GraphMergeConfig",
]
