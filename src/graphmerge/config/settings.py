from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

# ---------------------------------------------------------------------
# Editing history
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class HistoryConfig:
    """
    Bounds on the per-panel undo stack and approval log.
    """

    max_history: int = 10
    max_approval_history: int = 20


# ---------------------------------------------------------------------
# Path tracking
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class TrackingConfig:
    """
    Controls path-tag computation.

    Descriptor sets can grow combinatorially on wide DAGs; past
    ``descriptor_warning_threshold`` entries on a single node a warning
    is logged. ``None`` disables the warning. Results are never capped.
    """

    descriptor_warning_threshold: Optional[int] = 512


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class GraphMergeConfig:
    """
    Root configuration object for graphmerge.

    Constructed explicitly and handed to the components that need it.
    """

    history: HistoryConfig = field(default_factory=HistoryConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    default_graph_type: str = "DG"
