"""
Editor session state: panels holding a working graph, its approved
baseline, history and path-tracking exclusions.
"""

from graphmerge.session.panel import ApprovalRecord, GraphPanel, OperationResult

__all__ = [
    "ApprovalRecord",
    "GraphPanel",
    "OperationResult",
]
