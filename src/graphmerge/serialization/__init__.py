"""
JSON ingest and egress for the flat graph exchange format.
"""

from graphmerge.serialization.graph_serializer import (
    ImportResult,
    validate_graph,
    graph_to_dict,
    to_json,
    from_json,
)

__all__ = [
    "ImportResult",
    "validate_graph",
    "graph_to_dict",
    "to_json",
    "from_json",
]
