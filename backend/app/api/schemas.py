from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# Graph payloads arrive as plain objects and are checked by
# graphmerge.serialization.validate_graph, which owns the error messages.
GraphData = Dict[str, Any]


class GraphNode(BaseModel):
    label: str
    type: Optional[str] = None
    props: Dict[str, str] = Field(default_factory=dict)


class GraphEdge(BaseModel):
    source: str
    target: str
    type: Optional[str] = None
    props: Dict[str, str] = Field(default_factory=dict)


class GraphResponse(BaseModel):
    nodes: List[GraphNode]
    edges: List[GraphEdge]


class GraphValidateResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    nodes: int = 0
    edges: int = 0


class EdgeValidateRequest(BaseModel):
    graph: GraphData
    source: str
    target: str
    graph_type: Optional[str] = None


class EdgeValidateResponse(BaseModel):
    ok: bool
    error: Optional[str] = None


class DiffRequest(BaseModel):
    base: Optional[GraphData] = None
    current: GraphData


class DiffEntryModel(BaseModel):
    kind: str
    action: str
    key: str
    old_props: Optional[Dict[str, str]] = None
    new_props: Optional[Dict[str, str]] = None


class DiffResponse(BaseModel):
    entries: List[DiffEntryModel]
    summary: str
    description: str


class MergeRequest(BaseModel):
    target: GraphData
    incoming: GraphData
    base: Optional[GraphData] = None
    scope: Optional[List[str]] = None
    graph_type: Optional[str] = None


class MergeResponse(BaseModel):
    graph: GraphResponse
    warning: Optional[str] = None


class AncestorsRequest(BaseModel):
    graph: GraphData
    root: str


class PathTagsRequest(BaseModel):
    graph: GraphData
    special_types: List[str]
    exclusions: Dict[str, List[str]] = Field(default_factory=dict)


class PathTagsResponse(BaseModel):
    tags: Dict[str, List[Dict[str, str]]]
    direct: Dict[str, List[str]]
    effective: Dict[str, List[str]]
    fully_excluded: List[str]
