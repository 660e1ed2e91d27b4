import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from backend.app.api.schemas import (
    AncestorsRequest,
    DiffEntryModel,
    DiffRequest,
    DiffResponse,
    EdgeValidateRequest,
    EdgeValidateResponse,
    GraphResponse,
    GraphValidateResponse,
    MergeRequest,
    MergeResponse,
)
from backend.app.config import AppConfig
from backend.app.dependencies import get_config

from graphmerge.diff.diff_engine import (
    compute_diff,
    format_diff_summary,
    format_grouped_diff_summary,
)
from graphmerge.graph.graph_constraints import has_cycle, validate_edge_add
from graphmerge.graph.graph_schema import Graph
from graphmerge.graph.graph_store import get_ancestor_subgraph
from graphmerge.graph.graph_template import get_graph_type
from graphmerge.merge.merge_engine import scoped_merge
from graphmerge.serialization.graph_serializer import graph_to_dict, validate_graph

router = APIRouter()

logger = logging.getLogger("graphmerge.api")


def ingest(data: Any, field_name: str) -> Graph:
    """
    Parse a request graph or fail the request with 422.
    """
    result = validate_graph(data)
    if not result.ok or result.graph is None:
        logger.info("rejected %s: %s", field_name, result.error)
        raise HTTPException(status_code=422, detail=f"{field_name}: {result.error}")
    return result.graph


def ingest_optional(data: Optional[Any], field_name: str) -> Optional[Graph]:
    return ingest(data, field_name) if data is not None else None


def to_response(graph: Graph) -> GraphResponse:
    return GraphResponse(**graph_to_dict(graph))


@router.post("/validate", response_model=GraphValidateResponse)
def graph_validate(payload: Dict[str, Any] = Body(...)):
    result = validate_graph(payload)
    if not result.ok or result.graph is None:
        return GraphValidateResponse(ok=False, error=result.error)
    return GraphValidateResponse(
        ok=True,
        nodes=len(result.graph.nodes),
        edges=len(result.graph.edges),
    )


@router.post("/edges/validate", response_model=EdgeValidateResponse)
def edge_validate(
    request: EdgeValidateRequest,
    config: AppConfig = Depends(get_config),
):
    graph = ingest(request.graph, "graph")
    graph_type = request.graph_type or config.graphmerge.default_graph_type
    result = validate_edge_add(graph, request.source, request.target, graph_type)
    return EdgeValidateResponse(ok=result.ok, error=result.error)


@router.post("/diff", response_model=DiffResponse)
def graph_diff(request: DiffRequest):
    base = ingest_optional(request.base, "base")
    current = ingest(request.current, "current")
    entries = compute_diff(base, current)
    return DiffResponse(
        entries=[
            DiffEntryModel(
                kind=e.kind,
                action=e.action,
                key=e.key,
                old_props=e.old_props,
                new_props=e.new_props,
            )
            for e in entries
        ],
        summary=format_diff_summary(entries),
        description=format_grouped_diff_summary(entries),
    )


@router.post("/merge", response_model=MergeResponse)
def graph_merge(
    request: MergeRequest,
    config: AppConfig = Depends(get_config),
):
    target = ingest(request.target, "target")
    incoming = ingest(request.incoming, "incoming")
    base = ingest_optional(request.base, "base")

    merged = scoped_merge(target, incoming, base, request.scope)

    warning = None
    info = get_graph_type(request.graph_type or config.graphmerge.default_graph_type)
    if info is not None and info.acyclic and has_cycle(merged, info.directed):
        warning = f"Warning: merge introduced a cycle in {info.label}"
        logger.warning(warning)

    return MergeResponse(graph=to_response(merged), warning=warning)


@router.post("/ancestors", response_model=GraphResponse)
def graph_ancestors(request: AncestorsRequest):
    graph = ingest(request.graph, "graph")
    return to_response(get_ancestor_subgraph(graph, request.root))
