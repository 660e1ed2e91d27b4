from fastapi import APIRouter, Depends

from backend.app.api.routes_graph import ingest
from backend.app.api.schemas import PathTagsRequest, PathTagsResponse
from backend.app.config import AppConfig
from backend.app.dependencies import get_config

from graphmerge.tracking.exclusions import compute_tracking_state

router = APIRouter()


@router.post("/path-tags", response_model=PathTagsResponse)
def path_tags(
    request: PathTagsRequest,
    config: AppConfig = Depends(get_config),
):
    graph = ingest(request.graph, "graph")
    state = compute_tracking_state(
        graph,
        request.exclusions,
        request.special_types,
        warning_threshold=config.graphmerge.tracking.descriptor_warning_threshold,
    )
    return PathTagsResponse(
        tags=state.path_tags,
        direct=state.direct,
        effective={key: sorted(tags) for key, tags in state.effective.items()},
        fully_excluded=state.fully_excluded_nodes(graph, request.special_types),
    )
