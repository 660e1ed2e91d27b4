import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.app.config import AppConfig
from backend.app.api.routes_graph import router as graph_router
from backend.app.api.routes_tracking import router as tracking_router
from backend.app.dependencies import get_config


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Resolve configuration once at startup so a bad environment fails fast.
    """
    config = get_config()
    logging.getLogger("graphmerge.api").info(
        "[startup] %s default_graph_type=%s",
        config.app_name,
        config.graphmerge.default_graph_type,
    )

    yield


def create_app(config: AppConfig) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    app.include_router(
        graph_router,
        prefix=f"{config.api_prefix}/graph",
        tags=["graph"],
    )

    app.include_router(
        tracking_router,
        prefix=f"{config.api_prefix}/tracking",
        tags=["tracking"],
    )

    return app


config = AppConfig()
app = create_app(config)
