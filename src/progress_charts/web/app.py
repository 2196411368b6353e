"""
FastAPI application for the Progress Charts dashboard.

PURPOSE: Build the ASGI app and serve it with uvicorn.
AI CONTEXT: Every route lives on the router in routes.py; this module only wires it up.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ..__version__ import __version__
from ..config import Config
from .routes import router

__all__ = ["create_app", "run_dashboard"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
    """
    Log dashboard start and stop around the serving period.

    Business context: Startup logging records which payload snapshot and
    theme the dashboard serves, which is the first thing to check when
    the charts look wrong.

    Args:
        app: Application being served; unused.

    Yields:
        Nothing; requests are handled while suspended here.
    """
    logger.info(
        "Progress Charts dashboard starting (v%s, payload=%s, theme=%s)",
        __version__,
        Config.get_payload_path(),
        Config.get_theme_name(),
    )
    yield
    logger.info("Progress Charts dashboard shutting down")


def create_app() -> FastAPI:
    """
    Build a fresh dashboard application.

    Factory function so uvicorn (factory=True) and tests each get a
    fresh instance.

    Returns:
        Configured FastAPI application with the dashboard page,
        /partials/*, /charts/* and /api/* routes, and OpenAPI docs at
        /docs.

    Example:
        >>> from fastapi.testclient import TestClient
        >>> client = TestClient(create_app())
        >>> client.get('/').status_code
        200
    """
    app = FastAPI(
        title="Progress Charts",
        description="Profile dashboard with XP, project and audit charts",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


def run_dashboard(
    host: str = Config.DEFAULT_HOST,
    port: int = Config.DEFAULT_PORT,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Serve the dashboard until interrupted.

    uvicorn imports create_app by path so --reload can rebuild it.

    Args:
        host: Network interface to bind. '127.0.0.1' for local-only
            access (default) or '0.0.0.0' for network access.
        port: Listening port, Config.DEFAULT_PORT unless given.
        reload: Restart the worker when source files change.
        log_level: Uvicorn logging verbosity ('info' by default).

    Returns:
        None. Blocks until the server is stopped (Ctrl+C).

    Raises:
        OSError: The address cannot be bound.

    Example:
        >>> run_dashboard(port=8080)  # blocks
    """
    uvicorn.run(
        "progress_charts.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# python -m progress_charts.web.app
if __name__ == "__main__":
    run_dashboard()
