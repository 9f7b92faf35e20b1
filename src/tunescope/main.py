"""FastAPI application factory and entry point."""

import logging

import uvicorn
from fastapi import FastAPI

from tunescope import __version__
from tunescope.api.exception_handlers import register_exception_handlers
from tunescope.api.routers import api_router, health
from tunescope.config import Settings, get_settings
from tunescope.infrastructure.lifecycle import lifespan
from tunescope.infrastructure.observability import (
    RequestLoggingMiddleware,
    configure_logging,
)

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (default: get_settings())

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.observability.level,
        json_format=settings.observability.json_format,
        app_name=settings.app_name,
    )

    app = FastAPI(
        title="TuneScope",
        description="Music data aggregation across Spotify, SpotOnTrack and Muso.AI",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        RequestLoggingMiddleware,
        log_request_body=settings.observability.log_request_body,
    )
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(health.router)

    return app


def run() -> None:
    """Run the server with uvicorn (console script entry point)."""
    settings = get_settings()
    uvicorn.run(
        "tunescope.main:create_app",
        factory=True,
        host="0.0.0.0",  # nosec B104 - container entry point
        port=8000,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    run()
