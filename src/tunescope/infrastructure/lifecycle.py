"""Application lifecycle management for startup and shutdown tasks.

This module handles the FastAPI lifespan context manager that builds the
provider clients, the Muso.AI cache and rate limiter, and the aggregator,
starts the rate limit cleanup worker, and stops the worker and closes the
HTTP clients again on shutdown.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI

from tunescope.application.services import MusicAggregator
from tunescope.application.workers import RateLimitCleanupWorker
from tunescope.config import Settings, get_settings
from tunescope.infrastructure.cache import MusoCache
from tunescope.infrastructure.integrations import (
    MusoClient,
    SpotifyClient,
    SpotOnTrackClient,
)
from tunescope.infrastructure.rate_limiter import (
    FixedWindowRateLimiter,
    RateLimiterConfig,
)

logger = logging.getLogger(__name__)


def build_components(settings: Settings) -> dict[str, object]:
    """Create every shared component from settings.

    Returns:
        Mapping of app.state attribute name to component
    """
    timeout = settings.providers.request_timeout
    spotify = SpotifyClient(settings.spotify, timeout=timeout)
    spotontrack = SpotOnTrackClient(settings.spotontrack, timeout=timeout)
    muso = MusoClient(
        settings.muso,
        timeout=timeout,
        cache=MusoCache() if settings.muso.cache_enabled else None,
    )
    limiter = FixedWindowRateLimiter(
        RateLimiterConfig.for_muso(
            max_requests=settings.rate_limit.muso_max_requests,
            window_seconds=settings.rate_limit.muso_window_seconds,
        )
    )
    aggregator = MusicAggregator(
        spotify=spotify,
        spotontrack=spotontrack,
        muso=muso,
        muso_limiter=limiter,
        provider_timeout=timeout,
        search_limit=settings.providers.search_limit,
    )
    cleanup_worker = RateLimitCleanupWorker(
        [limiter], interval_seconds=settings.rate_limit.cleanup_interval_seconds
    )
    return {
        "spotify_client": spotify,
        "spotontrack_client": spotontrack,
        "muso_client": muso,
        "muso_rate_limiter": limiter,
        "aggregator": aggregator,
        "rate_limit_cleanup_worker": cleanup_worker,
    }


# Listen future me, @asynccontextmanager makes this a CONTEXT MANAGER for FastAPI lifespan!
# Everything before `yield` runs at STARTUP, everything after runs at SHUTDOWN. Missing
# credentials are NOT a startup error - the clients report NotConfigured per request instead.
# The try/finally makes sure the httpx pools get closed even if something blows up mid-request.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown tasks including:
    - Provider client, cache and rate limiter construction
    - Logging which providers are configured
    - Starting and stopping the rate limit cleanup worker
    - HTTP client cleanup
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    logger.info("Starting application: %s", settings.app_name)

    components = build_components(settings)
    for name, component in components.items():
        setattr(app.state, name, component)

    aggregator: MusicAggregator = components["aggregator"]  # type: ignore[assignment]
    configured = [p.value for p in aggregator.configured_providers()]
    if configured:
        logger.info("Configured providers: %s", ", ".join(configured))
    else:
        logger.warning(
            "No provider credentials configured - aggregate endpoints will return 500"
        )

    cleanup_worker: RateLimitCleanupWorker = components["rate_limit_cleanup_worker"]  # type: ignore[assignment]
    cleanup_task = asyncio.create_task(cleanup_worker.start())
    app.state.rate_limit_cleanup_task = cleanup_task

    try:
        yield
    finally:
        logger.info("Shutting down application")
        # stop() alone waits out the current sleep, so cancel too.
        cleanup_worker.stop()
        cleanup_task.cancel()
        with suppress(asyncio.CancelledError):
            await cleanup_task
        for name in ("spotify_client", "spotontrack_client", "muso_client"):
            client = components[name]
            try:
                await client.close()  # type: ignore[attr-defined]
            except Exception as e:
                logger.warning("Error closing %s: %s", name, e)
        logger.info("Application shutdown complete")
