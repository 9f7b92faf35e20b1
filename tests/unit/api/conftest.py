"""Fixtures for API tests: app with every dependency overridden."""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tunescope.api.dependencies import (
    get_aggregator,
    get_muso_client,
    get_muso_rate_limiter,
    get_spotify_client,
    get_spotontrack_client,
)
from tunescope.application.services import MusicAggregator
from tunescope.infrastructure.integrations import (
    MusoClient,
    SpotifyClient,
    SpotOnTrackClient,
)
from tunescope.infrastructure.rate_limiter import (
    FixedWindowRateLimiter,
    RateLimiterConfig,
)
from tunescope.main import create_app


@pytest.fixture
def aggregator() -> AsyncMock:
    return AsyncMock(spec=MusicAggregator)


@pytest.fixture
def spotify_client() -> AsyncMock:
    client = AsyncMock(spec=SpotifyClient)
    client.is_configured.return_value = True
    return client


@pytest.fixture
def spotontrack_client() -> AsyncMock:
    client = AsyncMock(spec=SpotOnTrackClient)
    client.is_configured.return_value = True
    return client


@pytest.fixture
def muso_client() -> AsyncMock:
    client = AsyncMock(spec=MusoClient)
    client.is_configured.return_value = True
    return client


@pytest.fixture
def muso_limiter(clock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        RateLimiterConfig(max_requests=3, window_seconds=60), clock=clock
    )


@pytest.fixture
def app(
    unconfigured_settings,
    aggregator,
    spotify_client,
    spotontrack_client,
    muso_client,
    muso_limiter,
) -> FastAPI:
    """App built by create_app() with the lifespan skipped (no `with TestClient`)."""
    app = create_app(unconfigured_settings)
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    app.dependency_overrides[get_spotify_client] = lambda: spotify_client
    app.dependency_overrides[get_spotontrack_client] = lambda: spotontrack_client
    app.dependency_overrides[get_muso_client] = lambda: muso_client
    app.dependency_overrides[get_muso_rate_limiter] = lambda: muso_limiter
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
