"""Dependency injection for API endpoints."""

import logging
from typing import cast

from fastapi import Depends, HTTPException, Request

from tunescope.application.services import MusicAggregator
from tunescope.infrastructure.integrations import (
    MusoClient,
    SpotifyClient,
    SpotOnTrackClient,
)
from tunescope.infrastructure.rate_limiter import (
    FixedWindowRateLimiter,
    muso_rate_limit_key,
)

logger = logging.getLogger(__name__)


# Hey future me, everything below comes from app.state, which the lifespan fills (see
# infrastructure/lifecycle.py). A missing attribute means startup didn't finish → 503.
# Tests skip the lifespan and use app.dependency_overrides instead.
def _from_state(request: Request, attr: str) -> object:
    value = getattr(request.app.state, attr, None)
    if value is None:
        raise HTTPException(status_code=503, detail=f"{attr} not initialized")
    return value


def get_aggregator(request: Request) -> MusicAggregator:
    """Get the MusicAggregator built at startup."""
    return cast(MusicAggregator, _from_state(request, "aggregator"))


def get_spotify_client(request: Request) -> SpotifyClient:
    """Get the shared Spotify client."""
    return cast(SpotifyClient, _from_state(request, "spotify_client"))


def get_spotontrack_client(request: Request) -> SpotOnTrackClient:
    """Get the shared SpotOnTrack client."""
    return cast(SpotOnTrackClient, _from_state(request, "spotontrack_client"))


def get_muso_client(request: Request) -> MusoClient:
    """Get the shared Muso.AI client."""
    return cast(MusoClient, _from_state(request, "muso_client"))


def get_muso_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    """Get the per-caller Muso.AI rate limiter."""
    return cast(FixedWindowRateLimiter, _from_state(request, "muso_rate_limiter"))


# Yo, header order matters: X-Forwarded-For is set by our reverse proxy and its FIRST entry is
# the real client. X-Real-IP is the nginx-style fallback. request.client is the socket peer,
# which behind a proxy is just the proxy itself.
def get_client_ip(request: Request) -> str:
    """Resolve the caller's IP address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_muso_caller_key(client_ip: str = Depends(get_client_ip)) -> str:
    """Rate-limit key for the caller's Muso.AI budget."""
    return muso_rate_limit_key(client_ip)
