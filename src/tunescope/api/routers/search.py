"""Search API endpoints for Spotify artists and Muso.AI.

Hey future me - /search/muso is the ONLY route that talks to Muso.AI directly, and it shares
the per-IP budget (muso_search_<ip>) with the Muso.AI branch of the enriched routes. The
limiter is checked BEFORE the client call, so a denied request never reaches Muso.AI.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from tunescope.api.dependencies import (
    get_muso_caller_key,
    get_muso_client,
    get_muso_rate_limiter,
    get_spotify_client,
)
from tunescope.api.schemas import (
    ArtistSearchResponse,
    MusoSearchResponse,
    RateLimitInfo,
    RateLimitResponse,
    SearchArtistResult,
)
from tunescope.infrastructure.integrations import MusoClient, SpotifyClient
from tunescope.infrastructure.integrations.base_client import require_text
from tunescope.infrastructure.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["Search"])

ARTIST_NOT_FOUND_MESSAGE = "Artist not found"


def _rate_limit_headers(limit: int, remaining: int, reset_time_ms: int) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(reset_time_ms),
    }


# =============================================================================
# SPOTIFY ARTIST LOOKUP
# =============================================================================


@router.get(
    "/artist",
    response_model=ArtistSearchResponse,
    responses={404: {"model": ArtistSearchResponse}},
)
async def search_artist(
    name: str | None = Query(None, description="Artist name to look up"),
    spotify: SpotifyClient = Depends(get_spotify_client),
) -> ArtistSearchResponse | JSONResponse:
    """Return the best Spotify match for an artist name.

    Not found is a 404 that still carries the normal body shape
    ({success: false, artist: null, error}) so clients can parse both cases alike.
    """
    cleaned = require_text(name, "Artist name")
    artists = await spotify.search_artists(cleaned, limit=1)
    if not artists:
        logger.info("No Spotify artist found for %r", cleaned)
        body = ArtistSearchResponse(
            success=False, artist=None, error=ARTIST_NOT_FOUND_MESSAGE
        )
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=body.model_dump(by_alias=True),
        )
    return ArtistSearchResponse(
        success=True, artist=SearchArtistResult.from_record(artists[0])
    )


# =============================================================================
# MUSO.AI SEARCH
# =============================================================================


@router.get("/muso", response_model=MusoSearchResponse)
async def search_muso(
    response: Response,
    q: str | None = Query(None, description="Search keyword"),
    search_type: Literal["profile", "album", "track", "organization"] = Query(
        "profile", alias="type", description="Entity type to search"
    ),
    limit: int = Query(10, ge=1, le=50, description="Page size"),
    offset: int = Query(0, ge=0, description="Page offset"),
    muso: MusoClient = Depends(get_muso_client),
    limiter: FixedWindowRateLimiter = Depends(get_muso_rate_limiter),
    caller_key: str = Depends(get_muso_caller_key),
) -> MusoSearchResponse | JSONResponse:
    """Search Muso.AI, rate limited per client IP."""
    keyword = require_text(q, "Search query")

    decision = await limiter.try_acquire(caller_key)
    headers = _rate_limit_headers(
        limiter.config.max_requests, decision.remaining, decision.reset_time_ms
    )
    if not decision.allowed:
        logger.warning(
            "Muso.AI search rate limited for %s",
            caller_key,
            extra={"retry_after": decision.retry_after_seconds},
        )
        headers["Retry-After"] = str(decision.retry_after_seconds)
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={
                "success": False,
                "error": "Rate limit exceeded. Please try again later.",
            },
            headers=headers,
        )

    data = await muso.search(keyword, types=(search_type,), limit=limit, offset=offset)
    response.headers.update(headers)
    return MusoSearchResponse(success=True, data=data)


@router.get("/muso/rate-limit", response_model=RateLimitResponse)
async def muso_rate_limit_status(
    limiter: FixedWindowRateLimiter = Depends(get_muso_rate_limiter),
    caller_key: str = Depends(get_muso_caller_key),
) -> RateLimitResponse:
    """Show the caller's Muso.AI window without spending a request."""
    current = await limiter.status(caller_key)
    return RateLimitResponse(success=True, rate_limit=RateLimitInfo.from_status(current))
