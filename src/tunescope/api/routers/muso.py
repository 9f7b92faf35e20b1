"""Muso.AI passthrough endpoints: profiles, credits, collaborators, tracks.

Hey future me - every route here spends ONE request of the caller's shared Muso.AI budget
(muso_search_<ip>, same key as /search/muso and the enriched routes). Input is validated
BEFORE spending, so a request with a missing id never costs the caller anything.
"""

import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query

from tunescope.api.dependencies import (
    get_muso_caller_key,
    get_muso_client,
    get_muso_rate_limiter,
)
from tunescope.api.schemas import (
    MusoPageMeta,
    MusoPageResponse,
    MusoProfileResponse,
    MusoTrackResponse,
    TrackSchema,
)
from tunescope.domain.exceptions import RateLimitExceededError
from tunescope.infrastructure.integrations import MusoClient
from tunescope.infrastructure.integrations.base_client import dict_items, require_text
from tunescope.infrastructure.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Muso.AI"])

RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again later."


async def _spend_budget(limiter: FixedWindowRateLimiter, caller_key: str) -> None:
    decision = await limiter.try_acquire(caller_key)
    if not decision.allowed:
        raise RateLimitExceededError(
            RATE_LIMITED_MESSAGE,
            retry_after=decision.retry_after_seconds,
            remaining=decision.remaining,
        )


def _page(
    data: dict[str, Any], limit: int, offset: int = 0, sort_key: str | None = None
) -> MusoPageResponse:
    total = data.get("totalCount")
    return MusoPageResponse(
        success=True,
        data=dict_items(data.get("items")),
        meta=MusoPageMeta(
            total=total if isinstance(total, int) else 0,
            limit=limit,
            offset=offset,
            sort_key=sort_key,
        ),
    )


@router.get("/artist/muso/profile", response_model=MusoProfileResponse)
async def get_muso_profile(
    profile_id: str | None = Query(None, alias="id", description="Profile ID"),
    source: Literal["muso", "spotify"] = Query(
        "muso", description="ID namespace: a Muso.AI id or a Spotify artist id"
    ),
    muso: MusoClient = Depends(get_muso_client),
    limiter: FixedWindowRateLimiter = Depends(get_muso_rate_limiter),
    caller_key: str = Depends(get_muso_caller_key),
) -> MusoProfileResponse:
    """Full Muso.AI profile."""
    cleaned = require_text(profile_id, "Artist ID")
    await _spend_budget(limiter, caller_key)
    return MusoProfileResponse(
        success=True, data=await muso.get_profile(cleaned, source=source)
    )


@router.get("/artist/muso/credits", response_model=MusoPageResponse)
async def get_muso_credits(
    profile_id: str | None = Query(None, alias="id", description="Profile ID"),
    keyword: str | None = Query(None, description="Filter credits by text"),
    credit: list[str] | None = Query(None, description="Credit roles, repeatable"),
    limit: int = Query(20, ge=1, le=50, description="Page size"),
    offset: int = Query(0, ge=0, description="Page offset"),
    sort_key: Literal["releaseDate", "popularity", "title"] | None = Query(
        None, alias="sortKey"
    ),
    sort_direction: Literal["ASC", "DESC"] | None = Query(None, alias="sortDirection"),
    muso: MusoClient = Depends(get_muso_client),
    limiter: FixedWindowRateLimiter = Depends(get_muso_rate_limiter),
    caller_key: str = Depends(get_muso_caller_key),
) -> MusoPageResponse:
    """One page of an artist's credits."""
    cleaned = require_text(profile_id, "Artist ID")
    await _spend_budget(limiter, caller_key)
    data = await muso.get_profile_credits(
        cleaned,
        keyword=keyword,
        credits=credit,
        limit=limit,
        offset=offset,
        sort_key=sort_key,
        sort_direction=sort_direction,
    )
    return _page(data, limit, offset, sort_key)


# Yo, "similar" and "recommendations" are the same collaborators call with a different
# sort. Muso.AI has no similarity model, people you work with most is the best signal there is.
@router.get("/artist/muso/similar", response_model=MusoPageResponse)
async def get_similar_artists(
    profile_id: str | None = Query(None, alias="id", description="Profile ID"),
    limit: int = Query(10, ge=1, le=50, description="Artists to return"),
    muso: MusoClient = Depends(get_muso_client),
    limiter: FixedWindowRateLimiter = Depends(get_muso_rate_limiter),
    caller_key: str = Depends(get_muso_caller_key),
) -> MusoPageResponse:
    """Collaborators ranked by how often they worked with the artist."""
    cleaned = require_text(profile_id, "Artist ID")
    await _spend_budget(limiter, caller_key)
    data = await muso.get_profile_collaborators(
        cleaned,
        limit=limit,
        sort_key="collaborationsCount",
        sort_direction="DESC",
        profile_type="artist",
    )
    return _page(data, limit, sort_key="collaborationsCount")


@router.get("/artist/muso/recommendations", response_model=MusoPageResponse)
async def get_recommended_artists(
    profile_id: str | None = Query(None, alias="id", description="Profile ID"),
    limit: int = Query(10, ge=1, le=50, description="Artists to return"),
    muso: MusoClient = Depends(get_muso_client),
    limiter: FixedWindowRateLimiter = Depends(get_muso_rate_limiter),
    caller_key: str = Depends(get_muso_caller_key),
) -> MusoPageResponse:
    """Collaborators ranked by their own popularity."""
    cleaned = require_text(profile_id, "Artist ID")
    await _spend_budget(limiter, caller_key)
    data = await muso.get_profile_collaborators(
        cleaned,
        limit=limit,
        sort_key="popularity",
        sort_direction="DESC",
        profile_type="artist",
    )
    return _page(data, limit, sort_key="popularity")


@router.get("/track/muso", response_model=MusoTrackResponse)
async def get_muso_track(
    track_id: str | None = Query(None, alias="id", description="Muso.AI id or ISRC"),
    id_type: Literal["id", "isrc"] = Query("id", alias="idType"),
    muso: MusoClient = Depends(get_muso_client),
    limiter: FixedWindowRateLimiter = Depends(get_muso_rate_limiter),
    caller_key: str = Depends(get_muso_caller_key),
) -> MusoTrackResponse:
    """A Muso.AI track with its full credit list."""
    cleaned = require_text(track_id, "Track ID")
    await _spend_budget(limiter, caller_key)
    track = await muso.get_track(cleaned, id_type=id_type)
    logger.debug("Muso.AI track %s has %d credits", cleaned, len(track.credits))
    return MusoTrackResponse(success=True, data=TrackSchema.from_record(track))
