"""Trending artists endpoint.

Hey future me - "trending" here is an approximation: a seed-keyword search on each provider,
merged and sorted by popularity/followers. timeframe is validated and echoed but does not
change the data (no provider gives us a time-bucketed feed). `genre` swaps the seed keyword.
"""

from fastapi import APIRouter, Depends, Query

from tunescope.api.dependencies import get_aggregator, get_muso_caller_key
from tunescope.api.schemas import TrendingData, TrendingResponse
from tunescope.application.services import MusicAggregator
from tunescope.application.services.music_aggregator import DEFAULT_TRENDING_SEED

router = APIRouter(prefix="/trending", tags=["Trending"])


@router.get("/artists", response_model=TrendingResponse)
async def get_trending_artists(
    timeframe: str = Query("weekly", description="daily, weekly or monthly"),
    limit: int = Query(20, description="Number of artists (1-50)"),
    genre: str | None = Query(None, description="Seed keyword, e.g. a genre"),
    aggregator: MusicAggregator = Depends(get_aggregator),
    caller_key: str = Depends(get_muso_caller_key),
) -> TrendingResponse:
    """Approximate trending artists ranked by popularity."""
    result = await aggregator.get_trending_artists(
        timeframe=timeframe,
        limit=limit,
        seed=(genre or "").strip() or DEFAULT_TRENDING_SEED,
        caller_key=caller_key,
    )
    return TrendingResponse(success=True, data=TrendingData.from_result(result))
