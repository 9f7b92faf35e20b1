"""Track endpoints: cross-provider enrichment and SpotOnTrack analytics."""

import logging

from fastapi import APIRouter, Depends, Query

from tunescope.api.dependencies import (
    get_aggregator,
    get_muso_caller_key,
    get_spotontrack_client,
)
from tunescope.api.schemas import (
    AnalyticsData,
    AnalyticsMeta,
    AnalyticsResponse,
    EnrichedData,
    EnrichedResponse,
)
from tunescope.application.services import MusicAggregator
from tunescope.infrastructure.integrations import SpotOnTrackClient
from tunescope.infrastructure.integrations.base_client import require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/track", tags=["Tracks"])


@router.get("/enriched", response_model=EnrichedResponse)
async def get_enriched_track(
    title: str | None = Query(None, description="Track title"),
    artist: str | None = Query(None, description="Artist name"),
    track_id: str | None = Query(None, alias="trackId", description="Spotify track ID"),
    aggregator: MusicAggregator = Depends(get_aggregator),
    caller_key: str = Depends(get_muso_caller_key),
) -> EnrichedResponse:
    """Merge track data from every configured provider.

    An empty result is still a 200 - "nobody knows this track" is an answer,
    not an error.
    """
    result = await aggregator.get_enriched_track(
        title=title or "",
        artist=artist,
        track_id=track_id,
        caller_key=caller_key,
    )
    return EnrichedResponse(success=True, data=EnrichedData.from_result(result))


# Yo, analytics is SpotOnTrack-only. No fallback provider has playlist/chart data, so
# NotConfigured here is a hard 500 instead of a degraded answer.
@router.get("/analytics", response_model=AnalyticsResponse)
async def get_track_analytics(
    isrc: str | None = Query(None, description="ISRC of the track"),
    spotontrack: SpotOnTrackClient = Depends(get_spotontrack_client),
) -> AnalyticsResponse:
    """Streaming, playlist and chart data for one ISRC."""
    cleaned = require_text(isrc, "ISRC")
    record = await spotontrack.get_track_analytics(cleaned)
    if record.failed_sections:
        logger.info(
            "Analytics for %s returned with %d failed sections",
            record.isrc,
            len(record.failed_sections),
        )
    return AnalyticsResponse(
        success=True,
        data=AnalyticsData.from_record(record),
        meta=AnalyticsMeta(platforms=record.platform_summary()),
    )
