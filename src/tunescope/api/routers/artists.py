"""Artist enrichment endpoint."""

from fastapi import APIRouter, Depends, Query

from tunescope.api.dependencies import get_aggregator, get_muso_caller_key
from tunescope.api.schemas import EnrichedData, EnrichedResponse
from tunescope.application.services import MusicAggregator

router = APIRouter(prefix="/artist", tags=["Artists"])


@router.get("/enriched", response_model=EnrichedResponse)
async def get_enriched_artist(
    name: str | None = Query(None, description="Artist name"),
    aggregator: MusicAggregator = Depends(get_aggregator),
    caller_key: str = Depends(get_muso_caller_key),
) -> EnrichedResponse:
    """Merged artist profile plus their tracks across providers."""
    result = await aggregator.get_enriched_artist(name or "", caller_key=caller_key)
    return EnrichedResponse(success=True, data=EnrichedData.from_result(result))
