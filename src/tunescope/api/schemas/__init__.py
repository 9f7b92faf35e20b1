"""API request/response schemas."""

from tunescope.api.schemas.music import (
    AnalyticsData,
    AnalyticsMeta,
    AnalyticsResponse,
    ArtistSchema,
    ArtistSearchResponse,
    EnrichedData,
    EnrichedResponse,
    ErrorResponse,
    MusoPageMeta,
    MusoPageResponse,
    MusoProfileResponse,
    MusoSearchResponse,
    MusoTrackResponse,
    RateLimitInfo,
    RateLimitResponse,
    SearchArtistResult,
    TrackSchema,
    TrendingData,
    TrendingResponse,
)

__all__ = [
    "AnalyticsData",
    "AnalyticsMeta",
    "AnalyticsResponse",
    "ArtistSchema",
    "ArtistSearchResponse",
    "EnrichedData",
    "EnrichedResponse",
    "ErrorResponse",
    "MusoPageMeta",
    "MusoPageResponse",
    "MusoProfileResponse",
    "MusoSearchResponse",
    "MusoTrackResponse",
    "RateLimitInfo",
    "RateLimitResponse",
    "SearchArtistResult",
    "TrackSchema",
    "TrendingData",
    "TrendingResponse",
]
