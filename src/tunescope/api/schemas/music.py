"""API schemas for music data responses.

Hey future me - every schema inherits CamelModel, so JSON keys go out as camelCase
(spotifyUrl, resetTime...) while Python code keeps snake_case. FastAPI serializes
response_model by alias by default, so routes just return these objects.
"""

from dataclasses import asdict
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tunescope.domain.dtos import (
    AnalyticsRecord,
    ArtistRecord,
    EnrichedResult,
    TrackRecord,
    TrendingResult,
)
from tunescope.infrastructure.rate_limiter import RateLimitStatus


class CamelModel(BaseModel):
    """Base model emitting camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(CamelModel):
    """Body of every error response."""

    success: bool = Field(default=False, description="Always false")
    error: str = Field(..., description="Human readable error message")


# =============================================================================
# TRACKS & ARTISTS
# =============================================================================


class TrackCreditSchema(CamelModel):
    """One credit line on a track."""

    name: str = Field(..., description="Credited person")
    role: str = Field(..., description="Credit role, e.g. Producer")


class TrackSchema(CamelModel):
    """Normalized track."""

    title: str = Field(..., description="Track title")
    isrc: str | None = Field(None, description="ISRC, uppercase")
    artist_names: list[str] = Field(default_factory=list, description="Artists")
    album_name: str | None = Field(None, description="Album title")
    release_date: str | None = Field(None, description="Release date as reported")
    artwork_url: str | None = Field(None, description="Cover art URL")
    duration_ms: int | None = Field(None, description="Duration in milliseconds")
    popularity_score: int | None = Field(None, description="Provider popularity")
    provider_ids: dict[str, str] = Field(
        default_factory=dict, description="Identifier per provider"
    )
    credits: list[TrackCreditSchema] = Field(
        default_factory=list, description="Credits (Muso.AI)"
    )
    sources: list[str] = Field(
        default_factory=list, description="Contributing providers in merge order"
    )

    @classmethod
    def from_record(cls, record: TrackRecord) -> "TrackSchema":
        return cls(
            title=record.title,
            isrc=record.isrc,
            artist_names=record.artist_names,
            album_name=record.album_name,
            release_date=record.release_date,
            artwork_url=record.artwork_url,
            duration_ms=record.duration_ms,
            popularity_score=record.popularity_score,
            provider_ids=record.provider_ids,
            credits=[
                TrackCreditSchema(name=c.name, role=c.role) for c in record.credits
            ],
            sources=record.sources,
        )


class ArtistSchema(CamelModel):
    """Normalized artist."""

    name: str = Field(..., description="Artist name")
    provider_artist_id: str | None = Field(
        None, description="ID at the provider that supplied the name"
    )
    image_url: str | None = Field(None, description="Artist image URL")
    genres: list[str] = Field(default_factory=list, description="Genres")
    follower_count: int | None = Field(None, description="Followers")
    popularity_score: int | None = Field(None, description="Provider popularity")
    external_url: str | None = Field(None, description="Profile URL")
    provider_ids: dict[str, str] = Field(
        default_factory=dict, description="Identifier per provider"
    )
    sources: list[str] = Field(
        default_factory=list, description="Contributing providers in merge order"
    )

    @classmethod
    def from_record(cls, record: ArtistRecord) -> "ArtistSchema":
        return cls(
            name=record.name,
            provider_artist_id=record.provider_artist_id,
            image_url=record.image_url,
            genres=record.genres,
            follower_count=record.follower_count,
            popularity_score=record.popularity_score,
            external_url=record.external_url,
            provider_ids=record.provider_ids,
            sources=record.sources,
        )


# =============================================================================
# /search/artist
# =============================================================================


class SearchArtistResult(CamelModel):
    """Spotify artist as returned by /search/artist."""

    name: str = Field(..., description="Artist name")
    followers: int | None = Field(None, description="Spotify follower count")
    genres: list[str] = Field(default_factory=list, description="Spotify genres")
    image: str | None = Field(None, description="Largest artist image")
    spotify_url: str | None = Field(None, description="Spotify profile URL")

    @classmethod
    def from_record(cls, record: ArtistRecord) -> "SearchArtistResult":
        return cls(
            name=record.name,
            followers=record.follower_count,
            genres=record.genres,
            image=record.image_url,
            spotify_url=record.external_url,
        )


class ArtistSearchResponse(CamelModel):
    """Response of /search/artist (found and not-found)."""

    success: bool = Field(..., description="True if an artist was found")
    artist: SearchArtistResult | None = Field(None, description="Best match")
    error: str | None = Field(None, description="Why nothing was returned")


# =============================================================================
# ENRICHED / TRENDING
# =============================================================================


class EnrichedMetrics(CamelModel):
    """Per-provider outcome of an aggregate call."""

    per_provider_availability: dict[str, str] = Field(
        default_factory=dict,
        description="ok, empty, not_configured or a failure kind per provider",
    )


class EnrichedData(CamelModel):
    """Merged view across providers."""

    artist: ArtistSchema | None = Field(None, description="Primary artist")
    tracks: list[TrackSchema] = Field(
        default_factory=list, description="De-duplicated tracks"
    )
    metrics: EnrichedMetrics = Field(default_factory=EnrichedMetrics)
    audio_features: dict[str, Any] | None = Field(
        None, description="Spotify audio features of the top track (tracks only)"
    )

    @classmethod
    def from_result(cls, result: EnrichedResult) -> "EnrichedData":
        return cls(
            artist=ArtistSchema.from_record(result.artist) if result.artist else None,
            tracks=[TrackSchema.from_record(t) for t in result.tracks],
            metrics=EnrichedMetrics(
                per_provider_availability=result.per_provider_availability
            ),
            audio_features=result.audio_features,
        )


class EnrichedResponse(CamelModel):
    """Response of /track/enriched and /artist/enriched."""

    success: bool = True
    data: EnrichedData


class TrendingData(CamelModel):
    """Approximate trending artists."""

    timeframe: str = Field(..., description="Echoed timeframe")
    artists: list[ArtistSchema] = Field(default_factory=list)
    metrics: EnrichedMetrics = Field(default_factory=EnrichedMetrics)

    @classmethod
    def from_result(cls, result: TrendingResult) -> "TrendingData":
        return cls(
            timeframe=result.timeframe,
            artists=[ArtistSchema.from_record(a) for a in result.artists],
            metrics=EnrichedMetrics(
                per_provider_availability=result.per_provider_availability
            ),
        )


class TrendingResponse(CamelModel):
    """Response of /trending/artists."""

    success: bool = True
    data: TrendingData


# =============================================================================
# ANALYTICS
# =============================================================================


class AnalyticsData(CamelModel):
    """SpotOnTrack analytics for one ISRC."""

    isrc: str
    title: str
    artist_name: str | None = None
    release_date: str | None = None
    artwork_url: str | None = None
    artists: list[dict[str, Any]] = Field(default_factory=list)
    links: dict[str, list[str]] = Field(default_factory=dict)
    spotify_streams: list[dict[str, Any]] = Field(default_factory=list)
    spotify_playlists: list[dict[str, Any]] = Field(default_factory=list)
    spotify_charts: list[dict[str, Any]] = Field(default_factory=list)
    apple_playlists: list[dict[str, Any]] = Field(default_factory=list)
    apple_charts: list[dict[str, Any]] = Field(default_factory=list)
    deezer_playlists: list[dict[str, Any]] = Field(default_factory=list)
    deezer_charts: list[dict[str, Any]] = Field(default_factory=list)
    shazam_data: list[dict[str, Any]] = Field(default_factory=list)
    shazam_charts: list[dict[str, Any]] = Field(default_factory=list)
    failed_sections: list[str] = Field(
        default_factory=list, description="Sections that could not be fetched"
    )

    @classmethod
    def from_record(cls, record: AnalyticsRecord) -> "AnalyticsData":
        return cls(**asdict(record))


class AnalyticsMeta(CamelModel):
    """Entry counts per platform."""

    platforms: dict[str, dict[str, int]] = Field(default_factory=dict)


class AnalyticsResponse(CamelModel):
    """Response of /track/analytics."""

    success: bool = True
    data: AnalyticsData
    meta: AnalyticsMeta


# =============================================================================
# MUSO SEARCH & RATE LIMIT
# =============================================================================


class MusoSearchResponse(CamelModel):
    """Raw Muso.AI search data, passed through."""

    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)


class MusoProfileResponse(CamelModel):
    """Raw Muso.AI profile, passed through."""

    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)


class MusoPageMeta(CamelModel):
    """Paging info of a Muso.AI list."""

    total: int = Field(0, description="Items available upstream")
    limit: int = Field(..., description="Page size requested")
    offset: int = Field(0, description="Page offset requested")
    sort_key: str | None = Field(None, description="Upstream sort key")


class MusoPageResponse(CamelModel):
    """One page of Muso.AI credits or collaborators."""

    success: bool = True
    data: list[dict[str, Any]] = Field(default_factory=list)
    meta: MusoPageMeta


class MusoTrackResponse(CamelModel):
    """A single Muso.AI track with its credits."""

    success: bool = True
    data: TrackSchema


class RateLimitInfo(CamelModel):
    """Caller's current Muso.AI window."""

    limit: int = Field(..., description="Requests allowed per window")
    remaining: int = Field(..., description="Requests left in this window")
    used: int = Field(..., description="Requests counted in this window")
    reset_time: int = Field(..., description="Window end, epoch milliseconds")
    reset_in: int = Field(..., description="Seconds until the window ends")

    @classmethod
    def from_status(cls, status: RateLimitStatus) -> "RateLimitInfo":
        return cls(
            limit=status.limit,
            remaining=status.remaining,
            used=status.count,
            reset_time=status.reset_time_ms,
            reset_in=status.reset_in_seconds,
        )


class RateLimitResponse(CamelModel):
    """Response of /search/muso/rate-limit."""

    success: bool = True
    rate_limit: RateLimitInfo
