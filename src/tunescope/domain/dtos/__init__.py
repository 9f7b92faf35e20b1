"""
Standard Data Transfer Objects for provider data.

Hey future me - these DTOs are the LINGUA FRANCA between the provider clients and
the aggregator! Every client (Spotify, SpotOnTrack, Muso.AI) MUST return data in
these shapes. Nothing downstream ever touches raw provider JSON.

Rules:
1. Fields a provider doesn't report stay None (or empty list). NEVER default a
   missing popularity to 0 here - that lies to the merge code.
2. `sources` records which providers contributed, in merge order.
3. `provider_ids` keeps each provider's own identifier ({"spotify": "abc"}).

Flow: Provider JSON → client normalizer → DTO → MusicAggregator merge → API schema
"""

from dataclasses import dataclass, field, fields
from typing import Any

from tunescope.domain.exceptions import ValidationError


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def normalize_text(value: str | None) -> str:
    """Lowercase and trim a string for use in composite keys."""
    return (value or "").strip().lower()


@dataclass
class TrackCredit:
    """One credit line on a track (Muso.AI only)."""

    name: str
    role: str


@dataclass
class TrackRecord:
    """Normalized track from any provider."""

    title: str
    isrc: str | None = None
    artist_names: list[str] = field(default_factory=list)
    album_name: str | None = None
    release_date: str | None = None
    artwork_url: str | None = None
    duration_ms: int | None = None
    popularity_score: int | None = None
    provider_ids: dict[str, str] = field(default_factory=dict)
    credits: list[TrackCredit] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate essential fields."""
        if not self.title or not self.title.strip():
            raise ValidationError("Track title cannot be empty")
        if self.isrc:
            self.isrc = self.isrc.strip().upper()

    # Hey future me - ISRC is THE identity across providers. Only fall back to the
    # title+artist composite when a provider didn't send one (Spotify search
    # results sometimes don't).
    def dedup_key(self) -> str:
        """Key used to collapse the same recording reported by several providers."""
        if self.isrc:
            return f"isrc:{self.isrc}"
        return self.composite_key()

    def composite_key(self) -> str:
        """Lowercased, trimmed title|first-artist key."""
        first_artist = self.artist_names[0] if self.artist_names else ""
        return f"name:{normalize_text(self.title)}|{normalize_text(first_artist)}"

    def fill_missing_from(self, other: "TrackRecord") -> None:
        """Copy fields from `other` only where this record has nothing."""
        _fill_missing(self, other)


@dataclass
class ArtistRecord:
    """Normalized artist from any provider."""

    name: str
    provider_artist_id: str | None = None
    image_url: str | None = None
    genres: list[str] = field(default_factory=list)
    follower_count: int | None = None
    popularity_score: int | None = None
    external_url: str | None = None
    provider_ids: dict[str, str] = field(default_factory=dict)
    sources: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate essential fields."""
        if not self.name or not self.name.strip():
            raise ValidationError("Artist name cannot be empty")

    def dedup_key(self) -> str:
        """Artists have no shared identifier across providers, so match on name."""
        return normalize_text(self.name)

    def fill_missing_from(self, other: "ArtistRecord") -> None:
        """Copy fields from `other` only where this record has nothing."""
        _fill_missing(self, other)


def _fill_missing(target: Any, other: Any) -> None:
    for f in fields(target):
        if f.name == "sources":
            continue
        if f.name == "provider_ids":
            for provider, provider_id in other.provider_ids.items():
                target.provider_ids.setdefault(provider, provider_id)
            continue
        if _is_empty(getattr(target, f.name)) and not _is_empty(
            getattr(other, f.name)
        ):
            setattr(target, f.name, getattr(other, f.name))
    for source in other.sources:
        if source not in target.sources:
            target.sources.append(source)


@dataclass
class AnalyticsRecord:
    """SpotOnTrack cross-platform analytics for one ISRC.

    Identity fields come from the metadata endpoint (required). Every list below
    comes from its own sub-endpoint and is [] if that fetch failed.
    """

    isrc: str
    title: str
    artist_name: str | None = None
    release_date: str | None = None
    artwork_url: str | None = None
    artists: list[dict[str, Any]] = field(default_factory=list)
    links: dict[str, list[str]] = field(default_factory=dict)
    spotify_streams: list[dict[str, Any]] = field(default_factory=list)
    spotify_playlists: list[dict[str, Any]] = field(default_factory=list)
    spotify_charts: list[dict[str, Any]] = field(default_factory=list)
    apple_playlists: list[dict[str, Any]] = field(default_factory=list)
    apple_charts: list[dict[str, Any]] = field(default_factory=list)
    deezer_playlists: list[dict[str, Any]] = field(default_factory=list)
    deezer_charts: list[dict[str, Any]] = field(default_factory=list)
    shazam_data: list[dict[str, Any]] = field(default_factory=list)
    shazam_charts: list[dict[str, Any]] = field(default_factory=list)
    failed_sections: list[str] = field(default_factory=list)

    def platform_summary(self) -> dict[str, dict[str, int]]:
        """Count entries per platform for the analytics meta block."""
        return {
            "spotify": {
                "charts": len(self.spotify_charts),
                "playlists": len(self.spotify_playlists),
                "streams": len(self.spotify_streams),
            },
            "apple": {
                "charts": len(self.apple_charts),
                "playlists": len(self.apple_playlists),
            },
            "deezer": {
                "charts": len(self.deezer_charts),
                "playlists": len(self.deezer_playlists),
            },
            "shazam": {
                "charts": len(self.shazam_charts),
                "data_points": len(self.shazam_data),
            },
        }


@dataclass
class EnrichedResult:
    """Merged view of one track/artist query across all providers.

    artist=None and tracks=[] means "found nothing" - a valid, successful result.
    """

    artist: ArtistRecord | None = None
    tracks: list[TrackRecord] = field(default_factory=list)
    per_provider_availability: dict[str, str] = field(default_factory=dict)
    audio_features: dict[str, Any] | None = None

    @property
    def is_empty(self) -> bool:
        return self.artist is None and not self.tracks


@dataclass
class TrendingResult:
    """Popularity-sorted artists. An approximation, not a real trend signal."""

    timeframe: str
    artists: list[ArtistRecord] = field(default_factory=list)
    per_provider_availability: dict[str, str] = field(default_factory=dict)


__all__ = [
    "AnalyticsRecord",
    "ArtistRecord",
    "EnrichedResult",
    "TrackCredit",
    "TrackRecord",
    "TrendingResult",
    "normalize_text",
]
