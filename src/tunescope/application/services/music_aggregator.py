"""Multi-Provider Music Aggregator.

Hey future me - this service merges track/artist data from ALL providers into
one EnrichedResult!

Architecture:
    Route handler
        ↓
    MusicAggregator
        ↓ (asyncio.gather, one branch per configured provider)
    [SpotOnTrackClient, SpotifyClient, MusoClient]
        ↓ (each branch settles into Ok(...) | Err(ProviderFailure))
    Merge in FIXED priority order
        ↓
    EnrichedResult / TrendingResult

Merge rules:
1. Priority is SpotOnTrack > Spotify > Muso.AI, always. Completion order of the
   network calls never matters because we merge after gather().
2. A field set by a higher-priority provider is never overwritten. Later
   providers only fill what is still empty.
3. Tracks collapse by ISRC. Without an ISRC, by lowercased "title|first artist".
4. A failed provider contributes nothing. The other providers still count.

"Nothing found" is a normal, successful, empty result. The only aggregate
errors are:
- ConfigurationError: no provider is configured at all
- AllProvidersUnavailableError: every attempted provider timed out or was unreachable
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from tunescope.domain.dtos import (
    ArtistRecord,
    EnrichedResult,
    TrackRecord,
    TrendingResult,
)
from tunescope.domain.exceptions import (
    AllProvidersUnavailableError,
    ConfigurationError,
    ProviderError,
    ProviderRateLimitedError,
    ValidationError,
)
from tunescope.domain.value_objects import (
    PROVIDER_PRIORITY,
    Err,
    Ok,
    ProviderName,
    ProviderResult,
    failure_from_exception,
)

if TYPE_CHECKING:
    from tunescope.infrastructure.integrations import (
        MusoClient,
        SpotifyClient,
        SpotOnTrackClient,
    )
    from tunescope.infrastructure.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

MAX_TRENDING_LIMIT = 50
DEFAULT_TRENDING_SEED = "popular"


class Timeframe(str, Enum):
    """Accepted trending windows. Echoed back only, see get_trending_artists()."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Availability(str, Enum):
    """Per-provider outcome reported next to every aggregate result."""

    OK = "ok"
    EMPTY = "empty"
    NOT_CONFIGURED = "not_configured"


@dataclass
class ProviderContribution:
    """What one provider branch produced."""

    artists: list[ArtistRecord] = field(default_factory=list)
    tracks: list[TrackRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.artists and not self.tracks


type BranchFactory = Callable[[], Awaitable[ProviderContribution]]


def _require(value: str | None, message: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(message)
    return cleaned


def merge_tracks(
    contributions: list[tuple[ProviderName, ProviderContribution]],
) -> list[TrackRecord]:
    """Union tracks from all providers, de-duplicated, in priority order.

    A track matches an already merged one when the ISRCs are equal, or when
    their title|artist keys are equal and at least one side has no ISRC. Two
    different ISRCs are never merged.
    """
    merged: list[TrackRecord] = []
    by_isrc: dict[str, TrackRecord] = {}
    by_name: dict[str, TrackRecord] = {}

    for _, contribution in contributions:
        for track in contribution.tracks:
            existing = by_isrc.get(track.isrc) if track.isrc else None
            if existing is None:
                candidate = by_name.get(track.composite_key())
                if candidate is not None and not (track.isrc and candidate.isrc):
                    existing = candidate

            if existing is None:
                merged.append(track)
                existing = track
            else:
                existing.fill_missing_from(track)

            if existing.isrc:
                by_isrc.setdefault(existing.isrc, existing)
            by_name.setdefault(existing.composite_key(), existing)
            by_name.setdefault(track.composite_key(), existing)

    return merged


def merge_artist(
    contributions: list[tuple[ProviderName, ProviderContribution]],
) -> ArtistRecord | None:
    """Pick the primary artist and fill its gaps from lower-priority providers.

    The primary is the first artist of the highest-priority provider that
    returned any. Only artists with the same normalized name fill fields.
    """
    candidates = [a for _, c in contributions for a in c.artists]
    if not candidates:
        return None

    primary = candidates[0]

    for artist in candidates:
        if artist is not primary and artist.dedup_key() == primary.dedup_key():
            primary.fill_missing_from(artist)
    return primary


def merge_artist_lists(
    contributions: list[tuple[ProviderName, ProviderContribution]],
) -> list[ArtistRecord]:
    """Union artists by normalized name, first provider wins per field."""
    merged: dict[str, ArtistRecord] = {}
    for _, contribution in contributions:
        for artist in contribution.artists:
            key = artist.dedup_key()
            if key in merged:
                merged[key].fill_missing_from(artist)
            else:
                merged[key] = artist
    return list(merged.values())


def trending_sort_key(artist: ArtistRecord) -> tuple[int, int]:
    """Popularity first, followers as tie-break. Missing signals count as 0."""
    return (artist.popularity_score or 0, artist.follower_count or 0)


class MusicAggregator:
    """Combines Spotify, SpotOnTrack and Muso.AI into one enriched view.

    Hey future me - this service NEVER lets one provider's failure kill a request.
    Every branch is wrapped in asyncio.wait_for() plus a catch-all that turns the
    exception into Err(ProviderFailure). The `match` in _collect() is the ONLY
    place that unpacks those results.
    """

    def __init__(
        self,
        spotify: "SpotifyClient",
        spotontrack: "SpotOnTrackClient",
        muso: "MusoClient",
        muso_limiter: "FixedWindowRateLimiter | None" = None,
        provider_timeout: float = 12.0,
        search_limit: int = 10,
    ) -> None:
        """
        Initialize aggregator.

        Args:
            spotify: Spotify client
            spotontrack: SpotOnTrack client
            muso: Muso.AI client
            muso_limiter: Per-caller limiter for Muso.AI (None = unlimited)
            provider_timeout: Budget in seconds for one provider branch
            search_limit: Results requested from each provider search
        """
        self._spotify = spotify
        self._spotontrack = spotontrack
        self._muso = muso
        self._muso_limiter = muso_limiter
        self._provider_timeout = provider_timeout
        self._search_limit = search_limit

    def _client(self, provider: ProviderName) -> Any:
        match provider:
            case ProviderName.SPOTONTRACK:
                return self._spotontrack
            case ProviderName.SPOTIFY:
                return self._spotify
            case ProviderName.MUSO:
                return self._muso

    def configured_providers(self) -> list[ProviderName]:
        """Configured providers in priority order."""
        return [p for p in PROVIDER_PRIORITY if self._client(p).is_configured()]

    # =========================================================================
    # BRANCH PLUMBING
    # =========================================================================

    async def _settle(
        self, provider: ProviderName, branch: BranchFactory
    ) -> ProviderResult[ProviderContribution]:
        """Run one provider branch under the timeout and settle it."""
        try:
            contribution = await asyncio.wait_for(branch(), self._provider_timeout)
        except Exception as e:
            failure = failure_from_exception(provider.value, e)
            if isinstance(e, ProviderError | TimeoutError | ValidationError):
                logger.warning(
                    "%s contributed nothing: %s (%s)",
                    provider.value,
                    failure.message,
                    failure.kind.value,
                    extra={"provider": provider.value},
                )
            else:
                logger.exception(
                    "Unexpected error from %s branch",
                    provider.value,
                    extra={"provider": provider.value},
                )
            return Err(failure)
        return Ok(contribution)

    async def _muso_gate(self, caller_key: str | None) -> None:
        """Count one Muso.AI call against the caller's window, raise if denied."""
        if self._muso_limiter is None or caller_key is None:
            return
        decision = await self._muso_limiter.try_acquire(caller_key)
        if not decision.allowed:
            raise ProviderRateLimitedError(
                ProviderName.MUSO.value,
                "Muso.AI request budget for this caller is used up",
                retry_after=decision.retry_after_seconds,
            )

    async def _collect(
        self, branches: dict[ProviderName, BranchFactory]
    ) -> tuple[list[tuple[ProviderName, ProviderContribution]], dict[str, str]]:
        """Run all branches concurrently and return priority-ordered contributions.

        Raises:
            ConfigurationError: If no provider is configured
            AllProvidersUnavailableError: If every attempted provider hit a
                timeout or connection failure
        """
        configured = [p for p in self.configured_providers() if p in branches]
        availability: dict[str, str] = {
            p.value: Availability.NOT_CONFIGURED.value
            for p in PROVIDER_PRIORITY
            if p not in configured
        }
        if not configured:
            raise ConfigurationError("No music data providers are configured")

        results = await asyncio.gather(
            *(self._settle(p, branches[p]) for p in configured)
        )

        contributions: list[tuple[ProviderName, ProviderContribution]] = []
        failures = []
        for provider, result in zip(configured, results, strict=True):
            match result:
                case Ok(value=contribution):
                    contributions.append((provider, contribution))
                    availability[provider.value] = (
                        Availability.EMPTY.value
                        if contribution.is_empty
                        else Availability.OK.value
                    )
                case Err(failure=failure):
                    failures.append(failure)
                    availability[provider.value] = failure.kind.value

        if failures and len(failures) == len(configured) and all(
            f.kind.is_infrastructure for f in failures
        ):
            raise AllProvidersUnavailableError([f.provider for f in failures])

        return contributions, availability

    # =========================================================================
    # PER-PROVIDER BRANCHES
    # =========================================================================

    async def _spotontrack_tracks_with_artist(self, query: str) -> ProviderContribution:
        """Track search plus the first hit's artist list.

        Search hits carry no artist names, so the first hit's metadata is read
        for them. That second call is best-effort: if it fails we keep the tracks.
        """
        tracks = await self._spotontrack.search_tracks(query, limit=self._search_limit)
        artists: list[ArtistRecord] = []
        if tracks and tracks[0].isrc:
            try:
                artists = await self._spotontrack.get_track_artists(tracks[0].isrc)
            except ProviderError as e:
                logger.warning(
                    "SpotOnTrack artist lookup failed for %s: %s",
                    tracks[0].isrc,
                    e.message,
                    extra={"provider": ProviderName.SPOTONTRACK.value},
                )
            if artists and not tracks[0].artist_names:
                tracks[0].artist_names = [a.name for a in artists]
        return ProviderContribution(artists=artists[:1], tracks=tracks)

    # Yo, the Spotify extras below are garnish on top of the merged result. A failed or slow
    # call logs and gives None, it never fails the enrichment it decorates.
    async def _spotify_extra(self, what: str, call: Awaitable[Any]) -> Any:
        try:
            return await asyncio.wait_for(call, self._provider_timeout)
        except (ProviderError, TimeoutError) as e:
            logger.warning(
                "Spotify %s lookup failed: %s",
                what,
                getattr(e, "message", None) or type(e).__name__,
                extra={"provider": ProviderName.SPOTIFY.value},
            )
            return None

    async def _audio_features(self, tracks: list[TrackRecord]) -> dict[str, Any] | None:
        """Spotify audio features of the top merged track, when it has a Spotify id."""
        if not tracks or not self._spotify.is_configured():
            return None
        spotify_id = tracks[0].provider_ids.get(ProviderName.SPOTIFY.value)
        if not spotify_id:
            return None
        return await self._spotify_extra(
            "audio features", self._spotify.get_audio_features(spotify_id)
        )

    async def _with_spotify_artist(
        self, contributions: list[tuple[ProviderName, ProviderContribution]]
    ) -> list[tuple[ProviderName, ProviderContribution]]:
        """Slot in the Spotify artist when only another provider knew its Spotify id.

        Muso.AI profiles carry a spotifyId. When the Spotify search found no
        artist, that id is looked up directly and the result takes Spotify's
        place in the priority order, so its fields beat Muso.AI's.
        """
        candidates = [a for _, c in contributions for a in c.artists]
        if not candidates or not self._spotify.is_configured():
            return contributions
        if any(p is ProviderName.SPOTIFY and c.artists for p, c in contributions):
            return contributions

        lead = candidates[0].dedup_key()
        spotify_id = next(
            (
                a.provider_ids[ProviderName.SPOTIFY.value]
                for a in candidates
                if a.dedup_key() == lead and ProviderName.SPOTIFY.value in a.provider_ids
            ),
            None,
        )
        if not spotify_id:
            return contributions

        artist = await self._spotify_extra("artist", self._spotify.get_artist(spotify_id))
        if artist is None:
            return contributions

        by_provider = dict(contributions)
        existing = by_provider.get(ProviderName.SPOTIFY, ProviderContribution())
        by_provider[ProviderName.SPOTIFY] = ProviderContribution(
            artists=[artist], tracks=existing.tracks
        )
        return [(p, by_provider[p]) for p in PROVIDER_PRIORITY if p in by_provider]

    # =========================================================================
    # PUBLIC OPERATIONS
    # =========================================================================

    async def get_enriched_track(
        self,
        title: str,
        artist: str | None = None,
        track_id: str | None = None,
        caller_key: str | None = None,
    ) -> EnrichedResult:
        """
        Enrich a track query with data from every configured provider.

        Args:
            title: Track title (required)
            artist: Artist name, narrows searches and drives the artist lookup
            track_id: Spotify track ID, replaces the Spotify title search
            caller_key: Rate-limit key for Muso.AI calls

        Returns:
            EnrichedResult (possibly empty - that's not an error)

        Raises:
            ValidationError: If title is blank
            ConfigurationError: If no provider is configured
            AllProvidersUnavailableError: If every provider is unreachable
        """
        title = _require(title, "Track title is required")
        artist = (artist or "").strip() or None
        track_id = (track_id or "").strip() or None
        query = f"{title} {artist}" if artist else title
        limit = self._search_limit

        async def spotify_branch() -> ProviderContribution:
            if track_id:
                track = await self._spotify.get_track(track_id)
                tracks = [track] if track else []
            else:
                spotify_query = f"{title} artist:{artist}" if artist else title
                tracks = await self._spotify.search_tracks(spotify_query, limit=limit)
            artists = (
                await self._spotify.search_artists(artist, limit=1) if artist else []
            )
            return ProviderContribution(artists=artists, tracks=tracks)

        async def muso_branch() -> ProviderContribution:
            await self._muso_gate(caller_key)
            tracks = await self._muso.search_tracks(query, limit=limit)
            artists = await self._muso.search_artists(artist or title, limit=1)
            return ProviderContribution(artists=artists, tracks=tracks)

        contributions, availability = await self._collect(
            {
                ProviderName.SPOTONTRACK: lambda: self._spotontrack_tracks_with_artist(
                    query
                ),
                ProviderName.SPOTIFY: spotify_branch,
                ProviderName.MUSO: muso_branch,
            }
        )

        tracks = merge_tracks(contributions)
        result = EnrichedResult(
            artist=merge_artist(contributions),
            tracks=tracks,
            per_provider_availability=availability,
            audio_features=await self._audio_features(tracks),
        )
        logger.info(
            "Enriched track %r: %d tracks, artist=%s",
            title,
            len(result.tracks),
            result.artist.name if result.artist else None,
            extra={"availability": availability},
        )
        return result

    async def get_enriched_artist(
        self, name: str, caller_key: str | None = None
    ) -> EnrichedResult:
        """
        Enrich an artist query: profile fields plus their tracks.

        Raises:
            ValidationError: If name is blank
            ConfigurationError: If no provider is configured
            AllProvidersUnavailableError: If every provider is unreachable
        """
        name = _require(name, "Artist name is required")
        limit = self._search_limit

        async def spotify_branch() -> ProviderContribution:
            artists, tracks = await asyncio.gather(
                self._spotify.search_artists(name, limit=limit),
                self._spotify.search_tracks(f"artist:{name}", limit=limit),
            )
            return ProviderContribution(artists=artists, tracks=tracks)

        async def muso_branch() -> ProviderContribution:
            await self._muso_gate(caller_key)
            artists = await self._muso.search_artists(name, limit=limit)
            tracks = await self._muso.search_tracks(name, limit=limit)
            return ProviderContribution(artists=artists, tracks=tracks)

        contributions, availability = await self._collect(
            {
                ProviderName.SPOTONTRACK: lambda: self._spotontrack_tracks_with_artist(
                    name
                ),
                ProviderName.SPOTIFY: spotify_branch,
                ProviderName.MUSO: muso_branch,
            }
        )

        contributions = await self._with_spotify_artist(contributions)
        return EnrichedResult(
            artist=merge_artist(contributions),
            tracks=merge_tracks(contributions),
            per_provider_availability=availability,
        )

    # Listen up: this is NOT a real trending computation! None of the providers exposes a
    # cross-platform trending feed, so we search a seed keyword, merge, and sort by whatever
    # popularity/followers signal exists. The timeframe is validated and echoed, nothing more.
    async def get_trending_artists(
        self,
        timeframe: str = Timeframe.WEEKLY.value,
        limit: int = 20,
        seed: str = DEFAULT_TRENDING_SEED,
        caller_key: str | None = None,
    ) -> TrendingResult:
        """
        Approximate trending artists by popularity.

        Args:
            timeframe: daily, weekly or monthly (echoed back)
            limit: Artists to return (1-50)
            seed: Keyword used to pull candidate artists
            caller_key: Rate-limit key for Muso.AI calls

        Raises:
            ValidationError: If timeframe, limit or seed is invalid
        """
        try:
            resolved = Timeframe((timeframe or "").strip().lower())
        except ValueError as e:
            allowed = ", ".join(t.value for t in Timeframe)
            raise ValidationError(f"timeframe must be one of: {allowed}") from e
        if not 1 <= limit <= MAX_TRENDING_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_TRENDING_LIMIT}")
        seed = _require(seed, "Trending seed keyword is required")
        fetch_limit = max(limit, self._search_limit)

        async def spotontrack_branch() -> ProviderContribution:
            return ProviderContribution(
                artists=await self._spotontrack.search_artists(seed, limit=fetch_limit)
            )

        async def spotify_branch() -> ProviderContribution:
            return ProviderContribution(
                artists=await self._spotify.search_artists(seed, limit=fetch_limit)
            )

        async def muso_branch() -> ProviderContribution:
            await self._muso_gate(caller_key)
            return ProviderContribution(
                artists=await self._muso.search_artists(seed, limit=fetch_limit)
            )

        contributions, availability = await self._collect(
            {
                ProviderName.SPOTONTRACK: spotontrack_branch,
                ProviderName.SPOTIFY: spotify_branch,
                ProviderName.MUSO: muso_branch,
            }
        )

        # sorted() is stable, so equal scores keep provider priority order
        ranked = sorted(
            merge_artist_lists(contributions), key=trending_sort_key, reverse=True
        )
        return TrendingResult(
            timeframe=resolved.value,
            artists=ranked[:limit],
            per_provider_availability=availability,
        )

    async def provider_status(self) -> dict[str, str]:
        """
        Health-check every provider concurrently.

        Returns:
            {provider: "healthy" | "unhealthy" | "not_configured"}
        """
        configured = self.configured_providers()
        checks = await asyncio.gather(
            *(self._client(p).health_check() for p in configured)
        )
        status = {
            p.value: Availability.NOT_CONFIGURED.value for p in PROVIDER_PRIORITY
        }
        for provider, healthy in zip(configured, checks, strict=True):
            status[provider.value] = "healthy" if healthy else "unhealthy"
        return status
