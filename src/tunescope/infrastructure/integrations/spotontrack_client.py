"""SpotOnTrack API client (streaming, chart and playlist analytics by ISRC)."""

import asyncio
import logging
from typing import Any

from tunescope.config.settings import SpotOnTrackSettings
from tunescope.domain.dtos import AnalyticsRecord, ArtistRecord, TrackRecord
from tunescope.domain.exceptions import ProviderNotFoundError
from tunescope.infrastructure.integrations.base_client import (
    BaseProviderClient,
    as_dict,
    dict_items,
    require_text,
)

logger = logging.getLogger(__name__)

# AnalyticsRecord field → sub-path under /tracks/{isrc}.
ANALYTICS_SECTIONS: dict[str, str] = {
    "spotify_streams": "spotify/streams",
    "spotify_playlists": "spotify/playlists/current",
    "spotify_charts": "spotify/charts/current",
    "apple_playlists": "apple/playlists/current",
    "apple_charts": "apple/charts/current",
    "deezer_playlists": "deezer/playlists/current",
    "deezer_charts": "deezer/charts/current",
    "shazam_data": "shazam/shazams",
    "shazam_charts": "shazam/charts/current",
}


def track_from_spotontrack(item: Any) -> TrackRecord | None:
    """Map a SpotOnTrack search hit or metadata object to a TrackRecord."""
    if not isinstance(item, dict):
        return None
    title = (item.get("name") or "").strip()
    if not title:
        return None
    isrc = item.get("isrc")
    return TrackRecord(
        title=title,
        isrc=isrc,
        artist_names=[
            a["name"] for a in dict_items(item.get("artists")) if a.get("name")
        ],
        release_date=item.get("release_date"),
        artwork_url=item.get("artwork") or None,
        provider_ids={"spotontrack": isrc} if isrc else {},
        sources=["spotontrack"],
    )


def artist_from_spotontrack(item: Any) -> ArtistRecord | None:
    """Map an entry of a metadata `artists` array to an ArtistRecord."""
    if not isinstance(item, dict):
        return None
    name = (item.get("name") or "").strip()
    if not name:
        return None
    artist_id = str(item["id"]) if item.get("id") is not None else None
    return ArtistRecord(
        name=name,
        provider_artist_id=artist_id,
        image_url=item.get("image") or None,
        provider_ids={"spotontrack": artist_id} if artist_id else {},
        sources=["spotontrack"],
    )


class SpotOnTrackClient(BaseProviderClient):
    """HTTP client for the SpotOnTrack v1 API."""

    name = "spotontrack"
    HEALTH_CHECK_QUERY = "test"

    def __init__(self, settings: SpotOnTrackSettings, timeout: float = 12.0) -> None:
        """
        Initialize SpotOnTrack client.

        Args:
            settings: SpotOnTrack configuration settings
            timeout: Per-request timeout in seconds
        """
        super().__init__(timeout=timeout)
        self.settings = settings

    def has_real_api_key(self) -> bool:
        """False for empty, placeholder or suspiciously short keys."""
        return self.settings.is_configured()

    def is_configured(self) -> bool:
        return self.has_real_api_key()

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.settings.api_key.strip()}"}

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        self._ensure_configured()
        return await self._request(
            "GET", f"{self.settings.api_base_url}/{path.lstrip('/')}", params=params
        )

    async def search_tracks(self, query: str, limit: int = 10) -> list[TrackRecord]:
        """
        Search tracks.

        Args:
            query: Free text, usually "title artist"
            limit: Maximum results (SpotOnTrack has no limit param, we slice)

        Returns:
            Tracks with ISRC, title, release date and artwork. Search hits do
            NOT carry artist names - use get_track_artists() for those.
        """
        cleaned = require_text(query, "Track query")
        data = await self._get("/tracks", {"query": cleaned})
        if not isinstance(data, list):
            logger.debug("SpotOnTrack search returned no list for %r", cleaned)
            return []
        tracks = [t for t in (track_from_spotontrack(i) for i in data) if t]
        return tracks[:limit]

    async def _fetch_metadata(self, isrc: str) -> dict[str, Any]:
        cleaned = require_text(isrc, "ISRC").upper()
        data = await self._get(f"/tracks/{cleaned}")
        if not isinstance(data, dict) or not data:
            raise ProviderNotFoundError(
                self.name, f"No SpotOnTrack metadata for ISRC {cleaned}"
            )
        return data

    async def get_track_metadata(self, isrc: str) -> TrackRecord:
        """
        Get track metadata by ISRC.

        Raises:
            ProviderNotFoundError: If SpotOnTrack doesn't know the ISRC
        """
        data = await self._fetch_metadata(isrc)
        track = track_from_spotontrack(data)
        if track is None:
            raise ProviderNotFoundError(self.name, f"Track {isrc} has no title")
        return track

    async def get_track_artists(self, isrc: str) -> list[ArtistRecord]:
        """Artists listed on a track's metadata, in credited order."""
        data = await self._fetch_metadata(isrc)
        return [
            a
            for a in (artist_from_spotontrack(i) for i in dict_items(data.get("artists")))
            if a is not None
        ]

    # Hey future me - SpotOnTrack has no artist search endpoint! We search tracks and read the
    # artist list off the FIRST hit's metadata. One search plus one metadata call, not N+1.
    async def search_artists(self, name: str, limit: int = 10) -> list[ArtistRecord]:
        """
        Infer artists from the first track matching `name`.

        Returns:
            Unique artists (by SpotOnTrack id), or [] if no track matched
        """
        tracks = await self.search_tracks(name, limit=1)
        if not tracks or not tracks[0].isrc:
            return []

        seen: set[str] = set()
        artists: list[ArtistRecord] = []
        for artist in await self.get_track_artists(tracks[0].isrc):
            key = artist.provider_artist_id or artist.dedup_key()
            if key not in seen:
                seen.add(key)
                artists.append(artist)
        return artists[:limit]

    async def _fetch_section(self, isrc: str, sub_path: str) -> list[dict[str, Any]]:
        data = await self._get(f"/tracks/{isrc}/{sub_path}")
        return dict_items(data)

    # Listen up: analytics is BEST-EFFORT. Metadata is the only required call - if that fails the
    # whole thing fails. The nine sections fan out in parallel and any that blow up become [] and
    # get listed in failed_sections so callers can tell "no playlists" from "playlists errored".
    async def get_track_analytics(self, isrc: str) -> AnalyticsRecord:
        """
        Get cross-platform analytics for a track.

        Args:
            isrc: Track ISRC

        Returns:
            AnalyticsRecord with every section that could be fetched

        Raises:
            ProviderNotFoundError: If the ISRC can't be resolved
            ProviderError: If the metadata request fails for another reason
        """
        metadata = await self._fetch_metadata(isrc)
        resolved_isrc = (metadata.get("isrc") or isrc).strip().upper()

        section_names = list(ANALYTICS_SECTIONS)
        results = await asyncio.gather(
            *(
                self._fetch_section(resolved_isrc, ANALYTICS_SECTIONS[section])
                for section in section_names
            ),
            return_exceptions=True,
        )

        sections: dict[str, list[dict[str, Any]]] = {}
        failed: list[str] = []
        for section, result in zip(section_names, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(
                    "SpotOnTrack %s unavailable for %s: %s",
                    section,
                    resolved_isrc,
                    getattr(result, "message", result),
                    extra={"provider": self.name, "section": section},
                )
                sections[section] = []
                failed.append(section)
            else:
                sections[section] = result

        artists = dict_items(metadata.get("artists"))
        return AnalyticsRecord(
            isrc=resolved_isrc,
            title=metadata.get("name") or resolved_isrc,
            artist_name=artists[0].get("name") if artists else None,
            release_date=metadata.get("release_date"),
            artwork_url=metadata.get("artwork"),
            artists=artists,
            links=as_dict(metadata.get("links")),
            failed_sections=failed,
            **sections,
        )
