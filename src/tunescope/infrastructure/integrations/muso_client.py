"""Muso.AI API client (credits, collaborators and profile data)."""

import logging
from typing import Any, Literal

from tunescope.config.settings import MusoSettings
from tunescope.domain.dtos import ArtistRecord, TrackCredit, TrackRecord
from tunescope.domain.exceptions import ProviderNotFoundError
from tunescope.infrastructure.cache import MusoCache, MusoCacheTTL
from tunescope.infrastructure.integrations.base_client import (
    BaseProviderClient,
    as_dict,
    paged_items,
    require_text,
)

logger = logging.getLogger(__name__)

# Muso.AI caps every paged endpoint at 50.
MAX_PAGE_SIZE = 50
DEFAULT_SEARCH_TYPES = ("profile", "album", "track")

MusoSearchType = Literal["profile", "album", "track", "organization"]


def _page_size(limit: int) -> int:
    return max(1, min(limit, MAX_PAGE_SIZE))


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _credits_from_muso(raw_credits: Any) -> list[TrackCredit]:
    # Credits come either flat ({name, role}) or grouped by role with a
    # collaborators list. Accept both.
    result: list[TrackCredit] = []
    for credit in _as_list(raw_credits):
        if not isinstance(credit, dict):
            continue
        role = credit.get("role") or credit.get("child") or credit.get("parent") or ""
        collaborators = credit.get("collaborators")
        if isinstance(collaborators, list):
            for person in collaborators:
                if isinstance(person, dict) and person.get("name"):
                    result.append(TrackCredit(name=person["name"], role=role))
        elif credit.get("name"):
            result.append(TrackCredit(name=credit["name"], role=role))
    return result


def artist_from_muso(profile: Any) -> ArtistRecord | None:
    """Map a Muso.AI profile to an ArtistRecord."""
    if not isinstance(profile, dict):
        return None
    name = (profile.get("name") or "").strip()
    if not name:
        return None
    profile_id = profile.get("id")
    provider_ids: dict[str, str] = {}
    if profile_id:
        provider_ids["muso"] = str(profile_id)
    if profile.get("spotifyId"):
        provider_ids["spotify"] = profile["spotifyId"]
    return ArtistRecord(
        name=name,
        provider_artist_id=str(profile_id) if profile_id else None,
        image_url=profile.get("avatarUrl") or None,
        genres=[g for g in _as_list(profile.get("genres")) if isinstance(g, str)],
        popularity_score=profile.get("popularity"),
        external_url=profile.get("website") or None,
        provider_ids=provider_ids,
        sources=["muso"],
    )


def track_from_muso(item: Any) -> TrackRecord | None:
    """Map a Muso.AI track to a TrackRecord, credits included."""
    if not isinstance(item, dict):
        return None
    title = (item.get("title") or "").strip()
    if not title:
        return None
    album = as_dict(item.get("album"))
    isrcs = [i for i in _as_list(item.get("isrcs")) if isinstance(i, str)]
    track_id = item.get("id")
    provider_ids: dict[str, str] = {}
    if track_id:
        provider_ids["muso"] = str(track_id)
    spotify_ids = [s for s in _as_list(item.get("spotifyIds")) if isinstance(s, str)]
    if spotify_ids:
        provider_ids["spotify"] = spotify_ids[0]
    return TrackRecord(
        title=title,
        isrc=isrcs[0] if isrcs else None,
        artist_names=[
            a["name"]
            for a in _as_list(item.get("artists"))
            if isinstance(a, dict) and a.get("name")
        ],
        album_name=album.get("title"),
        release_date=item.get("releaseDate") or album.get("releaseDate"),
        artwork_url=album.get("albumArt") or None,
        duration_ms=item.get("duration"),
        popularity_score=item.get("popularity"),
        provider_ids=provider_ids,
        credits=_credits_from_muso(item.get("credits")),
        sources=["muso"],
    )


class MusoClient(BaseProviderClient):
    """HTTP client for the Muso.AI v4 developer API.

    Every read goes through MusoCache. Pass cache=None to disable caching
    (MUSO_CACHE_ENABLED=false does exactly that in lifecycle.py).
    """

    name = "muso"
    HEALTH_CHECK_QUERY = "test"

    def __init__(
        self,
        settings: MusoSettings,
        timeout: float = 12.0,
        cache: MusoCache | None = None,
    ) -> None:
        """
        Initialize Muso.AI client.

        Args:
            settings: Muso.AI configuration settings
            timeout: Per-request timeout in seconds
            cache: Response cache, or None for always-fresh requests
        """
        super().__init__(timeout=timeout)
        self.settings = settings
        self.cache = cache

    def is_configured(self) -> bool:
        return self.settings.is_configured()

    def _auth_headers(self) -> dict[str, str]:
        return {"x-api-key": self.settings.api_key.strip()}

    async def _cached(
        self,
        operation: str,
        params: dict[str, Any],
        ttl: MusoCacheTTL,
        method: str,
        path: str,
        *,
        query: list[tuple[str, Any]] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        self._ensure_configured()

        async def fetch() -> Any:
            payload = await self._request(
                method,
                f"{self.settings.api_base_url}{path}",
                params=query,
                json=body,
            )
            # Muso wraps everything as {"result": ..., "code": ..., "data": ...}
            if isinstance(payload, dict) and "data" in payload:
                return payload["data"]
            return payload

        if self.cache is None:
            return await fetch()
        return await self.cache.cached(operation, params, ttl, fetch)

    async def search(
        self,
        keyword: str,
        types: tuple[MusoSearchType, ...] | list[MusoSearchType] = DEFAULT_SEARCH_TYPES,
        limit: int = 20,
        offset: int = 0,
        child_credits: list[str] | None = None,
        release_date_start: str | None = None,
        release_date_end: str | None = None,
    ) -> dict[str, Any]:
        """
        Search across profiles, albums, tracks and organizations.

        Args:
            keyword: Search text
            types: Entity types to include
            limit: Page size (capped at 50)
            offset: Page offset
            child_credits: Restrict to these credit roles
            release_date_start: ISO date lower bound
            release_date_end: ISO date upper bound

        Returns:
            Raw search data: {"profiles": {"items", "total"}, "tracks": ..., ...}
        """
        cleaned = require_text(keyword, "Search keyword")
        body: dict[str, Any] = {
            "keyword": cleaned,
            "type": list(types),
            "limit": _page_size(limit),
            "offset": max(0, offset),
        }
        if child_credits:
            body["childCredits"] = child_credits
        if release_date_start:
            body["releaseDateStart"] = release_date_start
        if release_date_end:
            body["releaseDateEnd"] = release_date_end

        data = await self._cached(
            "search", body, MusoCacheTTL.MEDIUM, "POST", "/search", body=body
        )
        if data is None:
            return {}
        return self._expect_object(data, "search")

    async def search_artists(self, name: str, limit: int = 10) -> list[ArtistRecord]:
        """Search Muso.AI profiles by name."""
        data = await self.search(name, types=("profile",), limit=limit)
        items = paged_items(data, "profiles")
        return [a for a in (artist_from_muso(p) for p in items) if a is not None]

    async def search_tracks(self, query: str, limit: int = 10) -> list[TrackRecord]:
        """Search Muso.AI tracks. Results carry credits."""
        data = await self.search(query, types=("track",), limit=limit)
        items = paged_items(data, "tracks")
        return [t for t in (track_from_muso(i) for i in items) if t is not None]

    async def get_profile(
        self, profile_id: str, source: Literal["muso", "spotify"] = "muso"
    ) -> dict[str, Any]:
        """
        Get a full profile.

        Args:
            profile_id: Muso.AI profile id, or a Spotify artist id with source="spotify"
            source: Which id namespace profile_id belongs to

        Raises:
            ProviderNotFoundError: If no such profile exists
        """
        cleaned = require_text(profile_id, "Profile ID")
        data = await self._cached(
            "getProfile",
            {"id": cleaned, "source": source},
            MusoCacheTTL.LONG,
            "GET",
            f"/profile/{cleaned}",
            query=[("source", source)],
        )
        if not data:
            raise ProviderNotFoundError(self.name, f"Muso.AI profile {cleaned} not found")
        return self._expect_object(data, "profile")

    async def get_profile_credits(
        self,
        profile_id: str,
        keyword: str | None = None,
        credits: list[str] | None = None,
        limit: int = 20,
        offset: int = 0,
        sort_key: Literal["releaseDate", "popularity", "title"] | None = None,
        sort_direction: Literal["ASC", "DESC"] | None = None,
    ) -> dict[str, Any]:
        """
        Get a page of credits for a profile.

        Returns:
            {"items": [...], "limit", "offset", "totalCount"}
        """
        cleaned = require_text(profile_id, "Profile ID")
        query: list[tuple[str, Any]] = []
        if keyword:
            query.append(("keyword", keyword))
        for credit in credits or []:
            query.append(("credit", credit))
        query.append(("offset", max(0, offset)))
        query.append(("limit", _page_size(limit)))
        if sort_key:
            query.append(("sortKey", sort_key))
        if sort_direction:
            query.append(("sortDirection", sort_direction))

        data = await self._cached(
            "getProfileCredits",
            {"id": cleaned, "query": query},
            MusoCacheTTL.MEDIUM,
            "GET",
            f"/profile/{cleaned}/credits",
            query=query,
        )
        return as_dict(data)

    async def get_profile_collaborators(
        self,
        profile_id: str,
        keyword: str | None = None,
        limit: int = 20,
        offset: int = 0,
        sort_key: Literal[
            "collaborationsCount", "lastCollaborationDate", "name", "popularity"
        ] = "lastCollaborationDate",
        sort_direction: Literal["ASC", "DESC"] = "DESC",
        profile_type: Literal["artist", "organization"] = "artist",
    ) -> dict[str, Any]:
        """
        Get a page of collaborators for a profile.

        Returns:
            {"items": [...], "limit", "offset", "totalCount"}
        """
        cleaned = require_text(profile_id, "Profile ID")
        query: list[tuple[str, Any]] = []
        if keyword:
            query.append(("keyword", keyword))
        query += [
            ("sortKey", sort_key),
            ("sortDirection", sort_direction),
            ("offset", max(0, offset)),
            ("limit", _page_size(limit)),
            ("type", profile_type),
        ]

        data = await self._cached(
            "getProfileCollaborators",
            {"id": cleaned, "query": query},
            MusoCacheTTL.LONG,
            "GET",
            f"/profile/{cleaned}/collaborators",
            query=query,
        )
        return as_dict(data)

    async def get_track(
        self, track_id: str, id_type: Literal["id", "isrc"] = "id"
    ) -> TrackRecord:
        """
        Get a track by Muso.AI id or ISRC.

        Raises:
            ProviderNotFoundError: If the track is unknown
        """
        cleaned = require_text(track_id, "Track ID")
        data = await self._cached(
            "getTrack",
            {"id": cleaned, "idType": id_type},
            MusoCacheTTL.VERY_LONG,
            "GET",
            f"/track/{id_type}/{cleaned}",
        )
        track = track_from_muso(data)
        if track is None:
            raise ProviderNotFoundError(self.name, f"Muso.AI track {cleaned} not found")
        return track
