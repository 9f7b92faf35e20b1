"""Spotify Web API client using the client-credentials grant."""

import asyncio
import base64
import logging
import time
from collections.abc import Callable
from typing import Any

from tunescope.config.settings import SpotifySettings
from tunescope.domain.dtos import ArtistRecord, TrackRecord
from tunescope.domain.exceptions import (
    ProviderAuthenticationError,
    ProviderNotConfiguredError,
    ProviderNotFoundError,
)
from tunescope.infrastructure.integrations.base_client import (
    BaseProviderClient,
    as_dict,
    dict_items,
    paged_items,
    require_text,
)

logger = logging.getLogger(__name__)

# Spotify's search endpoint rejects limits outside 1..50.
_MAX_SEARCH_LIMIT = 50


def _first_image_url(images: Any) -> str | None:
    entries = dict_items(images)
    return (entries[0].get("url") or None) if entries else None


def artist_from_spotify(item: Any) -> ArtistRecord | None:
    """Map a Spotify artist object. Returns None for nulls and nameless junk entries."""
    if not isinstance(item, dict):
        return None
    name = (item.get("name") or "").strip()
    if not name:
        return None
    artist_id = item.get("id")
    return ArtistRecord(
        name=name,
        provider_artist_id=artist_id,
        image_url=_first_image_url(item.get("images")),
        genres=[g for g in item.get("genres") or [] if isinstance(g, str)],
        follower_count=as_dict(item.get("followers")).get("total"),
        popularity_score=item.get("popularity"),
        external_url=as_dict(item.get("external_urls")).get("spotify"),
        provider_ids={"spotify": artist_id} if artist_id else {},
        sources=["spotify"],
    )


def track_from_spotify(item: Any) -> TrackRecord | None:
    """Map a Spotify track object. Returns None for nulls and nameless junk entries."""
    if not isinstance(item, dict):
        return None
    title = (item.get("name") or "").strip()
    if not title:
        return None
    album = as_dict(item.get("album"))
    track_id = item.get("id")
    return TrackRecord(
        title=title,
        isrc=as_dict(item.get("external_ids")).get("isrc"),
        artist_names=[
            a["name"] for a in dict_items(item.get("artists")) if a.get("name")
        ],
        album_name=album.get("name"),
        release_date=album.get("release_date"),
        artwork_url=_first_image_url(album.get("images")),
        duration_ms=item.get("duration_ms"),
        popularity_score=item.get("popularity"),
        provider_ids={"spotify": track_id} if track_id else {},
        sources=["spotify"],
    )


class SpotifyClient(BaseProviderClient):
    """HTTP client for Spotify catalog lookups (no user context)."""

    name = "spotify"
    HEALTH_CHECK_QUERY = "test"

    # Hey future me - the token cache lives on the INSTANCE, not in a module global. One client
    # per app (see infrastructure/lifecycle.py) means one token per process. The clock is injectable so tests
    # can fast-forward past expiry without sleeping.
    def __init__(
        self,
        settings: SpotifySettings,
        timeout: float = 12.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            timeout: Per-request timeout in seconds
            clock: Monotonic time source used for token expiry
        """
        super().__init__(timeout=timeout)
        self.settings = settings
        self._clock = clock
        self._access_token: str | None = None
        self._token_expires_at: float = 0.0
        self._token_lock = asyncio.Lock()

    def is_configured(self) -> bool:
        """Check client id and secret are present."""
        return self.settings.is_configured()

    @property
    def has_valid_token(self) -> bool:
        """True while a cached token exists and has not expired."""
        return self._access_token is not None and self._clock() < self._token_expires_at

    def invalidate_token(self) -> None:
        """Drop the cached token so the next call re-authenticates."""
        self._access_token = None
        self._token_expires_at = 0.0

    # Listen up: NO proactive refresh. A request that arrives right after expiry pays one extra
    # round trip to the token endpoint. The lock stops N concurrent requests from all fetching a
    # token at once after expiry - the first one fetches, the rest reuse it.
    async def get_access_token(self) -> str:
        """
        Get a client-credentials access token, reusing the cached one until it expires.

        Returns:
            Bearer access token

        Raises:
            ProviderNotConfiguredError: If client id/secret are missing
            ProviderAuthenticationError: If Spotify rejects the credentials
        """
        if not self.is_configured():
            raise ProviderNotConfiguredError(
                self.name,
                "SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET are not configured",
            )

        async with self._token_lock:
            if self.has_valid_token:
                return self._access_token  # type: ignore[return-value]

            credentials = f"{self.settings.client_id}:{self.settings.client_secret}"
            basic = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
            response = await self._send(
                "POST",
                self.settings.token_url,
                data={"grant_type": "client_credentials"},
                headers={
                    "Authorization": f"Basic {basic}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
            )

            # 400 invalid_client is how Spotify says "wrong secret"
            if response.status_code in (400, 401, 403):
                logger.error(
                    "Spotify token request rejected (%d)",
                    response.status_code,
                    extra={"provider": self.name},
                )
                raise ProviderAuthenticationError(
                    self.name,
                    "Spotify rejected the client credentials",
                    response.status_code,
                )
            self._raise_for_status(response)

            try:
                payload = as_dict(response.json())
            except ValueError as e:
                raise ProviderAuthenticationError(
                    self.name, "Spotify token endpoint returned a non-JSON body"
                ) from e

            token = payload.get("access_token")
            if not token:
                raise ProviderAuthenticationError(
                    self.name, "No access token received from Spotify"
                )

            expires_in = int(payload.get("expires_in") or 3600)
            self._access_token = token
            self._token_expires_at = self._clock() + expires_in
            logger.info("Spotify access token acquired (expires in %ds)", expires_in)
            return token

    async def _api_get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET an API path with the bearer token. Drops the token on 401."""
        token = await self.get_access_token()
        try:
            return await self._request(
                "GET",
                f"{self.settings.api_base_url}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except ProviderAuthenticationError as e:
            if e.status_code == 401:
                self.invalidate_token()
            raise

    def _search_params(self, query: str, kind: str, limit: int) -> dict[str, Any]:
        params: dict[str, Any] = {
            "q": query,
            "type": kind,
            "limit": max(1, min(limit, _MAX_SEARCH_LIMIT)),
        }
        if self.settings.market:
            params["market"] = self.settings.market
        return params

    async def search_artists(self, name: str, limit: int = 10) -> list[ArtistRecord]:
        """
        Search Spotify artists.

        Args:
            name: Artist name
            limit: Maximum results (1-50)

        Returns:
            Normalized artists in Spotify's relevance order
        """
        query = require_text(name, "Artist name")
        data = await self._api_get(
            "/search", self._search_params(query, "artist", limit)
        )
        page = self._expect_object(data, "artist search")
        items = paged_items(page, "artists")
        return [a for a in (artist_from_spotify(i) for i in items) if a is not None]

    async def search_tracks(self, query: str, limit: int = 10) -> list[TrackRecord]:
        """
        Search Spotify tracks.

        Args:
            query: Free-text query (supports Spotify's `artist:` filter)
            limit: Maximum results (1-50)

        Returns:
            Normalized tracks in Spotify's relevance order
        """
        cleaned = require_text(query, "Track query")
        data = await self._api_get(
            "/search", self._search_params(cleaned, "track", limit)
        )
        page = self._expect_object(data, "track search")
        items = paged_items(page, "tracks")
        return [t for t in (track_from_spotify(i) for i in items) if t is not None]

    async def get_track(self, track_id: str) -> TrackRecord | None:
        """
        Get a single track by Spotify ID.

        Raises:
            ProviderNotFoundError: If Spotify doesn't know the ID
        """
        cleaned = require_text(track_id, "Track ID")
        data = await self._api_get(f"/tracks/{cleaned}")
        return track_from_spotify(data)

    async def get_artist(self, artist_id: str) -> ArtistRecord | None:
        """
        Get a single artist by Spotify ID.

        Raises:
            ProviderNotFoundError: If Spotify doesn't know the ID
        """
        cleaned = require_text(artist_id, "Artist ID")
        data = await self._api_get(f"/artists/{cleaned}")
        return artist_from_spotify(data)

    # Yo, Spotify locked audio-features down for newer apps (403). That's "not available", not a
    # credentials problem, so it maps to None instead of bubbling as an auth error.
    async def get_audio_features(self, track_id: str) -> dict[str, Any] | None:
        """
        Get audio features (tempo, key, energy...) for a track.

        Returns:
            Raw feature dict, or None if Spotify has none for this track
        """
        cleaned = require_text(track_id, "Track ID")
        try:
            data = await self._api_get(f"/audio-features/{cleaned}")
        except ProviderNotFoundError:
            return None
        except ProviderAuthenticationError as e:
            if e.status_code == 403:
                logger.info("Spotify audio features not available for this app")
                return None
            raise
        return data if isinstance(data, dict) and data else None
