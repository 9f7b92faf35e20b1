"""Tests for /api/search endpoints."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from tunescope.domain.dtos import ArtistRecord
from tunescope.domain.exceptions import ProviderNotConfiguredError

DRAKE = ArtistRecord(
    name="Drake",
    provider_artist_id="3TVXtAsR1Inumwj472S9r4",
    image_url="https://i.scdn.co/image/drake-640",
    genres=["canadian hip hop", "rap"],
    follower_count=92_000_000,
    popularity_score=96,
    external_url="https://open.spotify.com/artist/3TVXtAsR1Inumwj472S9r4",
    sources=["spotify"],
)


class TestSearchArtist:
    """Test GET /api/search/artist."""

    def test_found(self, client: TestClient, spotify_client: AsyncMock) -> None:
        spotify_client.search_artists.return_value = [DRAKE]

        response = client.get("/api/search/artist", params={"name": " Drake "})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["artist"] == {
            "name": "Drake",
            "followers": 92_000_000,
            "genres": ["canadian hip hop", "rap"],
            "image": "https://i.scdn.co/image/drake-640",
            "spotifyUrl": "https://open.spotify.com/artist/3TVXtAsR1Inumwj472S9r4",
        }
        spotify_client.search_artists.assert_awaited_once_with("Drake", limit=1)

    def test_not_found_keeps_body_shape(
        self, client: TestClient, spotify_client: AsyncMock
    ) -> None:
        spotify_client.search_artists.return_value = []

        response = client.get("/api/search/artist", params={"name": "zzzqqq"})

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "artist": None,
            "error": "Artist not found",
        }

    def test_blank_name_is_400(self, client: TestClient, spotify_client: AsyncMock) -> None:
        response = client.get("/api/search/artist", params={"name": "   "})

        assert response.status_code == 400
        assert response.json()["success"] is False
        spotify_client.search_artists.assert_not_awaited()

    def test_missing_name_is_400(self, client: TestClient) -> None:
        assert client.get("/api/search/artist").status_code == 400

    def test_unconfigured_spotify_is_500(
        self, client: TestClient, spotify_client: AsyncMock
    ) -> None:
        spotify_client.search_artists.side_effect = ProviderNotConfiguredError("spotify")

        response = client.get("/api/search/artist", params={"name": "Drake"})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "spotify credentials are not configured",
        }


class TestSearchMuso:
    """Test GET /api/search/muso (limiter allows 3 per window in these tests)."""

    def test_success_passes_raw_data_and_headers(
        self, client: TestClient, muso_client: AsyncMock
    ) -> None:
        muso_client.search.return_value = {"profiles": {"items": [], "total": 0}}

        response = client.get(
            "/api/search/muso", params={"q": "drake", "type": "track", "limit": 5}
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"profiles": {"items": [], "total": 0}},
        }
        assert response.headers["X-RateLimit-Limit"] == "3"
        assert response.headers["X-RateLimit-Remaining"] == "2"
        assert int(response.headers["X-RateLimit-Reset"]) == 1_060_000
        muso_client.search.assert_awaited_once_with(
            "drake", types=("track",), limit=5, offset=0
        )

    def test_default_type_is_profile(
        self, client: TestClient, muso_client: AsyncMock
    ) -> None:
        muso_client.search.return_value = {}

        client.get("/api/search/muso", params={"q": "drake"})

        assert muso_client.search.await_args.kwargs["types"] == ("profile",)

    def test_limit_exceeded_is_429_without_calling_muso(
        self, client: TestClient, muso_client: AsyncMock
    ) -> None:
        muso_client.search.return_value = {}
        for _ in range(3):
            assert client.get("/api/search/muso", params={"q": "drake"}).status_code == 200

        response = client.get("/api/search/muso", params={"q": "drake"})

        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "error": "Rate limit exceeded. Please try again later.",
        }
        assert response.headers["Retry-After"] == "60"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert muso_client.search.await_count == 3

    def test_window_rolls_over(self, client: TestClient, muso_client: AsyncMock, clock) -> None:
        muso_client.search.return_value = {}
        for _ in range(3):
            client.get("/api/search/muso", params={"q": "drake"})

        clock.advance(60)

        assert client.get("/api/search/muso", params={"q": "drake"}).status_code == 200

    def test_budget_is_per_forwarded_ip(
        self, client: TestClient, muso_client: AsyncMock, muso_limiter
    ) -> None:
        muso_client.search.return_value = {}
        for _ in range(3):
            client.get(
                "/api/search/muso",
                params={"q": "drake"},
                headers={"X-Forwarded-For": "203.0.113.7"},
            )

        other = client.get(
            "/api/search/muso",
            params={"q": "drake"},
            headers={"X-Forwarded-For": "198.51.100.2"},
        )

        assert other.status_code == 200
        assert len(muso_limiter.store) == 2

    def test_blank_query_does_not_spend_budget(
        self, client: TestClient, muso_client: AsyncMock, muso_limiter
    ) -> None:
        response = client.get("/api/search/muso", params={"q": "  "})

        assert response.status_code == 400
        assert len(muso_limiter.store) == 0
        muso_client.search.assert_not_awaited()

    def test_invalid_type_is_400(self, client: TestClient) -> None:
        response = client.get("/api/search/muso", params={"q": "drake", "type": "podcast"})

        assert response.status_code == 400
        assert "type" in response.json()["error"]

    def test_limit_out_of_range_is_400(self, client: TestClient) -> None:
        response = client.get("/api/search/muso", params={"q": "drake", "limit": 500})
        assert response.status_code == 400


class TestMusoRateLimitStatus:
    """Test GET /api/search/muso/rate-limit."""

    def test_reports_window_without_spending(
        self, client: TestClient, muso_client: AsyncMock
    ) -> None:
        muso_client.search.return_value = {}
        client.get("/api/search/muso", params={"q": "drake"})

        first = client.get("/api/search/muso/rate-limit").json()["rateLimit"]
        second = client.get("/api/search/muso/rate-limit").json()["rateLimit"]

        assert first == second
        assert first["limit"] == 3
        assert first["used"] == 1
        assert first["remaining"] == 2
        assert first["resetTime"] == 1_060_000
        assert first["resetIn"] == 60

    def test_fresh_caller_has_full_budget(self, client: TestClient) -> None:
        info = client.get("/api/search/muso/rate-limit").json()["rateLimit"]

        assert info["used"] == 0
        assert info["remaining"] == 3
