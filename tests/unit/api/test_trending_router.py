"""Tests for /api/trending endpoints."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from tunescope.domain.dtos import ArtistRecord, TrendingResult
from tunescope.domain.exceptions import ValidationError


@pytest.fixture
def trending(aggregator: AsyncMock) -> AsyncMock:
    aggregator.get_trending_artists.return_value = TrendingResult(
        timeframe="weekly",
        artists=[
            ArtistRecord(name="Drake", follower_count=92_000_000, popularity_score=96),
            ArtistRecord(name="SZA", follower_count=20_000_000, popularity_score=90),
        ],
        per_provider_availability={"spotontrack": "ok", "spotify": "ok", "muso": "empty"},
    )
    return aggregator.get_trending_artists


class TestTrendingArtists:
    def test_defaults(self, client: TestClient, trending: AsyncMock) -> None:
        response = client.get("/api/trending/artists")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["timeframe"] == "weekly"
        assert [a["name"] for a in data["artists"]] == ["Drake", "SZA"]
        assert data["metrics"]["perProviderAvailability"]["muso"] == "empty"
        trending.assert_awaited_once_with(
            timeframe="weekly",
            limit=20,
            seed="popular",
            caller_key="muso_search_testclient",
        )

    def test_genre_becomes_seed(self, client: TestClient, trending: AsyncMock) -> None:
        client.get(
            "/api/trending/artists",
            params={"timeframe": "daily", "limit": 5, "genre": " afrobeats "},
        )

        kwargs = trending.await_args.kwargs
        assert kwargs["timeframe"] == "daily"
        assert kwargs["limit"] == 5
        assert kwargs["seed"] == "afrobeats"

    def test_non_numeric_limit_is_400(self, client: TestClient, trending: AsyncMock) -> None:
        response = client.get("/api/trending/artists", params={"limit": "abc"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid parameter: limit"
        trending.assert_not_awaited()

    def test_invalid_timeframe_is_400(self, client: TestClient, trending: AsyncMock) -> None:
        trending.side_effect = ValidationError(
            "timeframe must be one of: daily, weekly, monthly"
        )

        response = client.get("/api/trending/artists", params={"timeframe": "yearly"})

        assert response.status_code == 400
        assert response.json()["success"] is False
