"""Tests for health check endpoints."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient


class TestLiveness:
    def test_alive_without_touching_providers(
        self, client: TestClient, aggregator: AsyncMock
    ) -> None:
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"
        aggregator.provider_status.assert_not_awaited()


class TestProvidersHealth:
    def test_all_healthy(self, client: TestClient, aggregator: AsyncMock) -> None:
        aggregator.provider_status.return_value = {
            "spotontrack": "healthy",
            "spotify": "healthy",
            "muso": "healthy",
        }

        response = client.get("/health/providers")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["spotify"] == {
            "status": "healthy",
            "configured": True,
            "message": None,
        }

    def test_unconfigured_provider_degrades(
        self, client: TestClient, aggregator: AsyncMock
    ) -> None:
        aggregator.provider_status.return_value = {
            "spotontrack": "not_configured",
            "spotify": "healthy",
            "muso": "unhealthy",
        }

        response = client.get("/health/providers")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["spotontrack"]["configured"] is False
        assert body["checks"]["muso"]["status"] == "unhealthy"

    def test_nothing_healthy_is_503(self, client: TestClient, aggregator: AsyncMock) -> None:
        aggregator.provider_status.return_value = {
            "spotontrack": "not_configured",
            "spotify": "unhealthy",
            "muso": "not_configured",
        }

        response = client.get("/health/providers")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    def test_not_under_api_prefix(self, client: TestClient) -> None:
        assert client.get("/api/health/live").status_code == 404
