"""Tests for provider health aggregation."""

from tunescope.infrastructure.observability.health import (
    HealthCheck,
    HealthStatus,
    health_from_provider_status,
    overall_status,
)


class TestHealthFromProviderStatus:
    def test_maps_each_state(self):
        checks = health_from_provider_status(
            {"spotontrack": "healthy", "spotify": "unhealthy", "muso": "not_configured"}
        )
        by_name = {c.name: c for c in checks}

        assert by_name["spotontrack"].status == HealthStatus.HEALTHY
        assert by_name["spotify"].status == HealthStatus.UNHEALTHY
        assert by_name["muso"].status == HealthStatus.DEGRADED
        assert by_name["muso"].configured is False


class TestOverallStatus:
    """Test the overall status rules."""

    def test_all_healthy(self):
        checks = [HealthCheck("a", HealthStatus.HEALTHY), HealthCheck("b", HealthStatus.HEALTHY)]
        assert overall_status(checks) == HealthStatus.HEALTHY

    def test_one_unconfigured_is_degraded(self):
        checks = [HealthCheck("a", HealthStatus.HEALTHY), HealthCheck("b", HealthStatus.DEGRADED)]
        assert overall_status(checks) == HealthStatus.DEGRADED

    def test_none_healthy_is_unhealthy(self):
        checks = [
            HealthCheck("a", HealthStatus.UNHEALTHY),
            HealthCheck("b", HealthStatus.DEGRADED),
        ]
        assert overall_status(checks) == HealthStatus.UNHEALTHY

    def test_empty_is_unhealthy(self):
        assert overall_status([]) == HealthStatus.UNHEALTHY
