"""Provider health reporting."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheck:
    """Result of one provider health check."""

    name: str
    status: HealthStatus
    configured: bool = True
    message: str | None = None
    details: dict[str, Any] | None = None


def health_from_provider_status(status: dict[str, str]) -> list[HealthCheck]:
    """Turn MusicAggregator.provider_status() output into HealthChecks.

    An unconfigured provider is DEGRADED, not UNHEALTHY - the app works
    without it, just with fewer fields.
    """
    checks: list[HealthCheck] = []
    for name, state in status.items():
        match state:
            case "healthy":
                checks.append(HealthCheck(name=name, status=HealthStatus.HEALTHY))
            case "not_configured":
                checks.append(
                    HealthCheck(
                        name=name,
                        status=HealthStatus.DEGRADED,
                        configured=False,
                        message="Credentials not configured",
                    )
                )
            case _:
                checks.append(
                    HealthCheck(
                        name=name,
                        status=HealthStatus.UNHEALTHY,
                        message="Health check query failed",
                    )
                )
    return checks


# Hey future me - overall status rules: no provider healthy → UNHEALTHY, all configured providers
# healthy and all configured → HEALTHY, anything in between → DEGRADED.
def overall_status(checks: list[HealthCheck]) -> HealthStatus:
    """Aggregate provider checks into one status."""
    if not any(c.status == HealthStatus.HEALTHY for c in checks):
        overall = HealthStatus.UNHEALTHY
    elif all(c.status == HealthStatus.HEALTHY for c in checks):
        overall = HealthStatus.HEALTHY
    else:
        overall = HealthStatus.DEGRADED

    if overall != HealthStatus.HEALTHY:
        logger.warning(
            "Provider health %s",
            overall.value,
            extra={"providers": {c.name: c.status.value for c in checks}},
        )
    return overall
