# Hey future me - this router is for Docker/Kubernetes health checks!
#
# Endpoints:
# - /health/live       → Liveness check (process is up, no provider calls)
# - /health/providers  → One cheap search per configured provider
#
# Use cases:
# - Docker HEALTHCHECK: curl -f http://localhost:8000/health/live || exit 1
# - Monitoring dashboard: /health/providers
#
# Don't point a liveness check at /providers - a Spotify outage must not restart our pods.
"""Health check endpoints for Docker/Kubernetes health checks."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from tunescope.api.dependencies import get_aggregator
from tunescope.application.services import MusicAggregator
from tunescope.infrastructure.observability import (
    HealthStatus,
    health_from_provider_status,
    overall_status,
)

router = APIRouter(prefix="/health", tags=["Health"])


class LivenessStatus(BaseModel):
    """Simple liveness check response."""

    status: str = Field(description="alive or dead")
    timestamp: str = Field(description="ISO timestamp")


class ProvidersHealth(BaseModel):
    """Provider health response."""

    status: str = Field(description="Overall status: healthy, degraded, unhealthy")
    timestamp: str = Field(description="ISO timestamp of health check")
    checks: dict[str, Any] = Field(
        default_factory=dict, description="Per-provider checks"
    )


@router.get("/live", response_model=LivenessStatus)
async def liveness_check() -> LivenessStatus:
    """Liveness check for Kubernetes/Docker.

    Returns 200 if the application process is running. No dependency checks.
    """
    return LivenessStatus(
        status="alive",
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/providers", response_model=ProvidersHealth)
async def providers_health(
    aggregator: MusicAggregator = Depends(get_aggregator),
) -> JSONResponse:
    """Check every provider.

    Returns 200 when at least one provider is healthy (degraded is still
    serviceable), 503 when none is.
    """
    checks = health_from_provider_status(await aggregator.provider_status())
    overall = overall_status(checks)
    body = ProvidersHealth(
        status=overall.value,
        timestamp=datetime.now(UTC).isoformat(),
        checks={
            c.name: {
                "status": c.status.value,
                "configured": c.configured,
                "message": c.message,
            }
            for c in checks
        },
    )
    code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if overall == HealthStatus.UNHEALTHY
        else status.HTTP_200_OK
    )
    return JSONResponse(status_code=code, content=body.model_dump())
