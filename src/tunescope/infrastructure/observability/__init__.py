"""Observability infrastructure for structured logging and health reporting."""

from tunescope.infrastructure.observability.health import (
    HealthCheck,
    HealthStatus,
    health_from_provider_status,
    overall_status,
)
from tunescope.infrastructure.observability.logging import (
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)
from tunescope.infrastructure.observability.middleware import (
    RequestLoggingMiddleware,
)

__all__ = [
    "HealthCheck",
    "HealthStatus",
    "RequestLoggingMiddleware",
    "configure_logging",
    "get_correlation_id",
    "health_from_provider_status",
    "overall_status",
    "set_correlation_id",
]
