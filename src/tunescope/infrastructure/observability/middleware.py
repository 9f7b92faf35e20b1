"""Middleware for observability: request/response logging."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from tunescope.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


# Hey future me, this runs around EVERY request. It sets the correlation id first so every log
# line the route and the provider clients write carries it, then echoes it back in the response
# header. Health checks are logged at DEBUG, otherwise k8s fills the logs with /health/live.
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with status and duration, propagate X-Correlation-ID."""

    def __init__(self, app: ASGIApp, log_request_body: bool = False) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application
            log_request_body: Log JSON bodies of POST requests (debugging only)
        """
        super().__init__(app)
        self.log_request_body = log_request_body

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        method = request.method
        path = request.url.path
        level = logging.DEBUG if path.startswith("/health") else logging.INFO

        extra: dict[str, object] = {
            "method": method,
            "path": path,
            "query_params": str(request.query_params),
        }
        if self.log_request_body and method in ("POST", "PUT", "PATCH"):
            body = await request.body()
            extra["body"] = body[:2000].decode("utf-8", errors="replace")
        logger.log(level, "→ %s %s", method, path, extra=extra)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed: %s %s",
                method,
                path,
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration_ms = int((time.perf_counter() - start) * 1000)
        marker = "✓" if response.status_code < 400 else "✗"
        logger.log(
            level,
            "%s %s %s → %d (%dms)",
            marker,
            method,
            path,
            response.status_code,
            duration_ms,
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers[CORRELATION_HEADER] = get_correlation_id() or correlation_id
        return response
