"""Custom exception handlers for FastAPI application.

This module registers global exception handlers that convert domain exceptions
and validation errors into `{"success": false, "error": ...}` JSON responses
with the right status code.

Hey future me - upstream response bodies (UpstreamError.body) are LOGGED here
and never sent to the client. Only our own messages go out.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tunescope.domain.exceptions import (
    AllProvidersUnavailableError,
    ConfigurationError,
    ProviderAuthenticationError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderNotFoundError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
    ProviderUnreachableError,
    RateLimitExceededError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


def error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Build the standard error body."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep only JSON-safe parts of pydantic errors (loc, msg, type)."""
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": str(error.get("msg", "")),
            "type": str(error.get("type", "")),
        }
        for error in errors
    ]


def _retry_headers(retry_after: int | None) -> dict[str, str] | None:
    return {"Retry-After": str(retry_after)} if retry_after else None


# Hey future me, Starlette resolves handlers through the exception's MRO, so the specific
# ProviderError subclasses win over the ProviderError fallback at the bottom. Register all of
# this BEFORE the app starts serving.
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, validation and unexpected exceptions.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle domain validation errors with 400 Bad Request."""
        logger.info(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle bad query parameter types with 400 Bad Request."""
        errors = _sanitize_validation_errors(list(exc.errors()))
        logger.info(
            "Request validation error at %s",
            request.url.path,
            extra={"path": request.url.path, "errors": errors},
        )
        fields = ", ".join(e["loc"][-1] for e in errors if e["loc"]) or "request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": f"Invalid parameter: {fields}",
                "details": errors,
            },
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle server misconfiguration with 500."""
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)

    @app.exception_handler(ProviderNotConfiguredError)
    async def provider_not_configured_handler(
        request: Request, exc: ProviderNotConfiguredError
    ) -> JSONResponse:
        """Handle missing provider credentials with 500."""
        logger.error(
            "%s not configured (path %s)",
            exc.provider,
            request.url.path,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)

    @app.exception_handler(ProviderAuthenticationError)
    async def provider_authentication_handler(
        request: Request, exc: ProviderAuthenticationError
    ) -> JSONResponse:
        """Handle rejected provider credentials with 500. Not the caller's fault."""
        logger.error(
            "%s rejected our credentials at %s: %s",
            exc.provider,
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"{exc.provider} authentication failed",
        )

    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_exceeded_handler(
        request: Request, exc: RateLimitExceededError
    ) -> JSONResponse:
        """Handle our own per-caller limit with 429 Too Many Requests."""
        logger.warning(
            "Rate limit exceeded at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            exc.message,
            headers=_retry_headers(exc.retry_after),
        )

    @app.exception_handler(ProviderRateLimitedError)
    async def provider_rate_limited_handler(
        request: Request, exc: ProviderRateLimitedError
    ) -> JSONResponse:
        """Handle upstream 429 with 429, forwarding Retry-After."""
        logger.warning(
            "%s rate limited us at %s",
            exc.provider,
            request.url.path,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        return error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            exc.message,
            headers=_retry_headers(exc.retry_after),
        )

    @app.exception_handler(ProviderTimeoutError)
    async def provider_timeout_handler(
        request: Request, exc: ProviderTimeoutError
    ) -> JSONResponse:
        """Handle provider timeouts with 504 Gateway Timeout."""
        logger.warning(
            "%s timed out at %s",
            exc.provider,
            request.url.path,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        return error_response(status.HTTP_504_GATEWAY_TIMEOUT, exc.message)

    @app.exception_handler(ProviderNotFoundError)
    async def provider_not_found_handler(
        request: Request, exc: ProviderNotFoundError
    ) -> JSONResponse:
        """Handle unknown identifiers with 404 Not Found."""
        logger.info(
            "%s: not found at %s",
            exc.provider,
            request.url.path,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        return error_response(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(
        request: Request, exc: UpstreamError
    ) -> JSONResponse:
        """Handle other upstream failures with 502. The raw body stays in the logs."""
        logger.error(
            "%s returned %s at %s",
            exc.provider,
            exc.status_code,
            request.url.path,
            extra={
                "path": request.url.path,
                "provider": exc.provider,
                "upstream_status": exc.status_code,
                "upstream_body": exc.body,
            },
        )
        return error_response(status.HTTP_502_BAD_GATEWAY, exc.message)

    @app.exception_handler(ProviderUnreachableError)
    async def provider_unreachable_handler(
        request: Request, exc: ProviderUnreachableError
    ) -> JSONResponse:
        """Handle connection failures with 502 Bad Gateway."""
        logger.error(
            "%s unreachable at %s",
            exc.provider,
            request.url.path,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        return error_response(status.HTTP_502_BAD_GATEWAY, exc.message)

    @app.exception_handler(ProviderError)
    async def provider_error_handler(
        request: Request, exc: ProviderError
    ) -> JSONResponse:
        """Fallback for any other provider failure: 502 Bad Gateway."""
        logger.error(
            "%s error at %s: %s",
            exc.provider,
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        return error_response(status.HTTP_502_BAD_GATEWAY, exc.message)

    @app.exception_handler(AllProvidersUnavailableError)
    async def all_providers_unavailable_handler(
        request: Request, exc: AllProvidersUnavailableError
    ) -> JSONResponse:
        """Handle total provider outage with 503 Service Unavailable."""
        logger.error(
            "All providers unavailable at %s",
            request.url.path,
            extra={"path": request.url.path, "providers": exc.providers},
        )
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Keep framework HTTP errors (404 route, 405, 503 not ready) in our shape."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "HTTP error %d at %s: %s",
            exc.status_code,
            request.url.path,
            exc.detail,
            extra={"path": request.url.path, "status_code": exc.status_code},
        )
        return error_response(
            exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
        )

    # Hey future me - this one runs inside Starlette's ServerErrorMiddleware, after the request
    # middleware already logged the traceback. We only make sure nothing internal leaks.
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all: 500 with a generic message."""
        logger.error(
            "Unhandled %s at %s",
            type(exc).__name__,
            request.url.path,
            extra={"path": request.url.path},
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE
        )
