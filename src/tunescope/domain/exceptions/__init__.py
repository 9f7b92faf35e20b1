"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing
    # str(exception). Don't raise this directly - use a specific subclass so handlers can map it.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed (blank names, unknown timeframe, etc.).

    HTTP Status: 400

    Example:
        raise ValidationError("Artist name is required")
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    HTTP Status: 500 (server misconfiguration, not the caller's fault)

    Example:
        raise ConfigurationError("No music data providers are configured")
    """

    pass


class RateLimitExceededError(DomainException):
    """This service's own per-caller limit was hit (not an upstream 429).

    HTTP Status: 429
    """

    def __init__(
        self, message: str, retry_after: int | None = None, remaining: int = 0
    ) -> None:
        super().__init__(message)
        self.retry_after = retry_after
        self.remaining = remaining


class AllProvidersUnavailableError(DomainException):
    """Every attempted provider was unreachable or timed out.

    Only raised for infrastructure failures. "Nothing found" is NOT this error!

    HTTP Status: 503
    """

    def __init__(self, providers: list[str]) -> None:
        super().__init__(
            "All music data providers are unavailable: " + ", ".join(providers)
        )
        self.providers = providers


# =============================================================================
# Provider failures
# Hey future me - provider clients raise ONLY these (never raw httpx errors).
# The aggregator turns them into ProviderResult Err values; single-provider
# routes let them bubble to the exception handlers.
# =============================================================================


class ProviderError(DomainException):
    """Base class for failures talking to an external music-data provider."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class ProviderNotConfiguredError(ProviderError):
    """Provider credentials are missing. HTTP Status: 500"""

    def __init__(self, provider: str, message: str | None = None) -> None:
        super().__init__(
            provider, message or f"{provider} credentials are not configured"
        )


class ProviderAuthenticationError(ProviderError):
    """Upstream rejected our credentials (401/403). HTTP Status: 500"""

    pass


class ProviderRateLimitedError(ProviderError):
    """Upstream answered 429. HTTP Status: 429"""

    def __init__(
        self,
        provider: str,
        message: str,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(provider, message, status_code=429)
        self.retry_after = retry_after


class ProviderTimeoutError(ProviderError):
    """Request exceeded its timeout or upstream answered 504. HTTP Status: 504"""

    pass


class ProviderUnreachableError(ProviderError):
    """Connection could not be established. HTTP Status: 502"""

    pass


class ProviderNotFoundError(ProviderError):
    """Upstream has no record for the requested identifier. HTTP Status: 404"""

    pass


class UpstreamError(ProviderError):
    """Any other non-2xx upstream answer. HTTP Status: 502

    The raw body is kept for logs only - it must never reach API clients.
    """

    def __init__(
        self,
        provider: str,
        status_code: int,
        body: str = "",
        message: str | None = None,
    ) -> None:
        super().__init__(
            provider,
            message or f"{provider} API error: {status_code}",
            status_code=status_code,
        )
        self.body = body


__all__ = [
    "AllProvidersUnavailableError",
    "ConfigurationError",
    "DomainException",
    "ProviderAuthenticationError",
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderNotFoundError",
    "ProviderRateLimitedError",
    "ProviderTimeoutError",
    "ProviderUnreachableError",
    "RateLimitExceededError",
    "UpstreamError",
    "ValidationError",
]
