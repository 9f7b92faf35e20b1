"""Tagged result type for provider calls.

Hey future me - this is what the aggregator works with instead of try/except soup!
Every provider branch settles into either Ok(value) or Err(failure). The merge
code then uses `match` to handle both arms explicitly, so a failed provider can
never be mistaken for "returned nothing".
"""

from dataclasses import dataclass
from enum import Enum

from tunescope.domain.exceptions import (
    ProviderAuthenticationError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderNotFoundError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
    ProviderUnreachableError,
    ValidationError,
)


class ProviderName(str, Enum):
    """Supported providers, declared in merge priority order."""

    SPOTONTRACK = "spotontrack"
    SPOTIFY = "spotify"
    MUSO = "muso"


# Highest priority first. Merge code iterates this, never completion order.
PROVIDER_PRIORITY: tuple[ProviderName, ...] = (
    ProviderName.SPOTONTRACK,
    ProviderName.SPOTIFY,
    ProviderName.MUSO,
)


class FailureKind(str, Enum):
    """Why a provider contributed nothing."""

    NOT_CONFIGURED = "not_configured"
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"

    @property
    def is_infrastructure(self) -> bool:
        """True for failures caused by the network rather than the provider's answer."""
        return self in (FailureKind.TIMEOUT, FailureKind.UNREACHABLE)


@dataclass(frozen=True)
class ProviderFailure:
    """Normalized description of a failed provider call."""

    provider: str
    kind: FailureKind
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class Ok[T]:
    """Successful provider branch."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed provider branch."""

    failure: ProviderFailure


type ProviderResult[T] = Ok[T] | Err


def failure_from_exception(provider: str, exc: BaseException) -> ProviderFailure:
    """Map a provider exception onto the shared failure taxonomy.

    Unknown exceptions are reported as UPSTREAM so one misbehaving client can't
    take down the whole aggregation.
    """
    match exc:
        case ProviderNotConfiguredError():
            kind = FailureKind.NOT_CONFIGURED
        case ProviderAuthenticationError():
            kind = FailureKind.UNAUTHORIZED
        case ProviderRateLimitedError():
            kind = FailureKind.RATE_LIMITED
        case ProviderTimeoutError() | TimeoutError():
            kind = FailureKind.TIMEOUT
        case ProviderUnreachableError():
            kind = FailureKind.UNREACHABLE
        case ProviderNotFoundError():
            kind = FailureKind.NOT_FOUND
        case ValidationError():
            kind = FailureKind.INVALID_INPUT
        case _:
            kind = FailureKind.UPSTREAM

    status_code = exc.status_code if isinstance(exc, ProviderError) else None
    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    return ProviderFailure(
        provider=provider, kind=kind, message=message, status_code=status_code
    )


__all__ = [
    "Err",
    "FailureKind",
    "Ok",
    "PROVIDER_PRIORITY",
    "ProviderFailure",
    "ProviderName",
    "ProviderResult",
    "failure_from_exception",
]
