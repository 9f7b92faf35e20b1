"""Domain value objects."""

from tunescope.domain.value_objects.provider_result import (
    PROVIDER_PRIORITY,
    Err,
    FailureKind,
    Ok,
    ProviderFailure,
    ProviderName,
    ProviderResult,
    failure_from_exception,
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
