"""Shared HTTP plumbing for provider clients.

Hey future me - this is the ONE place where httpx exceptions and upstream status
codes get translated into our ProviderError taxonomy. Concrete clients call
_request() and only ever see parsed JSON or a typed domain exception. If you find
yourself catching httpx.HTTPStatusError in a client, you're doing it wrong - add
the case here instead.

Status mapping:
- 401/403 → ProviderAuthenticationError
- 404     → ProviderNotFoundError
- 429     → ProviderRateLimitedError (Retry-After parsed if present)
- 504     → ProviderTimeoutError
- other non-2xx → UpstreamError(status, body)
- httpx timeout → ProviderTimeoutError, other transport errors → ProviderUnreachableError
- 2xx with a body of the wrong shape → UpstreamError (see _expect_object)
"""

import logging
from typing import Any

import httpx

from tunescope.domain.exceptions import (
    ProviderAuthenticationError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderNotFoundError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
    ProviderUnreachableError,
    UpstreamError,
    ValidationError,
)
from tunescope.domain.ports import IMusicDataProvider

logger = logging.getLogger(__name__)

# Upstream error bodies can be whole HTML pages. Keep logs readable.
_MAX_LOGGED_BODY = 500


def parse_retry_after(value: str | None) -> int | None:
    """Parse a Retry-After header given in seconds. HTTP-date values are ignored."""
    if not value:
        return None
    try:
        return max(0, int(value.strip()))
    except ValueError:
        return None


def require_text(value: str | None, field_name: str) -> str:
    """Return the trimmed value or raise ValidationError for blank input."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field_name} must not be empty")
    return cleaned


def as_dict(value: Any) -> dict[str, Any]:
    """Return value when it is a JSON object, else an empty dict."""
    return value if isinstance(value, dict) else {}


# Yo, Spotify search pages really do contain `null` entries now and then. Every mapper
# iterates through this so a junk item is skipped instead of blowing up the whole page.
def dict_items(value: Any) -> list[dict[str, Any]]:
    """JSON objects of a list, skipping nulls and other junk entries."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def paged_items(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """Items of a `{key: {"items": [...]}}` search page."""
    return dict_items(as_dict(data.get(key)).get("items"))


class BaseProviderClient(IMusicDataProvider):
    """Base class holding the lazily created AsyncClient and error mapping."""

    name = "provider"
    # Fixed query used by health_check(); subclasses override.
    HEALTH_CHECK_QUERY = "test"

    # Hey future me, we DON'T create the httpx client in __init__ - AsyncClient wants a running
    # loop and the clients get built at import/lifespan time. _get_client() creates it on demand.
    def __init__(self, timeout: float = 12.0) -> None:
        """
        Initialize provider client.

        Args:
            timeout: Per-request timeout in seconds
        """
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _ensure_configured(self) -> None:
        """Raise before building a request when credentials are missing."""
        if not self.is_configured():
            raise ProviderNotConfiguredError(self.name)

    def _auth_headers(self) -> dict[str, str]:
        """Headers carrying this provider's credentials."""
        return {}

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | list[tuple[str, Any]] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request, mapping transport failures. Status codes are NOT checked."""
        client = await self._get_client()
        request_headers = {"Accept": "application/json", **self._auth_headers()}
        if headers:
            request_headers.update(headers)

        logger.debug("%s %s %s", self.name, method, url)
        try:
            return await client.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                headers=request_headers,
            )
        except httpx.TimeoutException as e:
            logger.warning("%s request timed out: %s %s", self.name, method, url)
            raise ProviderTimeoutError(
                self.name, f"{self.name} request timed out after {self.timeout:.0f}s"
            ) from e
        except httpx.TransportError as e:
            logger.warning(
                "%s unreachable: %s",
                self.name,
                e,
                extra={"provider": self.name, "url": url},
            )
            raise ProviderUnreachableError(
                self.name, f"{self.name} is unreachable: {type(e).__name__}"
            ) from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Translate a non-2xx response into the matching ProviderError."""
        status = response.status_code
        if 200 <= status < 300:
            return

        body = response.text[:_MAX_LOGGED_BODY]
        logger.warning(
            "%s API error %d",
            self.name,
            status,
            extra={"provider": self.name, "status_code": status, "body": body},
        )

        if status in (401, 403):
            raise ProviderAuthenticationError(
                self.name, f"{self.name} rejected our credentials ({status})", status
            )
        if status == 404:
            raise ProviderNotFoundError(
                self.name, f"{self.name} resource not found", status
            )
        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            raise ProviderRateLimitedError(
                self.name,
                f"{self.name} rate limit exceeded"
                + (f" - retry after {retry_after}s" if retry_after else ""),
                retry_after=retry_after,
            )
        if status == 504:
            raise ProviderTimeoutError(
                self.name, f"{self.name} gateway timeout", status
            )
        raise UpstreamError(self.name, status, body)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | list[tuple[str, Any]] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ProviderError: For every failure mode (see module docstring)
        """
        response = await self._send(
            method, url, params=params, json=json, headers=headers
        )
        self._raise_for_status(response)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                self.name,
                response.status_code,
                response.text[:_MAX_LOGGED_BODY],
                message=f"{self.name} returned a non-JSON body",
            ) from e

    def _expect_object(self, data: Any, what: str) -> dict[str, Any]:
        """Return a JSON object body or raise UpstreamError for any other shape."""
        if isinstance(data, dict):
            return data
        logger.warning(
            "%s returned an unexpected %s body (%s)",
            self.name,
            what,
            type(data).__name__,
            extra={"provider": self.name},
        )
        raise UpstreamError(
            self.name,
            200,
            repr(data)[:_MAX_LOGGED_BODY],
            message=f"{self.name} returned an unexpected {what} response",
        )

    async def health_check(self) -> bool:
        """Run the fixed health query. Returns False on any failure, never raises."""
        if not self.is_configured():
            return False
        try:
            await self.search_tracks(self.HEALTH_CHECK_QUERY, limit=1)
        except ProviderError as e:
            logger.warning(
                "%s health check failed: %s",
                self.name,
                e.message,
                extra={"provider": self.name},
            )
            return False
        except Exception:
            logger.exception("%s health check error", self.name)
            return False
        return True
