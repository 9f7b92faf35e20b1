"""Muso.AI response cache.

Hey future me - Muso.AI is the provider with the nasty rate limits, so every
client call goes through here first. A hit never touches the network. It still
costs the caller one rate-limiter slot though, because the limiter runs before
the client is called.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from enum import IntEnum
from typing import Any

from tunescope.infrastructure.cache.base_cache import InMemoryCache

logger = logging.getLogger(__name__)


class MusoCacheTTL(IntEnum):
    """TTL tiers in seconds."""

    SHORT = 5 * 60
    MEDIUM = 15 * 60
    LONG = 60 * 60
    VERY_LONG = 24 * 60 * 60


class MusoCache:
    """Cache for Muso.AI API responses.

    Keys are "muso:<operation>:<params as sorted JSON>" so the same call with the
    same arguments always lands on the same entry regardless of kwarg order.
    """

    def __init__(self, cache: InMemoryCache[str, Any] | None = None) -> None:
        """Initialize Muso cache."""
        self._cache: InMemoryCache[str, Any] = cache or InMemoryCache()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(operation: str, params: dict[str, Any]) -> str:
        """Make cache key for an operation call."""
        encoded = json.dumps(params, sort_keys=True, default=str, separators=(",", ":"))
        return f"muso:{operation}:{encoded}"

    async def cached(
        self,
        operation: str,
        params: dict[str, Any],
        ttl: MusoCacheTTL,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the cached value for (operation, params) or fetch and store it.

        Failures from `fetch` propagate and are NOT cached.

        Args:
            operation: Client operation name
            params: Call arguments that make the result unique
            ttl: Lifetime tier for the stored value
            fetch: Zero-arg coroutine function doing the real request

        Returns:
            Cached or freshly fetched value
        """
        key = self.make_key(operation, params)
        value = await self._cache.get(key)
        if value is not None:
            self.hits += 1
            logger.debug("Muso cache hit: %s", operation)
            return value

        self.misses += 1
        value = await fetch()
        if value is not None:
            await self._cache.set(key, value, int(ttl))
        return value

    async def clear(self) -> None:
        """Drop every cached response."""
        await self._cache.clear()
        self.hits = 0
        self.misses = 0

    def get_stats(self) -> dict[str, Any]:
        """Cache statistics including hit/miss counters."""
        return {**self._cache.get_stats(), "hits": self.hits, "misses": self.misses}
