"""Base cache interface and in-memory implementation."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntry[V]:
    """Cache entry with value and metadata."""

    value: V
    created_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        """Check if cache entry is expired at `now`."""
        return now >= self.created_at + self.ttl_seconds


class BaseCache[K, V](ABC):
    """Base cache interface for all cache implementations."""

    @abstractmethod
    async def get(self, key: K) -> V | None:
        """Get value from cache.

        Returns:
            Cached value if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: K, value: V, ttl_seconds: float = 900) -> None:
        """Set value in cache."""
        pass

    @abstractmethod
    async def delete(self, key: K) -> bool:
        """Delete value from cache. Returns True if the key existed."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Clear all entries from cache."""
        pass


class InMemoryCache[K, V](BaseCache[K, V]):
    """Dict-backed TTL cache with a size cap.

    Process-local only. A restart empties it and workers don't share it.
    """

    # Listen up future me, ALWAYS "async with self._lock" before touching self._cache. When the
    # size cap is hit we drop the OLDEST inserted key (dicts keep insertion order), not the least
    # recently used one. Good enough for API response caching.
    def __init__(
        self,
        max_size: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize in-memory cache.

        Args:
            max_size: Entries kept before the oldest is evicted
            clock: Time source, injectable for tests
        """
        self._cache: dict[K, CacheEntry[V]] = {}
        self._lock = asyncio.Lock()
        self._max_size = max_size
        self._clock = clock

    # Yo, get() evicts expired entries on read, so it has a side effect. None means
    # "not found" OR "expired" - callers can't tell the difference and don't need to.
    async def get(self, key: K) -> V | None:
        """Get value from cache."""
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._cache[key]
                return None
            return entry.value

    async def set(self, key: K, value: V, ttl_seconds: float = 900) -> None:
        """Set value in cache, overwriting any existing entry."""
        async with self._lock:
            self._cache.pop(key, None)
            self._cache[key] = CacheEntry(
                value=value, created_at=self._clock(), ttl_seconds=ttl_seconds
            )
            while len(self._cache) > self._max_size:
                oldest = next(iter(self._cache))
                del self._cache[oldest]

    async def delete(self, key: K) -> bool:
        """Delete value from cache."""
        async with self._lock:
            return self._cache.pop(key, None) is not None

    async def clear(self) -> None:
        """Clear all entries from cache."""
        async with self._lock:
            self._cache.clear()

    async def cleanup_expired(self) -> int:
        """Remove expired entries from cache.

        Returns:
            Number of entries removed
        """
        async with self._lock:
            now = self._clock()
            expired_keys = [
                key for key, entry in self._cache.items() if entry.is_expired(now)
            ]
            for key in expired_keys:
                del self._cache[key]
            return len(expired_keys)

    # Not locked on purpose - stats are for the health endpoint, a slightly stale count is fine.
    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        now = self._clock()
        total_entries = len(self._cache)
        expired_entries = sum(
            1 for entry in self._cache.values() if entry.is_expired(now)
        )
        return {
            "total_entries": total_entries,
            "active_entries": total_entries - expired_entries,
            "expired_entries": expired_entries,
            "max_size": self._max_size,
        }
