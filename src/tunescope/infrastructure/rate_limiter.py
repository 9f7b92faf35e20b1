"""
Per-caller fixed-window rate limiter.

Hey future me - this gates OUR outbound calls to Muso.AI per client IP. It is
NOT the upstream's own 429 handling (that's ProviderRateLimitedError).

ALGORITHM: fixed window
- First call for a key (or first call after its window ended) opens a new
  window with count=1.
- Inside a window: if count already hit max_requests → deny, remaining=0.
  Otherwise count += 1 and allow.
- Denied calls do NOT bump the count, so count never exceeds max_requests.

The store is injected, so a shared backend can replace InMemoryRateLimitStore
when we run more than one worker. The limiter itself never touches a global.

USAGE:
    limiter = FixedWindowRateLimiter(RateLimiterConfig.for_muso())
    decision = await limiter.try_acquire(muso_rate_limit_key(client_ip))
    if not decision.allowed:
        ...  # 429 with decision.retry_after_seconds
"""

import asyncio
import logging
import math
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MUSO_KEY_PREFIX = "muso_search_"


@dataclass(frozen=True)
class RateLimiterConfig:
    """Threshold and window length for one limiter."""

    max_requests: int = 100
    window_seconds: float = 60.0

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

    @classmethod
    def for_muso(
        cls, max_requests: int = 30, window_seconds: float = 60.0
    ) -> "RateLimiterConfig":
        """Muso.AI preset: 30 requests per minute per caller."""
        return cls(max_requests=max_requests, window_seconds=window_seconds)

    @classmethod
    def general(
        cls, max_requests: int = 100, window_seconds: float = 60.0
    ) -> "RateLimiterConfig":
        """General API preset: 100 requests per minute per caller."""
        return cls(max_requests=max_requests, window_seconds=window_seconds)


@dataclass
class RateLimitState:
    """One caller's current window."""

    caller_key: str
    window_start: float
    count: int


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of try_acquire()."""

    allowed: bool
    remaining: int
    reset_time_ms: int
    retry_after_seconds: int


@dataclass(frozen=True)
class RateLimitStatus:
    """Read-only snapshot of a caller's window."""

    limit: int
    count: int
    remaining: int
    reset_time_ms: int
    reset_in_seconds: int


class RateLimitStore(ABC):
    """Storage for per-caller windows. Swap for a shared backend when scaling out."""

    @abstractmethod
    async def get(self, key: str) -> RateLimitState | None:
        pass

    @abstractmethod
    async def put(self, state: RateLimitState) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def items(self) -> list[RateLimitState]:
        pass


class InMemoryRateLimitStore(RateLimitStore):
    """Dict-backed store. Process-local, lost on restart."""

    def __init__(self) -> None:
        self._states: dict[str, RateLimitState] = {}

    async def get(self, key: str) -> RateLimitState | None:
        return self._states.get(key)

    async def put(self, state: RateLimitState) -> None:
        self._states[state.caller_key] = state

    async def delete(self, key: str) -> bool:
        return self._states.pop(key, None) is not None

    async def items(self) -> list[RateLimitState]:
        return list(self._states.values())

    def __len__(self) -> int:
        return len(self._states)


class FixedWindowRateLimiter:
    """Fixed-window counter per caller key.

    Attributes:
        config: Threshold and window length
        store: Where windows live
    """

    # Listen up: the lock covers the whole read-compare-write in try_acquire. Without it two
    # concurrent requests can both read count=29 and both get allowed → 31 calls in a window.
    # The clock returns SECONDS; reset times are exposed in epoch MILLISECONDS because that's
    # what API clients get in the X-RateLimit-Reset header.
    def __init__(
        self,
        config: RateLimiterConfig | None = None,
        store: RateLimitStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize rate limiter.

        Args:
            config: Limits, defaults to the general preset
            store: Window storage, defaults to InMemoryRateLimitStore
            clock: Wall-clock time source in seconds, injectable for tests
        """
        self.config = config or RateLimiterConfig.general()
        self.store = store or InMemoryRateLimitStore()
        self._clock = clock
        self._lock = asyncio.Lock()

    def _is_expired(self, state: RateLimitState, now: float) -> bool:
        return now >= state.window_start + self.config.window_seconds

    def _reset_at(self, state: RateLimitState) -> float:
        return state.window_start + self.config.window_seconds

    async def try_acquire(self, key: str) -> RateLimitDecision:
        """
        Count one call for `key` if the window has room.

        Returns:
            RateLimitDecision with allowed flag, remaining calls and reset time
        """
        async with self._lock:
            now = self._clock()
            state = await self.store.get(key)

            if state is None or self._is_expired(state, now):
                state = RateLimitState(caller_key=key, window_start=now, count=1)
                await self.store.put(state)
                allowed = True
            elif state.count >= self.config.max_requests:
                allowed = False
            else:
                state.count += 1
                await self.store.put(state)
                allowed = True

            reset_at = self._reset_at(state)
            remaining = (
                max(0, self.config.max_requests - state.count) if allowed else 0
            )

        if not allowed:
            logger.info(
                "Rate limit exceeded for %s (%d/%d)",
                key,
                state.count,
                self.config.max_requests,
            )
        return RateLimitDecision(
            allowed=allowed,
            remaining=remaining,
            reset_time_ms=int(reset_at * 1000),
            retry_after_seconds=max(1, math.ceil(reset_at - now)),
        )

    async def status(self, key: str) -> RateLimitStatus:
        """
        Read a caller's window without counting a call.

        An unknown or expired window reports count=0 and a full allowance.
        """
        now = self._clock()
        state = await self.store.get(key)
        if state is None or self._is_expired(state, now):
            count = 0
            reset_at = now + self.config.window_seconds
        else:
            count = state.count
            reset_at = self._reset_at(state)

        return RateLimitStatus(
            limit=self.config.max_requests,
            count=count,
            remaining=max(0, self.config.max_requests - count),
            reset_time_ms=int(reset_at * 1000),
            reset_in_seconds=max(0, math.ceil(reset_at - now)),
        )

    async def reset(self, key: str) -> bool:
        """Forget a caller's window. Returns True if one existed."""
        async with self._lock:
            return await self.store.delete(key)

    async def cleanup(self) -> int:
        """Drop every expired window. Returns how many were removed."""
        async with self._lock:
            now = self._clock()
            expired = [s.caller_key for s in await self.store.items() if self._is_expired(s, now)]
            for key in expired:
                await self.store.delete(key)
        if expired:
            logger.debug("Rate limiter cleanup removed %d windows", len(expired))
        return len(expired)


def muso_rate_limit_key(client_ip: str) -> str:
    """Caller key for Muso.AI searches."""
    return f"{MUSO_KEY_PREFIX}{client_ip}"


__all__ = [
    "FixedWindowRateLimiter",
    "InMemoryRateLimitStore",
    "MUSO_KEY_PREFIX",
    "RateLimitDecision",
    "RateLimitState",
    "RateLimitStatus",
    "RateLimitStore",
    "RateLimiterConfig",
    "muso_rate_limit_key",
]
