"""Rate Limit Cleanup Worker - drops expired fixed-window counters.

Hey future me - the limiter only resets a window lazily, when the SAME caller comes back.
A caller that never returns leaves its window in the store forever, so on a busy public
instance the store grows by one entry per distinct IP. This worker sweeps them out on a
timer. It never touches live windows, so budgets are unaffected.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from tunescope.infrastructure.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_INTERVAL_SECONDS = 300.0


class RateLimitCleanupWorker:
    """Periodically calls cleanup() on every registered limiter.

    Runs until stop() is called. A failed sweep is logged and retried on the
    next tick, it never ends the loop.
    """

    def __init__(
        self,
        limiters: list[FixedWindowRateLimiter],
        interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize worker.

        Args:
            limiters: Limiters to sweep
            interval_seconds: Pause between sweeps
            sleep: Awaitable sleep, swapped out in tests
        """
        self._limiters = limiters
        self._interval = interval_seconds
        self._sleep = sleep
        self._running = False
        self.sweeps = 0
        self.removed_total = 0

    @property
    def is_running(self) -> bool:
        return self._running

    async def run_once(self) -> int:
        """Sweep every limiter once. Returns how many windows were removed."""
        removed = 0
        for limiter in self._limiters:
            removed += await limiter.cleanup()
        self.sweeps += 1
        self.removed_total += removed
        if removed:
            logger.info("Rate limit cleanup removed %d expired windows", removed)
        return removed

    async def start(self) -> None:
        """Run sweeps until stop() is called."""
        self._running = True
        logger.info(
            "RateLimitCleanupWorker started (interval=%.0fs, limiters=%d)",
            self._interval,
            len(self._limiters),
        )

        while self._running:
            await self._sleep(self._interval)
            if not self._running:
                break
            try:
                await self.run_once()
            except Exception as e:
                logger.exception("RateLimitCleanupWorker error: %s", e)

        logger.info("RateLimitCleanupWorker stopped")

    def stop(self) -> None:
        """Signal the worker to stop after the current tick."""
        self._running = False
