"""Tests for RateLimitCleanupWorker."""

import asyncio
from contextlib import suppress
from unittest.mock import AsyncMock

import pytest

from tunescope.application.workers import RateLimitCleanupWorker
from tunescope.infrastructure.rate_limiter import (
    FixedWindowRateLimiter,
    RateLimiterConfig,
)


@pytest.fixture
def limiter(clock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(RateLimiterConfig.for_muso(), clock=clock)


class TestRunOnce:
    async def test_expired_windows_are_removed(self, limiter, clock) -> None:
        for ip in ("1.1.1.1", "2.2.2.2", "3.3.3.3"):
            await limiter.try_acquire(f"muso_search_{ip}")
        clock.advance(61)
        await limiter.try_acquire("muso_search_4.4.4.4")
        worker = RateLimitCleanupWorker([limiter])

        removed = await worker.run_once()

        assert removed == 3
        assert len(limiter.store) == 1
        assert worker.sweeps == 1
        assert worker.removed_total == 3

    async def test_live_windows_keep_their_count(self, limiter, clock) -> None:
        key = "muso_search_1.1.1.1"
        for _ in range(5):
            await limiter.try_acquire(key)
        clock.advance(30)

        assert await RateLimitCleanupWorker([limiter]).run_once() == 0
        assert (await limiter.status(key)).count == 5

    async def test_sums_over_all_limiters(self, clock) -> None:
        first = FixedWindowRateLimiter(RateLimiterConfig.for_muso(), clock=clock)
        second = FixedWindowRateLimiter(
            RateLimiterConfig(max_requests=5, window_seconds=10), clock=clock
        )
        await first.try_acquire("a")
        await second.try_acquire("b")
        await second.try_acquire("c")
        clock.advance(61)

        assert await RateLimitCleanupWorker([first, second]).run_once() == 3


class TestWorkerLoop:
    """Test start()/stop() with a fake sleep that drives the fake clock."""

    async def test_sweeps_every_interval_until_stopped(self, limiter, clock) -> None:
        sleeps: list[float] = []
        await limiter.try_acquire("muso_search_1.1.1.1")

        async def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)
            clock.advance(seconds)
            if len(sleeps) == 3:
                worker.stop()
            await asyncio.sleep(0)

        worker = RateLimitCleanupWorker([limiter], interval_seconds=90, sleep=fake_sleep)

        await worker.start()

        assert sleeps == [90, 90, 90]
        assert worker.sweeps == 2
        assert worker.removed_total == 1
        assert len(limiter.store) == 0
        assert worker.is_running is False

    async def test_failed_sweep_does_not_end_loop(self) -> None:
        broken = AsyncMock(spec=FixedWindowRateLimiter)
        broken.cleanup.side_effect = [RuntimeError("store down"), 2]
        calls = 0

        async def fake_sleep(seconds: float) -> None:
            nonlocal calls
            calls += 1
            if calls == 3:
                worker.stop()

        worker = RateLimitCleanupWorker([broken], sleep=fake_sleep)

        await worker.start()

        assert broken.cleanup.await_count == 2
        assert worker.removed_total == 2

    async def test_cancel_interrupts_sleep(self, limiter) -> None:
        worker = RateLimitCleanupWorker([limiter], interval_seconds=3600)
        task = asyncio.create_task(worker.start())
        await asyncio.sleep(0)
        assert worker.is_running is True

        worker.stop()
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

        assert task.cancelled()
        assert worker.sweeps == 0
