"""Tests for the Muso.AI response cache."""

from unittest.mock import AsyncMock

import pytest

from tunescope.domain.exceptions import ProviderTimeoutError
from tunescope.infrastructure.cache import InMemoryCache, MusoCache, MusoCacheTTL


@pytest.fixture
def muso_cache(clock) -> MusoCache:
    return MusoCache(InMemoryCache(clock=clock))


class TestMusoCacheKeys:
    def test_key_is_independent_of_param_order(self) -> None:
        first = MusoCache.make_key("search", {"keyword": "drake", "limit": 10})
        second = MusoCache.make_key("search", {"limit": 10, "keyword": "drake"})
        assert first == second
        assert first.startswith("muso:search:")

    def test_different_operations_get_different_keys(self) -> None:
        params = {"id": "abc"}
        assert MusoCache.make_key("getProfile", params) != MusoCache.make_key(
            "getTrack", params
        )


class TestMusoCacheCached:
    """Test the read-through behaviour."""

    async def test_second_call_is_served_from_cache(self, muso_cache: MusoCache) -> None:
        fetch = AsyncMock(return_value={"profiles": {"items": []}})

        first = await muso_cache.cached("search", {"k": 1}, MusoCacheTTL.MEDIUM, fetch)
        second = await muso_cache.cached("search", {"k": 1}, MusoCacheTTL.MEDIUM, fetch)

        assert first == second
        fetch.assert_awaited_once()
        assert muso_cache.get_stats()["hits"] == 1
        assert muso_cache.get_stats()["misses"] == 1

    async def test_entry_expires_after_ttl(self, muso_cache: MusoCache, clock) -> None:
        fetch = AsyncMock(return_value={"ok": True})
        await muso_cache.cached("getProfile", {"id": "x"}, MusoCacheTTL.SHORT, fetch)

        clock.advance(MusoCacheTTL.SHORT + 1)
        await muso_cache.cached("getProfile", {"id": "x"}, MusoCacheTTL.SHORT, fetch)

        assert fetch.await_count == 2

    async def test_none_is_not_cached(self, muso_cache: MusoCache) -> None:
        fetch = AsyncMock(return_value=None)
        await muso_cache.cached("getTrack", {"id": "x"}, MusoCacheTTL.LONG, fetch)
        await muso_cache.cached("getTrack", {"id": "x"}, MusoCacheTTL.LONG, fetch)
        assert fetch.await_count == 2

    async def test_failures_propagate_and_are_not_cached(
        self, muso_cache: MusoCache
    ) -> None:
        fetch = AsyncMock(
            side_effect=[ProviderTimeoutError("muso", "timed out"), {"ok": True}]
        )

        with pytest.raises(ProviderTimeoutError):
            await muso_cache.cached("search", {"k": 2}, MusoCacheTTL.MEDIUM, fetch)
        result = await muso_cache.cached("search", {"k": 2}, MusoCacheTTL.MEDIUM, fetch)

        assert result == {"ok": True}

    async def test_clear_resets_counters(self, muso_cache: MusoCache) -> None:
        fetch = AsyncMock(return_value={"ok": True})
        await muso_cache.cached("search", {}, MusoCacheTTL.MEDIUM, fetch)
        await muso_cache.clear()

        stats = muso_cache.get_stats()
        assert stats["hits"] == 0
        assert stats["misses"] == 0
        assert stats["total_entries"] == 0


def test_ttl_tiers() -> None:
    assert [int(t) for t in MusoCacheTTL] == [300, 900, 3600, 86400]
