"""Caching layer - Cache implementations for reducing API calls."""

from tunescope.infrastructure.cache.base_cache import BaseCache, InMemoryCache
from tunescope.infrastructure.cache.muso_cache import MusoCache, MusoCacheTTL

__all__ = [
    "BaseCache",
    "InMemoryCache",
    "MusoCache",
    "MusoCacheTTL",
]
