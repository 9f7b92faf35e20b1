"""Application services."""

from tunescope.application.services.music_aggregator import (
    MusicAggregator,
    ProviderContribution,
    Timeframe,
)

__all__ = ["MusicAggregator", "ProviderContribution", "Timeframe"]
