"""Configuration module for TuneScope."""

from .settings import (
    MusoSettings,
    ObservabilitySettings,
    ProviderSettings,
    RateLimitSettings,
    Settings,
    SpotifySettings,
    SpotOnTrackSettings,
    get_settings,
)

__all__ = [
    "MusoSettings",
    "ObservabilitySettings",
    "ProviderSettings",
    "RateLimitSettings",
    "Settings",
    "SpotOnTrackSettings",
    "SpotifySettings",
    "get_settings",
]
