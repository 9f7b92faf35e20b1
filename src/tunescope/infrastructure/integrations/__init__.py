"""External music-data provider clients."""

from tunescope.infrastructure.integrations.base_client import BaseProviderClient
from tunescope.infrastructure.integrations.muso_client import MusoClient
from tunescope.infrastructure.integrations.spotify_client import SpotifyClient
from tunescope.infrastructure.integrations.spotontrack_client import (
    SpotOnTrackClient,
)

__all__ = [
    "BaseProviderClient",
    "MusoClient",
    "SpotOnTrackClient",
    "SpotifyClient",
]
