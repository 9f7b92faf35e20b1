"""Shared fixtures for the TuneScope test suite."""

import pytest

from tunescope.config.settings import (
    MusoSettings,
    Settings,
    SpotifySettings,
    SpotOnTrackSettings,
)

SPOTIFY_TOKEN_URL = "https://accounts.test/api/token"
SPOTIFY_API = "https://api.spotify.test/v1"
SPOTONTRACK_API = "https://spotontrack.test/api/v1"
MUSO_API = "https://muso.test/v4"


class FakeClock:
    """Manually advanced time source for limiter, cache and token tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def spotify_settings() -> SpotifySettings:
    return SpotifySettings(
        client_id="test-client-id",
        client_secret="test-client-secret",
        token_url=SPOTIFY_TOKEN_URL,
        api_base_url=SPOTIFY_API,
    )


@pytest.fixture
def spotontrack_settings() -> SpotOnTrackSettings:
    return SpotOnTrackSettings(
        api_key="sot-test-key-0123456789", api_base_url=SPOTONTRACK_API
    )


@pytest.fixture
def muso_settings() -> MusoSettings:
    return MusoSettings(api_key="muso-test-key", api_base_url=MUSO_API)


@pytest.fixture
def unconfigured_settings() -> Settings:
    """Settings with every provider credential blank."""
    return Settings(
        spotify=SpotifySettings(client_id="", client_secret=""),
        spotontrack=SpotOnTrackSettings(api_key=""),
        muso=MusoSettings(api_key=""),
    )
