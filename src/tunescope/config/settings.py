"""Application settings loaded from environment variables and .env.

Hey future me - every provider credential is OPTIONAL here! A missing key never
crashes startup. The client for that provider just reports is_configured() ==
False and the aggregator skips it. Don't add required fields to the provider
sections or the whole app refuses to boot without a Spotify account.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_FILE = ".env"

# Sample values from example .env files. Clients treat them as missing keys.
PLACEHOLDER_API_KEYS = frozenset(
    {
        "dev_fallback_key",
        "your_spotontrack_api_key_here",
        "your_muso_api_key_here",
        "changeme",
    }
)


class SpotifySettings(BaseSettings):
    """Spotify client-credentials configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_", env_file=_ENV_FILE, extra="ignore"
    )

    client_id: str = ""
    client_secret: str = ""
    token_url: str = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL
    api_base_url: str = "https://api.spotify.com/v1"
    market: str | None = None

    def is_configured(self) -> bool:
        """Check both halves of the client-credentials pair are present."""
        return bool(self.client_id.strip() and self.client_secret.strip())


class SpotOnTrackSettings(BaseSettings):
    """SpotOnTrack API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTONTRACK_", env_file=_ENV_FILE, extra="ignore"
    )

    api_key: str = ""
    api_base_url: str = "https://www.spotontrack.com/api/v1"

    def is_configured(self) -> bool:
        """Check the API key is set and not a known placeholder."""
        key = self.api_key.strip()
        return bool(key) and key not in PLACEHOLDER_API_KEYS and len(key) > 10


class MusoSettings(BaseSettings):
    """Muso.AI API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MUSO_", env_file=_ENV_FILE, extra="ignore"
    )

    api_key: str = ""
    api_base_url: str = "https://api.developer.muso.ai/v4"
    cache_enabled: bool = True

    def is_configured(self) -> bool:
        """Check the API key is set and not a known placeholder."""
        key = self.api_key.strip()
        return bool(key) and key not in PLACEHOLDER_API_KEYS


class ProviderSettings(BaseSettings):
    """Settings shared by every outbound provider call."""

    model_config = SettingsConfigDict(
        env_prefix="PROVIDERS_", env_file=_ENV_FILE, extra="ignore"
    )

    # Seconds. Applied both as the httpx timeout and as the aggregator's
    # asyncio.wait_for() budget for a whole provider branch.
    request_timeout: float = Field(default=12.0, gt=0, le=60)
    search_limit: int = Field(default=10, ge=1, le=50)


class RateLimitSettings(BaseSettings):
    """Per-caller limits for outbound calls (Muso.AI is the strict one)."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_", env_file=_ENV_FILE, extra="ignore"
    )

    muso_max_requests: int = Field(default=30, ge=1)
    muso_window_seconds: float = Field(default=60.0, gt=0)
    cleanup_interval_seconds: float = Field(default=300.0, gt=0)


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_", env_file=_ENV_FILE, extra="ignore"
    )

    level: str = "INFO"
    json_format: bool = False
    log_request_body: bool = False


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(env_file=_ENV_FILE, extra="ignore")

    app_name: str = "tunescope"
    debug: bool = False
    api_prefix: str = "/api"

    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    spotontrack: SpotOnTrackSettings = Field(default_factory=SpotOnTrackSettings)
    muso: MusoSettings = Field(default_factory=MusoSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    observability: ObservabilitySettings = Field(
        default_factory=ObservabilitySettings
    )


# Yo, this is cached for the process lifetime! Tests that need different values
# should build Settings(...) directly or call get_settings.cache_clear().
@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
