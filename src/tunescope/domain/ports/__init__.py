"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod

from tunescope.domain.dtos import ArtistRecord, TrackRecord


# Hey future me, this is the contract every music-data client implements! The aggregator only
# talks to this interface, which is what lets tests swap in AsyncMock(spec=IMusicDataProvider)
# without any HTTP. Implementations raise ProviderError subclasses on failure - never raw httpx.
class IMusicDataProvider(ABC):
    """Port for an external music metadata provider."""

    name: str

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True if credentials are present."""
        pass

    @abstractmethod
    async def search_artists(self, name: str, limit: int = 10) -> list[ArtistRecord]:
        """Search artists by name.

        Raises:
            ValidationError: If name is blank
            ProviderError: On any upstream failure
        """
        pass

    @abstractmethod
    async def search_tracks(self, query: str, limit: int = 10) -> list[TrackRecord]:
        """Search tracks by free-text query.

        Raises:
            ValidationError: If query is blank
            ProviderError: On any upstream failure
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Run a known-good query. Never raises."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release HTTP resources."""
        pass


__all__ = ["IMusicDataProvider"]
