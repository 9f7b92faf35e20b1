"""TuneScope - music data aggregation across Spotify, SpotOnTrack and Muso.AI."""

__version__ = "0.1.0"
