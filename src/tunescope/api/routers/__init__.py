"""API router initialization."""

# Hey future me, this is the MAIN API router aggregator! It collects the sub-routers and gets
# mounted under settings.api_prefix ("/api") in main.py, so endpoints become /api/search/artist,
# /api/track/enriched etc. Each router defines its own prefix in its file. health is NOT in here,
# main.py mounts it at the root so health checks hit /health/live.

from fastapi import APIRouter

from tunescope.api.routers import artists, health, muso, search, tracks, trending

api_router = APIRouter()

api_router.include_router(search.router, tags=["Search"])
api_router.include_router(tracks.router, tags=["Tracks"])
api_router.include_router(artists.router, tags=["Artists"])
api_router.include_router(trending.router, tags=["Trending"])
api_router.include_router(muso.router, tags=["Muso.AI"])

__all__ = [
    "api_router",
    "artists",
    "health",
    "muso",
    "search",
    "tracks",
    "trending",
]
