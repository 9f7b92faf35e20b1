"""API module for TuneScope.

Hey future me - the main entry point is `api_router` from routers/, which
aggregates the sub-routers and is mounted under /api in main.py.

Structure:
- routers/: endpoints (search, track, artist, trending, health)
- schemas/: Pydantic response models (camelCase JSON)
- dependencies.py: Dependency injection from app.state
- exception_handlers.py: Global error handlers
"""

from tunescope.api.routers import api_router

__all__ = ["api_router"]
