"""Background workers started by the application lifespan."""

from tunescope.application.workers.rate_limit_cleanup_worker import (
    RateLimitCleanupWorker,
)

__all__ = ["RateLimitCleanupWorker"]
