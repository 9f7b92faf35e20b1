"""Infrastructure layer - provider clients, response caches, rate limiting, observability."""
