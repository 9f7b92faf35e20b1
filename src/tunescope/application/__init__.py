"""Application layer - services sitting between API and integrations."""
