"""Directory sync service."""
