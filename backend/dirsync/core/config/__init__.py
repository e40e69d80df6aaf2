"""Configuration module for the directory sync backend.

Provides centralized configuration management with type-safe enums.

Usage:
    from dirsync.core.config import settings, Environment

    # Access settings
    timeout = settings.DIRECTORY_SYNC_TIMEOUT_SECONDS

    # Use enums for type safety
    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from dirsync.core.config.enums import Environment
from dirsync.core.config.settings import Settings

__all__ = [
    "Settings",
    "Environment",
    "settings",
]

# Singleton settings instance
settings = Settings()
