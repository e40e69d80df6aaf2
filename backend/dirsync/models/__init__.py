"""Models for the application."""

from ._base import Base
from .directory_sync_config import DirectorySyncConfig
from .user import User

__all__ = ["Base", "DirectorySyncConfig", "User"]
