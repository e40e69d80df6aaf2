"""Shared exceptions module."""

from typing import Optional


class DirSyncException(Exception):
    """Base exception for directory sync services."""

    pass


class NotFoundException(DirSyncException):
    """Exception raised when an object is not found."""

    def __init__(self, message: Optional[str] = "Object not found"):
        """Create a new NotFoundException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class DirectorySyncConfigNotFoundException(NotFoundException):
    """Raised when a directory sync configuration is not found."""

    pass


class InvalidStateError(DirSyncException):
    """Exception raised when an object is in an invalid state for the requested operation."""

    def __init__(self, message: Optional[str] = "Object is in an invalid state"):
        """Create a new InvalidStateError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)
