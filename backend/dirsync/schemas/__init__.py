"""Schemas for the application."""

from .directory_sync import (
    ConnectionTestRequest,
    ConnectionTestResult,
    SampleUser,
    SyncBatchResult,
    SyncConfiguration,
    SyncRunResult,
)
from .user import LocalIdentity, LocalIdentityCreate, LocalIdentityUpdate

__all__ = [
    "ConnectionTestRequest",
    "ConnectionTestResult",
    "LocalIdentity",
    "LocalIdentityCreate",
    "LocalIdentityUpdate",
    "SampleUser",
    "SyncBatchResult",
    "SyncConfiguration",
    "SyncRunResult",
]
