"""Protocols for the directory sync domain."""

from datetime import datetime
from typing import List, Optional, Protocol, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dirsync import schemas
from dirsync.core.logging import ContextualLogger
from dirsync.domains.directory_sync.types import ReconciliationStats
from dirsync.platform.directory.types import DirectoryIdentity


class DirectorySyncConfigRepositoryProtocol(Protocol):
    """Read access to sync configurations, plus the ``last_sync_at`` stamp."""

    async def list_eligible(self, db: AsyncSession) -> List[schemas.SyncConfiguration]:
        """Configurations that are active and have sync enabled."""
        ...

    async def get(self, db: AsyncSession, id: UUID) -> Optional[schemas.SyncConfiguration]:
        """Get one configuration by ID."""
        ...

    async def mark_synced(self, db: AsyncSession, id: UUID, at: datetime) -> None:
        """Record a completed sync."""
        ...


class ReconciliationEngineProtocol(Protocol):
    """Applies one pass of directory identities to the local store."""

    async def reconcile(
        self,
        db: AsyncSession,
        tenant_id: UUID,
        identities: Sequence[DirectoryIdentity],
        logger: Optional[ContextualLogger] = None,
    ) -> ReconciliationStats:
        """Deactivate missing provisioned identities, then create or update found ones."""
        ...


class SyncOrchestratorProtocol(Protocol):
    """Runs directory sync across configurations."""

    async def run_due_configurations(
        self, now: Optional[datetime] = None
    ) -> schemas.SyncBatchResult:
        """Sync every eligible configuration that is due."""
        ...

    async def run_configuration(self, config_id: UUID) -> schemas.SyncRunResult:
        """Sync one active configuration now, regardless of schedule."""
        ...


class ConnectionTesterProtocol(Protocol):
    """Validates directory connection parameters without writing anything."""

    async def test_connection(
        self, request: schemas.ConnectionTestRequest
    ) -> schemas.ConnectionTestResult:
        """Connect, bind and run a small search."""
        ...
