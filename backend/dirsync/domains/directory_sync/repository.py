"""Directory sync configuration repository."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dirsync import schemas
from dirsync.domains.directory_sync.protocols import DirectorySyncConfigRepositoryProtocol
from dirsync.models.directory_sync_config import DirectorySyncConfig


class DirectorySyncConfigRepository(DirectorySyncConfigRepositoryProtocol):
    """Reads ``directory_sync_config`` rows as SyncConfiguration schemas."""

    async def list_eligible(self, db: AsyncSession) -> List[schemas.SyncConfiguration]:
        """Active configurations with sync enabled, oldest first."""
        result = await db.execute(
            select(DirectorySyncConfig)
            .where(
                DirectorySyncConfig.is_active.is_(True),
                DirectorySyncConfig.sync_enabled.is_(True),
            )
            .order_by(DirectorySyncConfig.created_at)
        )
        return [
            schemas.SyncConfiguration.model_validate(row) for row in result.scalars().all()
        ]

    async def get(self, db: AsyncSession, id: UUID) -> Optional[schemas.SyncConfiguration]:
        """Get a configuration by ID."""
        row = await db.get(DirectorySyncConfig, id)
        if row is None:
            return None
        return schemas.SyncConfiguration.model_validate(row)

    async def mark_synced(self, db: AsyncSession, id: UUID, at: datetime) -> None:
        """Set ``last_sync_at``. The caller commits."""
        await db.execute(
            update(DirectorySyncConfig)
            .where(DirectorySyncConfig.id == id)
            .values(last_sync_at=at)
        )
