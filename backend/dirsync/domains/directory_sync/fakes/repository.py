"""Fake directory sync configuration repository for testing."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dirsync import schemas


class FakeDirectorySyncConfigRepository:
    """In-memory fake for DirectorySyncConfigRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with an empty store."""
        self._store: Dict[UUID, schemas.SyncConfiguration] = {}
        self._calls: List[tuple[Any, ...]] = []

    def seed(self, config: schemas.SyncConfiguration) -> None:
        """Store a configuration."""
        self._store[config.id] = config

    def stored(self, id: UUID) -> schemas.SyncConfiguration:
        """Current stored state, for assertions."""
        return self._store[id]

    def calls(self, method: str) -> List[tuple[Any, ...]]:
        """Recorded calls to ``method``."""
        return [c for c in self._calls if c[0] == method]

    async def list_eligible(self, db: AsyncSession) -> List[schemas.SyncConfiguration]:
        """Seeded configurations that are active and enabled, in seed order."""
        self._calls.append(("list_eligible",))
        return [c for c in self._store.values() if c.is_active and c.sync_enabled]

    async def get(self, db: AsyncSession, id: UUID) -> Optional[schemas.SyncConfiguration]:
        """Return the seeded configuration."""
        self._calls.append(("get", id))
        return self._store.get(id)

    async def mark_synced(self, db: AsyncSession, id: UUID, at: datetime) -> None:
        """Stamp ``last_sync_at`` on the stored configuration."""
        self._calls.append(("mark_synced", id, at))
        self._store[id] = self._store[id].model_copy(update={"last_sync_at": at})
