"""Protocols for the local identity store."""

from typing import List, Optional, Protocol, Set
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dirsync import schemas


class LocalIdentityStoreProtocol(Protocol):
    """Data access for tenant-scoped local identities.

    Every operation is scoped to one tenant; directory sync never reads or
    writes across tenants.
    """

    async def find_active_provisioned_identities(
        self, db: AsyncSession, tenant_id: UUID, excluding_emails: Set[str]
    ) -> List[schemas.LocalIdentity]:
        """Active, directory-provisioned identities whose email is not in ``excluding_emails``."""
        ...

    async def find_by_email(
        self, db: AsyncSession, tenant_id: UUID, email: str
    ) -> Optional[schemas.LocalIdentity]:
        """Look up one identity by email within a tenant."""
        ...

    async def create(
        self, db: AsyncSession, tenant_id: UUID, obj_in: schemas.LocalIdentityCreate
    ) -> schemas.LocalIdentity:
        """Create a directory-provisioned identity."""
        ...

    async def update(
        self, db: AsyncSession, id: UUID, obj_in: schemas.LocalIdentityUpdate
    ) -> schemas.LocalIdentity:
        """Apply the set fields of ``obj_in`` to an identity."""
        ...
