"""SQLAlchemy-backed local identity store."""

from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dirsync import schemas
from dirsync.core.exceptions import NotFoundException
from dirsync.domains.users.protocols import LocalIdentityStoreProtocol
from dirsync.models.user import DIRECTORY_PROVISIONED_PASSWORD, User

DEFAULT_ROLE = "USER"


class LocalIdentityRepository(LocalIdentityStoreProtocol):
    """Reads and writes the ``user`` table.

    ``create`` and ``update`` each run inside a SAVEPOINT, so a failure rolls
    back only that row and leaves the surrounding transaction usable.
    """

    async def find_active_provisioned_identities(
        self, db: AsyncSession, tenant_id: UUID, excluding_emails: Set[str]
    ) -> List[schemas.LocalIdentity]:
        """Active users with an empty local password and an email not in the set."""
        query = select(User).where(
            User.tenant_id == tenant_id,
            User.password == DIRECTORY_PROVISIONED_PASSWORD,
            User.is_active.is_(True),
        )
        if excluding_emails:
            query = query.where(User.email.notin_(excluding_emails))
        result = await db.execute(query)
        return [schemas.LocalIdentity.model_validate(user) for user in result.scalars().all()]

    async def find_by_email(
        self, db: AsyncSession, tenant_id: UUID, email: str
    ) -> Optional[schemas.LocalIdentity]:
        """Look up one user by email within a tenant."""
        result = await db.execute(
            select(User).where(User.tenant_id == tenant_id, User.email == email)
        )
        user = result.scalar_one_or_none()
        if user is None:
            return None
        return schemas.LocalIdentity.model_validate(user)

    async def create(
        self, db: AsyncSession, tenant_id: UUID, obj_in: schemas.LocalIdentityCreate
    ) -> schemas.LocalIdentity:
        """Insert a directory-provisioned user (empty password, default role)."""
        async with db.begin_nested():
            user = User(
                tenant_id=tenant_id,
                email=obj_in.email,
                name=obj_in.name,
                password=DIRECTORY_PROVISIONED_PASSWORD,
                role=DEFAULT_ROLE,
                is_active=obj_in.is_active,
            )
            db.add(user)
            await db.flush()
        return schemas.LocalIdentity.model_validate(user)

    async def update(
        self, db: AsyncSession, id: UUID, obj_in: schemas.LocalIdentityUpdate
    ) -> schemas.LocalIdentity:
        """Apply the fields set on ``obj_in``."""
        async with db.begin_nested():
            user = await db.get(User, id)
            if user is None:
                raise NotFoundException(f"User {id} not found")
            for field, value in obj_in.model_dump(exclude_unset=True).items():
                setattr(user, field, value)
            await db.flush()
        return schemas.LocalIdentity.model_validate(user)
