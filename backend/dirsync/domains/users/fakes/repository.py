"""Fake local identity store for testing."""

from typing import Any, Dict, List, Optional, Set
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from dirsync import schemas


class FakeLocalIdentityRepository:
    """In-memory fake for LocalIdentityStoreProtocol.

    ``fail_on(email)`` makes create/update for that email raise, to exercise
    per-identity error handling.
    """

    def __init__(self) -> None:
        """Initialize with an empty store."""
        self._store: Dict[UUID, schemas.LocalIdentity] = {}
        self._failing_emails: Set[str] = set()
        self._calls: List[tuple[Any, ...]] = []

    def seed(
        self,
        tenant_id: UUID,
        email: str,
        name: str = "Seeded User",
        is_active: bool = True,
        has_directory_provenance: bool = True,
    ) -> schemas.LocalIdentity:
        """Add an identity directly and return it."""
        identity = schemas.LocalIdentity(
            id=uuid4(),
            tenant_id=tenant_id,
            email=email,
            name=name,
            is_active=is_active,
            has_directory_provenance=has_directory_provenance,
        )
        self._store[identity.id] = identity
        return identity

    def fail_on(self, email: str) -> None:
        """Make writes for ``email`` raise RuntimeError."""
        self._failing_emails.add(email)

    def all(self, tenant_id: Optional[UUID] = None) -> List[schemas.LocalIdentity]:
        """Every stored identity, optionally for one tenant."""
        return [i for i in self._store.values() if tenant_id is None or i.tenant_id == tenant_id]

    def get_by_email(self, tenant_id: UUID, email: str) -> Optional[schemas.LocalIdentity]:
        """Synchronous lookup for assertions."""
        for identity in self._store.values():
            if identity.tenant_id == tenant_id and identity.email == email:
                return identity
        return None

    def calls(self, method: str) -> List[tuple[Any, ...]]:
        """Recorded calls to ``method``."""
        return [c for c in self._calls if c[0] == method]

    async def find_active_provisioned_identities(
        self, db: AsyncSession, tenant_id: UUID, excluding_emails: Set[str]
    ) -> List[schemas.LocalIdentity]:
        """Return matching seeded identities."""
        self._calls.append(("find_active_provisioned_identities", tenant_id, set(excluding_emails)))
        return [
            i
            for i in self._store.values()
            if i.tenant_id == tenant_id
            and i.has_directory_provenance
            and i.is_active
            and i.email not in excluding_emails
        ]

    async def find_by_email(
        self, db: AsyncSession, tenant_id: UUID, email: str
    ) -> Optional[schemas.LocalIdentity]:
        """Return the seeded identity with this email."""
        self._calls.append(("find_by_email", tenant_id, email))
        return self.get_by_email(tenant_id, email)

    async def create(
        self, db: AsyncSession, tenant_id: UUID, obj_in: schemas.LocalIdentityCreate
    ) -> schemas.LocalIdentity:
        """Store a new provisioned identity."""
        self._calls.append(("create", tenant_id, obj_in))
        if obj_in.email in self._failing_emails:
            raise RuntimeError(f"Injected failure for {obj_in.email}")
        identity = schemas.LocalIdentity(
            id=uuid4(),
            tenant_id=tenant_id,
            email=obj_in.email,
            name=obj_in.name,
            is_active=obj_in.is_active,
            has_directory_provenance=True,
        )
        self._store[identity.id] = identity
        return identity

    async def update(
        self, db: AsyncSession, id: UUID, obj_in: schemas.LocalIdentityUpdate
    ) -> schemas.LocalIdentity:
        """Replace the stored identity with the updated fields."""
        self._calls.append(("update", id, obj_in))
        current = self._store[id]
        if current.email in self._failing_emails:
            raise RuntimeError(f"Injected failure for {current.email}")
        updated = current.model_copy(update=obj_in.model_dump(exclude_unset=True))
        self._store[id] = updated
        return updated
