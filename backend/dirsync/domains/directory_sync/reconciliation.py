"""Reconciliation of directory identities against the local identity store."""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dirsync import schemas
from dirsync.core.logging import ContextualLogger
from dirsync.core.logging import logger as default_logger
from dirsync.domains.directory_sync.protocols import ReconciliationEngineProtocol
from dirsync.domains.directory_sync.types import ReconciliationStats
from dirsync.domains.users.protocols import LocalIdentityStoreProtocol
from dirsync.platform.directory.exceptions import IdentityReconciliationError
from dirsync.platform.directory.types import DirectoryIdentity


class ReconciliationEngine(ReconciliationEngineProtocol):
    """Applies one directory snapshot to one tenant's local identities.

    Two passes, in this order:

    1. Deactivation: every active, directory-provisioned identity whose email
       is not in the snapshot is deactivated. Identities with a local password
       are never touched.
    2. Provisioning: every snapshot identity is updated (name, and
       ``is_active=True``) when its email exists, else created.

    Updates are issued even when nothing changed, so a second run over the
    same snapshot reports every match as updated and nothing created or
    deactivated. Matched identities are always reactivated, including ones an
    administrator deactivated by hand.

    Deactivation errors propagate and fail the pass. Provisioning errors are
    caught per identity, logged and counted in ``failed``.
    """

    def __init__(self, identity_store: LocalIdentityStoreProtocol) -> None:
        """Initialize with the local identity store."""
        self._identity_store = identity_store

    async def reconcile(
        self,
        db: AsyncSession,
        tenant_id: UUID,
        identities: Sequence[DirectoryIdentity],
        logger: Optional[ContextualLogger] = None,
    ) -> ReconciliationStats:
        """Run both passes and return the counts."""
        log = logger or default_logger.with_context(tenant_id=str(tenant_id))
        stats = ReconciliationStats()

        found_emails = {identity.email for identity in identities}
        stale = await self._identity_store.find_active_provisioned_identities(
            db, tenant_id, found_emails
        )
        for local in stale:
            await self._identity_store.update(
                db, local.id, schemas.LocalIdentityUpdate(is_active=False)
            )
            stats.deactivated += 1
        if stats.deactivated:
            log.info(f"Deactivated {stats.deactivated} users no longer in the directory")

        for identity in identities:
            try:
                created = await self._provision(db, tenant_id, identity)
            except Exception as e:
                stats.failed += 1
                error = IdentityReconciliationError(identity.email, str(e))
                log.error(f"Error syncing user: {error}", exc_info=True)
                continue
            if created:
                stats.created += 1
            else:
                stats.updated += 1

        log.info(
            f"Reconciled {len(identities)} directory users: {stats.created} created, "
            f"{stats.updated} updated, {stats.deactivated} deactivated, {stats.failed} failed"
        )
        return stats

    async def _provision(
        self, db: AsyncSession, tenant_id: UUID, identity: DirectoryIdentity
    ) -> bool:
        """Create or update one identity. Returns True when created."""
        existing = await self._identity_store.find_by_email(db, tenant_id, identity.email)
        if existing is not None:
            await self._identity_store.update(
                db,
                existing.id,
                schemas.LocalIdentityUpdate(name=identity.display_name, is_active=True),
            )
            return False

        await self._identity_store.create(
            db,
            tenant_id,
            schemas.LocalIdentityCreate(
                email=identity.email, name=identity.display_name, is_active=True
            ),
        )
        return True
