"""Sync orchestrator: fans a sync pass out across directory configurations."""

import asyncio
from datetime import datetime, timedelta
from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dirsync import schemas
from dirsync.core.config import Settings
from dirsync.core.datetime_utils import utc_now_naive
from dirsync.core.exceptions import DirectorySyncConfigNotFoundException, InvalidStateError
from dirsync.core.logging import ContextualLogger
from dirsync.core.logging import logger as default_logger
from dirsync.db.session import get_db_context
from dirsync.domains.directory_sync.protocols import (
    DirectorySyncConfigRepositoryProtocol,
    ReconciliationEngineProtocol,
    SyncOrchestratorProtocol,
)
from dirsync.platform.directory.normalizer import EntryNormalizer
from dirsync.platform.directory.session import ProtocolSession
from dirsync.platform.directory.transport import TransportFactory
from dirsync.platform.directory.types import DirectoryIdentity, SearchRequest, SessionOutcome

DbContextFactory = Callable[[], AsyncContextManager[AsyncSession]]


class SyncOrchestrator(SyncOrchestratorProtocol):
    """Runs one directory session and one reconciliation per configuration.

    Each configuration is isolated: any failure is recorded in its own
    ``SyncRunResult`` and the remaining configurations still run. Each one
    gets its own transport, session, watchdog and database transaction.
    ``last_sync_at`` moves to the pass start time only on success, so a
    failed configuration stays due for the next trigger.
    """

    def __init__(
        self,
        config_repo: DirectorySyncConfigRepositoryProtocol,
        reconciliation: ReconciliationEngineProtocol,
        transport_factory: TransportFactory,
        settings: Settings,
        db_context: DbContextFactory = get_db_context,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialize with injected dependencies."""
        self._config_repo = config_repo
        self._reconciliation = reconciliation
        self._transport_factory = transport_factory
        self._settings = settings
        self._db_context = db_context
        self._logger = logger or default_logger.with_prefix("Directory sync: ")

    def is_due(self, config: schemas.SyncConfiguration, now: datetime) -> bool:
        """True when never synced or the interval has elapsed since ``last_sync_at``."""
        if config.last_sync_at is None:
            return True
        interval = (
            config.sync_interval_seconds
            or self._settings.DIRECTORY_SYNC_DEFAULT_INTERVAL_SECONDS
        )
        return now - config.last_sync_at >= timedelta(seconds=interval)

    async def run_due_configurations(
        self, now: Optional[datetime] = None
    ) -> schemas.SyncBatchResult:
        """Sync every eligible configuration that is due.

        ``total_configs`` counts eligible configurations, including the ones
        skipped as not yet due.
        """
        started = now or utc_now_naive()
        async with self._db_context() as db:
            configs = await self._config_repo.list_eligible(db)

        due = []
        for config in configs:
            if self.is_due(config, started):
                due.append(config)
            else:
                self._logger.debug(
                    "Skipping configuration, not due yet",
                    extra={"config_id": str(config.id)},
                )
        self._logger.info(f"Found {len(configs)} eligible configurations, {len(due)} due")

        results = await self._run_all(due, started)
        return schemas.SyncBatchResult(total_configs=len(configs), results=results)

    async def run_configuration(self, config_id: UUID) -> schemas.SyncRunResult:
        """Sync one configuration now, regardless of schedule or ``sync_enabled``.

        Raises:
        ------
            DirectorySyncConfigNotFoundException: no configuration with this ID.
            InvalidStateError: the configuration is not active.

        """
        async with self._db_context() as db:
            config = await self._config_repo.get(db, config_id)
        if config is None:
            raise DirectorySyncConfigNotFoundException(
                f"Directory sync configuration {config_id} not found"
            )
        if not config.is_active:
            raise InvalidStateError("Directory sync configuration is not active")
        return await self._run_isolated(config, utc_now_naive())

    async def _run_all(
        self, configs: List[schemas.SyncConfiguration], started: datetime
    ) -> List[schemas.SyncRunResult]:
        limit = self._settings.DIRECTORY_SYNC_MAX_CONCURRENCY
        if limit <= 1:
            return [await self._run_isolated(config, started) for config in configs]

        semaphore = asyncio.Semaphore(limit)

        async def bounded(config: schemas.SyncConfiguration) -> schemas.SyncRunResult:
            async with semaphore:
                return await self._run_isolated(config, started)

        return list(await asyncio.gather(*(bounded(config) for config in configs)))

    async def _run_isolated(
        self, config: schemas.SyncConfiguration, started: datetime
    ) -> schemas.SyncRunResult:
        log = self._logger.with_context(config_id=str(config.id), tenant_id=str(config.tenant_id))
        try:
            return await self._sync(config, started, log)
        except Exception as e:
            log.error(f"Sync failed: {e}", exc_info=True)
            return schemas.SyncRunResult(
                config_id=config.id, config_name=config.name, success=False, error=str(e)
            )

    async def _sync(
        self, config: schemas.SyncConfiguration, started: datetime, log: ContextualLogger
    ) -> schemas.SyncRunResult:
        log.info(f"Starting sync against {config.endpoint.url}")
        outcome = await self._fetch(config, log)
        if not outcome.success:
            log.warning(f"Directory session failed: {outcome.error}")
            return schemas.SyncRunResult(
                config_id=config.id,
                config_name=config.name,
                success=False,
                error=outcome.error.user_message,
            )

        identities = self._normalize(config, outcome, log)
        async with self._db_context() as db:
            stats = await self._reconciliation.reconcile(db, config.tenant_id, identities, log)
            await self._config_repo.mark_synced(db, config.id, started)
            await db.commit()

        log.info(
            f"Sync completed: {len(identities)} found, {stats.created} created, "
            f"{stats.updated} updated, {stats.deactivated} deactivated"
        )
        return schemas.SyncRunResult(
            config_id=config.id,
            config_name=config.name,
            success=True,
            users_found=len(identities),
            users_created=stats.created,
            users_updated=stats.updated,
            users_deactivated=stats.deactivated,
        )

    async def _fetch(
        self, config: schemas.SyncConfiguration, log: ContextualLogger
    ) -> SessionOutcome:
        timeout = self._settings.DIRECTORY_SYNC_TIMEOUT_SECONDS
        transport = self._transport_factory(config.endpoint, timeout)
        session = ProtocolSession(
            transport,
            bind_dn=config.bind_dn,
            bind_secret=config.bind_secret.get_secret_value(),
            search=SearchRequest(
                base=config.effective_search_base,
                filter=config.effective_search_filter,
                size_limit=self._settings.DIRECTORY_SYNC_SIZE_LIMIT,
                page_size=self._settings.DIRECTORY_SYNC_PAGE_SIZE,
            ),
            timeout_seconds=timeout,
            logger=log,
        )
        return await session.run()

    @staticmethod
    def _normalize(
        config: schemas.SyncConfiguration, outcome: SessionOutcome, log: ContextualLogger
    ) -> List[DirectoryIdentity]:
        normalizer = EntryNormalizer(config.base_dn)
        identities = []
        for entry in outcome.entries:
            identity = normalizer.normalize(entry)
            if identity is not None:
                identities.append(identity)
        skipped = len(outcome.entries) - len(identities)
        if skipped:
            log.debug(f"Skipped {skipped} machine, system or nameless entries")
        return identities
