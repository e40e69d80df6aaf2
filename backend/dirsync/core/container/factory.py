"""Container Factory.

All construction logic lives here. The factory reads settings and builds
the container.
"""

from dirsync.core.config import Settings
from dirsync.core.container.container import Container
from dirsync.core.logging import logger
from dirsync.domains.directory_sync.connection_tester import ConnectionTester
from dirsync.domains.directory_sync.orchestrator import SyncOrchestrator
from dirsync.domains.directory_sync.reconciliation import ReconciliationEngine
from dirsync.domains.directory_sync.repository import DirectorySyncConfigRepository
from dirsync.domains.users.repository import LocalIdentityRepository
from dirsync.platform.directory.transport import ldap3_transport_factory


def create_container(settings: Settings) -> Container:
    """Build the container with the ldap3 transport and SQLAlchemy repositories.

    Args:
        settings: Application settings (from core/config.py)

    Returns:
        Fully constructed Container ready for use
    """
    config_repo = DirectorySyncConfigRepository()
    identity_store = LocalIdentityRepository()
    reconciliation = ReconciliationEngine(identity_store=identity_store)

    sync_orchestrator = SyncOrchestrator(
        config_repo=config_repo,
        reconciliation=reconciliation,
        transport_factory=ldap3_transport_factory,
        settings=settings,
    )
    connection_tester = ConnectionTester(
        transport_factory=ldap3_transport_factory,
        settings=settings,
    )

    logger.debug(
        "Container built "
        f"(sync timeout {settings.DIRECTORY_SYNC_TIMEOUT_SECONDS:g}s, "
        f"max concurrency {settings.DIRECTORY_SYNC_MAX_CONCURRENCY})"
    )
    return Container(
        config_repo=config_repo,
        identity_store=identity_store,
        reconciliation=reconciliation,
        sync_orchestrator=sync_orchestrator,
        connection_tester=connection_tester,
    )
