"""Dependency Injection Container.

The container is a simple immutable dataclass that holds protocol implementations.
It has no construction logic; that belongs in the factory.

Tests construct it directly with fakes.
"""

from dataclasses import dataclass, replace
from typing import Any

from dirsync.domains.directory_sync.protocols import (
    ConnectionTesterProtocol,
    DirectorySyncConfigRepositoryProtocol,
    ReconciliationEngineProtocol,
    SyncOrchestratorProtocol,
)
from dirsync.domains.users.protocols import LocalIdentityStoreProtocol


@dataclass(frozen=True)
class Container:
    """Immutable container holding all protocol implementations.

    Usage:
        # Production: use the global container built by factory
        from dirsync.core.container import container
        await container.sync_orchestrator.run_due_configurations()

        # Testing: construct directly with fakes (see backend/conftest.py)
        test_container = Container(sync_orchestrator=FakeSyncOrchestrator(), ...)

        # FastAPI endpoints: use Inject() to pull individual protocols
        from dirsync.api.deps import Inject
        async def run(orchestrator: SyncOrchestratorProtocol = Inject(SyncOrchestratorProtocol)):
            ...
    """

    # Repositories
    config_repo: DirectorySyncConfigRepositoryProtocol
    identity_store: LocalIdentityStoreProtocol

    # Directory sync services
    reconciliation: ReconciliationEngineProtocol
    sync_orchestrator: SyncOrchestratorProtocol
    connection_tester: ConnectionTesterProtocol

    def replace(self, **changes: Any) -> "Container":
        """Create a new container with some dependencies replaced.

            modified = container.replace(connection_tester=FakeConnectionTester())
        """
        return replace(self, **changes)
