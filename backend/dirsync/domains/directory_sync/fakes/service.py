"""Fake directory sync services for testing."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from dirsync import schemas
from dirsync.core.exceptions import DirectorySyncConfigNotFoundException, InvalidStateError


class FakeSyncOrchestrator:
    """In-memory fake for SyncOrchestratorProtocol."""

    def __init__(self) -> None:
        """Initialize with an empty batch result."""
        self._batch_result = schemas.SyncBatchResult(total_configs=0, results=[])
        self._run_results: dict[UUID, schemas.SyncRunResult] = {}
        self._inactive: set[UUID] = set()
        self._calls: List[tuple[Any, ...]] = []

    def set_batch_result(self, result: schemas.SyncBatchResult) -> None:
        """Set the result returned by run_due_configurations."""
        self._batch_result = result

    def seed_run_result(self, result: schemas.SyncRunResult, active: bool = True) -> None:
        """Set the result returned by run_configuration for ``result.config_id``."""
        self._run_results[result.config_id] = result
        if not active:
            self._inactive.add(result.config_id)

    def calls(self, method: str) -> List[tuple[Any, ...]]:
        """Recorded calls to ``method``."""
        return [c for c in self._calls if c[0] == method]

    async def run_due_configurations(
        self, now: Optional[datetime] = None
    ) -> schemas.SyncBatchResult:
        """Return the configured batch result."""
        self._calls.append(("run_due_configurations", now))
        return self._batch_result

    async def run_configuration(self, config_id: UUID) -> schemas.SyncRunResult:
        """Return the seeded result, or raise like the real orchestrator."""
        self._calls.append(("run_configuration", config_id))
        if config_id not in self._run_results:
            raise DirectorySyncConfigNotFoundException(
                f"Directory sync configuration {config_id} not found"
            )
        if config_id in self._inactive:
            raise InvalidStateError("Directory sync configuration is not active")
        return self._run_results[config_id]


class FakeConnectionTester:
    """In-memory fake for ConnectionTesterProtocol."""

    def __init__(self) -> None:
        """Initialize with a successful default result."""
        self._result: Optional[schemas.ConnectionTestResult] = None
        self._calls: List[tuple[Any, ...]] = []

    def set_result(self, result: schemas.ConnectionTestResult) -> None:
        """Set the result returned by test_connection."""
        self._result = result

    def calls(self) -> List[tuple[Any, ...]]:
        """Recorded calls."""
        return list(self._calls)

    async def test_connection(
        self, request: schemas.ConnectionTestRequest
    ) -> schemas.ConnectionTestResult:
        """Return the configured result, or a success derived from the request."""
        self._calls.append(("test_connection", request))
        if self._result is not None:
            return self._result
        return schemas.ConnectionTestResult(
            success=True,
            message="Connection successful",
            base_dn=",".join(f"DC={part}" for part in request.domain.split(".")),
            bind_dn=f"{request.admin_username}@{request.domain}",
            ldap_url=request.endpoint.url,
        )
