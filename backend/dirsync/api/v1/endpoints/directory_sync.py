"""Directory sync trigger and connection-test endpoints.

Every route requires ``Authorization: Bearer <CRON_SECRET>``.
"""

from uuid import UUID

from fastapi import Depends, Response

from dirsync import schemas
from dirsync.api.deps import Inject, require_cron_secret
from dirsync.api.router import TrailingSlashRouter
from dirsync.core.logging import logger
from dirsync.domains.directory_sync.protocols import (
    ConnectionTesterProtocol,
    SyncOrchestratorProtocol,
)

router = TrailingSlashRouter(dependencies=[Depends(require_cron_secret)])


@router.post("/run", response_model=schemas.SyncBatchResult)
async def run_due_syncs(
    orchestrator: SyncOrchestratorProtocol = Inject(SyncOrchestratorProtocol),
) -> schemas.SyncBatchResult:
    """Sync every active, enabled configuration that is due.

    Called by the periodic trigger. Per-configuration failures are reported in
    ``results``; the request itself succeeds.
    """
    logger.info("Starting scheduled directory sync")
    result = await orchestrator.run_due_configurations()
    logger.info(
        f"Scheduled directory sync finished: {len(result.results)} of "
        f"{result.total_configs} configurations processed"
    )
    return result


@router.post("/configurations/{config_id}/sync", response_model=schemas.SyncRunResult)
async def sync_configuration(
    config_id: UUID,
    orchestrator: SyncOrchestratorProtocol = Inject(SyncOrchestratorProtocol),
) -> schemas.SyncRunResult:
    """Sync one configuration now, regardless of its schedule.

    Returns 404 when the configuration does not exist and 400 when it is not active.
    """
    return await orchestrator.run_configuration(config_id)


@router.post(
    "/test-connection",
    response_model=schemas.ConnectionTestResult,
    responses={
        400: {"model": schemas.ConnectionTestResult},
        408: {"model": schemas.ConnectionTestResult},
    },
)
async def test_connection(
    request: schemas.ConnectionTestRequest,
    response: Response,
    tester: ConnectionTesterProtocol = Inject(ConnectionTesterProtocol),
) -> schemas.ConnectionTestResult:
    """Check directory connection parameters by connecting, binding and previewing users.

    Returns 400 with a cause-specific ``error`` when the test fails, or 408
    when the server did not answer in time. Nothing is stored.
    """
    result = await tester.test_connection(request)
    if not result.success:
        response.status_code = 408 if result.error_kind == "timeout" else 400
    return result
