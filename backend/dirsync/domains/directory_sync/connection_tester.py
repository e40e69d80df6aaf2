"""Interactive directory connection test."""

from typing import Optional

from dirsync import schemas
from dirsync.core.config import Settings
from dirsync.core.logging import ContextualLogger
from dirsync.core.logging import logger as default_logger
from dirsync.domains.directory_sync.protocols import ConnectionTesterProtocol
from dirsync.platform.directory.exceptions import (
    DirectoryAuthenticationError,
    DirectoryConnectionError,
    DirectorySearchError,
    DirectorySessionError,
    DirectoryWatchdogTimeout,
)
from dirsync.platform.directory.normalizer import EntryNormalizer, base_dn_from_domain
from dirsync.platform.directory.session import ProtocolSession
from dirsync.platform.directory.transport import TransportFactory
from dirsync.platform.directory.types import SearchRequest

MAX_SAMPLE_USERS = 3


def _error_kind(error: DirectorySessionError) -> str:
    if isinstance(error, DirectoryWatchdogTimeout):
        return "timeout"
    if isinstance(error, DirectoryAuthenticationError):
        return "authentication"
    if isinstance(error, DirectoryConnectionError):
        return "connection"
    if isinstance(error, DirectorySearchError):
        return "search"
    return "unknown"


class ConnectionTester(ConnectionTesterProtocol):
    """Runs one short directory session from administrator-supplied parameters.

    The base DN comes from the domain (``acme.com`` -> ``DC=acme,DC=com``) and
    the bind DN is ``<admin username>@<domain>``. Nothing is written.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        settings: Settings,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialize with the transport factory and session bounds."""
        self._transport_factory = transport_factory
        self._settings = settings
        self._logger = logger or default_logger.with_prefix("Connection test: ")

    async def test_connection(
        self, request: schemas.ConnectionTestRequest
    ) -> schemas.ConnectionTestResult:
        """Connect, bind and preview up to three users.

        Failures are returned as a result with a cause-specific ``error``
        message. Unexpected errors are returned with ``error_kind="unknown"``.
        """
        domain = request.domain.strip()
        base_dn = base_dn_from_domain(domain)
        bind_dn = f"{request.admin_username}@{domain}"
        endpoint = request.endpoint
        log = self._logger.with_context(ldap_url=endpoint.url)
        log.info(f"Testing connection as {bind_dn}, base DN {base_dn}")

        timeout = self._settings.DIRECTORY_TEST_TIMEOUT_SECONDS
        session = ProtocolSession(
            self._transport_factory(endpoint, timeout),
            bind_dn=bind_dn,
            bind_secret=request.admin_password.get_secret_value(),
            search=SearchRequest(
                base=base_dn,
                size_limit=self._settings.DIRECTORY_TEST_SIZE_LIMIT,
                page_size=self._settings.DIRECTORY_TEST_PAGE_SIZE,
            ),
            timeout_seconds=timeout,
            logger=log,
        )
        try:
            outcome = await session.run()
        except Exception as e:
            log.exception(f"Connection test crashed: {e}")
            return schemas.ConnectionTestResult(
                success=False,
                base_dn=base_dn,
                bind_dn=bind_dn,
                ldap_url=endpoint.url,
                error=f"Unexpected error: {e}",
                error_kind="unknown",
            )

        if not outcome.success:
            log.warning(f"Connection test failed: {outcome.error}")
            return schemas.ConnectionTestResult(
                success=False,
                base_dn=base_dn,
                bind_dn=bind_dn,
                ldap_url=endpoint.url,
                error=outcome.error.user_message,
                error_kind=_error_kind(outcome.error),
            )

        normalizer = EntryNormalizer(base_dn)
        samples = [normalizer.sample(entry) for entry in outcome.entries[:MAX_SAMPLE_USERS]]
        log.info(f"Connection test succeeded, {len(outcome.entries)} users found")
        return schemas.ConnectionTestResult(
            success=True,
            message="Connection successful",
            users_count=len(outcome.entries),
            sample_users=[
                schemas.SampleUser(cn=s.cn, username=s.username, email=s.email) for s in samples
            ],
            base_dn=base_dn,
            bind_dn=bind_dn,
            ldap_url=endpoint.url,
        )
