"""One connect / bind / search / unbind cycle against a directory server.

Several independent events can finish a session: a connection error, a bind
error, a fatal search error, the end of the result stream, or the watchdog.
``ProtocolSession`` funnels all of them into one future that is resolved at
most once. Whichever event arrives first decides the ``SessionOutcome``; later
events are logged and dropped. Teardown runs exactly once, on every exit path,
from the ``finally`` block of ``run``.

Blocking transport calls run in worker threads. A worker thread cannot be
interrupted, so on watchdog expiry the transport is closed with ``force=True``,
which shuts the socket down under the blocked call.
"""

import asyncio
from typing import List, Optional

from dirsync.core.exceptions import InvalidStateError
from dirsync.core.logging import ContextualLogger
from dirsync.core.logging import logger as default_logger
from dirsync.platform.directory.exceptions import (
    DirectoryAuthenticationError,
    DirectoryConnectionError,
    DirectorySearchError,
    DirectorySessionError,
    DirectorySizeLimitExceeded,
    DirectoryWatchdogTimeout,
)
from dirsync.platform.directory.transport import DirectoryTransport
from dirsync.platform.directory.types import RawEntry, SearchRequest, SessionOutcome, SessionState


class ProtocolSession:
    """Single-use directory session with single-resolution settlement.

    Usage:
        session = ProtocolSession(transport, bind_dn=..., bind_secret=..., search=...,
                                  timeout_seconds=30)
        outcome = await session.run()

    The ``on_*`` methods are the session's event inputs. The driver calls them
    as transport calls complete; they are public so that every arrival order
    can be exercised directly.
    """

    def __init__(
        self,
        transport: DirectoryTransport,
        *,
        bind_dn: str,
        bind_secret: str,
        search: SearchRequest,
        timeout_seconds: float,
        logger: Optional[ContextualLogger] = None,
    ):
        """Create an IDLE session. Nothing is opened until ``run``."""
        self._transport = transport
        self._bind_dn = bind_dn
        self._bind_secret = bind_secret
        self._search = search
        self.timeout_seconds = timeout_seconds
        self.logger = logger or default_logger.with_context(component="directory_session")

        self._state = SessionState.IDLE
        self._entries: List[RawEntry] = []
        self._size_limit_exceeded = False
        self._outcome: Optional[asyncio.Future] = None
        self._watchdog: Optional[asyncio.TimerHandle] = None
        self._timed_out = False
        self._closed = False

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        return self._state

    @property
    def settled(self) -> bool:
        """True once the outcome is final."""
        return self._state is SessionState.SETTLED

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self) -> SessionOutcome:
        """Drive the session to settlement and return its outcome.

        Session-level failures are reported in ``SessionOutcome.error``, not
        raised. Unexpected exceptions from the driver propagate after teardown.
        """
        if self._state is not SessionState.IDLE:
            raise InvalidStateError("ProtocolSession.run() may only be called once")

        loop = asyncio.get_running_loop()
        self._outcome = loop.create_future()
        self._watchdog = loop.call_later(self.timeout_seconds, self.on_watchdog)
        driver = asyncio.create_task(self._drive())

        try:
            await asyncio.wait({self._outcome, driver}, return_when=asyncio.FIRST_COMPLETED)
            if self._outcome.done():
                return self._outcome.result()

            # Driver finished without settling: it crashed.
            self._state = SessionState.SETTLED
            error = driver.exception()
            if error is not None:
                raise error
            raise InvalidStateError("Directory session ended without an outcome")
        finally:
            self._state = SessionState.SETTLED
            self._disarm_watchdog()
            if not driver.done():
                driver.cancel()
                await asyncio.gather(driver, return_exceptions=True)
            if not self._outcome.done():
                self._outcome.cancel()
            await self._close()

    # ------------------------------------------------------------------
    # Event inputs
    # ------------------------------------------------------------------

    def on_connection_error(self, error: DirectoryConnectionError) -> bool:
        """Socket could not be opened. Fatal."""
        self.logger.warning(f"Connection error ({error.kind.value}): {error}")
        return self._settle_failure(error)

    def on_bind_error(self, error: DirectoryAuthenticationError) -> bool:
        """Bind rejected. Fatal."""
        self.logger.warning(f"Bind error ({error.kind.value}): {error}")
        return self._settle_failure(error)

    def on_search_entry(self, entry: RawEntry) -> bool:
        """Buffer one entry. Returns False once the session is settled."""
        if self.settled:
            return False
        self._entries.append(entry)
        return True

    def on_search_error(self, error: DirectorySearchError) -> bool:
        """Search stream error. Soft errors are recorded; all others settle."""
        if error.soft:
            if not self.settled:
                self._size_limit_exceeded = True
                self.logger.info(
                    f"Size limit exceeded (OK), continuing with {len(self._entries)} entries"
                )
            return False
        self.logger.warning(f"Search result error: {error}")
        return self._settle_failure(error)

    def on_search_end(self) -> bool:
        """Result stream completed. Settles successfully."""
        return self._settle(
            SessionOutcome(
                entries=tuple(self._entries),
                size_limit_exceeded=self._size_limit_exceeded,
            )
        )

    def on_watchdog(self) -> bool:
        """Watchdog expired. Settles with DirectoryWatchdogTimeout and forces teardown."""
        if self.settled:
            return False
        self._timed_out = True
        self._watchdog = None
        self.logger.warning(f"Session timed out after {self.timeout_seconds:g}s")
        return self._settle_failure(DirectoryWatchdogTimeout(self.timeout_seconds))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _settle_failure(self, error: DirectorySessionError) -> bool:
        return self._settle(
            SessionOutcome(
                entries=tuple(self._entries),
                error=error,
                size_limit_exceeded=self._size_limit_exceeded,
            )
        )

    def _settle(self, outcome: SessionOutcome) -> bool:
        if self.settled or self._outcome is None or self._outcome.done():
            self.logger.debug("Ignoring event after settlement")
            return False
        self._state = SessionState.SETTLED
        self._disarm_watchdog()
        self._outcome.set_result(outcome)
        return True

    def _disarm_watchdog(self) -> None:
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None

    async def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await asyncio.to_thread(self._transport.close, self._timed_out)
        except Exception as e:
            # Never raise from teardown; the outcome is already final.
            self.logger.warning(f"Directory teardown failed: {e}")

    async def _drive(self) -> None:
        self._state = SessionState.CONNECTING
        try:
            await asyncio.to_thread(self._transport.open)
        except DirectoryConnectionError as e:
            self.on_connection_error(e)
            return
        if self.settled:
            return

        try:
            await asyncio.to_thread(self._transport.bind, self._bind_dn, self._bind_secret)
        except DirectoryAuthenticationError as e:
            self.on_bind_error(e)
            return
        except DirectoryConnectionError as e:
            self.on_connection_error(e)
            return
        if self.settled:
            return
        self._state = SessionState.BOUND
        self.logger.info(f"Bind successful, searching {self._search.base}")

        self._state = SessionState.SEARCHING
        try:
            await self._consume_pages()
        except DirectorySearchError as e:
            self.on_search_error(e)
            if not e.soft:
                return
        except DirectoryConnectionError as e:
            self.on_connection_error(e)
            return
        if self.settled:
            return

        self.logger.info(f"Search completed. Found {len(self._entries)} entries")
        self.on_search_end()

    async def _consume_pages(self) -> None:
        cookie: Optional[bytes] = None
        while True:
            page = await asyncio.to_thread(self._transport.search_page, self._search, cookie)
            for entry in page.entries:
                if not self.on_search_entry(entry):
                    return
                if len(self._entries) >= self._search.size_limit:
                    # Client-side cap; servers are not required to enforce size_limit.
                    self.on_search_error(DirectorySizeLimitExceeded())
                    return
            if page.size_limit_exceeded:
                self.on_search_error(DirectorySizeLimitExceeded())
                return
            cookie = page.cookie
            if not cookie:
                return
