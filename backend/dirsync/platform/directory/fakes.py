"""Fake directory transports for testing."""

import threading
from typing import Dict, List, Optional

from dirsync.platform.directory.exceptions import (
    DirectoryAuthenticationError,
    DirectoryConnectionError,
    DirectorySearchError,
)
from dirsync.platform.directory.types import DirectoryEndpoint, SearchPage, SearchRequest


class FakeDirectoryTransport:
    """Scripted in-memory DirectoryTransport.

    ``block_on`` names a step ("open", "bind" or "search") that blocks until
    ``release`` is set or ``close`` is called, mimicking a hung server that
    only a forced teardown interrupts.
    """

    def __init__(
        self,
        *,
        pages: Optional[List[SearchPage]] = None,
        open_error: Optional[DirectoryConnectionError] = None,
        bind_error: Optional[DirectoryAuthenticationError] = None,
        search_error: Optional[DirectorySearchError] = None,
        block_on: Optional[str] = None,
    ) -> None:
        """Configure the script."""
        self.pages = list(pages if pages is not None else [SearchPage()])
        self.open_error = open_error
        self.bind_error = bind_error
        self.search_error = search_error
        self.block_on = block_on
        self.release = threading.Event()
        self.blocked = threading.Event()
        self.calls: List[tuple] = []
        self.close_calls: List[bool] = []
        self._search_count = 0

    def _maybe_block(self, step: str) -> None:
        if self.block_on == step:
            self.blocked.set()
            self.release.wait(timeout=5)

    def open(self) -> None:
        """Record and optionally fail."""
        self.calls.append(("open",))
        self._maybe_block("open")
        if self.open_error is not None:
            raise self.open_error

    def bind(self, bind_dn: str, secret: str) -> None:
        """Record the DN (never the secret) and optionally fail."""
        self.calls.append(("bind", bind_dn))
        self._maybe_block("bind")
        if self.bind_error is not None:
            raise self.bind_error

    def search_page(self, request: SearchRequest, cookie: Optional[bytes]) -> SearchPage:
        """Return the next scripted page."""
        self.calls.append(("search", request, cookie))
        self._maybe_block("search")
        if self.search_error is not None:
            raise self.search_error
        index = self._search_count
        self._search_count += 1
        if index < len(self.pages):
            return self.pages[index]
        return SearchPage()

    def close(self, force: bool = False) -> None:
        """Record the call and unblock any pending step."""
        self.close_calls.append(force)
        self.release.set()


class FakeTransportFactory:
    """TransportFactory returning scripted transports by host."""

    def __init__(self, transports: Optional[Dict[str, FakeDirectoryTransport]] = None) -> None:
        """Map host -> transport; unknown hosts get a default empty transport."""
        self.transports = dict(transports or {})
        self.requests: List[tuple] = []

    def __call__(self, endpoint: DirectoryEndpoint, timeout_seconds: float) -> FakeDirectoryTransport:
        """Hand out the scripted transport for ``endpoint.host``."""
        self.requests.append((endpoint, timeout_seconds))
        if endpoint.host not in self.transports:
            self.transports[endpoint.host] = FakeDirectoryTransport()
        return self.transports[endpoint.host]
