"""Blocking directory transports.

A transport owns one socket to one directory server. Its methods block and
are driven from worker threads by ``ProtocolSession``; they translate ldap3
results and exceptions into ``DirectorySessionError`` subclasses so the
session only ever sees classified failures.
"""

import socket
import ssl
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol

from ldap3 import NONE, SIMPLE, SUBTREE, Connection, Server, Tls
from ldap3.core.exceptions import (
    LDAPException,
    LDAPResponseTimeoutError,
    LDAPSocketReceiveError,
)

from dirsync.core.logging import ContextualLogger
from dirsync.core.logging import logger as default_logger
from dirsync.platform.directory.exceptions import (
    RESULT_SIZE_LIMIT_EXCEEDED,
    RESULT_SUCCESS,
    AuthenticationFailureKind,
    DirectoryAuthenticationError,
    DirectoryConnectionError,
    DirectorySearchError,
    classify_bind_failure,
    classify_connection_failure,
)
from dirsync.platform.directory.types import DirectoryEndpoint, RawEntry, SearchPage, SearchRequest

# Simple Paged Results control (RFC 2696)
PAGED_RESULTS_OID = "1.2.840.113556.1.4.319"


class DirectoryTransport(Protocol):
    """One connection to a directory server."""

    def open(self) -> None:
        """Open the socket (TLS-wrapped when configured)."""
        ...

    def bind(self, bind_dn: str, secret: str) -> None:
        """Perform a simple bind."""
        ...

    def search_page(self, request: SearchRequest, cookie: Optional[bytes]) -> SearchPage:
        """Fetch the page after ``cookie`` (first page when None)."""
        ...

    def close(self, force: bool = False) -> None:
        """Unbind and release the socket. Idempotent.

        ``force`` shuts the socket down first so that a call blocked in
        another thread returns immediately.
        """
        ...


TransportFactory = Callable[[DirectoryEndpoint, float], DirectoryTransport]


def first_values(attributes: Dict[str, Any]) -> RawEntry:
    """Reduce an ldap3 attribute mapping to attribute -> first value as text.

    Empty attributes are dropped.
    """
    entry: RawEntry = {}
    for name, value in attributes.items():
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = value[0]
        if value is None:
            continue
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        text = str(value)
        if text:
            entry[name] = text
    return entry


class Ldap3Transport:
    """DirectoryTransport backed by an ldap3 synchronous connection.

    TLS mode negotiates encryption but does not validate the server
    certificate chain; Active Directory deployments commonly use
    self-signed certificates.
    """

    def __init__(
        self,
        endpoint: DirectoryEndpoint,
        timeout_seconds: float,
        logger: Optional[ContextualLogger] = None,
    ):
        """Prepare a transport; no I/O happens until ``open``."""
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.logger = logger or default_logger.with_context(component="ldap_transport")
        self._connection: Optional[Connection] = None
        self._closed = False
        self._lock = threading.Lock()

    def _build_connection(self) -> Connection:
        tls_config = None
        if self.endpoint.use_tls:
            tls_config = Tls(validate=ssl.CERT_NONE)
        server = Server(
            self.endpoint.host,
            port=self.endpoint.effective_port,
            use_ssl=self.endpoint.use_tls,
            tls=tls_config,
            get_info=NONE,
            connect_timeout=self.timeout_seconds,
        )
        return Connection(
            server,
            authentication=SIMPLE,
            read_only=True,
            raise_exceptions=False,
            receive_timeout=self.timeout_seconds,
        )

    def _require_connection(self) -> Connection:
        conn = self._connection
        if conn is None or self._closed:
            raise DirectoryConnectionError("Connection is closed", host=self.endpoint.host)
        return conn

    def open(self) -> None:
        """Open the socket; raises DirectoryConnectionError with a classified kind."""
        conn = self._build_connection()
        with self._lock:
            if self._closed:
                raise DirectoryConnectionError("Connection is closed", host=self.endpoint.host)
            self._connection = conn

        try:
            conn.open()
        except (LDAPException, OSError) as e:
            raise DirectoryConnectionError(
                str(e),
                kind=classify_connection_failure(e),
                host=self.endpoint.host,
                port=self.endpoint.effective_port,
            ) from e

        if self._closed:
            # close() ran while the socket was still connecting
            self._teardown(conn, force=True)
            raise DirectoryConnectionError("Connection is closed", host=self.endpoint.host)

        self.logger.debug(f"Socket open to {self.endpoint.url}")

    def bind(self, bind_dn: str, secret: str) -> None:
        """Simple bind; raises DirectoryAuthenticationError with a classified kind."""
        conn = self._require_connection()
        conn.user = bind_dn
        conn.password = secret
        try:
            bound = conn.bind()
        except (LDAPResponseTimeoutError, LDAPSocketReceiveError) as e:
            raise DirectoryAuthenticationError(
                str(e), kind=AuthenticationFailureKind.TIMEOUT
            ) from e
        except LDAPException as e:
            raise DirectoryAuthenticationError(
                str(e), kind=classify_bind_failure(message=str(e))
            ) from e
        finally:
            conn.password = None

        if not bound:
            result = conn.result or {}
            code = result.get("result")
            description = result.get("description") or "Bind failed"
            message = result.get("message") or ""
            raise DirectoryAuthenticationError(
                f"{description}: {message}" if message else description,
                kind=classify_bind_failure(code, description),
            )

    def search_page(self, request: SearchRequest, cookie: Optional[bytes]) -> SearchPage:
        """Run one paged search request.

        Result code 4 (size limit exceeded) yields a page flagged
        ``size_limit_exceeded``; any other non-success code raises
        DirectorySearchError.
        """
        conn = self._require_connection()
        try:
            conn.search(
                search_base=request.base,
                search_filter=request.filter,
                search_scope=SUBTREE,
                attributes=list(request.attributes),
                size_limit=request.size_limit,
                time_limit=int(self.timeout_seconds),
                paged_size=request.page_size,
                paged_cookie=cookie,
            )
        except LDAPException as e:
            raise DirectorySearchError(str(e)) from e

        result = conn.result or {}
        code = result.get("result", RESULT_SUCCESS)
        entries: List[RawEntry] = [
            first_values(item.get("attributes") or {})
            for item in (conn.response or [])
            if item.get("type") == "searchResEntry"
        ]

        if code == RESULT_SIZE_LIMIT_EXCEEDED:
            return SearchPage(entries=entries, cookie=None, size_limit_exceeded=True)
        if code != RESULT_SUCCESS:
            description = result.get("description") or "search failed"
            message = result.get("message") or ""
            raise DirectorySearchError(
                f"{description}: {message}" if message else description, result_code=code
            )

        next_cookie = (
            result.get("controls", {}).get(PAGED_RESULTS_OID, {}).get("value", {}).get("cookie")
        )
        return SearchPage(entries=entries, cookie=next_cookie or None)

    def close(self, force: bool = False) -> None:
        """Unbind once; later calls are no-ops."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            conn, self._connection = self._connection, None
        if conn is not None:
            self._teardown(conn, force=force)

    def _teardown(self, conn: Connection, force: bool) -> None:
        if force:
            sock = getattr(conn, "socket", None)
            if sock is not None:
                try:
                    sock.shutdown(socket.SHUT_RDWR)
                except OSError as e:
                    self.logger.debug(f"Socket shutdown failed (already closed?): {e}")
        try:
            conn.unbind()
        except (LDAPException, OSError) as e:
            self.logger.debug(f"Unbind failed during teardown: {e}")


def ldap3_transport_factory(endpoint: DirectoryEndpoint, timeout_seconds: float) -> Ldap3Transport:
    """Default TransportFactory."""
    return Ldap3Transport(endpoint, timeout_seconds)


__all__ = [
    "DirectoryTransport",
    "Ldap3Transport",
    "TransportFactory",
    "first_values",
    "ldap3_transport_factory",
]
