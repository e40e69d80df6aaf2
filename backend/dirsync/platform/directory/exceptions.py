"""Directory session errors and their classification.

Every fatal session error carries a ``user_message``: the cause-keyed text the
connection test shows to administrators. Scheduled syncs record ``str(exc)``.
"""

import socket
from enum import Enum
from typing import Iterator, Optional

# LDAP result codes (RFC 4511)
RESULT_SUCCESS = 0
RESULT_SIZE_LIMIT_EXCEEDED = 4
RESULT_INVALID_CREDENTIALS = 49

_HOST_NOT_FOUND_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo",
    "name resolution",
    "no address associated",
    "enotfound",
)
_RESET_MARKERS = ("connection reset", "econnreset", "reset by peer")
_REFUSED_OR_TIMEOUT_MARKERS = ("refused", "econnrefused", "timed out", "etimedout", "timeout")


class ConnectionFailureKind(str, Enum):
    """Why the socket could not be established."""

    HOST_NOT_FOUND = "host_not_found"
    REFUSED_OR_TIMED_OUT = "refused_or_timed_out"
    RESET = "reset"
    OTHER = "other"


class AuthenticationFailureKind(str, Enum):
    """Why the bind was rejected."""

    INVALID_CREDENTIALS = "invalid_credentials"
    TIMEOUT = "timeout"
    OTHER = "other"


class DirectorySessionError(Exception):
    """Base class for errors that settle a directory session."""

    def __init__(self, message: str):
        """Create a new DirectorySessionError instance.

        Args:
        ----
            message (str): Description of the failure. Never contains secrets.

        """
        self.message = message
        super().__init__(message)

    @property
    def user_message(self) -> str:
        """Human-readable explanation for administrators."""
        return self.message


class DirectoryConnectionError(DirectorySessionError):
    """The directory server could not be reached."""

    def __init__(
        self,
        message: str,
        kind: ConnectionFailureKind = ConnectionFailureKind.OTHER,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ):
        """Create a new DirectoryConnectionError instance.

        Args:
        ----
            message (str): Underlying socket error text.
            kind (ConnectionFailureKind): Classified cause.
            host (str, optional): Host that was dialed.
            port (int, optional): Port that was dialed.

        """
        self.kind = kind
        self.host = host
        self.port = port
        super().__init__(message)

    @property
    def user_message(self) -> str:
        """Point the administrator at the address or port."""
        if self.kind is ConnectionFailureKind.HOST_NOT_FOUND:
            return f"Server not found. Check address: {self.host}"
        if self.kind is ConnectionFailureKind.REFUSED_OR_TIMED_OUT:
            return f"Server unavailable. Check address and port: {self.host}:{self.port}"
        if self.kind is ConnectionFailureKind.RESET:
            return "Connection reset. Try using a different port (636 for SSL)"
        return f"Connection error: {self.message}"


class DirectoryAuthenticationError(DirectorySessionError):
    """The bind was rejected or did not complete."""

    def __init__(
        self,
        message: str,
        kind: AuthenticationFailureKind = AuthenticationFailureKind.OTHER,
    ):
        """Create a new DirectoryAuthenticationError instance.

        Args:
        ----
            message (str): Server diagnostic or client error text.
            kind (AuthenticationFailureKind): Classified cause.

        """
        self.kind = kind
        super().__init__(message)

    @property
    def user_message(self) -> str:
        """Point the administrator at the credentials."""
        if self.kind is AuthenticationFailureKind.INVALID_CREDENTIALS:
            return "Invalid username or password. Check admin credentials"
        if self.kind is AuthenticationFailureKind.TIMEOUT:
            return "Timeout exceeded. Check server address and port"
        return f"Authentication error: {self.message}"


class DirectorySearchError(DirectorySessionError):
    """An error on the search result stream.

    Soft errors (size limit exceeded) do not settle the session; every other
    search error is fatal.
    """

    soft = False

    def __init__(self, message: str, result_code: Optional[int] = None):
        """Create a new DirectorySearchError instance.

        Args:
        ----
            message (str): Server diagnostic or client error text.
            result_code (int, optional): LDAP result code when the server sent one.

        """
        self.result_code = result_code
        super().__init__(message)

    @property
    def user_message(self) -> str:
        """Report the search failure verbatim."""
        return f"Error getting results: {self.message}"


class DirectorySizeLimitExceeded(DirectorySearchError):
    """The server (or the client cap) stopped returning entries. Not fatal."""

    soft = True

    def __init__(self, message: str = "Size Limit Exceeded"):
        """Create a new DirectorySizeLimitExceeded instance."""
        super().__init__(message, result_code=RESULT_SIZE_LIMIT_EXCEEDED)


class DirectoryWatchdogTimeout(DirectorySessionError):
    """The session did not settle within its watchdog duration."""

    def __init__(self, seconds: float):
        """Create a new DirectoryWatchdogTimeout instance.

        Args:
        ----
            seconds (float): The watchdog duration that elapsed.

        """
        self.seconds = seconds
        super().__init__(f"Directory session exceeded {seconds:g} seconds")

    @property
    def user_message(self) -> str:
        """Ask the administrator to check reachability."""
        return (
            f"Connection timeout ({self.seconds:g} sec). "
            "Check server address and port availability."
        )


class IdentityReconciliationError(Exception):
    """Applying one directory identity to the local store failed."""

    def __init__(self, email: str, message: str):
        """Create a new IdentityReconciliationError instance.

        Args:
        ----
            email (str): Email of the identity being applied.
            message (str): Underlying store error text.

        """
        self.email = email
        self.message = message
        super().__init__(f"{email}: {message}")


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
        for linked in (current.__cause__, current.__context__):
            if linked is not None:
                pending.append(linked)


def classify_connection_failure(exc: BaseException) -> ConnectionFailureKind:
    """Map a socket-open failure to a ConnectionFailureKind.

    Typed OS errors anywhere in the chain win; otherwise the message text is
    inspected, since ldap3 folds the socket errors of every candidate address
    into a single string.
    """
    for err in _exception_chain(exc):
        if isinstance(err, socket.gaierror):
            return ConnectionFailureKind.HOST_NOT_FOUND
        if isinstance(err, ConnectionResetError):
            return ConnectionFailureKind.RESET
        if isinstance(err, (ConnectionRefusedError, TimeoutError, socket.timeout)):
            return ConnectionFailureKind.REFUSED_OR_TIMED_OUT

    text = " ".join(str(err) for err in _exception_chain(exc)).lower()
    if any(marker in text for marker in _HOST_NOT_FOUND_MARKERS):
        return ConnectionFailureKind.HOST_NOT_FOUND
    if any(marker in text for marker in _RESET_MARKERS):
        return ConnectionFailureKind.RESET
    if any(marker in text for marker in _REFUSED_OR_TIMEOUT_MARKERS):
        return ConnectionFailureKind.REFUSED_OR_TIMED_OUT
    return ConnectionFailureKind.OTHER


def classify_bind_failure(
    result_code: Optional[int] = None, message: str = ""
) -> AuthenticationFailureKind:
    """Map a bind result code or client error text to an AuthenticationFailureKind."""
    lowered = message.lower()
    if result_code == RESULT_INVALID_CREDENTIALS or "invalidcredentials" in lowered:
        return AuthenticationFailureKind.INVALID_CREDENTIALS
    if "timeout" in lowered or "timed out" in lowered:
        return AuthenticationFailureKind.TIMEOUT
    return AuthenticationFailureKind.OTHER
