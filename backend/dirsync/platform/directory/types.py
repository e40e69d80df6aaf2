"""Value objects shared by the directory session, transport and normalizer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from dirsync.platform.directory.exceptions import DirectorySessionError

# Attribute name -> first value. Multi-valued attributes keep only their first
# value; reconciliation outcomes depend on this.
RawEntry = Dict[str, str]

# Excludes computer objects and disabled accounts (userAccountControl bit 2).
DEFAULT_USER_SEARCH_FILTER = (
    "(&(objectClass=user)(objectCategory=person)(!(objectClass=computer))"
    "(!(userAccountControl:1.2.840.113556.1.4.803:=2)))"
)

USER_ATTRIBUTES: Tuple[str, ...] = (
    "sAMAccountName",
    "uid",
    "mail",
    "email",
    "userPrincipalName",
    "displayName",
    "cn",
)

LDAP_PORT = 389
LDAPS_PORT = 636


class SessionState(str, Enum):
    """Lifecycle of a ProtocolSession. SETTLED is terminal."""

    IDLE = "idle"
    CONNECTING = "connecting"
    BOUND = "bound"
    SEARCHING = "searching"
    SETTLED = "settled"


@dataclass(frozen=True)
class DirectoryEndpoint:
    """Where to connect: host, port and whether to wrap the socket in TLS."""

    host: str
    port: Optional[int] = None
    use_tls: bool = False

    @property
    def effective_port(self) -> int:
        """Configured port, else the protocol default."""
        if self.port:
            return self.port
        return LDAPS_PORT if self.use_tls else LDAP_PORT

    @property
    def url(self) -> str:
        """ldap:// or ldaps:// URL, for logs and connection-test results."""
        scheme = "ldaps" if self.use_tls else "ldap"
        return f"{scheme}://{self.host}:{self.effective_port}"


@dataclass(frozen=True)
class SearchRequest:
    """A subtree search with client-side size and page bounds."""

    base: str
    filter: str = DEFAULT_USER_SEARCH_FILTER
    attributes: Tuple[str, ...] = USER_ATTRIBUTES
    size_limit: int = 500
    page_size: int = 100


@dataclass(frozen=True)
class SearchPage:
    """One page of search results as returned by a transport.

    ``cookie`` is empty when the server has no further pages.
    ``size_limit_exceeded`` marks the soft size-limit condition: the entries
    are still valid and the search should finish normally.
    """

    entries: List[RawEntry] = field(default_factory=list)
    cookie: Optional[bytes] = None
    size_limit_exceeded: bool = False


@dataclass(frozen=True)
class SessionOutcome:
    """The single result of a ProtocolSession.

    ``entries`` holds everything buffered before settlement, also on failure.
    """

    entries: Tuple[RawEntry, ...] = ()
    error: Optional["DirectorySessionError"] = None
    size_limit_exceeded: bool = False

    @property
    def success(self) -> bool:
        """True when the search reached its end without a fatal error."""
        return self.error is None


@dataclass(frozen=True)
class DirectoryIdentity:
    """A user found in the directory during one pass."""

    account_name: str
    email: str
    display_name: str
