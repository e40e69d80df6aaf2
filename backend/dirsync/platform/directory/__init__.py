"""Directory protocol layer: transports, sessions and entry normalization."""

from dirsync.platform.directory.normalizer import EntryNormalizer, SampleUser
from dirsync.platform.directory.session import ProtocolSession
from dirsync.platform.directory.transport import (
    DirectoryTransport,
    Ldap3Transport,
    TransportFactory,
    ldap3_transport_factory,
)
from dirsync.platform.directory.types import (
    DEFAULT_USER_SEARCH_FILTER,
    DirectoryEndpoint,
    DirectoryIdentity,
    RawEntry,
    SearchPage,
    SearchRequest,
    SessionOutcome,
    SessionState,
)

__all__ = [
    "DEFAULT_USER_SEARCH_FILTER",
    "DirectoryEndpoint",
    "DirectoryIdentity",
    "DirectoryTransport",
    "EntryNormalizer",
    "Ldap3Transport",
    "ProtocolSession",
    "RawEntry",
    "SampleUser",
    "SearchPage",
    "SearchRequest",
    "SessionOutcome",
    "SessionState",
    "TransportFactory",
    "ldap3_transport_factory",
]
