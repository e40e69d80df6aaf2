"""Directory sync schemas.

Request and response models use camelCase on the wire (``totalConfigs``,
``serverAddress``, ``useTLS``, ``baseDN``) and snake_case in Python.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from dirsync.platform.directory.types import DEFAULT_USER_SEARCH_FILTER, DirectoryEndpoint


# Directory acronyms stay upper-case on the wire: useTLS, baseDN, bindDN.
_WIRE_ACRONYMS = {"dn": "DN", "tls": "TLS"}


def wire_alias(field_name: str) -> str:
    """snake_case -> camelCase, keeping directory acronyms upper-case."""
    head, *rest = field_name.split("_")
    return head + "".join(_WIRE_ACRONYMS.get(word, word.capitalize()) for word in rest)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=wire_alias, populate_by_name=True)


class SyncConfiguration(BaseModel):
    """A stored directory sync configuration as the sync engine sees it.

    ``bind_secret`` is a ``SecretStr`` so it never shows up in reprs or logs.
    """

    id: UUID
    tenant_id: UUID
    name: str
    host: str
    port: Optional[int] = None
    use_tls: bool = False
    base_dn: str
    bind_dn: str
    bind_secret: SecretStr
    user_search_base: Optional[str] = None
    user_search_filter: Optional[str] = None
    sync_interval_seconds: Optional[int] = None
    last_sync_at: Optional[datetime] = None
    is_active: bool = True
    sync_enabled: bool = False

    model_config = ConfigDict(from_attributes=True)

    @property
    def endpoint(self) -> DirectoryEndpoint:
        """Host, port and TLS flag as a DirectoryEndpoint."""
        return DirectoryEndpoint(host=self.host, port=self.port, use_tls=self.use_tls)

    @property
    def effective_search_base(self) -> str:
        """Search base, defaulting to the base DN."""
        return self.user_search_base or self.base_dn

    @property
    def effective_search_filter(self) -> str:
        """Search filter, defaulting to the built-in user filter."""
        return self.user_search_filter or DEFAULT_USER_SEARCH_FILTER


class SyncRunResult(_CamelModel):
    """Outcome of syncing one configuration in one pass."""

    config_id: UUID
    config_name: Optional[str] = None
    success: bool
    users_found: int = 0
    users_created: int = 0
    users_updated: int = 0
    users_deactivated: int = 0
    error: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=wire_alias,
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "configId": "7c9f5a8e-1d2b-4c3a-9e8f-0a1b2c3d4e5f",
                "configName": "Head office AD",
                "success": True,
                "usersFound": 42,
                "usersCreated": 3,
                "usersUpdated": 39,
                "usersDeactivated": 1,
                "error": None,
            }
        },
    )


class SyncBatchResult(_CamelModel):
    """Aggregate result of one orchestrator run."""

    total_configs: int
    results: List[SyncRunResult] = Field(default_factory=list)


class ConnectionTestRequest(_CamelModel):
    """Administrator-supplied parameters for a connection test."""

    server_address: str = Field(..., min_length=1)
    domain: str = Field(..., min_length=1)
    admin_username: str = Field(..., min_length=1)
    admin_password: SecretStr
    port: Optional[int] = None
    use_tls: bool = False

    model_config = ConfigDict(
        alias_generator=wire_alias,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "serverAddress": "dc01.acme.com",
                "domain": "acme.com",
                "adminUsername": "svc-sync",
                "adminPassword": "********",
                "port": 389,
                "useTLS": False,
            }
        },
    )

    @property
    def endpoint(self) -> DirectoryEndpoint:
        """Host, port and TLS flag as a DirectoryEndpoint."""
        return DirectoryEndpoint(host=self.server_address, port=self.port, use_tls=self.use_tls)


class SampleUser(_CamelModel):
    """One previewed directory user."""

    cn: str
    username: str
    email: str


class ConnectionTestResult(_CamelModel):
    """Result of a connection test.

    On failure ``error`` holds the human-readable message and ``error_kind``
    names the failing stage (``connection``, ``authentication``, ``search``,
    ``timeout``, or ``unknown`` for unexpected errors).
    """

    success: bool
    message: Optional[str] = None
    users_count: int = 0
    sample_users: List[SampleUser] = Field(default_factory=list)
    base_dn: str
    bind_dn: str
    ldap_url: str
    error: Optional[str] = None
    error_kind: Optional[str] = None
