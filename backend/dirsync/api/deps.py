"""Dependencies that are used in the API endpoints."""

import hmac
from typing import Optional, get_type_hints

from fastapi import Depends, Header, HTTPException

from dirsync.core import container as container_mod
from dirsync.core.config import settings
from dirsync.core.container import Container
from dirsync.core.logging import logger


def get_container() -> Container:
    """Get the DI container. Initialized at startup."""
    c = container_mod.container
    if c is None:
        raise RuntimeError("Container not initialized. Call initialize_container() first.")
    return c


# ---------------------------------------------------------------------------
# Protocol Injection
# ---------------------------------------------------------------------------

# Cache of protocol_type -> Container field name, built once at first call.
_INJECT_CACHE: dict[type, str] = {}


def _resolve_field_name(protocol_type: type) -> str:
    """Find which Container field matches the given protocol type."""
    if not _INJECT_CACHE:
        for name, hint in get_type_hints(Container).items():
            _INJECT_CACHE[hint] = name

    field_name = _INJECT_CACHE.get(protocol_type)
    if field_name is None:
        available = list(_INJECT_CACHE.values())
        raise TypeError(
            f"No binding for {protocol_type.__name__} in Container. Available fields: {available}"
        )
    return field_name


def Inject(protocol_type: type):  # noqa: N802
    """Resolve a protocol implementation from the DI container.

    Works like ``Depends()`` but looks up the implementation by protocol type::

        @router.post("/run")
        async def run(
            orchestrator: SyncOrchestratorProtocol = Inject(SyncOrchestratorProtocol),
        ):
            ...
    """
    field_name = _resolve_field_name(protocol_type)

    def _resolve(c: Container = Depends(get_container)):
        return getattr(c, field_name)

    return Depends(_resolve)


# ---------------------------------------------------------------------------
# Trigger authentication
# ---------------------------------------------------------------------------


async def require_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET>``.

    Raises:
    ------
        HTTPException: 401 when the header is missing or wrong, or no secret is configured.

    """
    secret = settings.CRON_SECRET
    if secret is None:
        logger.warning("Rejected directory sync request: CRON_SECRET is not configured")
        raise HTTPException(status_code=401, detail="Unauthorized")

    expected = f"Bearer {secret.get_secret_value()}"
    if authorization is None or not hmac.compare_digest(
        authorization.encode(), expected.encode()
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")
