"""Main module of the FastAPI application.

This module sets up the FastAPI application, its middleware and its exception
handlers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from dirsync.api.middleware import (
    add_request_id,
    dirsync_exception_handler,
    exception_logging_middleware,
    invalid_state_exception_handler,
    log_requests,
    not_found_exception_handler,
)
from dirsync.api.router import TrailingSlashRouter
from dirsync.api.v1.api import api_router
from dirsync.core.config import settings
from dirsync.core.exceptions import (
    DirSyncException,
    InvalidStateError,
    NotFoundException,
)
from dirsync.core.logging import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the DI container on startup."""
    from dirsync.core import container as container_mod
    from dirsync.core.container import initialize_container

    if container_mod.container is None:
        logger.info("Initializing dependency injection container...")
        initialize_container(settings)
        logger.info("Container initialized successfully")

    yield

    from dirsync.db.session import async_engine

    await async_engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url="/openapi.json",
    lifespan=lifespan,
    router=TrailingSlashRouter(),
    redirect_slashes=False,
)

app.include_router(api_router, prefix="/api/v1")

# First registered = innermost
app.middleware("http")(exception_logging_middleware)
app.middleware("http")(log_requests)
app.middleware("http")(add_request_id)

app.exception_handler(NotFoundException)(not_found_exception_handler)
app.exception_handler(InvalidStateError)(invalid_state_exception_handler)
app.exception_handler(DirSyncException)(dirsync_exception_handler)
