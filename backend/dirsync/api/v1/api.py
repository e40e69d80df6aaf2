"""API routes for the FastAPI application."""

from dirsync.api.router import TrailingSlashRouter
from dirsync.api.v1.endpoints import directory_sync, health

api_router = TrailingSlashRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    directory_sync.router, prefix="/directory-sync", tags=["directory-sync"]
)
