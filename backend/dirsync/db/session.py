"""Database session configuration."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from dirsync.core.config import settings

POOL_SIZE = settings.db_pool_size
MAX_OVERFLOW = settings.db_pool_max_overflow

connect_args_config = {
    "server_settings": {
        # Kill idle transactions after 5 minutes
        "idle_in_transaction_session_timeout": "300000",
    },
    "command_timeout": 60,
}

if settings.POSTGRES_SSLMODE == "disable":
    connect_args_config["ssl"] = False

async_engine = create_async_engine(
    str(settings.SQLALCHEMY_ASYNC_DATABASE_URI),
    pool_size=POOL_SIZE,
    max_overflow=MAX_OVERFLOW,
    pool_pre_ping=True,
    pool_recycle=300,
    pool_timeout=30,
    isolation_level="READ COMMITTED",
    connect_args=connect_args_config,
)

AsyncSessionLocal = async_sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=async_engine
)


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session that can be used as a context manager.

    Yields:
        AsyncSession: An async database session

    Example:
    -------
        async with get_db_context() as db:
            await db.execute(...)

    """
    async with AsyncSessionLocal() as db:
        try:
            yield db
        finally:
            await db.close()
