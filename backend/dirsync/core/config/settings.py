"""Application settings loaded from the environment."""

from typing import Optional

from pydantic import PostgresDsn, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dirsync.core.config.enums import Environment


class Settings(BaseSettings):
    """Settings for the directory sync service.

    Values come from environment variables (or a local ``.env`` file).
    Directory timeouts and search bounds default to the values used by the
    scheduled sync and the interactive connection test respectively.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "Directory Sync"
    ENVIRONMENT: Environment = Environment.LOCAL
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "dirsync"
    POSTGRES_PASSWORD: str = "dirsync"
    POSTGRES_DB: str = "dirsync"
    POSTGRES_SSLMODE: str = "prefer"
    SQLALCHEMY_ASYNC_DATABASE_URI: Optional[PostgresDsn] = None

    db_pool_size: int = 10
    db_pool_max_overflow: int = 20

    # Directory sessions
    DIRECTORY_SYNC_TIMEOUT_SECONDS: float = 30.0
    DIRECTORY_TEST_TIMEOUT_SECONDS: float = 5.0
    DIRECTORY_SYNC_SIZE_LIMIT: int = 500
    DIRECTORY_SYNC_PAGE_SIZE: int = 100
    DIRECTORY_TEST_SIZE_LIMIT: int = 5
    DIRECTORY_TEST_PAGE_SIZE: int = 5
    DIRECTORY_SYNC_DEFAULT_INTERVAL_SECONDS: int = 3600
    DIRECTORY_SYNC_MAX_CONCURRENCY: int = 1

    # Shared secret for the trigger / admin endpoints
    CRON_SECRET: Optional[SecretStr] = None

    @field_validator("DIRECTORY_SYNC_MAX_CONCURRENCY")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("DIRECTORY_SYNC_MAX_CONCURRENCY must be >= 1")
        return v

    @model_validator(mode="after")
    def _assemble_db_uri(self) -> "Settings":
        """Build the asyncpg DSN from the POSTGRES_* parts unless given explicitly."""
        if self.SQLALCHEMY_ASYNC_DATABASE_URI is None:
            self.SQLALCHEMY_ASYNC_DATABASE_URI = PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_HOST,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        return self
