"""Directory sync configuration model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dirsync.models._base import TenantBase


class DirectorySyncConfig(TenantBase):
    """Connection and schedule settings for syncing one tenant from a directory.

    Written by tenant administration; the sync engine only reads it and
    stamps ``last_sync_at``.
    """

    __tablename__ = "directory_sync_config"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    host: Mapped[str] = mapped_column(String(255), nullable=False)
    port: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    use_tls: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    base_dn: Mapped[str] = mapped_column(String(1024), nullable=False)
    bind_dn: Mapped[str] = mapped_column(String(1024), nullable=False)
    bind_secret: Mapped[str] = mapped_column(String(1024), nullable=False)
    user_search_base: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    user_search_filter: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sync_interval_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sync_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("idx_directory_sync_config_eligible", "is_active", "sync_enabled"),
    )
