"""Local user model."""

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column

from dirsync.models._base import TenantBase

# Users provisioned from a directory have no local password.
DIRECTORY_PROVISIONED_PASSWORD = ""


class User(TenantBase):
    """A user account in one tenant's local store."""

    __tablename__ = "user"

    email: Mapped[str] = mapped_column(String(320), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password: Mapped[str] = mapped_column(
        String(255), default=DIRECTORY_PROVISIONED_PASSWORD, nullable=False
    )
    role: Mapped[str] = mapped_column(String(50), default="USER", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_user_tenant_email"),)

    @hybrid_property
    def has_directory_provenance(self) -> bool:
        """True for accounts created by directory sync (empty local password)."""
        return self.password == DIRECTORY_PROVISIONED_PASSWORD
