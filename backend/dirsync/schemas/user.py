"""Local identity schemas."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class LocalIdentityBase(BaseModel):
    """Base schema for a local identity."""

    email: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class LocalIdentityCreate(LocalIdentityBase):
    """Schema for provisioning a local identity from the directory."""

    is_active: bool = True


class LocalIdentityUpdate(BaseModel):
    """Schema for updating a local identity."""

    name: Optional[str] = None
    is_active: Optional[bool] = None


class LocalIdentity(LocalIdentityBase):
    """A local identity as stored."""

    id: UUID
    tenant_id: UUID
    is_active: bool
    has_directory_provenance: bool
