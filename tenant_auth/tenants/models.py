# tenant_auth/tenants/models.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from ..users.models import UserRegistration, UserInDB
from ..licences.models import TenantLicenceInDB
from ..utils.email import normalize_email


class TenantBase(BaseModel):
    """Base model containing common tenant fields shared across operations."""
    name: str = Field(min_length=1)
    email: str = Field(description="Contact address; its domain identifies the tenant.")
    phone: str = ""
    address: str = ""

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class TenantRegistration(TenantBase):
    """Request model for provisioning a tenant together with its first administrator."""
    user: UserRegistration = Field(description="The tenant's first (admin) user.")


class TenantCreate(TenantBase):
    """Model handed to the tenant store when inserting a new tenant."""
    pass


class TenantUpdate(BaseModel):
    """Model for partial tenant updates - all fields are optional."""
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        return normalize_email(value) if value is not None else None


class TenantInDB(TenantBase):
    """Immutable tenant record as stored in the database."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class ProvisionedTenant(BaseModel):
    """Everything created by a successful tenant registration."""
    model_config = ConfigDict(frozen=True)

    tenant: TenantInDB
    licence: TenantLicenceInDB
    admin_user: UserInDB
