# tenant_auth/licences/models.py
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from ..utils.time import ensure_utc


class TenantLicenceCreate(BaseModel):
    """Model handed to the licence store when a tenant is provisioned."""
    tenant_id: str
    licence_key: str
    licenced_seats: int = Field(ge=0)
    used_seats: int = Field(default=0, ge=0)
    expiry_date: Optional[datetime] = None

    @field_validator("expiry_date")
    @classmethod
    def normalize_expiry(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @model_validator(mode="after")
    def check_seats(self) -> "TenantLicenceCreate":
        if self.used_seats > self.licenced_seats:
            raise ValueError("used_seats cannot exceed licenced_seats")
        return self


class TenantLicenceUpdate(BaseModel):
    """
    Partial licence update. The licence key is not updatable.

    Leaving ``expiry_date`` unset keeps the current value; setting it to None
    removes the expiry.
    """
    licenced_seats: Optional[int] = Field(default=None, ge=0)
    expiry_date: Optional[datetime] = None

    @field_validator("expiry_date")
    @classmethod
    def normalize_expiry(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class TenantLicenceInDB(BaseModel):
    """Immutable licence record as stored in the database."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    tenant_id: str
    licence_key: str
    licenced_seats: int
    used_seats: int
    expiry_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
