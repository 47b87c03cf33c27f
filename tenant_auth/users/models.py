# tenant_auth/users/models.py
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from ..utils.email import normalize_email


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    TENANT_ADMIN = "tenant_admin"
    TENANT_USER = "tenant_user"


class UserRegistration(BaseModel):
    """Request model for adding a user; the password is hashed before it reaches storage."""
    first_name: str
    last_name: str
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class UserCreate(BaseModel):
    """Model handed to the user store when inserting a new user."""
    tenant_id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str
    role: UserRole
    is_active: bool = True


class UserUpdate(BaseModel):
    """Model for partial profile updates - all fields are optional."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        return normalize_email(value) if value is not None else None


class UserInDB(BaseModel):
    """Immutable user record as stored in the database, secrets included."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    tenant_id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str
    role: UserRole
    is_active: bool = True
    failed_login_attempts: int = 0
    last_login_at: Optional[datetime] = None
    last_login_ip: str = ""
    is_email_verified: bool = False
    email_verification_token: str = ""
    email_verification_token_expires_at: Optional[datetime] = None
    reset_password_token: str = ""
    reset_password_token_expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class User(BaseModel):
    """Model for user data returned to callers; never carries the hash or tokens."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    first_name: str
    last_name: str
    email: str
    role: UserRole
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
