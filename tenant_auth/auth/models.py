# tenant_auth/auth/models.py
from pydantic import BaseModel, ConfigDict, Field

from ..users.models import UserRole


class LoginRequest(BaseModel):
    """Credentials submitted by a user trying to log in."""
    email: str
    password: str = Field(min_length=1)


class LoginResult(BaseModel):
    """Verified identity produced by a successful login."""
    model_config = ConfigDict(frozen=True)

    tenant_id: str
    user_id: str
    email: str
    role: UserRole
