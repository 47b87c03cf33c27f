# tenant_auth/users/service.py
import logging
from datetime import datetime
from typing import Literal, Optional, List

from .models import User, UserUpdate
from .storage_interfaces import AbstractUserStore
from ..errors import UserAlreadyExistsError, UserNotFoundError
from ..settings import settings
from ..utils.email import email_domain
from ..utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class UserService:
    """Read and profile-edit operations for users; seats are handled by UserRegistrar."""

    def __init__(
        self,
        user_store: AbstractUserStore,
        uniqueness: Optional[Literal["domain", "email"]] = None,
    ):
        self.user_store = user_store
        self.uniqueness = uniqueness or settings.user_uniqueness

    async def _ensure_email_available(self, user_id: str, email: str) -> None:
        if self.uniqueness == "domain":
            domain = email_domain(email)
            holder = await self.user_store.get_user_by_email_domain(domain)
            if holder is not None and holder.id != user_id:
                logger.warning(f"Service: Domain '{domain}' is already used by user '{holder.id}'.")
                raise UserAlreadyExistsError(f"A user already exists for domain '{domain}'.")
        holder = await self.user_store.get_user_by_email(email)
        if holder is not None and holder.id != user_id:
            raise UserAlreadyExistsError(f"User '{email}' already exists.")

    async def get_user(self, tenant_id: str, user_id: str) -> User:
        logger.info(f"Service: Getting user '{user_id}' of tenant '{tenant_id}'")
        user = await self.user_store.get_user_by_id(tenant_id, user_id)
        if user is None:
            raise UserNotFoundError(f"User '{user_id}' not found in tenant '{tenant_id}'.")
        return User.model_validate(user)

    async def list_users(self, tenant_id: str) -> List[User]:
        logger.info(f"Service: Listing users of tenant '{tenant_id}'")
        return [User.model_validate(user) for user in await self.user_store.list_users(tenant_id)]

    async def update_user(
        self,
        tenant_id: str,
        user_id: str,
        user_update: UserUpdate,
        as_of: Optional[datetime] = None,
    ) -> User:
        """
        Change a user's name or email. Only fields that were explicitly set are applied.

        A new email follows the same uniqueness policy as registration.

        Raises:
            UserNotFoundError: No active user with that id in the tenant
            UserAlreadyExistsError: The new email (or its domain, by policy) belongs to another active user
        """
        logger.info(f"Service: Updating user '{user_id}' of tenant '{tenant_id}'")
        current = await self.user_store.get_user_by_id(tenant_id, user_id)
        if current is None:
            raise UserNotFoundError(f"User '{user_id}' not found in tenant '{tenant_id}'.")

        update_fields = user_update.model_dump(exclude_unset=True, exclude_none=True)
        if not update_fields:
            return User.model_validate(current)

        if "email" in update_fields and update_fields["email"] != current.email:
            await self._ensure_email_available(user_id, update_fields["email"])

        update_fields["updated_at"] = ensure_utc(as_of) or utcnow()
        updated = await self.user_store.update_user(current.model_copy(update=update_fields))
        if updated is None:
            raise UserNotFoundError(f"User '{user_id}' not found in tenant '{tenant_id}'.")
        return User.model_validate(updated)
