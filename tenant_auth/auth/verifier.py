# tenant_auth/auth/verifier.py
import logging
from datetime import datetime
from typing import Optional

from .hashing import CredentialHasherProtocol
from .models import LoginRequest, LoginResult
from ..errors import (
    AccountLockedError,
    InvalidCredentialError,
    TenantNotFoundError,
    UserNotFoundError,
)
from ..settings import settings
from ..tenants.storage_interfaces import AbstractTenantStore
from ..users.models import UserInDB
from ..users.storage_interfaces import AbstractUserStore
from ..utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class CredentialVerifier:
    """Authenticates login attempts and keeps the failed-attempt lockout counter."""

    def __init__(
        self,
        user_store: AbstractUserStore,
        tenant_store: AbstractTenantStore,
        hasher: CredentialHasherProtocol,
        max_failed_login_attempts: Optional[int] = None,
    ):
        self.user_store = user_store
        self.tenant_store = tenant_store
        self.hasher = hasher
        self.max_failed_login_attempts = max_failed_login_attempts or settings.max_failed_login_attempts

    def is_locked(self, user: UserInDB) -> bool:
        return user.failed_login_attempts >= self.max_failed_login_attempts

    async def login(
        self,
        request: LoginRequest,
        client_ip: str,
        as_of: Optional[datetime] = None,
    ) -> LoginResult:
        """
        Verify a user's email and password.

        A wrong password increments the user's failed login counter; once it
        reaches ``max_failed_login_attempts`` every further attempt, even with
        the right password, raises AccountLockedError until ``unlock_account``.
        A successful login resets the counter and records time and client IP.

        Raises:
            UserNotFoundError: No active user has this email
            AccountLockedError: Too many consecutive failures
            InvalidCredentialError: The password does not match
            TenantNotFoundError: The user's tenant is missing or deleted
            PersistenceError: The store failed
        """
        now = ensure_utc(as_of) or utcnow()
        email = request.email.strip().lower()

        user = await self.user_store.get_user_by_email(email)
        if user is None:
            await self.hasher.simulate_verification(request.password)
            logger.warning(f"Login: Unknown email '{email}' from {client_ip}.")
            raise UserNotFoundError()

        if self.is_locked(user):
            logger.warning(f"Login: Rejected attempt for locked user '{user.id}' from {client_ip}.")
            raise AccountLockedError()

        if not await self.hasher.verify_password(user.password_hash, request.password):
            attempts = await self.user_store.record_failed_login(user.id, now)
            logger.warning(
                f"Login: Invalid password for user '{user.id}' from {client_ip} "
                f"({attempts}/{self.max_failed_login_attempts} failed attempts)."
            )
            raise InvalidCredentialError()

        tenant = await self.tenant_store.get_tenant_by_id(user.tenant_id)
        if tenant is None:
            logger.error(f"Login: User '{user.id}' references missing tenant '{user.tenant_id}'.")
            raise TenantNotFoundError(f"Tenant '{user.tenant_id}' not found.")

        updated = await self.user_store.record_successful_login(user.id, now, client_ip)
        if updated is None:
            raise UserNotFoundError()

        logger.info(f"Login: User '{user.id}' of tenant '{tenant.id}' logged in from {client_ip}.")
        return LoginResult(
            tenant_id=tenant.id,
            user_id=updated.id,
            email=updated.email,
            role=updated.role,
        )

    async def unlock_account(
        self,
        tenant_id: str,
        user_id: str,
        as_of: Optional[datetime] = None,
    ) -> UserInDB:
        """Clear the failed login counter of a user; raises UserNotFoundError if absent."""
        now = ensure_utc(as_of) or utcnow()
        user = await self.user_store.get_user_by_id(tenant_id, user_id)
        if user is None:
            raise UserNotFoundError(f"User '{user_id}' not found in tenant '{tenant_id}'.")

        unlocked = await self.user_store.reset_failed_logins(user.id, now)
        if unlocked is None:
            raise UserNotFoundError(f"User '{user_id}' not found in tenant '{tenant_id}'.")
        logger.info(f"Login: Unlocked user '{user_id}' of tenant '{tenant_id}'.")
        return unlocked
