# tenant_auth/users/registrar.py
import logging
from datetime import datetime
from typing import Literal, Optional

from .models import UserCreate, UserInDB, UserRegistration, UserRole
from .storage_interfaces import AbstractUserStore
from ..auth.hashing import CredentialHasherProtocol
from ..errors import DuplicateRecordError, TenantNotFoundError, UserAlreadyExistsError, UserNotFoundError
from ..licences.ledger import LicenceLedger
from ..settings import settings
from ..storage.interfaces import AbstractUnitOfWork
from ..tenants.storage_interfaces import AbstractTenantStore
from ..utils.email import email_domain
from ..utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class UserRegistrar:
    """
    Adds and removes ordinary users of an existing tenant.

    Every active user holds exactly one licence seat: a seat is taken before
    the user row is written and handed back if the write does not happen, and a
    delete only frees the seat in the same transaction that records it.
    """

    def __init__(
        self,
        user_store: AbstractUserStore,
        tenant_store: AbstractTenantStore,
        ledger: LicenceLedger,
        unit_of_work: AbstractUnitOfWork,
        hasher: CredentialHasherProtocol,
        uniqueness: Optional[Literal["domain", "email"]] = None,
    ):
        self.user_store = user_store
        self.tenant_store = tenant_store
        self.ledger = ledger
        self.unit_of_work = unit_of_work
        self.hasher = hasher
        self.uniqueness = uniqueness or settings.user_uniqueness

    async def _ensure_user_absent(self, email: str) -> None:
        if self.uniqueness == "domain":
            domain = email_domain(email)
            existing = await self.user_store.get_user_by_email_domain(domain)
            if existing is not None:
                logger.warning(f"Registrar: Domain '{domain}' is already used by user '{existing.id}'.")
                raise UserAlreadyExistsError(f"A user already exists for domain '{domain}'.")
        existing = await self.user_store.get_user_by_email(email)
        if existing is not None:
            logger.warning(f"Registrar: Email '{email}' is already used by user '{existing.id}'.")
            raise UserAlreadyExistsError(f"User '{email}' already exists.")

    async def _ensure_tenant_active(self, tenant_id: str) -> None:
        if await self.tenant_store.get_tenant_by_id(tenant_id) is None:
            logger.warning(f"Registrar: Tenant '{tenant_id}' not found.")
            raise TenantNotFoundError(f"Tenant '{tenant_id}' not found.")

    async def register_user(
        self,
        tenant_id: str,
        registration: UserRegistration,
        as_of: Optional[datetime] = None,
    ) -> UserInDB:
        """
        Register a tenant_user under ``tenant_id``, consuming one licence seat.

        The tenant and uniqueness checks run once up front and again in the
        transaction that inserts the user, since hashing yields to other tasks.

        Raises:
            TenantNotFoundError: No active tenant with that id
            UserAlreadyExistsError: The email (or its domain, by policy) is taken
            LicenceNotFoundError: The tenant has no licence
            LicenceExpiredError: The licence has expired
            LicenceExceededError: No seat is free
            HashingError: The password could not be hashed
            PersistenceError: The store failed; the seat was given back
        """
        now = ensure_utc(as_of) or utcnow()
        logger.info(f"Registrar: Registering user '{registration.email}' in tenant '{tenant_id}'.")

        # Re-checked inside the transaction below
        await self._ensure_tenant_active(tenant_id)
        await self._ensure_user_absent(registration.email)
        await self.ledger.allocate_seat(tenant_id, as_of=now)

        try:
            password_hash = await self.hasher.hash_password(registration.password)
            async with self.unit_of_work.transaction():
                await self._ensure_tenant_active(tenant_id)
                await self._ensure_user_absent(registration.email)
                user = await self.user_store.create_user(
                    UserCreate(
                        tenant_id=tenant_id,
                        first_name=registration.first_name,
                        last_name=registration.last_name,
                        email=registration.email,
                        password_hash=password_hash,
                        role=UserRole.TENANT_USER,
                        is_active=True,
                    ),
                    created_at=now,
                )
        except BaseException as exc:
            logger.warning(
                f"Registrar: User '{registration.email}' was not created; releasing the seat of tenant '{tenant_id}'."
            )
            try:
                await self.ledger.release_seat(tenant_id, at=now)
            except Exception:
                logger.error(f"Registrar: Could not release the seat of tenant '{tenant_id}'.", exc_info=True)
            if isinstance(exc, DuplicateRecordError):
                raise UserAlreadyExistsError(f"User '{registration.email}' already exists.") from exc
            raise

        logger.info(f"Registrar: User '{user.id}' registered in tenant '{tenant_id}'.")
        return user

    async def delete_user(
        self,
        tenant_id: str,
        user_id: str,
        as_of: Optional[datetime] = None,
    ) -> UserInDB:
        """
        Soft-delete a user and give its seat back to the tenant licence.

        Deleting an already deleted user raises UserNotFoundError.

        Raises:
            UserNotFoundError: No active user with that id in the tenant
            LicenceNotFoundError: The tenant has no licence; the delete is rolled back
        """
        now = ensure_utc(as_of) or utcnow()
        logger.info(f"Registrar: Deleting user '{user_id}' from tenant '{tenant_id}'.")

        async with self.unit_of_work.transaction():
            user = await self.user_store.get_user_by_id(tenant_id, user_id)
            if user is None:
                logger.warning(f"Registrar: User '{user_id}' not found in tenant '{tenant_id}'.")
                raise UserNotFoundError(f"User '{user_id}' not found in tenant '{tenant_id}'.")

            deleted = user.model_copy(update={"is_active": False, "updated_at": now, "deleted_at": now})
            if not await self.user_store.delete_user(deleted):
                raise UserNotFoundError(f"User '{user_id}' not found in tenant '{tenant_id}'.")
            await self.ledger.release_seat(tenant_id, at=now)

        logger.info(f"Registrar: User '{user_id}' deleted from tenant '{tenant_id}'.")
        return deleted
