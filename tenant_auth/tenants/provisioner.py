# tenant_auth/tenants/provisioner.py
import logging
from datetime import datetime
from typing import Optional

from .models import ProvisionedTenant, TenantCreate, TenantRegistration
from .storage_interfaces import AbstractTenantStore
from ..auth.hashing import CredentialHasherProtocol, UniqueTokenGeneratorProtocol
from ..errors import (
    TenantAlreadyExistsError,
    UserAlreadyExistsError,
)
from ..licences.models import TenantLicenceCreate
from ..licences.storage_interfaces import AbstractTenantLicenceStore
from ..settings import settings
from ..storage.interfaces import AbstractUnitOfWork
from ..users.models import UserCreate, UserRole
from ..users.storage_interfaces import AbstractUserStore
from ..utils.email import email_domain
from ..utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class TenantProvisioner:
    """
    Creates a tenant, its licence and its first administrator as one unit.

    The admin password is hashed before anything is written. The domain check
    and the three inserts then run in a single store transaction, so a failure
    at any step leaves no tenant, licence or user behind.
    """

    def __init__(
        self,
        tenant_store: AbstractTenantStore,
        user_store: AbstractUserStore,
        licence_store: AbstractTenantLicenceStore,
        unit_of_work: AbstractUnitOfWork,
        hasher: CredentialHasherProtocol,
        token_generator: UniqueTokenGeneratorProtocol,
        licenced_seats: Optional[int] = None,
    ):
        self.tenant_store = tenant_store
        self.user_store = user_store
        self.licence_store = licence_store
        self.unit_of_work = unit_of_work
        self.hasher = hasher
        self.token_generator = token_generator
        self.licenced_seats = licenced_seats or settings.default_licenced_seats

    async def _ensure_domain_free(self, domain: str) -> None:
        existing = await self.tenant_store.get_tenant_by_email_domain(domain)
        if existing is not None:
            logger.warning(
                f"Provisioner: Domain '{domain}' already belongs to tenant '{existing.id}'."
            )
            raise TenantAlreadyExistsError(f"A tenant already exists for domain '{domain}'.")

    async def register_tenant(
        self,
        registration: TenantRegistration,
        as_of: Optional[datetime] = None,
    ) -> ProvisionedTenant:
        """
        Provision a new tenant with a starter licence and a tenant_admin user.

        Raises:
            TenantAlreadyExistsError: An active tenant already uses the email domain
            UserAlreadyExistsError: The admin email belongs to an active user
            HashingError: The admin password could not be hashed
            PersistenceError: The store failed; nothing was committed
        """
        now = ensure_utc(as_of) or utcnow()
        domain = email_domain(registration.email)
        logger.info(f"Provisioner: Registering tenant '{registration.name}' for domain '{domain}'.")

        # Re-checked inside the transaction below
        await self._ensure_domain_free(domain)
        password_hash = await self.hasher.hash_password(registration.user.password)

        async with self.unit_of_work.transaction():
            await self._ensure_domain_free(domain)
            if await self.user_store.get_user_by_email(registration.user.email) is not None:
                logger.warning(f"Provisioner: Admin email '{registration.user.email}' is already registered.")
                raise UserAlreadyExistsError(f"User '{registration.user.email}' already exists.")

            tenant = await self.tenant_store.create_tenant(
                TenantCreate(
                    name=registration.name,
                    email=registration.email,
                    phone=registration.phone,
                    address=registration.address,
                ),
                created_at=now,
            )

            licence = await self.licence_store.create_licence(
                TenantLicenceCreate(
                    tenant_id=tenant.id,
                    licence_key=self.token_generator.generate(),
                    licenced_seats=self.licenced_seats,
                    used_seats=1,
                    expiry_date=None,
                ),
                created_at=now,
            )

            admin_user = await self.user_store.create_user(
                UserCreate(
                    tenant_id=tenant.id,
                    first_name=registration.user.first_name,
                    last_name=registration.user.last_name,
                    email=registration.user.email,
                    password_hash=password_hash,
                    role=UserRole.TENANT_ADMIN,
                    is_active=True,
                ),
                created_at=now,
            )

        logger.info(
            f"Provisioner: Tenant '{tenant.id}' provisioned with admin '{admin_user.id}' "
            f"and {licence.licenced_seats} seats."
        )
        return ProvisionedTenant(tenant=tenant, licence=licence, admin_user=admin_user)
