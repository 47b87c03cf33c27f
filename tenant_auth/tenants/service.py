# tenant_auth/tenants/service.py
import logging
from datetime import datetime
from typing import Optional, List

from .models import TenantInDB, TenantUpdate
from .storage_interfaces import AbstractTenantStore
from ..errors import TenantAlreadyExistsError, TenantNotFoundError
from ..storage.interfaces import AbstractUnitOfWork
from ..users.storage_interfaces import AbstractUserStore
from ..utils.email import email_domain
from ..utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class TenantService:
    """
    Service layer for tenant management operations.

    Provisioning lives in TenantProvisioner; this service reads, edits and
    retires tenants that already exist.
    """

    def __init__(
        self,
        tenant_store: AbstractTenantStore,
        user_store: AbstractUserStore,
        unit_of_work: AbstractUnitOfWork,
    ):
        """Initialize the service with its storage implementations."""
        self.tenant_store = tenant_store
        self.user_store = user_store
        self.unit_of_work = unit_of_work

    async def get_tenant(self, tenant_id: str) -> TenantInDB:
        """Retrieve an active tenant or raise TenantNotFoundError."""
        logger.info(f"Service: Getting tenant with id: {tenant_id}")
        tenant = await self.tenant_store.get_tenant_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant '{tenant_id}' not found.")
        return tenant

    async def list_tenants(self, skip: int = 0, limit: int = 100) -> List[TenantInDB]:
        logger.info(f"Service: Listing tenants with skip: {skip}, limit: {limit}")
        return await self.tenant_store.list_tenants(skip=skip, limit=limit)

    async def update_tenant(
        self,
        tenant_id: str,
        tenant_update: TenantUpdate,
        as_of: Optional[datetime] = None,
    ) -> TenantInDB:
        """
        Update an existing tenant's contact details.

        Moving the tenant email onto a domain owned by another active tenant
        raises TenantAlreadyExistsError.
        """
        logger.info(f"Service: Updating tenant with id: {tenant_id}")
        update_fields = tenant_update.model_dump(exclude_unset=True, exclude_none=True)

        async with self.unit_of_work.transaction():
            current = await self.get_tenant(tenant_id)
            if not update_fields:
                return current

            if "email" in update_fields:
                domain = email_domain(update_fields["email"])
                owner = await self.tenant_store.get_tenant_by_email_domain(domain)
                if owner is not None and owner.id != tenant_id:
                    logger.warning(f"Service: Domain '{domain}' already belongs to tenant '{owner.id}'.")
                    raise TenantAlreadyExistsError(f"A tenant already exists for domain '{domain}'.")

            update_fields["updated_at"] = ensure_utc(as_of) or utcnow()
            updated = await self.tenant_store.update_tenant(current.model_copy(update=update_fields))
            if updated is None:
                raise TenantNotFoundError(f"Tenant '{tenant_id}' not found.")
        return updated

    async def delete_tenant(self, tenant_id: str, as_of: Optional[datetime] = None) -> TenantInDB:
        """
        Soft-delete a tenant together with all of its active users.

        Both happen in one transaction so no active user is left pointing at a
        deleted tenant.
        """
        logger.info(f"Service: Deleting tenant with id: {tenant_id}")
        now = ensure_utc(as_of) or utcnow()

        async with self.unit_of_work.transaction():
            tenant = await self.get_tenant(tenant_id)
            deleted = tenant.model_copy(update={"is_active": False, "updated_at": now, "deleted_at": now})
            if not await self.tenant_store.delete_tenant(deleted):
                raise TenantNotFoundError(f"Tenant '{tenant_id}' not found.")
            await self.user_store.delete_users_for_tenant(tenant_id, now)
        return deleted
