# tenant_auth/licences/service.py
import logging
from datetime import datetime
from typing import Optional, List

from .models import TenantLicenceInDB, TenantLicenceUpdate
from .storage_interfaces import AbstractTenantLicenceStore
from ..errors import LicenceExceededError, LicenceNotFoundError
from ..utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class LicenceService:
    """Lookup and capacity/expiry administration of tenant licences."""

    def __init__(self, licence_store: AbstractTenantLicenceStore):
        self.licence_store = licence_store

    async def get_licence_for_tenant(self, tenant_id: str) -> TenantLicenceInDB:
        logger.info(f"Service: Getting licence of tenant '{tenant_id}'")
        licence = await self.licence_store.get_licence_by_tenant_id(tenant_id)
        if licence is None:
            raise LicenceNotFoundError(f"No licence found for tenant '{tenant_id}'.")
        return licence

    async def get_licence_by_key(self, licence_key: str) -> TenantLicenceInDB:
        logger.info("Service: Getting licence by key")
        licence = await self.licence_store.get_licence_by_key(licence_key)
        if licence is None:
            raise LicenceNotFoundError("No licence found for the given key.")
        return licence

    async def list_licences(self, skip: int = 0, limit: int = 100) -> List[TenantLicenceInDB]:
        logger.info(f"Service: Listing licences with skip: {skip}, limit: {limit}")
        return await self.licence_store.list_licences(skip=skip, limit=limit)

    async def update_licence(
        self,
        tenant_id: str,
        licence_update: TenantLicenceUpdate,
        as_of: Optional[datetime] = None,
    ) -> TenantLicenceInDB:
        """
        Change seat capacity and/or expiry of a tenant's licence.

        Raises:
            LicenceNotFoundError: The tenant has no licence
            LicenceExceededError: The new capacity is below the seats in use
        """
        logger.info(f"Service: Updating licence of tenant '{tenant_id}'")
        current = await self.get_licence_for_tenant(tenant_id)

        update_fields = licence_update.model_dump(exclude_unset=True)
        if update_fields.get("licenced_seats") is None:
            update_fields.pop("licenced_seats", None)
        if not update_fields:
            return current

        update_fields["updated_at"] = ensure_utc(as_of) or utcnow()
        candidate = current.model_copy(update=update_fields)
        if candidate.licenced_seats < candidate.used_seats:
            raise LicenceExceededError(
                f"Cannot reduce tenant '{tenant_id}' to {candidate.licenced_seats} seats "
                f"while {candidate.used_seats} are in use."
            )

        updated = await self.licence_store.update_licence(candidate)
        if updated is None:
            # Seats were taken between the read and the guarded update
            latest = await self.get_licence_for_tenant(tenant_id)
            raise LicenceExceededError(
                f"Cannot reduce tenant '{tenant_id}' to {candidate.licenced_seats} seats "
                f"while {latest.used_seats} are in use."
            )
        logger.info(
            f"Service: Licence of tenant '{tenant_id}' now has {updated.licenced_seats} seats, "
            f"expiry {updated.expiry_date.isoformat() if updated.expiry_date else 'never'}."
        )
        return updated
