# tenant_auth/licences/ledger.py
import logging
from datetime import datetime
from typing import Optional

from .models import TenantLicenceInDB
from .storage_interfaces import AbstractTenantLicenceStore
from ..errors import LicenceExceededError, LicenceExpiredError, LicenceNotFoundError
from ..utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)


def is_expired(licence: TenantLicenceInDB, as_of: datetime) -> bool:
    """A licence is expired once its expiry date lies strictly before ``as_of``."""
    return licence.expiry_date is not None and licence.expiry_date < ensure_utc(as_of)


class LicenceLedger:
    """
    Owns the seat accounting of tenant licences.

    The ledger never increments a counter it has read; it asks the store for a
    guarded update and only reads the licence to explain why a request failed.
    That keeps ``0 <= used_seats <= licenced_seats`` true under concurrent
    registrations against the same tenant.
    """

    def __init__(self, licence_store: AbstractTenantLicenceStore):
        self.licence_store = licence_store

    def is_expired(self, licence: TenantLicenceInDB, as_of: datetime) -> bool:
        return is_expired(licence, as_of)

    async def _require_licence(self, tenant_id: str) -> TenantLicenceInDB:
        licence = await self.licence_store.get_licence_by_tenant_id(tenant_id)
        if licence is None:
            logger.warning(f"Ledger: No licence found for tenant '{tenant_id}'.")
            raise LicenceNotFoundError(f"No licence found for tenant '{tenant_id}'.")
        return licence

    def _check_allocatable(self, licence: TenantLicenceInDB, as_of: datetime) -> None:
        # Expiry wins over capacity: an expired licence is reported as such even with free seats
        if is_expired(licence, as_of):
            logger.warning(
                f"Ledger: Licence of tenant '{licence.tenant_id}' expired at {licence.expiry_date.isoformat()}."
            )
            raise LicenceExpiredError(f"Licence of tenant '{licence.tenant_id}' has expired.")
        if licence.used_seats >= licence.licenced_seats:
            logger.warning(
                f"Ledger: Licence of tenant '{licence.tenant_id}' is full "
                f"({licence.used_seats}/{licence.licenced_seats} seats)."
            )
            raise LicenceExceededError(
                f"All {licence.licenced_seats} seats of tenant '{licence.tenant_id}' are in use."
            )

    async def allocate_seat(self, tenant_id: str, as_of: Optional[datetime] = None) -> TenantLicenceInDB:
        """
        Take one seat from the tenant's licence.

        Raises:
            LicenceNotFoundError: The tenant has no licence
            LicenceExpiredError: The licence expired before ``as_of``
            LicenceExceededError: Every licenced seat is already in use
        """
        as_of = ensure_utc(as_of) or utcnow()
        licence = await self._require_licence(tenant_id)
        self._check_allocatable(licence, as_of)

        if not await self.licence_store.try_allocate_seat(tenant_id, as_of):
            # Lost a race between the read and the guarded update
            self._check_allocatable(await self._require_licence(tenant_id), as_of)
            raise LicenceExceededError(f"No free seat left for tenant '{tenant_id}'.")

        allocated = await self._require_licence(tenant_id)
        logger.info(
            f"Ledger: Allocated seat for tenant '{tenant_id}' "
            f"({allocated.used_seats}/{allocated.licenced_seats})."
        )
        return allocated

    async def release_seat(self, tenant_id: str, at: Optional[datetime] = None) -> TenantLicenceInDB:
        """
        Give one seat back to the tenant's licence. Never drops below zero.

        Raises:
            LicenceNotFoundError: The tenant has no licence
        """
        at = ensure_utc(at) or utcnow()
        if not await self.licence_store.try_release_seat(tenant_id, at):
            licence = await self._require_licence(tenant_id)
            logger.warning(f"Ledger: Release requested for tenant '{tenant_id}' with no seat in use.")
            return licence

        released = await self._require_licence(tenant_id)
        logger.info(
            f"Ledger: Released seat for tenant '{tenant_id}' "
            f"({released.used_seats}/{released.licenced_seats})."
        )
        return released
