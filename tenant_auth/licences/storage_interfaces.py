# tenant_auth/licences/storage_interfaces.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List
from .models import TenantLicenceInDB, TenantLicenceCreate


class AbstractTenantLicenceStore(ABC):
    """
    Abstract base class defining the interface for tenant licence storage.

    Seat counters are only ever changed through ``try_allocate_seat`` and
    ``try_release_seat``. Both must be a single conditional update so that two
    concurrent callers can never both pass the capacity check.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage system and prepare for operations."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Clean up resources and gracefully shutdown the storage system."""
        pass

    @abstractmethod
    async def create_licence(self, licence_create: TenantLicenceCreate, created_at: datetime) -> TenantLicenceInDB:
        """Insert a licence; raises DuplicateRecordError on a tenant or key clash."""
        pass

    @abstractmethod
    async def get_licence_by_tenant_id(self, tenant_id: str) -> Optional[TenantLicenceInDB]:
        pass

    @abstractmethod
    async def get_licence_by_key(self, licence_key: str) -> Optional[TenantLicenceInDB]:
        pass

    @abstractmethod
    async def list_licences(self, skip: int = 0, limit: int = 100) -> List[TenantLicenceInDB]:
        pass

    @abstractmethod
    async def update_licence(self, licence: TenantLicenceInDB) -> Optional[TenantLicenceInDB]:
        """
        Persist ``licenced_seats`` and ``expiry_date``.

        The write only applies while the new capacity still covers the seats in
        use; returns None when no licence was updated.
        """
        pass

    @abstractmethod
    async def try_allocate_seat(self, tenant_id: str, as_of: datetime) -> bool:
        """
        Increment ``used_seats`` if a seat is free and the licence is not expired at ``as_of``.

        Returns:
            True if a seat was taken, False if the guarded update matched nothing
        """
        pass

    @abstractmethod
    async def try_release_seat(self, tenant_id: str, at: datetime) -> bool:
        """Decrement ``used_seats`` unless it is already zero; True if a seat was released."""
        pass
