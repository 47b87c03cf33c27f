# tenant_auth/tenants/storage_interfaces.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List
from .models import TenantInDB, TenantCreate


class AbstractTenantStore(ABC):
    """
    Abstract base class defining the interface for tenant storage operations.

    Lookups only return active (non soft-deleted) tenants and return None when
    nothing matches. Storage faults surface as PersistenceError.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend and prepare it for operations."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Clean up resources and properly close the storage backend."""
        pass

    @abstractmethod
    async def create_tenant(self, tenant_create: TenantCreate, created_at: datetime) -> TenantInDB:
        """
        Create a new, active tenant.

        Args:
            tenant_create: Tenant creation data
            created_at: Timestamp recorded as both created_at and updated_at

        Returns:
            The created tenant with its generated id
        """
        pass

    @abstractmethod
    async def get_tenant_by_id(self, tenant_id: str) -> Optional[TenantInDB]:
        """Retrieve an active tenant by its identifier."""
        pass

    @abstractmethod
    async def get_tenant_by_email_domain(self, domain: str) -> Optional[TenantInDB]:
        """Retrieve the active tenant whose email address belongs to ``domain``."""
        pass

    @abstractmethod
    async def list_tenants(self, skip: int = 0, limit: int = 100) -> List[TenantInDB]:
        """
        Retrieve a paginated list of active tenants.

        Args:
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return
        """
        pass

    @abstractmethod
    async def update_tenant(self, tenant: TenantInDB) -> Optional[TenantInDB]:
        """
        Persist every mutable field of ``tenant``.

        Returns:
            The stored tenant, or None if no active tenant has that id
        """
        pass

    @abstractmethod
    async def delete_tenant(self, tenant: TenantInDB) -> bool:
        """
        Soft-delete a tenant. The caller sets ``is_active`` and ``deleted_at``.

        Returns:
            True if an active tenant was marked deleted, False if not found
        """
        pass
