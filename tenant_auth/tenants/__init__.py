# tenant_auth/tenants/__init__.py
"""
Tenant management module initialization.

This module provides tenant data models, storage abstractions, the SQLite
implementation and the management service. Provisioning of new tenants
lives in ``tenant_auth.tenants.provisioner``.
"""

from .models import (
    TenantRegistration,
    TenantCreate,
    TenantUpdate,
    TenantInDB,
    ProvisionedTenant,
)
from .storage_interfaces import AbstractTenantStore
from .sqlite_tenant_store import SQLiteTenantStore, get_sqlite_tenant_store
from .service import TenantService

# Export all public components for external use
__all__ = [
    # Data models for tenant operations
    "TenantRegistration",
    "TenantCreate",
    "TenantUpdate",
    "TenantInDB",
    "ProvisionedTenant",
    # Storage layer abstractions and implementations
    "AbstractTenantStore",
    "SQLiteTenantStore",
    "get_sqlite_tenant_store",
    # Business logic service
    "TenantService",
]
