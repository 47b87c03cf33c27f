# tenant_auth/licences/__init__.py
"""
Tenant licence module initialization.

Licence records, their storage, seat accounting and licence administration.
"""

from .models import TenantLicenceCreate, TenantLicenceUpdate, TenantLicenceInDB
from .storage_interfaces import AbstractTenantLicenceStore
from .sqlite_licence_store import SQLiteTenantLicenceStore, get_sqlite_licence_store
from .ledger import LicenceLedger, is_expired
from .service import LicenceService

__all__ = [
    # Data models
    "TenantLicenceCreate",
    "TenantLicenceUpdate",
    "TenantLicenceInDB",
    # Storage layer abstractions and implementations
    "AbstractTenantLicenceStore",
    "SQLiteTenantLicenceStore",
    "get_sqlite_licence_store",
    # Seat accounting and administration
    "LicenceLedger",
    "is_expired",
    "LicenceService",
]
