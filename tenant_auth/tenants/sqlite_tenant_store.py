# tenant_auth/tenants/sqlite_tenant_store.py
import sqlite3
import logging
from typing import Optional, List
from datetime import datetime
from uuid import uuid4

from .storage_interfaces import AbstractTenantStore
from .models import TenantInDB, TenantCreate
from ..storage.sqlite_base import SQLiteStoreBase, to_db_timestamp, from_db_timestamp
from ..utils.email import email_domain

logger = logging.getLogger(__name__)

_TENANT_COLUMNS = (
    "id, name, email, phone, address, is_active, created_at, updated_at, deleted_at"
)


class SQLiteTenantStore(SQLiteStoreBase, AbstractTenantStore):
    """SQLite implementation of the tenant storage interface."""

    def _row_to_tenant_in_db(self, row: Optional[sqlite3.Row]) -> Optional[TenantInDB]:
        """Convert a database row to a TenantInDB object."""
        if not row:
            return None
        return TenantInDB(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            address=row["address"],
            is_active=bool(row["is_active"]),
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
            deleted_at=from_db_timestamp(row["deleted_at"]),
        )

    async def create_tenant(self, tenant_create: TenantCreate, created_at: datetime) -> TenantInDB:
        tenant = TenantInDB(
            id=str(uuid4()),
            created_at=created_at,
            updated_at=created_at,
            **tenant_create.model_dump(),
        )
        query = """
            INSERT INTO tenants (id, name, email, email_domain, phone, address,
                                 is_active, created_at, updated_at, deleted_at)
            VALUES (?, ?, ?, ?, ?, ?, 1, ?, ?, NULL)
        """
        params = (
            tenant.id,
            tenant.name,
            tenant.email,
            email_domain(tenant.email),
            tenant.phone,
            tenant.address,
            to_db_timestamp(tenant.created_at),
            to_db_timestamp(tenant.updated_at),
        )
        await self._execute_query(query, params)
        logger.info(f"Created tenant '{tenant.id}' ({tenant.name}).")
        return tenant

    async def get_tenant_by_id(self, tenant_id: str) -> Optional[TenantInDB]:
        query = f"SELECT {_TENANT_COLUMNS} FROM tenants WHERE id = ? AND deleted_at IS NULL"
        row = await self._fetchone(query, (tenant_id,))
        return self._row_to_tenant_in_db(row)

    async def get_tenant_by_email_domain(self, domain: str) -> Optional[TenantInDB]:
        query = (
            f"SELECT {_TENANT_COLUMNS} FROM tenants "
            "WHERE email_domain = ? AND deleted_at IS NULL "
            "ORDER BY created_at LIMIT 1"
        )
        row = await self._fetchone(query, (domain.strip().lower(),))
        return self._row_to_tenant_in_db(row)

    async def list_tenants(self, skip: int = 0, limit: int = 100) -> List[TenantInDB]:
        """Active tenants ordered by creation date (newest first)."""
        query = f"""
            SELECT {_TENANT_COLUMNS}
            FROM tenants
            WHERE deleted_at IS NULL
            ORDER BY created_at DESC
            LIMIT ? OFFSET ?
        """
        rows = await self._fetchall(query, (limit, skip))
        return [self._row_to_tenant_in_db(row) for row in rows]

    async def update_tenant(self, tenant: TenantInDB) -> Optional[TenantInDB]:
        query = """
            UPDATE tenants
            SET name = ?, email = ?, email_domain = ?, phone = ?, address = ?,
                is_active = ?, updated_at = ?
            WHERE id = ? AND deleted_at IS NULL
        """
        params = (
            tenant.name,
            tenant.email,
            email_domain(tenant.email),
            tenant.phone,
            tenant.address,
            int(tenant.is_active),
            to_db_timestamp(tenant.updated_at),
            tenant.id,
        )
        cursor = await self._execute_query(query, params)
        if cursor.rowcount == 0:
            return None
        return await self.get_tenant_by_id(tenant.id)

    async def delete_tenant(self, tenant: TenantInDB) -> bool:
        query = """
            UPDATE tenants SET is_active = ?, updated_at = ?, deleted_at = ?
            WHERE id = ? AND deleted_at IS NULL
        """
        params = (
            int(tenant.is_active),
            to_db_timestamp(tenant.updated_at),
            to_db_timestamp(tenant.deleted_at),
            tenant.id,
        )
        cursor = await self._execute_query(query, params)
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Soft-deleted tenant '{tenant.id}'.")
        return deleted


# Singleton instance management
_sqlite_tenant_store_instance: Optional[SQLiteTenantStore] = None


async def get_sqlite_tenant_store() -> SQLiteTenantStore:
    """
    Get or create the singleton SQLiteTenantStore instance.

    Ensures only one instance exists and is properly initialized.
    """
    global _sqlite_tenant_store_instance
    if _sqlite_tenant_store_instance is None:
        _sqlite_tenant_store_instance = SQLiteTenantStore()
        await _sqlite_tenant_store_instance.initialize()
    return _sqlite_tenant_store_instance
