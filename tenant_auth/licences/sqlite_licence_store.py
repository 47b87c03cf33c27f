# tenant_auth/licences/sqlite_licence_store.py
import sqlite3
import logging
from typing import Optional, List
from datetime import datetime
from uuid import uuid4

from .storage_interfaces import AbstractTenantLicenceStore
from .models import TenantLicenceInDB, TenantLicenceCreate
from ..storage.sqlite_base import SQLiteStoreBase, to_db_timestamp, from_db_timestamp

logger = logging.getLogger(__name__)

_LICENCE_COLUMNS = (
    "id, tenant_id, licence_key, licenced_seats, used_seats, expiry_date, created_at, updated_at"
)


class SQLiteTenantLicenceStore(SQLiteStoreBase, AbstractTenantLicenceStore):
    """SQLite implementation of the tenant licence storage interface."""

    def _row_to_licence_in_db(self, row: Optional[sqlite3.Row]) -> Optional[TenantLicenceInDB]:
        """Convert a database row to a TenantLicenceInDB object."""
        if not row:
            return None
        return TenantLicenceInDB(
            id=row["id"],
            tenant_id=row["tenant_id"],
            licence_key=row["licence_key"],
            licenced_seats=row["licenced_seats"],
            used_seats=row["used_seats"],
            expiry_date=from_db_timestamp(row["expiry_date"]),
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )

    async def create_licence(self, licence_create: TenantLicenceCreate, created_at: datetime) -> TenantLicenceInDB:
        licence = TenantLicenceInDB(
            id=str(uuid4()),
            created_at=created_at,
            updated_at=created_at,
            **licence_create.model_dump(),
        )
        query = """
            INSERT INTO tenant_licences (id, tenant_id, licence_key, licenced_seats, used_seats,
                                         expiry_date, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            licence.id,
            licence.tenant_id,
            licence.licence_key,
            licence.licenced_seats,
            licence.used_seats,
            to_db_timestamp(licence.expiry_date),
            to_db_timestamp(licence.created_at),
            to_db_timestamp(licence.updated_at),
        )
        await self._execute_query(query, params)
        logger.info(
            f"Created licence for tenant '{licence.tenant_id}' "
            f"({licence.used_seats}/{licence.licenced_seats} seats)."
        )
        return licence

    async def get_licence_by_tenant_id(self, tenant_id: str) -> Optional[TenantLicenceInDB]:
        query = f"SELECT {_LICENCE_COLUMNS} FROM tenant_licences WHERE tenant_id = ?"
        row = await self._fetchone(query, (tenant_id,))
        return self._row_to_licence_in_db(row)

    async def get_licence_by_key(self, licence_key: str) -> Optional[TenantLicenceInDB]:
        query = f"SELECT {_LICENCE_COLUMNS} FROM tenant_licences WHERE licence_key = ?"
        row = await self._fetchone(query, (licence_key,))
        return self._row_to_licence_in_db(row)

    async def list_licences(self, skip: int = 0, limit: int = 100) -> List[TenantLicenceInDB]:
        query = f"""
            SELECT {_LICENCE_COLUMNS}
            FROM tenant_licences
            ORDER BY created_at DESC
            LIMIT ? OFFSET ?
        """
        rows = await self._fetchall(query, (limit, skip))
        return [self._row_to_licence_in_db(row) for row in rows]

    async def update_licence(self, licence: TenantLicenceInDB) -> Optional[TenantLicenceInDB]:
        query = """
            UPDATE tenant_licences
            SET licenced_seats = ?, expiry_date = ?, updated_at = ?
            WHERE tenant_id = ? AND used_seats <= ?
        """
        params = (
            licence.licenced_seats,
            to_db_timestamp(licence.expiry_date),
            to_db_timestamp(licence.updated_at),
            licence.tenant_id,
            licence.licenced_seats,
        )
        cursor = await self._execute_query(query, params)
        if cursor.rowcount == 0:
            return None
        return await self.get_licence_by_tenant_id(licence.tenant_id)

    async def try_allocate_seat(self, tenant_id: str, as_of: datetime) -> bool:
        query = """
            UPDATE tenant_licences
            SET used_seats = used_seats + 1, updated_at = ?
            WHERE tenant_id = ?
              AND used_seats < licenced_seats
              AND (expiry_date IS NULL OR expiry_date >= ?)
        """
        stamp = to_db_timestamp(as_of)
        cursor = await self._execute_query(query, (stamp, tenant_id, stamp))
        return cursor.rowcount == 1

    async def try_release_seat(self, tenant_id: str, at: datetime) -> bool:
        query = """
            UPDATE tenant_licences
            SET used_seats = used_seats - 1, updated_at = ?
            WHERE tenant_id = ? AND used_seats > 0
        """
        cursor = await self._execute_query(query, (to_db_timestamp(at), tenant_id))
        return cursor.rowcount == 1


# Global singleton instance management
_sqlite_licence_store_instance: Optional[SQLiteTenantLicenceStore] = None


async def get_sqlite_licence_store() -> SQLiteTenantLicenceStore:
    """Get or create the singleton SQLite licence store instance."""
    global _sqlite_licence_store_instance
    if _sqlite_licence_store_instance is None:
        _sqlite_licence_store_instance = SQLiteTenantLicenceStore()
        await _sqlite_licence_store_instance.initialize()
    return _sqlite_licence_store_instance
