# tenant_auth/users/sqlite_user_store.py
import sqlite3
import logging
from typing import Optional, List
from datetime import datetime
from uuid import uuid4

from .storage_interfaces import AbstractUserStore
from .models import UserInDB, UserCreate
from ..storage.sqlite_base import SQLiteStoreBase, to_db_timestamp, from_db_timestamp
from ..utils.email import email_domain

logger = logging.getLogger(__name__)

_USER_COLUMNS = (
    "id, tenant_id, first_name, last_name, email, password_hash, role, is_active, "
    "failed_login_attempts, last_login_at, last_login_ip, is_email_verified, "
    "email_verification_token, email_verification_token_expires_at, "
    "reset_password_token, reset_password_token_expires_at, "
    "created_at, updated_at, deleted_at"
)


class SQLiteUserStore(SQLiteStoreBase, AbstractUserStore):
    """SQLite implementation for storing users and their login bookkeeping."""

    def _row_to_user_in_db(self, row: Optional[sqlite3.Row]) -> Optional[UserInDB]:
        """Convert a database row to a UserInDB object."""
        if not row:
            return None
        return UserInDB(
            id=row["id"],
            tenant_id=row["tenant_id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=row["role"],
            is_active=bool(row["is_active"]),
            failed_login_attempts=row["failed_login_attempts"],
            last_login_at=from_db_timestamp(row["last_login_at"]),
            last_login_ip=row["last_login_ip"],
            is_email_verified=bool(row["is_email_verified"]),
            email_verification_token=row["email_verification_token"],
            email_verification_token_expires_at=from_db_timestamp(row["email_verification_token_expires_at"]),
            reset_password_token=row["reset_password_token"],
            reset_password_token_expires_at=from_db_timestamp(row["reset_password_token_expires_at"]),
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
            deleted_at=from_db_timestamp(row["deleted_at"]),
        )

    async def _get_active_user(self, user_id: str) -> Optional[UserInDB]:
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE id = ? AND deleted_at IS NULL"
        return self._row_to_user_in_db(await self._fetchone(query, (user_id,)))

    async def create_user(self, user_create: UserCreate, created_at: datetime) -> UserInDB:
        user = UserInDB(
            id=str(uuid4()),
            created_at=created_at,
            updated_at=created_at,
            **user_create.model_dump(),
        )
        query = """
            INSERT INTO users (id, tenant_id, first_name, last_name, email, email_domain,
                               password_hash, role, is_active, failed_login_attempts,
                               created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?)
        """
        params = (
            user.id,
            user.tenant_id,
            user.first_name,
            user.last_name,
            user.email,
            email_domain(user.email),
            user.password_hash,
            user.role.value,
            int(user.is_active),
            to_db_timestamp(user.created_at),
            to_db_timestamp(user.updated_at),
        )
        await self._execute_query(query, params)
        logger.info(f"Created user '{user.id}' with role '{user.role.value}' in tenant '{user.tenant_id}'.")
        return user

    async def get_user_by_id(self, tenant_id: str, user_id: str) -> Optional[UserInDB]:
        query = (
            f"SELECT {_USER_COLUMNS} FROM users "
            "WHERE id = ? AND tenant_id = ? AND deleted_at IS NULL"
        )
        row = await self._fetchone(query, (user_id, tenant_id))
        return self._row_to_user_in_db(row)

    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE email = ? AND deleted_at IS NULL"
        row = await self._fetchone(query, (email.strip().lower(),))
        return self._row_to_user_in_db(row)

    async def get_user_by_email_domain(self, domain: str) -> Optional[UserInDB]:
        query = (
            f"SELECT {_USER_COLUMNS} FROM users "
            "WHERE email_domain = ? AND deleted_at IS NULL "
            "ORDER BY created_at LIMIT 1"
        )
        row = await self._fetchone(query, (domain.strip().lower(),))
        return self._row_to_user_in_db(row)

    async def list_users(self, tenant_id: str) -> List[UserInDB]:
        query = (
            f"SELECT {_USER_COLUMNS} FROM users "
            "WHERE tenant_id = ? AND deleted_at IS NULL ORDER BY created_at"
        )
        rows = await self._fetchall(query, (tenant_id,))
        return [self._row_to_user_in_db(row) for row in rows]

    async def update_user(self, user: UserInDB) -> Optional[UserInDB]:
        query = """
            UPDATE users
            SET first_name = ?, last_name = ?, email = ?, email_domain = ?, password_hash = ?,
                role = ?, is_active = ?, is_email_verified = ?, email_verification_token = ?,
                email_verification_token_expires_at = ?, reset_password_token = ?,
                reset_password_token_expires_at = ?, updated_at = ?
            WHERE id = ? AND deleted_at IS NULL
        """
        params = (
            user.first_name,
            user.last_name,
            user.email,
            email_domain(user.email),
            user.password_hash,
            user.role.value,
            int(user.is_active),
            int(user.is_email_verified),
            user.email_verification_token,
            to_db_timestamp(user.email_verification_token_expires_at),
            user.reset_password_token,
            to_db_timestamp(user.reset_password_token_expires_at),
            to_db_timestamp(user.updated_at),
            user.id,
        )
        cursor = await self._execute_query(query, params)
        if cursor.rowcount == 0:
            return None
        return await self._get_active_user(user.id)

    async def delete_user(self, user: UserInDB) -> bool:
        query = """
            UPDATE users SET is_active = ?, updated_at = ?, deleted_at = ?
            WHERE id = ? AND deleted_at IS NULL
        """
        params = (
            int(user.is_active),
            to_db_timestamp(user.updated_at),
            to_db_timestamp(user.deleted_at),
            user.id,
        )
        cursor = await self._execute_query(query, params)
        return cursor.rowcount > 0

    async def delete_users_for_tenant(self, tenant_id: str, deleted_at: datetime) -> int:
        stamp = to_db_timestamp(deleted_at)
        query = """
            UPDATE users SET is_active = 0, updated_at = ?, deleted_at = ?
            WHERE tenant_id = ? AND deleted_at IS NULL
        """
        cursor = await self._execute_query(query, (stamp, stamp, tenant_id))
        logger.info(f"Soft-deleted {cursor.rowcount} user(s) of tenant '{tenant_id}'.")
        return cursor.rowcount

    async def record_failed_login(self, user_id: str, at: datetime) -> int:
        query = """
            UPDATE users SET failed_login_attempts = failed_login_attempts + 1, updated_at = ?
            WHERE id = ? AND deleted_at IS NULL
        """
        await self._execute_query(query, (to_db_timestamp(at), user_id))
        row = await self._fetchone("SELECT failed_login_attempts FROM users WHERE id = ?", (user_id,))
        return row["failed_login_attempts"] if row else 0

    async def record_successful_login(self, user_id: str, at: datetime, ip_address: str) -> Optional[UserInDB]:
        stamp = to_db_timestamp(at)
        query = """
            UPDATE users
            SET last_login_at = ?, last_login_ip = ?, failed_login_attempts = 0, updated_at = ?
            WHERE id = ? AND deleted_at IS NULL
        """
        cursor = await self._execute_query(query, (stamp, ip_address, stamp, user_id))
        if cursor.rowcount == 0:
            return None
        return await self._get_active_user(user_id)

    async def reset_failed_logins(self, user_id: str, at: datetime) -> Optional[UserInDB]:
        query = """
            UPDATE users SET failed_login_attempts = 0, updated_at = ?
            WHERE id = ? AND deleted_at IS NULL
        """
        cursor = await self._execute_query(query, (to_db_timestamp(at), user_id))
        if cursor.rowcount == 0:
            return None
        return await self._get_active_user(user_id)


# Global singleton instance management
_sqlite_user_store_instance: Optional[SQLiteUserStore] = None


async def get_sqlite_user_store() -> SQLiteUserStore:
    """Get or create the singleton SQLite user store instance."""
    global _sqlite_user_store_instance
    if _sqlite_user_store_instance is None:
        _sqlite_user_store_instance = SQLiteUserStore()
        await _sqlite_user_store_instance.initialize()
    return _sqlite_user_store_instance
