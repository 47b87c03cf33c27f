# tenant_auth/storage/sqlite_base.py
import asyncio
import sqlite3
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, List, Optional

from ..errors import DuplicateRecordError, PersistenceError
from ..settings import settings
from .interfaces import AbstractUnitOfWork

logger = logging.getLogger(__name__)

# Global connection instance to ensure single connection per application lifecycle
_db_connection: Optional[sqlite3.Connection] = None
# Serializes writers on the shared connection; created together with the connection
_write_lock: Optional[asyncio.Lock] = None
# True inside the task that currently owns an open transaction
_in_transaction: ContextVar[bool] = ContextVar("tenant_auth_in_transaction", default=False)


def to_db_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as a fixed-width UTC ISO string so SQL comparisons sort correctly."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def get_sqlite_db_connection() -> sqlite3.Connection:
    """
    Get or create a SQLite database connection with proper initialization.

    Uses a singleton pattern to maintain a single connection throughout
    the application lifecycle. The connection runs in autocommit mode;
    multi-statement units of work open explicit transactions through
    ``sqlite_transaction``.

    Returns:
        sqlite3.Connection: The database connection instance

    Raises:
        PersistenceError: If the database cannot be opened or initialized
    """
    global _db_connection, _write_lock
    if _db_connection is None:
        db_target = settings.sqlite_db_path
        try:
            if db_target != ":memory:":
                db_path = Path(db_target).resolve()
                # Ensure the database directory structure exists
                db_path.parent.mkdir(parents=True, exist_ok=True)
                db_target = str(db_path)

            logger.info(f"Attempting to connect to SQLite DB at: {db_target}")

            conn = sqlite3.connect(db_target, check_same_thread=False, isolation_level=None)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")

            await init_sqlite_db(conn)
        except sqlite3.Error as e:
            logger.error(
                f"Error connecting to SQLite database at {settings.sqlite_db_path}: {e}",
                exc_info=True
            )
            raise PersistenceError(f"Could not open database: {e}") from e

        _db_connection = conn
        _write_lock = asyncio.Lock()
        logger.info(f"Successfully connected to SQLite DB: {db_target}")
    return _db_connection


async def init_sqlite_db(conn: Optional[sqlite3.Connection] = None):
    """
    Initialize the SQLite database schema by creating all required tables.

    Uses IF NOT EXISTS so repeated initialization is harmless. Seat bounds and
    key uniqueness are also enforced by constraints so a faulty writer cannot
    commit a row that breaks them.

    Args:
        conn: Optional database connection. If None, uses the global connection.
    """
    db_conn = conn or await get_sqlite_db_connection()
    cursor = db_conn.cursor()

    # Tenants are the root aggregate; email_domain is the ownership key
    cursor.execute('''
    CREATE TABLE IF NOT EXISTS tenants (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL,
        email_domain TEXT NOT NULL,
        phone TEXT NOT NULL DEFAULT '',
        address TEXT NOT NULL DEFAULT '',
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    ''')
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS ix_tenants_email_domain ON tenants (email_domain)"
    )
    logger.info("Ensured 'tenants' table exists.")

    # One licence per tenant
    cursor.execute('''
    CREATE TABLE IF NOT EXISTS tenant_licences (
        id TEXT PRIMARY KEY,
        tenant_id TEXT NOT NULL UNIQUE REFERENCES tenants (id),
        licence_key TEXT NOT NULL UNIQUE,
        licenced_seats INTEGER NOT NULL,
        used_seats INTEGER NOT NULL DEFAULT 0,
        expiry_date TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        CHECK (used_seats >= 0 AND used_seats <= licenced_seats)
    )
    ''')
    logger.info("Ensured 'tenant_licences' table exists.")

    cursor.execute('''
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        tenant_id TEXT NOT NULL REFERENCES tenants (id),
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT NOT NULL,
        email_domain TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        failed_login_attempts INTEGER NOT NULL DEFAULT 0,
        last_login_at TEXT,
        last_login_ip TEXT NOT NULL DEFAULT '',
        is_email_verified INTEGER NOT NULL DEFAULT 0,
        email_verification_token TEXT NOT NULL DEFAULT '',
        email_verification_token_expires_at TEXT,
        reset_password_token TEXT NOT NULL DEFAULT '',
        reset_password_token_expires_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    ''')
    # Login resolves users by exact email, so active emails must be unique
    cursor.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS ux_users_active_email "
        "ON users (email) WHERE deleted_at IS NULL"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS ix_users_email_domain ON users (email_domain)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS ix_users_tenant_id ON users (tenant_id)"
    )
    logger.info("Ensured 'users' table exists.")

    logger.info("SQLite database schema initialized/verified.")


async def close_sqlite_db_connection():
    """
    Properly close the global SQLite database connection.

    Should be called during application shutdown to ensure
    proper cleanup of database resources.
    """
    global _db_connection, _write_lock
    if _db_connection is not None:
        logger.info("Closing SQLite DB connection.")
        _db_connection.close()
        _db_connection = None
        _write_lock = None
        logger.info("SQLite DB connection closed.")


@asynccontextmanager
async def sqlite_transaction() -> AsyncIterator[sqlite3.Connection]:
    """
    Run the enclosed store calls as one ``BEGIN IMMEDIATE`` transaction.

    Nested use joins the outer transaction. Any exception rolls back every
    statement issued inside the block and is re-raised unchanged.
    """
    conn = await get_sqlite_db_connection()
    if _in_transaction.get():
        yield conn
        return

    async with _write_lock:
        token = _in_transaction.set(True)
        try:
            conn.execute("BEGIN IMMEDIATE")
            logger.debug("Transaction started.")
            try:
                yield conn
                conn.commit()
                logger.debug("Transaction committed.")
            except BaseException:
                conn.rollback()
                logger.debug("Transaction rolled back.")
                raise
        except sqlite3.Error as e:
            logger.error(f"SQLite transaction failed: {e}", exc_info=True)
            raise PersistenceError(f"Transaction failed: {e}") from e
        finally:
            _in_transaction.reset(token)


class SQLiteUnitOfWork(AbstractUnitOfWork):
    """Transaction boundary shared by the SQLite tenant, user and licence stores."""

    def transaction(self):
        return sqlite_transaction()


class SQLiteStoreBase:
    """Query helpers shared by the SQLite store implementations."""

    async def initialize(self) -> None:
        """Ensure the database and tables exist."""
        await get_sqlite_db_connection()
        logger.info(f"{type(self).__name__} initialized (tables ensured by sqlite_base).")

    async def teardown(self) -> None:
        """Clean up resources - connection is managed globally."""
        logger.info(f"{type(self).__name__} teardown (connection managed globally).")

    async def _execute_query(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        """
        Execute a write statement.

        Outside a transaction the statement waits for the writer lock and
        autocommits; inside one it joins the open transaction.

        Raises:
            DuplicateRecordError: If a uniqueness constraint is violated
            PersistenceError: For any other SQLite failure
        """
        conn = await get_sqlite_db_connection()
        logger.debug(f"Executing SQL: {query.strip()} with params: {params}")
        if _in_transaction.get():
            return self._run(conn, query, params)
        async with _write_lock:
            return self._run(conn, query, params)

    async def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute a SELECT query and return a single row."""
        conn = await get_sqlite_db_connection()
        return self._run(conn, query, params).fetchone()

    async def _fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        """Execute a SELECT query and return all matching rows."""
        conn = await get_sqlite_db_connection()
        return self._run(conn, query, params).fetchall()

    @staticmethod
    def _run(conn: sqlite3.Connection, query: str, params: tuple) -> sqlite3.Cursor:
        try:
            return conn.execute(query, params)
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e):
                logger.warning(f"SQLite uniqueness violation for query '{query.strip()}': {e}")
                raise DuplicateRecordError(str(e)) from e
            logger.error(f"SQLite integrity error executing query '{query.strip()}': {e}", exc_info=True)
            raise PersistenceError(str(e)) from e
        except sqlite3.Error as e:
            logger.error(f"SQLite error executing query '{query.strip()}': {e}", exc_info=True)
            raise PersistenceError(str(e)) from e
