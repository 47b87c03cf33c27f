# tenant_auth/storage/__init__.py

"""Storage module initialization.

This module provides a unified interface for database operations,
currently supporting SQLite database connections, schema initialization
and transactions spanning several stores.
"""

from .interfaces import AbstractUnitOfWork
from .sqlite_base import (
    get_sqlite_db_connection,
    init_sqlite_db,
    close_sqlite_db_connection,
    sqlite_transaction,
    SQLiteUnitOfWork,
    SQLiteStoreBase,
)

# Export public API for database operations
__all__ = [
    "AbstractUnitOfWork",
    "get_sqlite_db_connection",
    "init_sqlite_db",
    "close_sqlite_db_connection",
    "sqlite_transaction",
    "SQLiteUnitOfWork",
    "SQLiteStoreBase",
]
