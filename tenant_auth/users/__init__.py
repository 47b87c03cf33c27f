# tenant_auth/users/__init__.py
"""
User management module initialization.

Seat-aware registration and deletion live in ``tenant_auth.users.registrar``.
"""

from .models import UserRole, UserRegistration, UserCreate, UserUpdate, UserInDB, User
from .storage_interfaces import AbstractUserStore
from .sqlite_user_store import SQLiteUserStore, get_sqlite_user_store
from .service import UserService

# Export all public components for external use
__all__ = [
    # Data models for user operations
    "UserRole",
    "UserRegistration",
    "UserCreate",
    "UserUpdate",
    "UserInDB",
    "User",
    # Storage layer abstractions and implementations
    "AbstractUserStore",
    "SQLiteUserStore",
    "get_sqlite_user_store",
    # Business logic service
    "UserService",
]
