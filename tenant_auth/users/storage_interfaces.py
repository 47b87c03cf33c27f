# tenant_auth/users/storage_interfaces.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List
from .models import UserInDB, UserCreate


class AbstractUserStore(ABC):
    """
    Abstract base class defining the interface for user storage operations.

    Every lookup ignores soft-deleted users. Emails are compared in their
    normalized (lowercase) form.
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
    async def create_user(self, user_create: UserCreate, created_at: datetime) -> UserInDB:
        """Insert a user; raises DuplicateRecordError if the email is held by an active user."""
        pass

    @abstractmethod
    async def get_user_by_id(self, tenant_id: str, user_id: str) -> Optional[UserInDB]:
        """Retrieve an active user belonging to ``tenant_id``."""
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        """Retrieve the active user with exactly this email address."""
        pass

    @abstractmethod
    async def get_user_by_email_domain(self, domain: str) -> Optional[UserInDB]:
        """Retrieve any active user whose email address belongs to ``domain``."""
        pass

    @abstractmethod
    async def list_users(self, tenant_id: str) -> List[UserInDB]:
        """Retrieve every active user of a tenant, oldest first."""
        pass

    @abstractmethod
    async def update_user(self, user: UserInDB) -> Optional[UserInDB]:
        """Persist every mutable field of ``user``; None if no active user has that id."""
        pass

    @abstractmethod
    async def delete_user(self, user: UserInDB) -> bool:
        """Soft-delete a user. The caller sets ``is_active`` and ``deleted_at``."""
        pass

    @abstractmethod
    async def delete_users_for_tenant(self, tenant_id: str, deleted_at: datetime) -> int:
        """Soft-delete every active user of a tenant and return how many were affected."""
        pass

    @abstractmethod
    async def record_failed_login(self, user_id: str, at: datetime) -> int:
        """Atomically increment the failed login counter and return its new value."""
        pass

    @abstractmethod
    async def record_successful_login(self, user_id: str, at: datetime, ip_address: str) -> Optional[UserInDB]:
        """Stamp last_login_at / last_login_ip and reset the failed login counter."""
        pass

    @abstractmethod
    async def reset_failed_logins(self, user_id: str, at: datetime) -> Optional[UserInDB]:
        """Clear the failed login counter (explicit unlock)."""
        pass
