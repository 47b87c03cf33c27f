# tenant_auth/errors.py
from typing import Optional


class TenantAuthError(Exception):
    """Base exception class for every failure raised by the tenant auth services.

    Business outcomes (not found, already exists, licence limits, bad credentials)
    and environment faults (hashing, persistence) share this root so a front end
    can map them to user-facing messages in one place.
    """

    default_detail = "Tenant auth operation failed."

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


# Lookups

class NotFoundError(TenantAuthError):
    default_detail = "Record not found."


class TenantNotFoundError(NotFoundError):
    default_detail = "Tenant not found."


class UserNotFoundError(NotFoundError):
    default_detail = "User not found."


class LicenceNotFoundError(NotFoundError):
    default_detail = "Tenant licence not found."


# Uniqueness

class AlreadyExistsError(TenantAuthError):
    default_detail = "Record already exists."


class TenantAlreadyExistsError(AlreadyExistsError):
    """Raised when another active tenant already owns the registrant's email domain."""

    default_detail = "Tenant already exists."


class UserAlreadyExistsError(AlreadyExistsError):
    default_detail = "User already exists."


# Licensing

class LicenceExceededError(TenantAuthError):
    """Raised when a tenant licence has no free seat left."""

    default_detail = "Tenant licence exceeded."


class LicenceExpiredError(TenantAuthError):
    default_detail = "Tenant licence expired."


# Credentials

class InvalidCredentialError(TenantAuthError):
    default_detail = "Invalid password."


class AccountLockedError(TenantAuthError):
    """Raised once the failed login counter has reached the configured threshold.

    The account stays locked until an explicit unlock resets the counter.
    """

    default_detail = "Account locked after too many failed login attempts."


# Environment faults

class HashingError(TenantAuthError):
    default_detail = "Failed to hash password."


class PersistenceError(TenantAuthError):
    """Wraps any storage-layer fault (database unavailable, constraint failure, ...)."""

    default_detail = "Storage operation failed."


class DuplicateRecordError(PersistenceError):
    """Raised by stores when an insert or update violates a uniqueness constraint."""

    default_detail = "A record with the same unique key already exists."
