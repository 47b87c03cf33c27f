# tenant_auth/dependencies.py
import logging
from typing import Optional

from .auth.hashing import CredentialHasherProtocol
from .auth.verifier import CredentialVerifier
from .licences.ledger import LicenceLedger
from .licences.service import LicenceService
from .licences.sqlite_licence_store import get_sqlite_licence_store
from .storage.sqlite_base import SQLiteUnitOfWork
from .tenants.provisioner import TenantProvisioner
from .tenants.service import TenantService
from .tenants.sqlite_tenant_store import get_sqlite_tenant_store
from .users.registrar import UserRegistrar
from .users.service import UserService
from .users.sqlite_user_store import get_sqlite_user_store
from .utils.security import BcryptCredentialHasher, UUIDTokenGenerator

logger = logging.getLogger(__name__)

_hasher_instance: Optional[BcryptCredentialHasher] = None


def get_credential_hasher() -> CredentialHasherProtocol:
    """Get or create the shared bcrypt hasher configured from settings."""
    global _hasher_instance
    if _hasher_instance is None:
        _hasher_instance = BcryptCredentialHasher()
        logger.info(f"Created bcrypt hasher with {_hasher_instance.rounds} rounds.")
    return _hasher_instance


async def get_licence_ledger() -> LicenceLedger:
    return LicenceLedger(await get_sqlite_licence_store())


async def get_tenant_provisioner() -> TenantProvisioner:
    """Factory function to create TenantProvisioner wired to the SQLite stores."""
    return TenantProvisioner(
        tenant_store=await get_sqlite_tenant_store(),
        user_store=await get_sqlite_user_store(),
        licence_store=await get_sqlite_licence_store(),
        unit_of_work=SQLiteUnitOfWork(),
        hasher=get_credential_hasher(),
        token_generator=UUIDTokenGenerator(),
    )


async def get_user_registrar() -> UserRegistrar:
    """Factory function to create UserRegistrar wired to the SQLite stores."""
    return UserRegistrar(
        user_store=await get_sqlite_user_store(),
        tenant_store=await get_sqlite_tenant_store(),
        ledger=await get_licence_ledger(),
        unit_of_work=SQLiteUnitOfWork(),
        hasher=get_credential_hasher(),
    )


async def get_credential_verifier() -> CredentialVerifier:
    return CredentialVerifier(
        user_store=await get_sqlite_user_store(),
        tenant_store=await get_sqlite_tenant_store(),
        hasher=get_credential_hasher(),
    )


async def get_tenant_service() -> TenantService:
    return TenantService(
        tenant_store=await get_sqlite_tenant_store(),
        user_store=await get_sqlite_user_store(),
        unit_of_work=SQLiteUnitOfWork(),
    )


async def get_user_service() -> UserService:
    return UserService(await get_sqlite_user_store())


async def get_licence_service() -> LicenceService:
    return LicenceService(await get_sqlite_licence_store())
