"""Shared fixtures: one in-memory SQLite database per test and a cheap bcrypt cost."""

from __future__ import annotations

from typing import AsyncIterator, Optional

import pytest
import pytest_asyncio

from tenant_auth import dependencies
from tenant_auth.licences.ledger import LicenceLedger
from tenant_auth.licences.sqlite_licence_store import SQLiteTenantLicenceStore
from tenant_auth.settings import settings
from tenant_auth.storage.sqlite_base import (
    SQLiteUnitOfWork,
    close_sqlite_db_connection,
    get_sqlite_db_connection,
)
from tenant_auth.tenants.models import ProvisionedTenant, TenantRegistration
from tenant_auth.tenants.provisioner import TenantProvisioner
from tenant_auth.tenants.sqlite_tenant_store import SQLiteTenantStore
from tenant_auth.users.models import UserRegistration
from tenant_auth.users.registrar import UserRegistrar
from tenant_auth.users.sqlite_user_store import SQLiteUserStore
from tenant_auth.utils.security import BcryptCredentialHasher, UUIDTokenGenerator

TEST_SEATS = 3


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "sqlite_db_path", ":memory:")
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)
    monkeypatch.setattr(settings, "max_failed_login_attempts", 3)
    monkeypatch.setattr(settings, "user_uniqueness", "domain")
    monkeypatch.setattr(dependencies, "_hasher_instance", None)


@pytest_asyncio.fixture
async def db() -> AsyncIterator[None]:
    await get_sqlite_db_connection()
    yield
    await close_sqlite_db_connection()


@pytest.fixture(scope="session")
def hasher() -> BcryptCredentialHasher:
    return BcryptCredentialHasher(rounds=4)


@pytest_asyncio.fixture
async def tenant_store(db) -> SQLiteTenantStore:
    store = SQLiteTenantStore()
    await store.initialize()
    return store


@pytest_asyncio.fixture
async def user_store(db) -> SQLiteUserStore:
    store = SQLiteUserStore()
    await store.initialize()
    return store


@pytest_asyncio.fixture
async def licence_store(db) -> SQLiteTenantLicenceStore:
    store = SQLiteTenantLicenceStore()
    await store.initialize()
    return store


@pytest.fixture
def ledger(licence_store: SQLiteTenantLicenceStore) -> LicenceLedger:
    return LicenceLedger(licence_store)


@pytest.fixture
def provisioner(
    tenant_store: SQLiteTenantStore,
    user_store: SQLiteUserStore,
    licence_store: SQLiteTenantLicenceStore,
    hasher: BcryptCredentialHasher,
) -> TenantProvisioner:
    return TenantProvisioner(
        tenant_store=tenant_store,
        user_store=user_store,
        licence_store=licence_store,
        unit_of_work=SQLiteUnitOfWork(),
        hasher=hasher,
        token_generator=UUIDTokenGenerator(),
        licenced_seats=TEST_SEATS,
    )


@pytest.fixture
def registrar(
    user_store: SQLiteUserStore,
    tenant_store: SQLiteTenantStore,
    ledger: LicenceLedger,
    hasher: BcryptCredentialHasher,
) -> UserRegistrar:
    return UserRegistrar(
        user_store=user_store,
        tenant_store=tenant_store,
        ledger=ledger,
        unit_of_work=SQLiteUnitOfWork(),
        hasher=hasher,
    )


def make_registration(domain: str = "acme.test", admin_email: Optional[str] = None) -> TenantRegistration:
    return TenantRegistration(
        name=f"Tenant {domain}",
        email=f"contact@{domain}",
        phone="+1 555 0100",
        address="1 Main Street",
        user=UserRegistration(
            first_name="Ada",
            last_name="Admin",
            email=admin_email or f"admin@{domain}",
            password="admin-secret",
        ),
    )


def make_user(index: int, password: str = "user-secret") -> UserRegistration:
    # Distinct domains keep the default domain-level uniqueness out of the way
    return UserRegistration(
        first_name=f"User{index}",
        last_name="Test",
        email=f"user{index}@mail{index}.test",
        password=password,
    )


@pytest_asyncio.fixture
async def tenant(provisioner: TenantProvisioner) -> ProvisionedTenant:
    return await provisioner.register_tenant(make_registration())


@pytest.fixture(name="make_registration")
def make_registration_fixture():
    return make_registration


@pytest.fixture(name="make_user")
def make_user_fixture():
    return make_user
