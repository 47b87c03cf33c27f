"""Tests for atomic tenant provisioning."""

from __future__ import annotations

import pytest

from tenant_auth.errors import (
    HashingError,
    PersistenceError,
    TenantAlreadyExistsError,
    UserAlreadyExistsError,
)
from tenant_auth.licences.sqlite_licence_store import SQLiteTenantLicenceStore
from tenant_auth.storage.sqlite_base import get_sqlite_db_connection
from tenant_auth.tenants.models import TenantRegistration
from tenant_auth.tenants.provisioner import TenantProvisioner
from tenant_auth.tenants.sqlite_tenant_store import SQLiteTenantStore
from tenant_auth.users.models import UserRole
from tenant_auth.users.sqlite_user_store import SQLiteUserStore


async def _row_counts() -> dict:
    conn = await get_sqlite_db_connection()
    return {
        table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        for table in ("tenants", "tenant_licences", "users")
    }


class FailingHasher:
    async def hash_password(self, plaintext: str) -> str:
        raise HashingError()

    async def verify_password(self, password_hash: str, plaintext: str) -> bool:
        return False

    async def simulate_verification(self, plaintext: str) -> None:
        return None


class FailingUserStore(SQLiteUserStore):
    async def create_user(self, user_create, created_at):
        raise PersistenceError("disk full")


class TestRegisterTenant:
    @pytest.mark.asyncio
    async def test_creates_tenant_licence_and_admin(
        self, provisioner: TenantProvisioner, user_store: SQLiteUserStore, make_registration
    ) -> None:
        provisioned = await provisioner.register_tenant(make_registration("acme.test"))

        assert provisioned.tenant.email == "contact@acme.test"
        assert provisioned.tenant.is_active
        assert provisioned.licence.tenant_id == provisioned.tenant.id
        assert provisioned.licence.used_seats == 1
        assert provisioned.licence.licenced_seats == provisioner.licenced_seats
        assert provisioned.licence.expiry_date is None
        assert provisioned.licence.licence_key

        admin = provisioned.admin_user
        assert admin.role == UserRole.TENANT_ADMIN
        assert admin.tenant_id == provisioned.tenant.id
        assert admin.password_hash != "admin-secret"
        assert (await user_store.get_user_by_email("admin@acme.test")).id == admin.id

    @pytest.mark.asyncio
    async def test_licence_keys_are_unique(self, provisioner: TenantProvisioner, make_registration) -> None:
        first = await provisioner.register_tenant(make_registration("one.test"))
        second = await provisioner.register_tenant(make_registration("two.test"))
        assert first.licence.licence_key != second.licence.licence_key

    @pytest.mark.asyncio
    async def test_email_is_normalized(self, provisioner: TenantProvisioner, make_registration) -> None:
        payload = make_registration("acme.test").model_dump()
        payload["email"] = "  Contact@ACME.test "
        registration = TenantRegistration(**payload)
        provisioned = await provisioner.register_tenant(registration)
        assert provisioned.tenant.email == "contact@acme.test"

    @pytest.mark.asyncio
    async def test_same_domain_is_rejected_without_partial_rows(
        self, provisioner: TenantProvisioner, make_registration
    ) -> None:
        await provisioner.register_tenant(make_registration("acme.test"))
        before = await _row_counts()

        duplicate = make_registration("acme.test", admin_email="other@elsewhere.test")
        with pytest.raises(TenantAlreadyExistsError):
            await provisioner.register_tenant(duplicate)

        assert await _row_counts() == before

    @pytest.mark.asyncio
    async def test_existing_admin_email_is_rejected(self, provisioner: TenantProvisioner, make_registration) -> None:
        await provisioner.register_tenant(make_registration("acme.test"))
        before = await _row_counts()

        with pytest.raises(UserAlreadyExistsError):
            await provisioner.register_tenant(make_registration("beta.test", admin_email="admin@acme.test"))

        assert await _row_counts() == before

    @pytest.mark.asyncio
    async def test_hashing_failure_writes_nothing(
        self,
        tenant_store: SQLiteTenantStore,
        user_store: SQLiteUserStore,
        licence_store: SQLiteTenantLicenceStore,
        provisioner: TenantProvisioner,
        make_registration,
    ) -> None:
        provisioner.hasher = FailingHasher()

        with pytest.raises(HashingError):
            await provisioner.register_tenant(make_registration("acme.test"))

        assert await _row_counts() == {"tenants": 0, "tenant_licences": 0, "users": 0}

    @pytest.mark.asyncio
    async def test_admin_insert_failure_rolls_back_tenant_and_licence(
        self, provisioner: TenantProvisioner, tenant_store: SQLiteTenantStore, make_registration
    ) -> None:
        failing_store = FailingUserStore()
        await failing_store.initialize()
        provisioner.user_store = failing_store

        with pytest.raises(PersistenceError):
            await provisioner.register_tenant(make_registration("acme.test"))

        assert await _row_counts() == {"tenants": 0, "tenant_licences": 0, "users": 0}
        assert await tenant_store.get_tenant_by_email_domain("acme.test") is None

    @pytest.mark.asyncio
    async def test_deleted_tenant_frees_its_domain(
        self, provisioner: TenantProvisioner, tenant_store: SQLiteTenantStore, make_registration
    ) -> None:
        first = await provisioner.register_tenant(make_registration("acme.test"))
        await tenant_store.delete_tenant(
            first.tenant.model_copy(update={"is_active": False, "deleted_at": first.tenant.created_at})
        )
        # The first admin still holds its email, so the new admin needs another one
        second = await provisioner.register_tenant(make_registration("acme.test", admin_email="boss@acme.test"))
        assert second.tenant.id != first.tenant.id
