"""Tests for login verification and lockout."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from tenant_auth.auth.models import LoginRequest
from tenant_auth.auth.verifier import CredentialVerifier
from tenant_auth.errors import (
    AccountLockedError,
    InvalidCredentialError,
    TenantNotFoundError,
    UserNotFoundError,
)
from tenant_auth.tenants.models import ProvisionedTenant
from tenant_auth.tenants.sqlite_tenant_store import SQLiteTenantStore
from tenant_auth.users.models import UserRole
from tenant_auth.users.sqlite_user_store import SQLiteUserStore
from tenant_auth.utils.security import BcryptCredentialHasher


class CountingHasher(BcryptCredentialHasher):
    def __init__(self) -> None:
        super().__init__(rounds=4)
        self.simulated = 0

    async def simulate_verification(self, plaintext: str) -> None:
        self.simulated += 1
        await super().simulate_verification(plaintext)


@pytest.fixture
def verifier(
    user_store: SQLiteUserStore, tenant_store: SQLiteTenantStore, hasher: BcryptCredentialHasher
) -> CredentialVerifier:
    return CredentialVerifier(user_store, tenant_store, hasher, max_failed_login_attempts=3)


def _login(email: str = "admin@acme.test", password: str = "admin-secret") -> LoginRequest:
    return LoginRequest(email=email, password=password)


class TestLogin:
    @pytest.mark.asyncio
    async def test_success_returns_identity_and_records_login(
        self, verifier: CredentialVerifier, user_store: SQLiteUserStore, tenant: ProvisionedTenant
    ) -> None:
        at = datetime(2030, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        result = await verifier.login(_login(), "203.0.113.7", as_of=at)

        assert result.tenant_id == tenant.tenant.id
        assert result.user_id == tenant.admin_user.id
        assert result.email == "admin@acme.test"
        assert result.role == UserRole.TENANT_ADMIN

        stored = await user_store.get_user_by_id(tenant.tenant.id, tenant.admin_user.id)
        assert stored.last_login_at == at
        assert stored.last_login_ip == "203.0.113.7"
        assert stored.failed_login_attempts == 0

    @pytest.mark.asyncio
    async def test_email_lookup_ignores_case_and_whitespace(
        self, verifier: CredentialVerifier, tenant: ProvisionedTenant
    ) -> None:
        result = await verifier.login(_login(email="  ADMIN@Acme.Test "), "127.0.0.1")
        assert result.user_id == tenant.admin_user.id

    @pytest.mark.asyncio
    async def test_unknown_email_runs_dummy_verification(
        self, user_store: SQLiteUserStore, tenant_store: SQLiteTenantStore, tenant: ProvisionedTenant
    ) -> None:
        hasher = CountingHasher()
        verifier = CredentialVerifier(user_store, tenant_store, hasher)

        with pytest.raises(UserNotFoundError):
            await verifier.login(_login(email="nobody@acme.test"), "127.0.0.1")
        assert hasher.simulated == 1

    @pytest.mark.asyncio
    async def test_wrong_password_counts_a_failure(
        self, verifier: CredentialVerifier, user_store: SQLiteUserStore, tenant: ProvisionedTenant
    ) -> None:
        with pytest.raises(InvalidCredentialError):
            await verifier.login(_login(password="wrong"), "127.0.0.1")

        stored = await user_store.get_user_by_id(tenant.tenant.id, tenant.admin_user.id)
        assert stored.failed_login_attempts == 1
        assert stored.last_login_at is None

    @pytest.mark.asyncio
    async def test_success_resets_failure_counter(
        self, verifier: CredentialVerifier, user_store: SQLiteUserStore, tenant: ProvisionedTenant
    ) -> None:
        for _ in range(2):
            with pytest.raises(InvalidCredentialError):
                await verifier.login(_login(password="wrong"), "127.0.0.1")

        await verifier.login(_login(), "127.0.0.1")

        stored = await user_store.get_user_by_id(tenant.tenant.id, tenant.admin_user.id)
        assert stored.failed_login_attempts == 0

    @pytest.mark.asyncio
    async def test_account_locks_after_max_failures(
        self, verifier: CredentialVerifier, tenant: ProvisionedTenant
    ) -> None:
        for _ in range(verifier.max_failed_login_attempts):
            with pytest.raises(InvalidCredentialError):
                await verifier.login(_login(password="wrong"), "127.0.0.1")

        # Locked even with the right password
        with pytest.raises(AccountLockedError):
            await verifier.login(_login(), "127.0.0.1")

    @pytest.mark.asyncio
    async def test_deleted_tenant_blocks_login(
        self,
        verifier: CredentialVerifier,
        tenant_store: SQLiteTenantStore,
        tenant: ProvisionedTenant,
    ) -> None:
        deleted = tenant.tenant.model_copy(update={"is_active": False, "deleted_at": tenant.tenant.created_at})
        assert await tenant_store.delete_tenant(deleted)

        with pytest.raises(TenantNotFoundError):
            await verifier.login(_login(), "127.0.0.1")


class TestUnlockAccount:
    @pytest.mark.asyncio
    async def test_unlock_allows_login_again(
        self, verifier: CredentialVerifier, tenant: ProvisionedTenant
    ) -> None:
        for _ in range(verifier.max_failed_login_attempts):
            with pytest.raises(InvalidCredentialError):
                await verifier.login(_login(password="wrong"), "127.0.0.1")

        unlocked = await verifier.unlock_account(tenant.tenant.id, tenant.admin_user.id)
        assert unlocked.failed_login_attempts == 0

        result = await verifier.login(_login(), "127.0.0.1")
        assert result.user_id == tenant.admin_user.id

    @pytest.mark.asyncio
    async def test_unlock_unknown_user_raises(self, verifier: CredentialVerifier, tenant: ProvisionedTenant) -> None:
        with pytest.raises(UserNotFoundError):
            await verifier.unlock_account(tenant.tenant.id, "missing-user")


class TestBcryptCredentialHasher:
    @pytest.mark.asyncio
    async def test_hash_verifies_and_is_salted(self, hasher: BcryptCredentialHasher) -> None:
        first = await hasher.hash_password("s3cret")
        second = await hasher.hash_password("s3cret")

        assert first != second
        assert await hasher.verify_password(first, "s3cret")
        assert not await hasher.verify_password(first, "other")

    @pytest.mark.asyncio
    async def test_malformed_hash_does_not_verify(self, hasher: BcryptCredentialHasher) -> None:
        assert not await hasher.verify_password("not-a-bcrypt-hash", "s3cret")
