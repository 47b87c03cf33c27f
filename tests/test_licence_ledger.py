"""Tests for seat accounting on tenant licences."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from tenant_auth.errors import LicenceExceededError, LicenceExpiredError, LicenceNotFoundError
from tenant_auth.licences.ledger import LicenceLedger, is_expired
from tenant_auth.licences.sqlite_licence_store import SQLiteTenantLicenceStore
from tenant_auth.tenants.models import ProvisionedTenant
from tenant_auth.utils.time import utcnow


async def _set_expiry(store: SQLiteTenantLicenceStore, tenant_id: str, expiry) -> None:
    licence = await store.get_licence_by_tenant_id(tenant_id)
    updated = await store.update_licence(licence.model_copy(update={"expiry_date": expiry, "updated_at": utcnow()}))
    assert updated is not None


class TestIsExpired:
    @pytest.mark.asyncio
    async def test_expiry_is_exclusive_of_the_instant_itself(self, tenant: ProvisionedTenant) -> None:
        expiry = utcnow()
        licence = tenant.licence.model_copy(update={"expiry_date": expiry})
        assert not is_expired(licence, expiry)
        assert is_expired(licence, expiry + timedelta(microseconds=1))

    @pytest.mark.asyncio
    async def test_licence_without_expiry_never_expires(self, tenant: ProvisionedTenant) -> None:
        assert tenant.licence.expiry_date is None
        assert not is_expired(tenant.licence, utcnow() + timedelta(days=365 * 50))


class TestAllocateSeat:
    @pytest.mark.asyncio
    async def test_allocate_increments_used_seats(self, ledger: LicenceLedger, tenant: ProvisionedTenant) -> None:
        licence = await ledger.allocate_seat(tenant.tenant.id)
        assert licence.used_seats == tenant.licence.used_seats + 1
        assert licence.licenced_seats == tenant.licence.licenced_seats

    @pytest.mark.asyncio
    async def test_full_licence_rejects_and_keeps_count(
        self, ledger: LicenceLedger, licence_store: SQLiteTenantLicenceStore, tenant: ProvisionedTenant
    ) -> None:
        tenant_id = tenant.tenant.id
        for _ in range(tenant.licence.licenced_seats - tenant.licence.used_seats):
            await ledger.allocate_seat(tenant_id)

        with pytest.raises(LicenceExceededError):
            await ledger.allocate_seat(tenant_id)

        licence = await licence_store.get_licence_by_tenant_id(tenant_id)
        assert licence.used_seats == licence.licenced_seats

    @pytest.mark.asyncio
    async def test_expired_licence_rejects(
        self, ledger: LicenceLedger, licence_store: SQLiteTenantLicenceStore, tenant: ProvisionedTenant
    ) -> None:
        tenant_id = tenant.tenant.id
        await _set_expiry(licence_store, tenant_id, utcnow() - timedelta(days=1))

        with pytest.raises(LicenceExpiredError):
            await ledger.allocate_seat(tenant_id)

        licence = await licence_store.get_licence_by_tenant_id(tenant_id)
        assert licence.used_seats == tenant.licence.used_seats

    @pytest.mark.asyncio
    async def test_expiry_is_reported_before_exhaustion(
        self, ledger: LicenceLedger, licence_store: SQLiteTenantLicenceStore, tenant: ProvisionedTenant
    ) -> None:
        tenant_id = tenant.tenant.id
        for _ in range(tenant.licence.licenced_seats - tenant.licence.used_seats):
            await ledger.allocate_seat(tenant_id)
        await _set_expiry(licence_store, tenant_id, utcnow() - timedelta(seconds=1))

        with pytest.raises(LicenceExpiredError):
            await ledger.allocate_seat(tenant_id)

    @pytest.mark.asyncio
    async def test_allocation_as_of_a_past_instant_honours_future_expiry(
        self, ledger: LicenceLedger, licence_store: SQLiteTenantLicenceStore, tenant: ProvisionedTenant
    ) -> None:
        expiry = utcnow() + timedelta(days=1)
        await _set_expiry(licence_store, tenant.tenant.id, expiry)

        licence = await ledger.allocate_seat(tenant.tenant.id, as_of=expiry)
        assert licence.used_seats == tenant.licence.used_seats + 1

        with pytest.raises(LicenceExpiredError):
            await ledger.allocate_seat(tenant.tenant.id, as_of=expiry + timedelta(seconds=1))

    @pytest.mark.asyncio
    async def test_unknown_tenant_has_no_licence(self, ledger: LicenceLedger, db) -> None:
        with pytest.raises(LicenceNotFoundError):
            await ledger.allocate_seat("missing-tenant")

    @pytest.mark.asyncio
    async def test_concurrent_allocations_never_exceed_capacity(
        self, ledger: LicenceLedger, licence_store: SQLiteTenantLicenceStore, tenant: ProvisionedTenant
    ) -> None:
        tenant_id = tenant.tenant.id
        free = tenant.licence.licenced_seats - tenant.licence.used_seats

        results = await asyncio.gather(
            *(ledger.allocate_seat(tenant_id) for _ in range(free + 5)),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(results) - len(failures) == free
        assert all(isinstance(f, LicenceExceededError) for f in failures)
        licence = await licence_store.get_licence_by_tenant_id(tenant_id)
        assert licence.used_seats == licence.licenced_seats


class TestReleaseSeat:
    @pytest.mark.asyncio
    async def test_release_decrements_used_seats(self, ledger: LicenceLedger, tenant: ProvisionedTenant) -> None:
        await ledger.allocate_seat(tenant.tenant.id)
        licence = await ledger.release_seat(tenant.tenant.id)
        assert licence.used_seats == tenant.licence.used_seats

    @pytest.mark.asyncio
    async def test_release_never_goes_below_zero(self, ledger: LicenceLedger, tenant: ProvisionedTenant) -> None:
        tenant_id = tenant.tenant.id
        for _ in range(tenant.licence.used_seats):
            await ledger.release_seat(tenant_id)

        licence = await ledger.release_seat(tenant_id)
        assert licence.used_seats == 0

    @pytest.mark.asyncio
    async def test_release_for_unknown_tenant_raises(self, ledger: LicenceLedger, db) -> None:
        with pytest.raises(LicenceNotFoundError):
            await ledger.release_seat("missing-tenant")
