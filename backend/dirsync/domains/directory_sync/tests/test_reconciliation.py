"""Unit tests for ReconciliationEngine.

Uses the in-memory identity store; no database.
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from dirsync.domains.directory_sync.reconciliation import ReconciliationEngine
from dirsync.domains.users.fakes.repository import FakeLocalIdentityRepository
from dirsync.platform.directory.types import DirectoryIdentity

TENANT_ID = uuid4()
OTHER_TENANT_ID = uuid4()


def _identity(account: str, display_name: str = "") -> DirectoryIdentity:
    return DirectoryIdentity(
        account_name=account,
        email=f"{account}@acme.com",
        display_name=display_name or account.title(),
    )


def _engine(store: FakeLocalIdentityRepository) -> ReconciliationEngine:
    return ReconciliationEngine(identity_store=store)


@pytest.mark.asyncio
async def test_new_identity_is_created_with_directory_provenance():
    """One found identity with no local match -> created=1."""
    store = FakeLocalIdentityRepository()

    stats = await _engine(store).reconcile(MagicMock(), TENANT_ID, [_identity("jdoe")])

    assert (stats.created, stats.updated, stats.deactivated) == (1, 0, 0)
    created = store.get_by_email(TENANT_ID, "jdoe@acme.com")
    assert created.is_active is True
    assert created.has_directory_provenance is True
    assert created.name == "Jdoe"


@pytest.mark.asyncio
async def test_existing_identity_is_updated_and_reactivated():
    store = FakeLocalIdentityRepository()
    store.seed(TENANT_ID, "jdoe@acme.com", name="Old Name", is_active=False)

    stats = await _engine(store).reconcile(
        MagicMock(), TENANT_ID, [_identity("jdoe", "John Doe")]
    )

    assert (stats.created, stats.updated, stats.deactivated) == (0, 1, 0)
    updated = store.get_by_email(TENANT_ID, "jdoe@acme.com")
    assert updated.name == "John Doe"
    assert updated.is_active is True


@pytest.mark.asyncio
async def test_missing_provisioned_identity_is_deactivated():
    store = FakeLocalIdentityRepository()
    store.seed(TENANT_ID, "gone@acme.com")

    stats = await _engine(store).reconcile(MagicMock(), TENANT_ID, [_identity("jdoe")])

    assert stats.deactivated == 1
    assert store.get_by_email(TENANT_ID, "gone@acme.com").is_active is False


@pytest.mark.asyncio
async def test_local_password_accounts_are_never_deactivated():
    store = FakeLocalIdentityRepository()
    store.seed(TENANT_ID, "admin@acme.com", has_directory_provenance=False)

    stats = await _engine(store).reconcile(MagicMock(), TENANT_ID, [])

    assert stats.deactivated == 0
    assert store.get_by_email(TENANT_ID, "admin@acme.com").is_active is True


@pytest.mark.asyncio
async def test_other_tenants_are_untouched():
    store = FakeLocalIdentityRepository()
    store.seed(OTHER_TENANT_ID, "gone@acme.com")

    stats = await _engine(store).reconcile(MagicMock(), TENANT_ID, [_identity("jdoe")])

    assert stats.deactivated == 0
    assert store.get_by_email(OTHER_TENANT_ID, "gone@acme.com").is_active is True
    assert store.get_by_email(OTHER_TENANT_ID, "jdoe@acme.com") is None


@pytest.mark.asyncio
async def test_empty_snapshot_deactivates_all_provisioned_identities():
    store = FakeLocalIdentityRepository()
    store.seed(TENANT_ID, "a@acme.com")
    store.seed(TENANT_ID, "b@acme.com")

    stats = await _engine(store).reconcile(MagicMock(), TENANT_ID, [])

    assert stats.deactivated == 2


@pytest.mark.asyncio
async def test_second_run_is_idempotent():
    store = FakeLocalIdentityRepository()
    store.seed(TENANT_ID, "gone@acme.com")
    snapshot = [_identity("jdoe"), _identity("asmith")]
    engine = _engine(store)

    first = await engine.reconcile(MagicMock(), TENANT_ID, snapshot)
    second = await engine.reconcile(MagicMock(), TENANT_ID, snapshot)

    assert (first.created, first.deactivated) == (2, 1)
    assert (second.created, second.updated, second.deactivated) == (0, 2, 0)


@pytest.mark.asyncio
async def test_deactivation_runs_before_provisioning():
    store = FakeLocalIdentityRepository()
    store.seed(TENANT_ID, "gone@acme.com")

    await _engine(store).reconcile(MagicMock(), TENANT_ID, [_identity("jdoe")])

    methods = [call[0] for call in store._calls]
    assert methods.index("find_active_provisioned_identities") < methods.index("find_by_email")
    first_update = store.calls("update")[0]
    assert first_update[2].is_active is False
    assert store.calls("find_active_provisioned_identities")[0][2] == {"jdoe@acme.com"}


@pytest.mark.asyncio
async def test_per_identity_failure_does_not_abort_the_pass():
    store = FakeLocalIdentityRepository()
    store.fail_on("broken@acme.com")
    snapshot = [_identity("broken"), _identity("jdoe")]

    stats = await _engine(store).reconcile(MagicMock(), TENANT_ID, snapshot)

    assert stats.failed == 1
    assert stats.created == 1
    assert store.get_by_email(TENANT_ID, "jdoe@acme.com") is not None
    assert store.get_by_email(TENANT_ID, "broken@acme.com") is None


@pytest.mark.asyncio
async def test_deactivation_failure_propagates():
    store = FakeLocalIdentityRepository()
    store.seed(TENANT_ID, "gone@acme.com")
    store.fail_on("gone@acme.com")

    with pytest.raises(RuntimeError):
        await _engine(store).reconcile(MagicMock(), TENANT_ID, [])
