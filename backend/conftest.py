"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before both tests/ and the colocated tests under
dirsync/, so its fixtures are available everywhere.
"""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

# ---------------------------------------------------------------------------
# Environment variables: must be set before any dirsync module import.
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test_user")
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("POSTGRES_DB", "test_db")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_db():
    """A stand-in AsyncSession that records commits."""
    db = MagicMock(name="AsyncSession")
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def fake_db_context(fake_db):
    """Replacement for get_db_context that yields ``fake_db``."""

    @asynccontextmanager
    async def _context():
        yield fake_db

    return _context


# ---------------------------------------------------------------------------
# Shared fake fixtures: individual protocol fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_config_repo():
    """Fake DirectorySyncConfigRepository."""
    from dirsync.domains.directory_sync.fakes.repository import (
        FakeDirectorySyncConfigRepository,
    )

    return FakeDirectorySyncConfigRepository()


@pytest.fixture
def fake_identity_store():
    """Fake LocalIdentityRepository."""
    from dirsync.domains.users.fakes.repository import FakeLocalIdentityRepository

    return FakeLocalIdentityRepository()


@pytest.fixture
def fake_sync_orchestrator():
    """Fake SyncOrchestrator returning canned results."""
    from dirsync.domains.directory_sync.fakes.service import FakeSyncOrchestrator

    return FakeSyncOrchestrator()


@pytest.fixture
def fake_connection_tester():
    """Fake ConnectionTester returning canned results."""
    from dirsync.domains.directory_sync.fakes.service import FakeConnectionTester

    return FakeConnectionTester()


# ---------------------------------------------------------------------------
# Test container: fully faked Container for injection
# ---------------------------------------------------------------------------


@pytest.fixture
def test_container(
    fake_config_repo,
    fake_identity_store,
    fake_sync_orchestrator,
    fake_connection_tester,
):
    """A Container with all dependencies replaced by fakes.

    For partial overrides, use container.replace():
        real_tester = test_container.replace(connection_tester=ConnectionTester(...))
    """
    from dirsync.core.container import Container
    from dirsync.domains.directory_sync.reconciliation import ReconciliationEngine

    return Container(
        config_repo=fake_config_repo,
        identity_store=fake_identity_store,
        reconciliation=ReconciliationEngine(identity_store=fake_identity_store),
        sync_orchestrator=fake_sync_orchestrator,
        connection_tester=fake_connection_tester,
    )
