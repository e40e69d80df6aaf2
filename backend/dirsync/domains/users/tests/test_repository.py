"""Unit tests for LocalIdentityRepository against a mocked AsyncSession."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from dirsync import schemas
from dirsync.core.exceptions import NotFoundException
from dirsync.domains.users.repository import LocalIdentityRepository
from dirsync.models.user import User

TENANT_ID = uuid4()


def _db() -> MagicMock:
    db = MagicMock(name="AsyncSession")
    db.add = MagicMock()
    db.get = AsyncMock(return_value=None)
    db.execute = AsyncMock()

    async def flush():
        # Mimic the INSERT assigning the primary key
        for call in db.add.call_args_list:
            obj = call.args[0]
            if obj.id is None:
                obj.id = uuid4()

    db.flush = AsyncMock(side_effect=flush)
    return db


def _user(email: str = "jdoe@acme.com", password: str = "", is_active: bool = True) -> User:
    return User(
        id=uuid4(),
        tenant_id=TENANT_ID,
        email=email,
        name="John Doe",
        password=password,
        role="USER",
        is_active=is_active,
    )


@pytest.mark.asyncio
async def test_create_provisions_with_empty_password_inside_savepoint():
    db = _db()

    identity = await LocalIdentityRepository().create(
        db, TENANT_ID, schemas.LocalIdentityCreate(email="jdoe@acme.com", name="John Doe")
    )

    db.begin_nested.assert_called_once()
    added = db.add.call_args.args[0]
    assert added.password == ""
    assert added.role == "USER"
    assert added.tenant_id == TENANT_ID
    assert identity.has_directory_provenance is True
    assert identity.is_active is True
    assert identity.id == added.id


@pytest.mark.asyncio
async def test_update_applies_only_set_fields():
    db = _db()
    user = _user(is_active=False)
    db.get.return_value = user

    identity = await LocalIdentityRepository().update(
        db, user.id, schemas.LocalIdentityUpdate(is_active=True)
    )

    db.begin_nested.assert_called_once()
    assert user.is_active is True
    assert user.name == "John Doe"
    assert identity.is_active is True


@pytest.mark.asyncio
async def test_update_missing_user_raises_not_found():
    db = _db()

    with pytest.raises(NotFoundException):
        await LocalIdentityRepository().update(
            db, uuid4(), schemas.LocalIdentityUpdate(is_active=False)
        )


@pytest.mark.asyncio
async def test_local_password_user_has_no_directory_provenance():
    db = _db()
    result = MagicMock()
    result.scalar_one_or_none.return_value = _user(email="admin@acme.com", password="hashed")
    db.execute.return_value = result

    identity = await LocalIdentityRepository().find_by_email(db, TENANT_ID, "admin@acme.com")

    assert identity.has_directory_provenance is False


@pytest.mark.asyncio
async def test_find_active_provisioned_identities_filters_in_sql():
    db = _db()
    result = MagicMock()
    result.scalars.return_value.all.return_value = [_user()]
    db.execute.return_value = result

    identities = await LocalIdentityRepository().find_active_provisioned_identities(
        db, TENANT_ID, {"other@acme.com"}
    )

    assert [i.email for i in identities] == ["jdoe@acme.com"]
    statement = str(db.execute.call_args.args[0])
    assert "tenant_id" in statement
    assert "password" in statement
    assert "NOT IN" in statement
