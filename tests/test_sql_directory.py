"""
tests.test_sql_directory

`SqlPrincipalDirectory` and `AlbumRepo` against a throwaway SQLite database.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_guard.catalog.models import AlbumDraft
from catalog_guard.db.init_db import init_db
from catalog_guard.db.repositories.albums import AlbumRepo
from catalog_guard.db.repositories.users import UserRepo
from catalog_guard.db.session import create_engine, create_sessionmaker
from catalog_guard.directory.sql import SqlPrincipalDirectory
from catalog_guard.membership.reconciler import MembershipReconciler
from catalog_guard.outcomes import SUCCESS, Failure, FailureKind
from catalog_guard.settings import Settings


@dataclass(slots=True)
class Db:
    sessionmaker: async_sessionmaker[AsyncSession]
    directory: SqlPrincipalDirectory


@pytest_asyncio.fixture()
async def db(tmp_path: Path) -> AsyncIterator[Db]:
    settings = Settings(env="test", database_url=f"sqlite+aiosqlite:///{tmp_path / 'guard.db'}")
    engine = create_engine(settings)
    await init_db(engine)
    sessionmaker = create_sessionmaker(engine)
    try:
        yield Db(sessionmaker=sessionmaker, directory=SqlPrincipalDirectory(sessionmaker))
    finally:
        await engine.dispose()


async def _add_user(db: Db, name: str, email: str = "") -> str:
    async with db.sessionmaker() as session:
        user = await UserRepo(session).create(user_name=name, email=email)
        await session.commit()
        return user.id


@pytest.mark.asyncio
async def test_role_lifecycle_and_uniqueness(db: Db) -> None:
    assert (await db.directory.create_role("Administrators")).succeeded
    dup = await db.directory.create_role("Administrators")
    assert not dup.succeeded
    assert "already taken" in dup.reason

    role = await db.directory.find_role_by_name("Administrators")
    assert role is not None
    assert (await db.directory.rename_role(role.id, "Admins")).succeeded
    assert await db.directory.find_role_by_name("Administrators") is None
    assert [r.name for r in await db.directory.roles()] == ["Admins"]


@pytest.mark.asyncio
async def test_snapshot_carries_roles_and_ordered_claims(db: Db) -> None:
    uid = await _add_user(db, "alice", "alice@126.com")
    await db.directory.create_role("Editors")
    role = await db.directory.find_role_by_name("Editors")
    assert role is not None

    assert (await db.directory.add_member(uid, role.id)).succeeded
    await db.directory.attach_claim(uid, "EditAlbums", "pop")
    await db.directory.attach_claim(uid, "EditAlbums", "jazz")

    principal = await db.directory.find_principal(uid)
    assert principal is not None
    assert principal.email == "alice@126.com"
    assert principal.role_names == {"Editors"}
    assert [(c.type, c.value) for c in principal.claims] == [
        ("EditAlbums", "pop"),
        ("EditAlbums", "jazz"),
    ]

    assert (await db.directory.detach_claim(uid, "EditAlbums")).succeeded
    principal = await db.directory.find_principal(uid)
    assert principal is not None and principal.claims == ()


@pytest.mark.asyncio
async def test_second_add_member_fails_in_directory(db: Db) -> None:
    uid = await _add_user(db, "bob")
    await db.directory.create_role("Editors")
    role = await db.directory.find_role_by_name("Editors")
    assert role is not None

    assert (await db.directory.add_member(uid, role.id)).succeeded
    assert not (await db.directory.add_member(uid, role.id)).succeeded
    assert await db.directory.is_member(uid, role.id)


@pytest.mark.asyncio
async def test_delete_role_cascades(db: Db) -> None:
    uid = await _add_user(db, "carol")
    await db.directory.create_role("Editors")
    role = await db.directory.find_role_by_name("Editors")
    assert role is not None
    await db.directory.add_member(uid, role.id)

    assert (await db.directory.delete_role(role.id)).succeeded
    assert not await db.directory.is_member(uid, role.id)
    principal = await db.directory.find_principal(uid)
    assert principal is not None and principal.roles == frozenset()


@pytest.mark.asyncio
async def test_reconciler_over_sql(db: Db) -> None:
    uid = await _add_user(db, "dave")
    r = MembershipReconciler(db.directory, claim_types=["EditAlbums"])

    assert await r.add_role("Administrators") == SUCCESS
    role = await db.directory.find_role_by_name("Administrators")
    assert role is not None
    assert await r.set_role_membership(uid, role.id, True) == SUCCESS
    assert await r.set_role_membership(uid, role.id, True) == SUCCESS
    assert await r.set_role_membership(uid, role.id, False) == SUCCESS

    outcome = await r.set_role_membership(uid, role.id, False)
    assert isinstance(outcome, Failure) and outcome.kind is FailureKind.not_a_member


@pytest.mark.asyncio
async def test_album_repo_crud(db: Db) -> None:
    repo = AlbumRepo(db.sessionmaker)
    draft = AlbumDraft(
        title="Kind of Blue",
        artist="Miles Davis",
        price=Decimal("12.50"),
        release_date=date(1959, 8, 17),
    )
    created = await repo.add(draft)
    assert created.id > 0
    assert created.price == Decimal("12.50")

    updated = await repo.update(created.id, draft.model_copy(update={"price": Decimal("10.00")}))
    assert updated is not None and updated.price == Decimal("10.00")

    assert [a.title for a in await repo.list_all()] == ["Kind of Blue"]
    assert await repo.delete(created.id)
    assert await repo.get(created.id) is None
    assert not await repo.delete(created.id)
