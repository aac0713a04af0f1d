"""
catalog_guard.directory.sql

`PrincipalDirectory` over the SQLAlchemy models.

Responsibilities:
- Build principal snapshots (roles + claims) in one query.
- Run each mutation in its own short transaction and report it as a `DirectoryResult`.
- Cascade role deletion to memberships.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_guard.auth.models import Claim, Principal, Role
from catalog_guard.db import models
from catalog_guard.db.repositories.roles import RoleRepo
from catalog_guard.db.repositories.users import UserRepo
from catalog_guard.directory.base import DirectoryResult


def _to_role(row: models.Role) -> Role:
    return Role(id=row.id, name=row.name)


def _to_principal(user: models.User) -> Principal:
    return Principal(
        id=user.id,
        name=user.user_name,
        email=user.email,
        roles=frozenset(_to_role(m.role) for m in user.memberships),
        claims=tuple(Claim(type=c.claim_type, value=c.claim_value) for c in user.claims),
    )


class SqlPrincipalDirectory:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_principal(self, principal_id: str) -> Principal | None:
        async with self._session_factory() as session:
            user = await UserRepo(session).get_with_grants(principal_id)
            return _to_principal(user) if user is not None else None

    async def list_principals(self) -> list[Principal]:
        async with self._session_factory() as session:
            return [_to_principal(u) for u in await UserRepo(session).list_with_grants()]

    async def roles(self) -> list[Role]:
        async with self._session_factory() as session:
            return [_to_role(r) for r in await RoleRepo(session).list()]

    async def find_role(self, role_id: str) -> Role | None:
        async with self._session_factory() as session:
            row = await RoleRepo(session).get(role_id)
            return _to_role(row) if row is not None else None

    async def find_role_by_name(self, name: str) -> Role | None:
        async with self._session_factory() as session:
            row = await RoleRepo(session).get_by_name(name)
            return _to_role(row) if row is not None else None

    async def create_role(self, name: str) -> DirectoryResult:
        async with self._session_factory() as session:
            try:
                await RoleRepo(session).create(name=name)
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return DirectoryResult.failed(f"Role name '{name}' is already taken.")
        return DirectoryResult.ok()

    async def rename_role(self, role_id: str, name: str) -> DirectoryResult:
        async with self._session_factory() as session:
            repo = RoleRepo(session)
            row = await repo.get(role_id)
            if row is None:
                return DirectoryResult.failed(f"Role '{role_id}' does not exist.")
            try:
                await repo.rename(row, name=name)
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return DirectoryResult.failed(f"Role name '{name}' is already taken.")
        return DirectoryResult.ok()

    async def delete_role(self, role_id: str) -> DirectoryResult:
        async with self._session_factory() as session:
            repo = RoleRepo(session)
            row = await repo.get(role_id)
            if row is None:
                return DirectoryResult.failed(f"Role '{role_id}' does not exist.")
            await repo.delete(row)
            await session.commit()
        return DirectoryResult.ok()

    async def is_member(self, principal_id: str, role_id: str) -> bool:
        async with self._session_factory() as session:
            return await RoleRepo(session).membership(user_id=principal_id, role_id=role_id) is not None

    async def add_member(self, principal_id: str, role_id: str) -> DirectoryResult:
        async with self._session_factory() as session:
            try:
                await RoleRepo(session).add_member(user_id=principal_id, role_id=role_id)
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                return DirectoryResult.failed(f"Could not add user to role: {e.orig}")
        return DirectoryResult.ok()

    async def remove_member(self, principal_id: str, role_id: str) -> DirectoryResult:
        async with self._session_factory() as session:
            repo = RoleRepo(session)
            row = await repo.membership(user_id=principal_id, role_id=role_id)
            if row is None:
                return DirectoryResult.failed("User is not in role.")
            await repo.remove_member(row)
            await session.commit()
        return DirectoryResult.ok()

    async def attach_claim(self, principal_id: str, claim_type: str, claim_value: str) -> DirectoryResult:
        async with self._session_factory() as session:
            try:
                await UserRepo(session).add_claim(
                    user_id=principal_id, claim_type=claim_type, claim_value=claim_value
                )
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                return DirectoryResult.failed(f"Could not attach claim: {e.orig}")
        return DirectoryResult.ok()

    async def detach_claim(self, principal_id: str, claim_type: str) -> DirectoryResult:
        async with self._session_factory() as session:
            await UserRepo(session).remove_claims(user_id=principal_id, claim_type=claim_type)
            await session.commit()
        return DirectoryResult.ok()


# --- Module Notes -----------------------------------------------------------
# Operational errors (connection loss etc.) are not translated: they propagate to the caller.
