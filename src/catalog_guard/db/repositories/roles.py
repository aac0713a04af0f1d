"""
catalog_guard.db.repositories.roles

Repository for `Role` entities and user/role membership rows.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_guard.db.models import Role, UserRole


class RoleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list(self) -> list[Role]:
        stmt = select(Role).order_by(Role.name)
        return list((await self._session.execute(stmt)).scalars().all())

    async def get(self, role_id: str) -> Role | None:
        return await self._session.get(Role, role_id)

    async def get_by_name(self, name: str) -> Role | None:
        stmt = select(Role).where(Role.name == name)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def create(self, *, name: str) -> Role:
        role = Role(name=name)
        self._session.add(role)
        await self._session.flush()
        return role

    async def rename(self, role: Role, *, name: str) -> None:
        role.name = name
        await self._session.flush()

    async def delete(self, role: Role) -> None:
        await self._session.execute(delete(UserRole).where(UserRole.role_id == role.id))
        await self._session.delete(role)
        await self._session.flush()

    async def membership(self, *, user_id: str, role_id: str) -> UserRole | None:
        return await self._session.get(UserRole, (user_id, role_id))

    async def add_member(self, *, user_id: str, role_id: str) -> UserRole:
        row = UserRole(user_id=user_id, role_id=role_id)
        self._session.add(row)
        await self._session.flush()
        return row

    async def remove_member(self, row: UserRole) -> None:
        await self._session.delete(row)
        await self._session.flush()
