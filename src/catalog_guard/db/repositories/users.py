"""
catalog_guard.db.repositories.users

Repository for `User` entities and their claims.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog_guard.db.models import User, UserClaim, UserRole


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        user_name: str,
        email: str = "",
        id_card_no: str | None = None,
        birth_date: date | None = None,
    ) -> User:
        user = User(
            user_name=user_name.strip(),
            email=email.strip(),
            id_card_no=id_card_no,
            birth_date=birth_date,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)

    async def get_with_grants(self, user_id: str) -> User | None:
        # One round trip for the whole snapshot: roles and claims eagerly loaded.
        stmt = (
            select(User)
            .where(User.id == user_id)
            .options(
                selectinload(User.memberships).selectinload(UserRole.role),
                selectinload(User.claims),
            )
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_with_grants(self) -> list[User]:
        stmt = (
            select(User)
            .order_by(User.user_name)
            .options(
                selectinload(User.memberships).selectinload(UserRole.role),
                selectinload(User.claims),
            )
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def add_claim(self, *, user_id: str, claim_type: str, claim_value: str) -> UserClaim:
        claim = UserClaim(user_id=user_id, claim_type=claim_type, claim_value=claim_value)
        self._session.add(claim)
        await self._session.flush()
        return claim

    async def remove_claims(self, *, user_id: str, claim_type: str) -> int:
        result = await self._session.execute(
            delete(UserClaim).where(UserClaim.user_id == user_id, UserClaim.claim_type == claim_type)
        )
        return result.rowcount or 0
