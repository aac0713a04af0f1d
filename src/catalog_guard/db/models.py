"""
catalog_guard.db.models

Persistence schema for the back office.

Responsibilities:
- Define ORM models for identity data (User, Role, UserRole, UserClaim).
- Define the album catalog model (Album).
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog_guard.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for simplicity; production systems may use tz-aware types.
    return datetime.utcnow()


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_name: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    id_card_no: Mapped[str | None] = mapped_column(String(18), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    memberships: Mapped[list[UserRole]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    claims: Mapped[list[UserClaim]] = relationship(
        back_populates="user", cascade="all, delete-orphan", order_by="UserClaim.id"
    )


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    # Case-sensitive unique name; duplicates must fail, never overwrite.
    name: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)

    memberships: Mapped[list[UserRole]] = relationship(
        back_populates="role", cascade="all, delete-orphan"
    )


class UserRole(Base):
    __tablename__ = "user_roles"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )

    user: Mapped[User] = relationship(back_populates="memberships")
    role: Mapped[Role] = relationship(back_populates="memberships")

    __table_args__ = (Index("ix_user_roles_role", "role_id"),)


class UserClaim(Base):
    __tablename__ = "user_claims"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # No uniqueness on (user_id, claim_type): duplicate claim types are allowed.
    claim_type: Mapped[str] = mapped_column(String(256), nullable=False)
    claim_value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    user: Mapped[User] = relationship(back_populates="claims")

    __table_args__ = (Index("ix_user_claims_user_type", "user_id", "claim_type"),)


class Album(Base):
    __tablename__ = "albums"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    artist: Mapped[str] = mapped_column(String(256), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    release_date: Mapped[date] = mapped_column(Date, nullable=False)
    cover_url: Mapped[str] = mapped_column(Text, nullable=False, default="")


# --- Module Notes -----------------------------------------------------------
# Role deletion cascades to user_roles both in SQL (ondelete) and in the directory adapter,
# because SQLite only enforces foreign keys when the pragma is enabled.
