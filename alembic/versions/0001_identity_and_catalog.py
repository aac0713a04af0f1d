"""identity tables and album catalog

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_name", sa.String(256), nullable=False, unique=True),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("id_card_no", sa.String(18), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "roles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(256), nullable=False, unique=True),
    )
    op.create_table(
        "user_roles",
        sa.Column(
            "user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "role_id", sa.String(36), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
        ),
    )
    op.create_index("ix_user_roles_role", "user_roles", ["role_id"])
    op.create_table(
        "user_claims",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("claim_type", sa.String(256), nullable=False),
        sa.Column("claim_value", sa.Text(), nullable=False),
    )
    op.create_index("ix_user_claims_user_type", "user_claims", ["user_id", "claim_type"])
    op.create_table(
        "albums",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("artist", sa.String(256), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("release_date", sa.Date(), nullable=False),
        sa.Column("cover_url", sa.Text(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("albums")
    op.drop_index("ix_user_claims_user_type", table_name="user_claims")
    op.drop_table("user_claims")
    op.drop_index("ix_user_roles_role", table_name="user_roles")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_table("users")
