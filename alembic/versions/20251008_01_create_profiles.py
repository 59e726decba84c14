"""Create profiles (one per member).

Revision ID: 20251008_01
Revises: 20250101_06
Create Date: 2025-10-08
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20251008_01"
down_revision = "20250101_06"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("bio", sa.Text()),
        sa.Column("avatar_url", sa.String(255)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_profiles_member_id", "profiles", ["member_id"])


def downgrade() -> None:
    op.drop_index("ix_profiles_member_id", table_name="profiles")
    op.drop_table("profiles")
