"""Create members.

Revision ID: 20250101_04
Revises: 20250101_03
Create Date: 2025-01-01
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20250101_04"
down_revision = "20250101_03"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(255)),
        sa.Column("membership_type", sa.String(255), nullable=False),
        sa.Column("joined_at", sa.Date()),
        sa.Column("active", sa.Boolean(), server_default=sa.true()),
        sa.Column("library_id", sa.Integer(), sa.ForeignKey("libraries.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_members_library_id", "members", ["library_id"])
    op.create_index("ix_members_email", "members", ["email"])
    op.create_index("ix_members_membership_type", "members", ["membership_type"])


def downgrade() -> None:
    op.drop_index("ix_members_membership_type", table_name="members")
    op.drop_index("ix_members_email", table_name="members")
    op.drop_index("ix_members_library_id", table_name="members")
    op.drop_table("members")
