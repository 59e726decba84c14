"""Create libraries.

Revision ID: 20250101_01
Revises:
Create Date: 2025-01-01
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20250101_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "libraries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("city", sa.String(255), nullable=False),
        sa.Column("state", sa.String(255)),
        sa.Column("phone", sa.String(255)),
        sa.Column("email", sa.String(255)),
        sa.Column("established_date", sa.Date()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_libraries_name", "libraries", ["name"])


def downgrade() -> None:
    op.drop_index("ix_libraries_name", table_name="libraries")
    op.drop_table("libraries")
