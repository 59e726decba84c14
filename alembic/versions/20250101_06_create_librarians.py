"""Create librarians.

Revision ID: 20250101_06
Revises: 20250101_05
Create Date: 2025-01-01
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20250101_06"
down_revision = "20250101_05"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "librarians",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(255), nullable=False),
        sa.Column("hire_date", sa.Date()),
        sa.Column("salary", sa.Numeric(10, 2)),
        sa.Column("library_id", sa.Integer(), sa.ForeignKey("libraries.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_librarians_library_id", "librarians", ["library_id"])
    op.create_index("ix_librarians_email", "librarians", ["email"])
    op.create_index("ix_librarians_role", "librarians", ["role"])


def downgrade() -> None:
    op.drop_index("ix_librarians_role", table_name="librarians")
    op.drop_index("ix_librarians_email", table_name="librarians")
    op.drop_index("ix_librarians_library_id", table_name="librarians")
    op.drop_table("librarians")
