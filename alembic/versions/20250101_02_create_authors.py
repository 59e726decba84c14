"""Create authors.

Revision ID: 20250101_02
Revises: 20250101_01
Create Date: 2025-01-01
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20250101_02"
down_revision = "20250101_01"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "authors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("biography", sa.Text()),
        sa.Column("birth_year", sa.Integer()),
        sa.Column("country", sa.String(255)),
        sa.Column("active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_authors_name", "authors", ["name"])


def downgrade() -> None:
    op.drop_index("ix_authors_name", table_name="authors")
    op.drop_table("authors")
