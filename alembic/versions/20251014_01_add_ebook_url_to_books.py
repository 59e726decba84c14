"""Add books.ebook_url.

Revision ID: 20251014_01
Revises: 20251010_02
Create Date: 2025-10-14
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20251014_01"
down_revision = "20251010_02"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("books", sa.Column("ebook_url", sa.String(255)))


def downgrade() -> None:
    with op.batch_alter_table("books") as batch:
        batch.drop_column("ebook_url")
