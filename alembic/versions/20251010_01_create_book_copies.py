"""Create book_copies.

Revision ID: 20251010_01
Revises: 20251009_01
Create Date: 2025-10-10
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20251010_01"
down_revision = "20251009_01"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "book_copies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("book_id", sa.Integer(), sa.ForeignKey("books.id"), nullable=False),
        sa.Column("library_id", sa.Integer(), sa.ForeignKey("libraries.id"), nullable=False),
        sa.Column("rfid", sa.String(255), nullable=False),
        sa.Column("available", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_book_copies_book_id", "book_copies", ["book_id"])
    op.create_index("ix_book_copies_library_id", "book_copies", ["library_id"])
    op.create_index("ix_book_copies_rfid", "book_copies", ["rfid"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_book_copies_rfid", table_name="book_copies")
    op.drop_index("ix_book_copies_library_id", table_name="book_copies")
    op.drop_index("ix_book_copies_book_id", table_name="book_copies")
    op.drop_table("book_copies")
