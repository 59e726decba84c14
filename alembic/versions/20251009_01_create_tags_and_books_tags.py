"""Create tags and the books_tags join table.

Revision ID: 20251009_01
Revises: 20251008_01
Create Date: 2025-10-09
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20251009_01"
down_revision = "20251008_01"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("color", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_tags_name", "tags", ["name"], unique=True)

    # sem coluna id
    op.create_table(
        "books_tags",
        sa.Column("book_id", sa.Integer(), sa.ForeignKey("books.id"), nullable=False),
        sa.Column("tag_id", sa.Integer(), sa.ForeignKey("tags.id"), nullable=False),
    )
    op.create_index("ix_books_tags_book_id", "books_tags", ["book_id"])
    op.create_index("ix_books_tags_tag_id", "books_tags", ["tag_id"])
    op.create_index(
        "index_books_tags_on_book_id_and_tag_id", "books_tags", ["book_id", "tag_id"], unique=True
    )


def downgrade() -> None:
    op.drop_index("index_books_tags_on_book_id_and_tag_id", table_name="books_tags")
    op.drop_index("ix_books_tags_tag_id", table_name="books_tags")
    op.drop_index("ix_books_tags_book_id", table_name="books_tags")
    op.drop_table("books_tags")
    op.drop_index("ix_tags_name", table_name="tags")
    op.drop_table("tags")
