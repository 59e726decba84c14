"""Create books.

Books still belong to a library here; the library moves to book copies in
20251010_02.

Revision ID: 20250101_03
Revises: 20250101_02
Create Date: 2025-01-01
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20250101_03"
down_revision = "20250101_02"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("isbn", sa.String(255), nullable=False),
        sa.Column("publication_year", sa.Integer()),
        sa.Column("pages", sa.Integer()),
        sa.Column("description", sa.Text()),
        sa.Column("available", sa.Boolean(), server_default=sa.true()),
        sa.Column("price", sa.Numeric(10, 2)),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("authors.id"), nullable=False),
        sa.Column("library_id", sa.Integer(), sa.ForeignKey("libraries.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_books_author_id", "books", ["author_id"])
    op.create_index("ix_books_library_id", "books", ["library_id"])
    op.create_index("ix_books_isbn", "books", ["isbn"], unique=True)
    op.create_index("ix_books_title", "books", ["title"])


def downgrade() -> None:
    op.drop_index("ix_books_title", table_name="books")
    op.drop_index("ix_books_isbn", table_name="books")
    op.drop_index("ix_books_library_id", table_name="books")
    op.drop_index("ix_books_author_id", table_name="books")
    op.drop_table("books")
