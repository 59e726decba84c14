"""Move the library from books to book copies; loans point at a copy.

SQLite cannot drop or add constrained columns in place, so both tables are
rebuilt with batch_alter_table. Loans must be empty: book_copy_id is NOT NULL.

Revision ID: 20251010_02
Revises: 20251010_01
Create Date: 2025-10-10
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20251010_02"
down_revision = "20251010_01"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("books", recreate="always") as batch:
        batch.drop_index("ix_books_library_id")
        batch.drop_column("library_id")
    with op.batch_alter_table("loans", recreate="always") as batch:
        batch.drop_index("ix_loans_book_id")
        batch.drop_column("book_id")
        batch.add_column(sa.Column("book_copy_id", sa.Integer(), nullable=False))
        batch.create_foreign_key("fk_loans_book_copy_id", "book_copies", ["book_copy_id"], ["id"])
        batch.create_index("ix_loans_book_copy_id", ["book_copy_id"])


def downgrade() -> None:
    with op.batch_alter_table("loans", recreate="always") as batch:
        batch.drop_index("ix_loans_book_copy_id")
        batch.drop_constraint("fk_loans_book_copy_id", type_="foreignkey")
        batch.drop_column("book_copy_id")
        batch.add_column(sa.Column("book_id", sa.Integer(), nullable=False))
        batch.create_foreign_key("fk_loans_book_id", "books", ["book_id"], ["id"])
        batch.create_index("ix_loans_book_id", ["book_id"])
    with op.batch_alter_table("books", recreate="always") as batch:
        batch.add_column(sa.Column("library_id", sa.Integer(), nullable=False))
        batch.create_foreign_key("fk_books_library_id", "libraries", ["library_id"], ["id"])
        batch.create_index("ix_books_library_id", ["library_id"])
