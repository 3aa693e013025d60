"""Create authors and blog_posts tables

Revision ID: 001
Revises: None
Create Date: 2024-05-02 00:00:00.000000+00:00

What:  Initial schema. Authors get a table of their own; each blog post is a
       single row whose comment thread lives in the `comments` JSON column.

Rollback: downgrade() drops both tables (destructive: all data is lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "authors",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("avatar", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_authors"),
    )
    op.create_index("ix_authors_email", "authors", ["email"], unique=True)

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("cover", sa.String(length=500), nullable=True),
        sa.Column("read_time", sa.JSON(), nullable=False),
        sa.Column("author", sa.String(length=201), nullable=False),
        sa.Column("author_email", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        # Embedded comment documents, in insertion order
        sa.Column("comments", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_blog_posts"),
    )
    op.create_index("ix_blog_posts_author_email", "blog_posts", ["author_email"])
    op.create_index("idx_blog_posts_created_at", "blog_posts", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_blog_posts_created_at", table_name="blog_posts")
    op.drop_index("ix_blog_posts_author_email", table_name="blog_posts")
    op.drop_table("blog_posts")
    op.drop_index("ix_authors_email", table_name="authors")
    op.drop_table("authors")
