"""
Blog Backend — BlogPost SQLAlchemy Model
==========================================

What:  ORM model for the `blog_posts` table.
Who:   Used by PostService for post and comment CRUD.

Document Design:
    A post is one self-contained document. Its comments are not a table of
    their own: they are an ordered JSON array stored inside the post row.

        comments = [
            {"id": "<uuid hex>", "name": "...", "email": "...",
             "content": "...", "createdAt": "<ISO 8601>"},
            ...
        ]

    - Order of the array is insertion order and is returned as-is
    - Comment ids are unique within one post only
    - Deleting the row deletes every comment with it
    - A comment mutation rewrites the whole array (last write wins)

    author / author_email are copied from the authenticated author when the
    post is created. They are NOT a foreign key: renaming or deleting the
    author later leaves existing posts untouched.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _default_read_time() -> Dict[str, Any]:
    return {"value": 1, "unit": "minute"}


class BlogPost(Base):
    """A published blog post with its embedded comment thread."""

    __tablename__ = "blog_posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    cover: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    # {"value": int, "unit": str}
    read_time: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=_default_read_time,
    )
    author: Mapped[str] = mapped_column(String(201), nullable=False)
    author_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    comments: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_blog_posts_created_at", created_at),
    )

    def find_comment(self, comment_id: str) -> Optional[Dict[str, Any]]:
        """Return the embedded comment with this id, or None."""
        for comment in self.comments:
            if comment.get("id") == comment_id:
                return comment
        return None

    def __repr__(self) -> str:
        return (
            f"<BlogPost(id={self.id}, title='{self.title}', "
            f"comments={len(self.comments or [])})>"
        )
