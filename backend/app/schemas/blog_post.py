"""
Blog Backend — BlogPost & Comment Schemas
===========================================

What:  API contracts for posts and their embedded comments.

Input rules:
    - author / authorEmail are NOT fields of any request model. Unknown keys
      are ignored, so a client that sends them has no effect: the values are
      always copied from the authenticated author.
    - Update models accept partial bodies; explicitly sending null for a
      required column is rejected.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, model_validator

from app.schemas.common import CamelModel, RequestModel


class ReadTime(CamelModel):
    """Estimated reading time, e.g. {"value": 4, "unit": "minute"}."""
    value: int = Field(ge=0, le=10_000)
    unit: str = Field(default="minute", min_length=1, max_length=20)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BlogPostCreate(RequestModel):
    """Body of POST /blogPosts (JSON or multipart form fields)."""
    title: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=1)
    cover: Optional[str] = Field(default=None, max_length=500)
    read_time: Optional[ReadTime] = Field(
        default=None,
        description="Omit to have it estimated from the content length",
    )


class BlogPostUpdate(RequestModel):
    """Body of PUT /blogPosts/{id}; only the fields sent are replaced."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    content: Optional[str] = Field(default=None, min_length=1)
    cover: Optional[str] = Field(default=None, max_length=500)
    read_time: Optional[ReadTime] = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "BlogPostUpdate":
        for name in ("title", "category", "content", "read_time"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class CommentCreate(RequestModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    content: str = Field(min_length=1, max_length=5000)


class CommentUpdate(RequestModel):
    """Only the content of a comment is editable."""
    content: str = Field(min_length=1, max_length=5000)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CommentResponse(CamelModel):
    id: str = Field(description="Identifier unique within the parent post")
    name: str
    email: str
    content: str
    created_at: Optional[datetime] = None


class BlogPostResponse(CamelModel):
    """
    Full post document as stored, comments included.

    author and authorEmail are the snapshot taken at creation time.
    """
    id: uuid.UUID
    title: str
    category: str
    cover: Optional[str] = None
    read_time: ReadTime
    author: str
    author_email: str
    content: str
    comments: List[CommentResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
