"""
Blog Backend — Post Service (Posts & Embedded Comments)
=========================================================

What:  Business logic for blog posts and the comment thread embedded in each.
Why:   Keeps store access and document mutation out of the HTTP layer.
Who:   Called by routes/blog_posts.py and AuthorService.

Every operation follows the same order:
    1. Look the document up
    2. Existence check (NotFoundError before anything is changed)
    3. Mutate in memory
    4. Persist (flush; the request's session commits)
    5. Build the response model

Comment mutations replace post.comments with a new list rather than editing
it in place, so SQLAlchemy sees the JSON column as changed and rewrites the
whole document.
"""

import logging
import math
import uuid
from datetime import datetime, timezone
from functools import partial
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import run_after_commit
from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.author import Author
from app.models.blog_post import BlogPost
from app.schemas.blog_post import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
    CommentCreate,
    CommentResponse,
    CommentUpdate,
)
from app.schemas.common import MessageResponse
from app.services.file_service import file_service

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
COVER_FOLDER = "covers"


def estimate_read_time(content: str) -> Dict[str, Any]:
    """Minutes needed to read `content` at 200 words per minute, at least 1."""
    words = len(content.split())
    return {"value": max(1, math.ceil(words / WORDS_PER_MINUTE)), "unit": "minute"}


def parse_id(raw_id: str, resource: str) -> uuid.UUID:
    """A string that is not a UUID cannot name a stored document: 404."""
    try:
        return uuid.UUID(str(raw_id))
    except (ValueError, TypeError):
        raise NotFoundError(resource=resource, resource_id=str(raw_id))


class PostService:
    """
    Stateless service: receives the session on every call.

    Store failures (SQLAlchemyError) are logged with context and re-raised
    as DatabaseError so the client only ever sees a generic 500 message.
    """

    # ── Store helpers ─────────────────────────────────────────────────────

    async def _load_post(self, db: AsyncSession, post_id: str) -> BlogPost:
        pid = parse_id(post_id, "blog post")
        try:
            result = await db.execute(select(BlogPost).where(BlogPost.id == pid))
            post = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the blog post. Please try again.",
                context={"post_id": str(post_id)},
            )
        if post is None:
            raise NotFoundError(resource="blog post", resource_id=str(post_id))
        return post

    async def _flush(self, db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error while trying to %s: %s", action, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Could not {action}. Please try again.",
                context={"error_type": type(e).__name__},
            )

    @staticmethod
    def _discard_after_commit(db: AsyncSession, reference: Optional[str]) -> None:
        """Delete a replaced upload only once the new reference is committed."""
        if reference:
            run_after_commit(db, partial(file_service.discard_reference, reference))

    @staticmethod
    def _find_comment(post: BlogPost, comment_id: str) -> Dict[str, Any]:
        comment = post.find_comment(comment_id)
        if comment is None:
            raise NotFoundError(resource="comment", resource_id=comment_id)
        return comment

    # ── Posts ─────────────────────────────────────────────────────────────

    async def list_posts(
        self,
        db: AsyncSession,
        title: Optional[str] = None,
        author_email: Optional[str] = None,
    ) -> List[BlogPostResponse]:
        """
        List posts, oldest first.

        Args:
            title: Case-insensitive substring filter; wildcard characters in
                   it are matched literally. Empty or None returns every post.
            author_email: Restrict to posts written by this author.
        """
        query = select(BlogPost)
        if title:
            query = query.where(BlogPost.title.icontains(title, autoescape=True))
        if author_email:
            query = query.where(BlogPost.author_email == author_email.lower())
        query = query.order_by(BlogPost.created_at, BlogPost.id)

        try:
            result = await db.execute(query)
            posts = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve blog posts. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [BlogPostResponse.model_validate(post) for post in posts]

    async def get_post(self, db: AsyncSession, post_id: str) -> BlogPostResponse:
        post = await self._load_post(db, post_id)
        return BlogPostResponse.model_validate(post)

    async def create_post(
        self,
        db: AsyncSession,
        author: Author,
        payload: BlogPostCreate,
        cover: Optional[UploadFile] = None,
    ) -> BlogPostResponse:
        """
        Create a post owned by the authenticated author.

        author/author_email are copied from `author`; payload cannot carry
        them. An uploaded cover wins over a cover URL in the payload.
        """
        read_time = (
            payload.read_time.model_dump()
            if payload.read_time is not None
            else estimate_read_time(payload.content)
        )

        stored_cover: Optional[str] = None
        if cover is not None:
            stored_cover = await file_service.save_upload(cover, COVER_FOLDER)

        post = BlogPost(
            title=payload.title,
            category=payload.category,
            content=payload.content,
            cover=stored_cover or payload.cover,
            read_time=read_time,
            author=author.full_name,
            author_email=author.email,
            comments=[],
        )
        db.add(post)
        try:
            await self._flush(db, "create the blog post")
        except DatabaseError:
            await file_service.discard_reference(stored_cover)
            raise

        logger.info("Blog post %s created by %s", post.id, author.email)
        return BlogPostResponse.model_validate(post)

    async def update_post(
        self,
        db: AsyncSession,
        post_id: str,
        payload: BlogPostUpdate,
    ) -> BlogPostResponse:
        post = await self._load_post(db, post_id)
        previous_cover = post.cover

        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(post, field, value)

        if changes:
            await self._flush(db, "update the blog post")
            if "cover" in changes and changes["cover"] != previous_cover:
                self._discard_after_commit(db, previous_cover)
            logger.info("Blog post %s updated: %s", post.id, sorted(changes))
        return BlogPostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, post_id: str) -> MessageResponse:
        """Delete a post; its embedded comments go with it."""
        post = await self._load_post(db, post_id)
        cover = post.cover

        await db.delete(post)
        await self._flush(db, "delete the blog post")
        self._discard_after_commit(db, cover)

        logger.info("Blog post %s deleted (%d comments)", post_id, len(post.comments))
        return MessageResponse(message="Blog post deleted")

    async def set_cover(
        self,
        db: AsyncSession,
        post_id: str,
        cover: Optional[UploadFile],
    ) -> BlogPostResponse:
        """Replace the cover image. The upload is required (400 without it)."""
        if cover is None or not cover.filename:
            raise ValidationError(message="No file uploaded: send the image in the 'cover' field.", field="cover")

        post = await self._load_post(db, post_id)
        previous = post.cover

        post.cover = await file_service.save_upload(cover, COVER_FOLDER)
        try:
            await self._flush(db, "update the cover image")
        except DatabaseError:
            await file_service.discard_reference(post.cover)
            raise

        self._discard_after_commit(db, previous)
        return BlogPostResponse.model_validate(post)

    # ── Comments ──────────────────────────────────────────────────────────

    async def list_comments(self, db: AsyncSession, post_id: str) -> List[CommentResponse]:
        post = await self._load_post(db, post_id)
        return [CommentResponse.model_validate(c) for c in post.comments]

    async def get_comment(
        self,
        db: AsyncSession,
        post_id: str,
        comment_id: str,
    ) -> CommentResponse:
        post = await self._load_post(db, post_id)
        return CommentResponse.model_validate(self._find_comment(post, comment_id))

    async def add_comment(
        self,
        db: AsyncSession,
        post_id: str,
        payload: CommentCreate,
    ) -> CommentResponse:
        """
        Append a comment to the end of the post's thread.

        The id is a fresh UUID, so it differs from every id already in the
        thread.
        """
        post = await self._load_post(db, post_id)

        comment = {
            "id": uuid.uuid4().hex,
            "name": payload.name,
            "email": str(payload.email),
            "content": payload.content,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        post.comments = [*post.comments, comment]
        await self._flush(db, "add the comment")

        logger.info("Comment %s added to post %s", comment["id"], post.id)
        return CommentResponse.model_validate(comment)

    async def update_comment(
        self,
        db: AsyncSession,
        post_id: str,
        comment_id: str,
        payload: CommentUpdate,
    ) -> CommentResponse:
        """Replace the content of one comment; name and email are kept."""
        post = await self._load_post(db, post_id)
        existing = self._find_comment(post, comment_id)

        updated = {**existing, "content": payload.content}
        post.comments = [
            updated if c.get("id") == comment_id else c for c in post.comments
        ]
        await self._flush(db, "update the comment")

        return CommentResponse.model_validate(updated)

    async def delete_comment(
        self,
        db: AsyncSession,
        post_id: str,
        comment_id: str,
    ) -> MessageResponse:
        post = await self._load_post(db, post_id)
        self._find_comment(post, comment_id)

        post.comments = [c for c in post.comments if c.get("id") != comment_id]
        await self._flush(db, "delete the comment")

        logger.info("Comment %s removed from post %s", comment_id, post.id)
        return MessageResponse(message="Comment deleted")


post_service = PostService()
