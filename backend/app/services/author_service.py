"""
Blog Backend — Author Service
===============================

What:  CRUD over author records, credential checks, avatar uploads.
Who:   Called by routes/authors.py, routes/auth.py and the auth dependency.

Credentials:
    Passwords are hashed by app.services.security before they reach the
    model; the plain value never touches the database or the logs.
    Emails are normalised to lower case so uniqueness is case-insensitive.

Ownership:
    Update, delete and avatar upload only apply to the principal's own
    record (ForbiddenError otherwise). The existence check runs first, so an
    unknown id is still a 404.
"""

import logging
import uuid
from functools import partial
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import run_after_commit
from app.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.models.author import Author
from app.schemas.author import AuthorCreate, AuthorResponse, AuthorUpdate
from app.schemas.blog_post import BlogPostResponse
from app.schemas.common import MessageResponse
from app.services.file_service import file_service
from app.services.post_service import parse_id, post_service
from app.services.security import hash_password, verify_password

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "avatars"


class AuthorService:
    """Stateless author operations; same lookup → check → mutate order as posts."""

    async def _load_author(self, db: AsyncSession, author_id: str) -> Author:
        aid = parse_id(author_id, "author")
        author = await self.get_by_id(db, aid)
        if author is None:
            raise NotFoundError(resource="author", resource_id=str(author_id))
        return author

    async def _load_owned(self, db: AsyncSession, author_id: str, principal: Author) -> Author:
        """Load an author record that the principal is allowed to modify: its own."""
        author = await self._load_author(db, author_id)
        if author.id != principal.id:
            logger.warning("Author %s tried to modify author %s", principal.id, author.id)
            raise ForbiddenError(message="Authors can only modify their own record")
        return author

    @staticmethod
    def _discard_after_commit(db: AsyncSession, reference: Optional[str]) -> None:
        if reference:
            run_after_commit(db, partial(file_service.discard_reference, reference))

    async def get_by_id(self, db: AsyncSession, author_id: uuid.UUID) -> Optional[Author]:
        try:
            result = await db.execute(select(Author).where(Author.id == author_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching author %s: %s", author_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the author. Please try again.",
                context={"author_id": str(author_id)},
            )

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[Author]:
        try:
            result = await db.execute(select(Author).where(Author.email == email.lower()))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up author by email: %s", str(e))
            raise DatabaseError(message="Could not retrieve the author. Please try again.")

    async def _ensure_email_free(
        self,
        db: AsyncSession,
        email: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        existing = await self.get_by_email(db, email)
        if existing is not None and existing.id != exclude_id:
            raise ValidationError(message="Email is already registered", field="email")

    async def _flush(self, db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            raise ValidationError(message="Email is already registered", field="email")
        except SQLAlchemyError as e:
            logger.error("Database error while trying to %s: %s", action, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Could not {action}. Please try again.",
                context={"error_type": type(e).__name__},
            )

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def list_authors(self, db: AsyncSession) -> List[AuthorResponse]:
        try:
            result = await db.execute(select(Author).order_by(Author.created_at, Author.id))
            authors = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing authors: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve authors. Please try again.")
        return [AuthorResponse.model_validate(a) for a in authors]

    async def get_author(self, db: AsyncSession, author_id: str) -> AuthorResponse:
        return AuthorResponse.model_validate(await self._load_author(db, author_id))

    async def create_author(self, db: AsyncSession, payload: AuthorCreate) -> Author:
        """Register an author. Returns the ORM entity (auth routes issue a token for it)."""
        email = str(payload.email).lower()
        await self._ensure_email_free(db, email)

        author = Author(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=email,
            password_hash=hash_password(payload.password),
            birth_date=payload.birth_date,
            avatar=payload.avatar,
        )
        db.add(author)
        await self._flush(db, "create the author")

        logger.info("Author %s registered", author.id)
        return author

    async def update_author(
        self,
        db: AsyncSession,
        author_id: str,
        payload: AuthorUpdate,
        principal: Author,
    ) -> AuthorResponse:
        author = await self._load_owned(db, author_id, principal)
        previous_avatar = author.avatar

        changes = payload.model_dump(exclude_unset=True)
        if "email" in changes:
            changes["email"] = str(changes["email"]).lower()
            if changes["email"] != author.email:
                await self._ensure_email_free(db, changes["email"], exclude_id=author.id)
        if "password" in changes:
            changes["password_hash"] = hash_password(changes.pop("password"))

        for field, value in changes.items():
            setattr(author, field, value)

        if changes:
            await self._flush(db, "update the author")
            if "avatar" in changes and changes["avatar"] != previous_avatar:
                self._discard_after_commit(db, previous_avatar)
            logger.info("Author %s updated: %s", author.id, sorted(changes))
        return AuthorResponse.model_validate(author)

    async def delete_author(
        self,
        db: AsyncSession,
        author_id: str,
        principal: Author,
    ) -> MessageResponse:
        """Posts keep their author snapshot; only the author record goes."""
        author = await self._load_owned(db, author_id, principal)
        avatar = author.avatar

        await db.delete(author)
        await self._flush(db, "delete the author")
        self._discard_after_commit(db, avatar)

        logger.info("Author %s deleted", author_id)
        return MessageResponse(message="Author deleted")

    async def set_avatar(
        self,
        db: AsyncSession,
        author_id: str,
        avatar: Optional[UploadFile],
        principal: Author,
    ) -> AuthorResponse:
        if avatar is None or not avatar.filename:
            raise ValidationError(message="No file uploaded: send the image in the 'avatar' field.", field="avatar")

        author = await self._load_owned(db, author_id, principal)
        previous = author.avatar

        author.avatar = await file_service.save_upload(avatar, AVATAR_FOLDER)
        try:
            await self._flush(db, "update the avatar")
        except DatabaseError:
            await file_service.discard_reference(author.avatar)
            raise

        self._discard_after_commit(db, previous)
        return AuthorResponse.model_validate(author)

    async def list_author_posts(self, db: AsyncSession, author_id: str) -> List[BlogPostResponse]:
        """Posts whose author snapshot carries this author's email."""
        author = await self._load_author(db, author_id)
        return await post_service.list_posts(db, author_email=author.email)

    # ── Credentials ───────────────────────────────────────────────────────

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> Author:
        """
        Return the author for a correct email/password pair.

        Raises UnauthorizedError with the same message whether the email is
        unknown or the password is wrong.
        """
        author = await self.get_by_email(db, email)
        if author is None or not verify_password(password, author.password_hash):
            logger.warning("Failed login attempt")
            raise UnauthorizedError(message="Invalid email or password")
        return author


author_service = AuthorService()
