"""
Blog Backend — Author Route Handlers
======================================

What:  CRUD over authors, avatar upload, and the posts written by an author.
Auth:  Reads and creation (registration) are public; update, delete and
       avatar upload require a valid credential for that same author (403
       for anyone else).
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.dependencies import get_current_author
from app.models.author import Author
from app.schemas.author import AuthorCreate, AuthorResponse, AuthorUpdate
from app.schemas.blog_post import BlogPostResponse
from app.schemas.common import ErrorResponse, MessageResponse
from app.services.author_service import author_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/authors", tags=["Authors"])

NOT_FOUND = {404: {"description": "Author not found", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid input or email taken", "model": ErrorResponse}}
UNAUTHORIZED = {401: {"description": "Missing or invalid credentials", "model": ErrorResponse}}
FORBIDDEN = {403: {"description": "Not the principal's own record", "model": ErrorResponse}}


@router.get("", response_model=List[AuthorResponse], summary="List authors")
async def list_authors(db: AsyncSession = Depends(get_db_session)) -> List[AuthorResponse]:
    return await author_service.list_authors(db)


@router.get(
    "/{author_id}",
    response_model=AuthorResponse,
    responses={**NOT_FOUND},
    summary="Get a single author",
)
async def get_author(
    author_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> AuthorResponse:
    return await author_service.get_author(db, author_id)


@router.get(
    "/{author_id}/blogPosts",
    response_model=List[BlogPostResponse],
    responses={**NOT_FOUND},
    summary="List the posts written by an author",
)
async def list_author_posts(
    author_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[BlogPostResponse]:
    return await author_service.list_author_posts(db, author_id)


@router.post(
    "",
    status_code=201,
    response_model=AuthorResponse,
    responses={**BAD_REQUEST},
    summary="Create an author",
    description="The password is hashed before it is stored and is never returned.",
)
async def create_author(
    payload: AuthorCreate,
    db: AsyncSession = Depends(get_db_session),
) -> AuthorResponse:
    author = await author_service.create_author(db, payload)
    return AuthorResponse.model_validate(author)


@router.put(
    "/{author_id}",
    response_model=AuthorResponse,
    responses={**BAD_REQUEST, **UNAUTHORIZED, **FORBIDDEN, **NOT_FOUND},
    summary="Update an author",
)
async def update_author(
    author_id: str,
    payload: AuthorUpdate,
    principal: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> AuthorResponse:
    return await author_service.update_author(db, author_id, payload, principal)


@router.delete(
    "/{author_id}",
    response_model=MessageResponse,
    responses={**UNAUTHORIZED, **FORBIDDEN, **NOT_FOUND},
    summary="Delete an author",
)
async def delete_author(
    author_id: str,
    principal: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await author_service.delete_author(db, author_id, principal)


@router.patch(
    "/{author_id}/avatar",
    response_model=AuthorResponse,
    responses={**BAD_REQUEST, **UNAUTHORIZED, **FORBIDDEN, **NOT_FOUND},
    summary="Upload or replace an author's avatar",
)
async def upload_avatar(
    author_id: str,
    avatar: Optional[UploadFile] = File(default=None, description="Avatar image"),
    principal: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> AuthorResponse:
    return await author_service.set_avatar(db, author_id, avatar, principal)
