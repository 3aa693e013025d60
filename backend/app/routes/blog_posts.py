"""
Blog Backend — Blog Post & Comment Route Handlers
===================================================

What:  HTTP surface for posts and the comments embedded in them.
How:   Thin handlers: extract path/query/body, delegate to PostService.

Authentication rule:
    Reads are public. Every mutation (post create/update/delete, cover
    upload, comment add/edit/delete) depends on get_current_author.

POST /blogPosts accepts either
    - application/json:   {"title", "category", "content", "cover"?, "readTime"?}
    - multipart/form-data: the same fields plus an optional `cover` file;
                           `readTime` is sent as a JSON string, e.g.
                           '{"value": 4, "unit": "minute"}'
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.config import settings
from app.database import get_db_session
from app.dependencies import get_current_author
from app.exceptions import ValidationError, validation_error_from
from app.models.author import Author
from app.schemas.blog_post import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
    CommentCreate,
    CommentResponse,
    CommentUpdate,
)
from app.schemas.common import ErrorResponse, MessageResponse
from app.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/blogPosts", tags=["Blog Posts"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

NOT_FOUND = {404: {"description": "Post or comment not found", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}
UNAUTHORIZED = {401: {"description": "Missing or invalid credentials", "model": ErrorResponse}}


def _decode_form_json(data: Dict[str, Any], *keys: str) -> None:
    """Form fields are strings: decode the structured ones in place, drop empty ones."""
    for key in keys:
        raw = data.get(key)
        if not isinstance(raw, str):
            continue
        if not raw.strip():
            del data[key]
            continue
        try:
            data[key] = json.loads(raw)
        except ValueError:
            raise ValidationError(message=f"{key} must be a JSON object", field=key)


async def _read_create_body(request: Request) -> Tuple[Dict[str, Any], Optional[UploadFile]]:
    """
    Pull the post fields and the optional cover file out of a JSON or form body.

    An empty file part (browser form with no file chosen) counts as no file.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        data: Dict[str, Any] = {}
        cover: Optional[UploadFile] = None
        for key, value in form.multi_items():
            if isinstance(value, StarletteUploadFile):
                if key == "cover" and value.filename:
                    cover = value
                continue
            data[key] = value
        try:
            _decode_form_json(data, "readTime", "read_time")
        except ValidationError:
            if cover is not None:
                await cover.close()
            raise
        return data, cover

    try:
        body = await request.json()
    except ValueError:
        raise ValidationError(message="Request body must be valid JSON")
    if not isinstance(body, dict):
        raise ValidationError(message="Request body must be a JSON object")
    return body, None


# ══════════════════════════════════════════════════════════════════════════
# Posts
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "",
    response_model=List[BlogPostResponse],
    summary="List blog posts, optionally filtered by title",
)
async def list_blog_posts(
    title: Optional[str] = Query(
        default=None,
        description="Case-insensitive substring of the title. Omit for all posts.",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[BlogPostResponse]:
    return await post_service.list_posts(db, title=title)


@router.get(
    "/{post_id}",
    response_model=BlogPostResponse,
    responses={**NOT_FOUND},
    summary="Get a single blog post",
)
async def get_blog_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostResponse:
    return await post_service.get_post(db, post_id)


@router.post(
    "",
    status_code=201,
    response_model=BlogPostResponse,
    responses={**BAD_REQUEST, **UNAUTHORIZED},
    summary="Create a blog post (optional `cover` upload)",
    description=(
        "Creates a post authored by the authenticated author. `author` and "
        "`authorEmail` are always taken from the credentials; values sent in "
        "the body are ignored."
    ),
)
async def create_blog_post(
    request: Request,
    author: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostResponse:
    data, cover = await _read_create_body(request)
    try:
        payload = BlogPostCreate.model_validate(data)
    except PydanticValidationError as e:
        if cover is not None:
            await cover.close()
        raise validation_error_from(e.errors())

    return await post_service.create_post(db, author=author, payload=payload, cover=cover)


@router.put(
    "/{post_id}",
    response_model=BlogPostResponse,
    responses={**BAD_REQUEST, **UNAUTHORIZED, **NOT_FOUND},
    summary="Update a blog post",
)
async def update_blog_post(
    post_id: str,
    payload: BlogPostUpdate,
    _: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostResponse:
    return await post_service.update_post(db, post_id, payload)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={**UNAUTHORIZED, **NOT_FOUND},
    summary="Delete a blog post and all of its comments",
)
async def delete_blog_post(
    post_id: str,
    _: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await post_service.delete_post(db, post_id)


@router.patch(
    "/{post_id}/cover",
    response_model=BlogPostResponse,
    responses={**BAD_REQUEST, **UNAUTHORIZED, **NOT_FOUND},
    summary="Upload or replace the cover image",
)
async def upload_cover(
    post_id: str,
    cover: Optional[UploadFile] = File(default=None, description="Cover image (PNG, JPEG, WEBP, GIF)"),
    _: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostResponse:
    return await post_service.set_cover(db, post_id, cover)


# ══════════════════════════════════════════════════════════════════════════
# Comments
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/{post_id}/comments",
    response_model=List[CommentResponse],
    responses={**NOT_FOUND},
    summary="List the comments of a post in insertion order",
)
async def list_comments(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    return await post_service.list_comments(db, post_id)


@router.get(
    "/{post_id}/comments/{comment_id}",
    response_model=CommentResponse,
    responses={**NOT_FOUND},
    summary="Get one comment of a post",
)
async def get_comment(
    post_id: str,
    comment_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await post_service.get_comment(db, post_id, comment_id)


@router.post(
    "/{post_id}/comments",
    status_code=201,
    response_model=CommentResponse,
    responses={**BAD_REQUEST, **UNAUTHORIZED, **NOT_FOUND},
    summary="Add a comment to a post",
)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    _: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await post_service.add_comment(db, post_id, payload)


@router.put(
    "/{post_id}/comments/{comment_id}",
    response_model=CommentResponse,
    responses={**BAD_REQUEST, **UNAUTHORIZED, **NOT_FOUND},
    summary="Edit the content of a comment",
)
async def update_comment(
    post_id: str,
    comment_id: str,
    payload: CommentUpdate,
    _: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await post_service.update_comment(db, post_id, comment_id, payload)


@router.delete(
    "/{post_id}/comments/{comment_id}",
    response_model=MessageResponse,
    responses={**UNAUTHORIZED, **NOT_FOUND},
    summary="Delete a comment",
)
async def delete_comment(
    post_id: str,
    comment_id: str,
    _: Author = Depends(get_current_author),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await post_service.delete_comment(db, post_id, comment_id)
