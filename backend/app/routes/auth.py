"""
Blog Backend — Authentication Routes
======================================

What:  Register, log in, log out, and inspect the current principal.
How:   A successful register/login returns a signed access token in the body
       AND sets it as an HttpOnly session cookie. API clients send the token
       as `Authorization: Bearer ...`; browsers just keep the cookie.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.dependencies import get_current_author
from app.models.author import Author
from app.schemas.author import AuthorCreate, AuthorResponse, LoginRequest, TokenResponse
from app.schemas.common import ErrorResponse, MessageResponse
from app.services.author_service import author_service
from app.services.security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/auth", tags=["Auth"])


def _issue_session(response: Response, author: Author) -> TokenResponse:
    token = create_access_token(author.id)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
        path="/",
    )
    return TokenResponse(access_token=token, author=AuthorResponse.model_validate(author))


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    responses={400: {"description": "Invalid input or email taken", "model": ErrorResponse}},
    summary="Register a new author and start a session",
)
async def register(
    payload: AuthorCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    author = await author_service.create_author(db, payload)
    return _issue_session(response, author)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Log in with email and password",
)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    author = await author_service.authenticate(db, str(payload.email), payload.password)
    logger.info("Author %s logged in", author.id)
    return _issue_session(response, author)


@router.post("/logout", response_model=MessageResponse, summary="End the cookie session")
async def logout(response: Response) -> MessageResponse:
    response.delete_cookie(key=settings.auth_cookie_name, path="/")
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_model=AuthorResponse,
    responses={401: {"description": "Missing or invalid credentials", "model": ErrorResponse}},
    summary="The currently authenticated author",
)
async def me(author: Author = Depends(get_current_author)) -> AuthorResponse:
    return AuthorResponse.model_validate(author)
