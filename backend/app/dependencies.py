"""
Blog Backend — Authentication Dependency
==========================================

What:  Resolves the acting author (principal) for a request, or fails with 401.
How:   Credential lookup order:
           1. Authorization: Bearer <token>
           2. Session cookie (settings.auth_cookie_name) set at login
       The token is decoded, its subject loaded from the store, and the
       Author entity returned to the route.
Who:   Declared on every mutating route with Depends(get_current_author).
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import UnauthorizedError
from app.models.author import Author
from app.services.author_service import author_service
from app.services.security import decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must fall through to the cookie
bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.auth_cookie_name) or None


async def get_current_author(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Author:
    """
    Return the authenticated author.

    Raises:
        UnauthorizedError: no credential, bad/expired token, or the token's
                           author no longer exists.
    """
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthorizedError(message="Authentication required")

    author_id = decode_access_token(token)
    if author_id is None:
        raise UnauthorizedError(message="Invalid or expired credentials")

    author = await author_service.get_by_id(db, author_id)
    if author is None:
        logger.warning("Token subject %s does not resolve to an author", author_id)
        raise UnauthorizedError(message="Invalid or expired credentials")

    request.state.author_id = str(author.id)
    return author
