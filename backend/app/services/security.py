"""
Blog Backend — Password Hashing & Access Tokens
=================================================

What:  Hashes author passwords and issues/verifies signed access tokens.
Who:   AuthorService (hash on create/update), auth routes (verify + issue),
       the auth dependency (decode).

Token format:
    HS256 JWT signed with settings.secret_key
    {"sub": "<author uuid>", "iat": <issued>, "exp": <expiry>, "type": "access"}

    The same token travels either as `Authorization: Bearer <token>` or inside
    the HttpOnly session cookie set at login.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings

logger = logging.getLogger(__name__)

# pbkdf2_sha256 is implemented on top of hashlib; no native backend needed
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password cannot be empty")
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Return False (never raise) for an unknown or malformed hash."""
    if not password_hash:
        return False
    try:
        return pwd_context.verify(plain_password, password_hash)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(
    author_id: uuid.UUID,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token for an author.

    Args:
        author_id: UUID of the author the token identifies
        expires_delta: Lifetime override (default: ACCESS_TOKEN_EXPIRE_MINUTES)
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode = {
        "sub": str(author_id),
        "iat": now,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[uuid.UUID]:
    """
    Decode and validate an access token.

    Returns:
        The author id carried in `sub`, or None when the token is expired,
        tampered with, of the wrong type, or not a token at all.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    if payload.get("type") != "access":
        return None
    subject = payload.get("sub")
    if not subject:
        return None
    try:
        return uuid.UUID(subject)
    except (ValueError, TypeError):
        return None
