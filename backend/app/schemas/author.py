"""
Blog Backend — Author & Auth Schemas
======================================

What:  API contracts for author records and the login/register exchange.
Security: No response model has a password or password_hash field, so the
          hash can never leak through serialisation.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import EmailStr, Field, model_validator

from app.schemas.common import CamelModel, RequestModel


class AuthorCreate(RequestModel):
    """Registration body; also used by POST /authors."""
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    birth_date: Optional[date] = None
    avatar: Optional[str] = Field(default=None, max_length=500)


class AuthorUpdate(RequestModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=128)
    birth_date: Optional[date] = None
    avatar: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def reject_null_required(self) -> "AuthorUpdate":
        for name in ("first_name", "last_name", "email", "password"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class AuthorResponse(CamelModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    birth_date: Optional[date] = None
    avatar: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class LoginRequest(RequestModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class TokenResponse(CamelModel):
    """
    Returned by register and login.

    The same token is also set as an HttpOnly session cookie, so browser
    clients can ignore accessToken and rely on the cookie.
    """
    access_token: str
    token_type: str = "bearer"
    author: AuthorResponse
