"""
Blog Backend — Shared Pydantic Schemas
========================================

What:  Base model with the camelCase wire convention plus the payloads every
       router shares (errors, confirmations, health).
Why:   The frontend speaks camelCase (authorEmail, readTime); Python code
       keeps snake_case. The alias generator bridges the two in one place.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for every API schema.

    - Serialised with camelCase aliases (FastAPI dumps by alias)
    - Accepts both camelCase and snake_case on input
    - Builds from ORM objects (from_attributes)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(CamelModel):
    """Base for request bodies: strips surrounding whitespace from strings."""

    model_config = ConfigDict(str_strip_whitespace=True)


class MessageResponse(BaseModel):
    """Confirmation payload for deletions and logout."""
    message: str = Field(description="Human-readable confirmation")


class ErrorResponse(CamelModel):
    """
    Standardized error body returned by every global exception handler.

    Example:
        {
            "error": "not_found",
            "message": "blog post with ID '...' was not found",
            "requestId": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """Health check payload used by container health checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Upload directory: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
