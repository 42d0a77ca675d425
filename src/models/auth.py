"""
Pydantic models for authentication.
"""

from datetime import datetime

from pydantic import Field

from src.models.common import CamelModel


class LoginRequest(CamelModel):
    """Admin login credentials."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)


class LoginResponse(CamelModel):
    """Issued access token."""

    token: str
    username: str
    expires_at: datetime


class ValidateResponse(CamelModel):
    """Result of a token validation."""

    valid: bool
    username: str | None = None
