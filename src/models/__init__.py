"""Pydantic models for API request/response schemas."""

from src.models.common import (
    CamelModel,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    PaginatedResponse,
    StrictBaseModel,
)
from src.models.auth import LoginRequest, LoginResponse, ValidateResponse
from src.models.posts import PagedPostsResponse, PostResponse
from src.models.store import ServiceHealthResponse, StoredFileResponse

__all__ = [
    # Common
    "CamelModel",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "PaginatedResponse",
    "StrictBaseModel",
    # Auth
    "LoginRequest",
    "LoginResponse",
    "ValidateResponse",
    # Posts
    "PagedPostsResponse",
    "PostResponse",
    # Store
    "ServiceHealthResponse",
    "StoredFileResponse",
]
