"""
Shared Pydantic models for API responses.
"""

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class StrictBaseModel(BaseModel):
    """Base model rejecting unknown fields."""

    model_config = ConfigDict(extra="forbid")


class CamelModel(StrictBaseModel):
    """Base model serialized with camelCase field names."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ErrorDetail(StrictBaseModel):
    """Error payload."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable message")
    details: dict[str, Any] | None = Field(default=None)
    path: str | None = Field(default=None, description="Request path")


class ErrorResponse(StrictBaseModel):
    """Envelope for every error response."""

    error: ErrorDetail


class HealthResponse(StrictBaseModel):
    """Service health."""

    status: str = Field(..., description="healthy, degraded or unhealthy")
    version: str
    services: dict[str, str] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PaginatedResponse(CamelModel, Generic[T]):
    """One page of results."""

    items: list[T] = Field(default_factory=list)
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_count: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
