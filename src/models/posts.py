"""
Pydantic models for post responses.
"""

from datetime import datetime

from pydantic import Field

from src.models.common import CamelModel, PaginatedResponse


class PostResponse(CamelModel):
    """A post as returned by the public and admin APIs."""

    id: str = Field(..., description="Opaque post ID")
    title: str
    public_id: int = Field(..., description="Public sequence number")
    media_id: str | None = Field(default=None)
    media_url: str | None = Field(
        default=None,
        description="Current URL of the post's media, absent without media",
    )
    json_meta: str = Field(default="{}", description="JSON-encoded metadata")
    created_at: datetime
    updated_at: datetime | None = Field(default=None)


PagedPostsResponse = PaginatedResponse[PostResponse]
