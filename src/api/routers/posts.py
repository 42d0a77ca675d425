"""
Public posts API router.

Read-only access to posts, no authentication required.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from src.models.posts import PagedPostsResponse, PostResponse
from src.services.posts import DEFAULT_PAGE_SIZE, PostService, get_post_service

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.get(
    "",
    response_model=list[PostResponse],
    response_model_exclude_none=True,
    summary="List posts",
    description="List all posts, newest first.",
)
async def list_posts(
    service: Annotated[PostService, Depends(get_post_service)],
) -> list[PostResponse]:
    """List posts with their media URLs."""
    return await service.list_posts()


@router.get(
    "/paged",
    response_model=PagedPostsResponse,
    response_model_exclude_none=True,
    summary="List posts (paged)",
    description="List one page of posts. Out-of-range values fall back to defaults.",
)
async def list_posts_paged(
    service: Annotated[PostService, Depends(get_post_service)],
    page: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
) -> PagedPostsResponse:
    """List a page of posts."""
    return await service.list_posts_paged(page, page_size)


@router.get(
    "/public/{public_id}",
    response_model=PostResponse,
    response_model_exclude_none=True,
    summary="Get post by public ID",
)
async def get_post_by_public_id(
    public_id: int,
    service: Annotated[PostService, Depends(get_post_service)],
) -> PostResponse:
    """Get a post by its public sequence number."""
    return await service.get_post_by_public_id(public_id)


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    response_model_exclude_none=True,
    summary="Get post",
)
async def get_post(
    post_id: uuid.UUID,
    service: Annotated[PostService, Depends(get_post_service)],
) -> PostResponse:
    """Get a post by ID."""
    return await service.get_post(post_id)
