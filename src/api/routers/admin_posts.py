"""
Admin posts API router.

Bearer-protected create, update and delete of posts with their media.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from src.core.auth import CurrentUser
from src.models.posts import PostResponse
from src.services.posts import FileUpload, PostService, get_post_service

router = APIRouter(prefix="/api/admin/posts", tags=["Admin"])


async def read_upload(file: UploadFile | None) -> FileUpload | None:
    """Read a multipart file; a missing or nameless part counts as no file."""
    if file is None or not file.filename:
        return None

    try:
        content = await file.read()
    finally:
        await file.close()

    return FileUpload(file_name=file.filename, content=content)


@router.get(
    "",
    response_model=list[PostResponse],
    response_model_exclude_none=True,
    summary="List posts",
)
async def list_posts(
    user: CurrentUser,
    service: Annotated[PostService, Depends(get_post_service)],
) -> list[PostResponse]:
    """List all posts for the admin view."""
    return await service.list_posts()


@router.post(
    "",
    response_model=PostResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create post",
    description="Create a post, optionally uploading its media file.",
)
async def create_post(
    user: CurrentUser,
    service: Annotated[PostService, Depends(get_post_service)],
    title: str = Form(...),
    file: UploadFile | None = File(None),
    json_meta: str | None = Form(None, alias="jsonMeta"),
) -> PostResponse:
    """
    Create a post.

    When a file is attached it is validated and stored first; a failed
    upload means no post is created.
    """
    return await service.create_post(
        title=title,
        file=await read_upload(file),
        json_meta=json_meta,
    )


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    response_model_exclude_none=True,
    summary="Get post",
)
async def get_post(
    post_id: uuid.UUID,
    user: CurrentUser,
    service: Annotated[PostService, Depends(get_post_service)],
) -> PostResponse:
    """Get a post by ID."""
    return await service.get_post(post_id)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    response_model_exclude_none=True,
    summary="Update post",
    description="Update the given fields; omitted or blank fields are left unchanged.",
)
async def update_post(
    post_id: uuid.UUID,
    user: CurrentUser,
    service: Annotated[PostService, Depends(get_post_service)],
    title: str | None = Form(None),
    file: UploadFile | None = File(None),
    json_meta: str | None = Form(None, alias="jsonMeta"),
) -> PostResponse:
    """Update a post, replacing its media when a new file is attached."""
    return await service.update_post(
        post_id,
        title=title,
        file=await read_upload(file),
        json_meta=json_meta,
    )


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete post",
)
async def delete_post(
    post_id: uuid.UUID,
    user: CurrentUser,
    service: Annotated[PostService, Depends(get_post_service)],
) -> Response:
    """Delete a post together with its media."""
    await service.delete_post(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
