"""
Post lifecycle coordination.

PostService keeps a post and its media consistent across create, update
and delete. Blob cleanup is best-effort; metadata rows are always kept
consistent. Concurrent updates of the same post are not serialized: the
last write wins and a replaced blob may be left behind, to be reclaimed by
scripts/cleanup_orphans.py.
"""

import json
import math
import uuid
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import (
    InvalidJsonMetaError,
    PostNotFoundError,
    ValidationError,
)
from src.core.logging import get_logger
from src.db.models import Media, Post
from src.db.repositories import MediaRepository, PostRepository
from src.db.session import get_db
from src.models.posts import PagedPostsResponse, PostResponse
from src.services.storage.service import StorageService, get_storage_service

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass
class FileUpload:
    """A file received from a client."""

    file_name: str
    content: bytes


def normalize_json_meta(value: str | None) -> str:
    """
    Return valid JSON text for a post's metadata.

    Absent or blank input becomes "{}".

    Raises:
        InvalidJsonMetaError: If the text is not valid JSON.
    """
    if value is None or not value.strip():
        return "{}"

    try:
        json.loads(value)
    except ValueError as e:
        raise InvalidJsonMetaError(details={"reason": str(e)}) from e
    return value


def clamp_pagination(page: int, page_size: int) -> tuple[int, int]:
    """Pages start at 1; out-of-range page sizes fall back to the default."""
    if page < 1:
        page = 1
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size


class PostService:
    """Coordinates posts, media rows and stored blobs."""

    def __init__(self, session: AsyncSession, storage: StorageService) -> None:
        self.session = session
        self.storage = storage
        self.posts = PostRepository(session)
        self.media = MediaRepository(session)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def to_response(self, post: Post) -> PostResponse:
        """Project a post, resolving its media URL when the media row exists."""
        media_url = None
        if post.media is not None:
            media_url = await self.storage.get_url(post.media.backend_path)

        return PostResponse(
            id=str(post.id),
            title=post.title,
            public_id=post.public_id,
            media_id=str(post.media_id) if post.media_id else None,
            media_url=media_url,
            json_meta=post.json_meta or "{}",
            created_at=post.created_at,
            updated_at=post.updated_at,
        )

    async def list_posts(self) -> list[PostResponse]:
        """All posts, newest first."""
        return [await self.to_response(post) for post in await self.posts.get_all()]

    async def list_posts_paged(self, page: int, page_size: int) -> PagedPostsResponse:
        """One page of posts with totals."""
        page, page_size = clamp_pagination(page, page_size)
        total = await self.posts.count()
        posts = await self.posts.get_paged(page, page_size)

        return PagedPostsResponse(
            items=[await self.to_response(post) for post in posts],
            page=page,
            page_size=page_size,
            total_count=total,
            total_pages=math.ceil(total / page_size),
        )

    async def get_post(self, post_id: uuid.UUID) -> PostResponse:
        """Get a post by ID or raise PostNotFoundError."""
        post = await self.posts.get_by_id(post_id)
        if post is None:
            raise PostNotFoundError(str(post_id))
        return await self.to_response(post)

    async def get_post_by_public_id(self, public_id: int) -> PostResponse:
        """Get a post by public ID or raise PostNotFoundError."""
        post = await self.posts.get_by_public_id(public_id)
        if post is None:
            raise PostNotFoundError(str(public_id))
        return await self.to_response(post)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_post(
        self,
        title: str,
        file: FileUpload | None = None,
        json_meta: str | None = None,
    ) -> PostResponse:
        """
        Create a post, storing its media first when a file is given.

        Raises:
            ValidationError: Blank title, bad file or bad jsonMeta.
            UploadError: The blob could not be stored; no post is created.
        """
        if not title or not title.strip():
            raise ValidationError(message="Title is required", details={"field": "title"})
        meta = normalize_json_meta(json_meta)

        backend_path = None
        if file is not None:
            result = await self.storage.upload(file.file_name, file.content)
            backend_path = result.url

        try:
            media_id = None
            if backend_path is not None:
                media = await self.media.create(backend_path)
                media_id = media.id

            post = await self.posts.create(title=title.strip(), media_id=media_id, json_meta=meta)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            if backend_path is not None:
                await self._discard_blob(backend_path, operation="create_rollback")
            raise

        logger.info("post_created", post_id=str(post.id), media_id=str(media_id) if media_id else None)
        return await self.get_post(post.id)

    async def update_post(
        self,
        post_id: uuid.UUID,
        title: str | None = None,
        file: FileUpload | None = None,
        json_meta: str | None = None,
    ) -> PostResponse:
        """
        Apply the given fields to a post; omitted or blank fields are kept.

        A new file replaces the post's media: the new blob and row are linked
        and committed before the old blob and row are removed. Removing the old
        row is best-effort; a failure is logged and the update still succeeds.

        Raises:
            PostNotFoundError: If the post does not exist.
        """
        post = await self.posts.get_by_id(post_id)
        if post is None:
            raise PostNotFoundError(str(post_id))

        changes: dict = {}
        if title is not None and title.strip():
            changes["title"] = title.strip()
        if json_meta is not None and json_meta.strip():
            changes["json_meta"] = normalize_json_meta(json_meta)

        old_media: Media | None = post.media
        new_path = None
        if file is not None:
            result = await self.storage.upload(file.file_name, file.content)
            new_path = result.url

        try:
            if new_path is not None:
                new_media = await self.media.create(new_path)
                changes["media_id"] = new_media.id

            await self.posts.update(post_id, **changes)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            if new_path is not None:
                await self._discard_blob(new_path, operation="update_rollback")
            raise

        if new_path is not None and old_media is not None:
            old_media_id = old_media.id
            await self._discard_blob(old_media.backend_path, operation="update_replace")
            try:
                await self.media.delete(old_media_id)
                await self.session.commit()
            except Exception as e:
                await self.session.rollback()
                logger.warning(
                    "media_cleanup_failed",
                    operation="update_replace",
                    post_id=str(post_id),
                    media_id=str(old_media_id),
                    error=str(e),
                )

        logger.info("post_updated", post_id=str(post_id), fields=sorted(changes))
        return await self.get_post(post_id)

    async def delete_post(self, post_id: uuid.UUID) -> None:
        """
        Delete a post together with its media row and blob.

        A failing blob delete is logged and does not stop the row deletes.

        Raises:
            PostNotFoundError: If the post does not exist.
        """
        post = await self.posts.get_by_id(post_id)
        if post is None:
            raise PostNotFoundError(str(post_id))

        media_id = post.media_id
        if post.media is not None:
            await self._discard_blob(post.media.backend_path, operation="delete")

        if media_id is not None:
            await self.media.delete(media_id)
        await self.posts.delete(post_id)
        await self.session.commit()

        logger.info("post_deleted", post_id=str(post_id), media_id=str(media_id) if media_id else None)

    async def _discard_blob(self, backend_path: str, operation: str) -> None:
        """Best-effort blob removal; failures are logged, never raised."""
        try:
            await self.storage.delete(backend_path)
        except Exception as e:
            logger.warning(
                "blob_cleanup_failed",
                operation=operation,
                backend=self.storage.provider_name,
                backend_path=backend_path,
                error=str(e),
            )


def get_post_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> PostService:
    """Dependency building a PostService for the current request."""
    return PostService(db, storage)
