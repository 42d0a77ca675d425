"""
Repository for Post operations.
"""

import uuid
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.db.models import Post, utcnow

# Sentinel distinguishing "leave unchanged" from an explicit None
UNSET: Any = object()


class PostRepository:
    """Repository for post CRUD operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _select(self):
        return select(Post).options(selectinload(Post.media))

    async def get_all(self) -> list[Post]:
        """Get all posts, newest first."""
        result = await self.session.execute(
            self._select().order_by(Post.created_at.desc(), Post.public_id.desc())
        )
        return list(result.scalars().all())

    async def get_paged(self, page: int, page_size: int) -> list[Post]:
        """Get one page of posts, newest first. Pages start at 1."""
        result = await self.session.execute(
            self._select()
            .order_by(Post.created_at.desc(), Post.public_id.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        """Count all posts."""
        result = await self.session.execute(select(func.count(Post.id)))
        return result.scalar_one()

    async def get_by_id(self, post_id: uuid.UUID) -> Post | None:
        """Get post by ID."""
        result = await self.session.execute(
            self._select()
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_public_id(self, public_id: int) -> Post | None:
        """Get post by its public sequence ID."""
        result = await self.session.execute(
            self._select()
            .where(Post.public_id == public_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def next_public_id(self) -> int:
        """Next value of the public sequence."""
        result = await self.session.execute(
            select(func.coalesce(func.max(Post.public_id), 0) + 1)
        )
        return int(result.scalar_one())

    async def create(
        self,
        title: str,
        media_id: uuid.UUID | None = None,
        json_meta: str = "{}",
    ) -> Post:
        """Create a new post with a fresh ID and public ID."""
        post = Post(
            id=uuid.uuid4(),
            title=title,
            media_id=media_id,
            public_id=await self.next_public_id(),
            json_meta=json_meta,
            created_at=utcnow(),
        )
        self.session.add(post)
        await self.session.flush()
        return post

    async def update(
        self,
        post_id: uuid.UUID,
        title: str = UNSET,
        media_id: uuid.UUID | None = UNSET,
        json_meta: str = UNSET,
    ) -> bool:
        """Update the given fields of a post and stamp updated_at."""
        values: dict[str, Any] = {"updated_at": utcnow()}
        if title is not UNSET:
            values["title"] = title
        if media_id is not UNSET:
            values["media_id"] = media_id
        if json_meta is not UNSET:
            values["json_meta"] = json_meta

        result = await self.session.execute(
            update(Post).where(Post.id == post_id).values(**values)
        )
        return result.rowcount > 0

    async def delete(self, post_id: uuid.UUID) -> bool:
        """Delete a post."""
        result = await self.session.execute(
            delete(Post).where(Post.id == post_id)
        )
        return result.rowcount > 0
