"""
Repository for Media operations.
"""

import uuid
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import Media, utcnow


class MediaRepository:
    """Repository for media CRUD operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_all(self) -> list[Media]:
        """Get all media records, newest first."""
        result = await self.session.execute(
            select(Media).order_by(Media.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_by_id(self, media_id: uuid.UUID) -> Media | None:
        """Get media by ID."""
        result = await self.session.execute(
            select(Media).where(Media.id == media_id)
        )
        return result.scalar_one_or_none()

    async def get_all_paths(self) -> set[str]:
        """Get every stored backend path."""
        result = await self.session.execute(select(Media.backend_path))
        return set(result.scalars().all())

    async def create(
        self,
        backend_path: str,
        media_id: uuid.UUID | None = None,
        created_at: datetime | None = None,
    ) -> Media:
        """Create a new media record."""
        media = Media(
            id=media_id or uuid.uuid4(),
            backend_path=backend_path,
            created_at=created_at or utcnow(),
        )
        self.session.add(media)
        await self.session.flush()
        return media

    async def update(self, media_id: uuid.UUID, backend_path: str) -> bool:
        """Point a media record at a new blob."""
        result = await self.session.execute(
            update(Media)
            .where(Media.id == media_id)
            .values(backend_path=backend_path, updated_at=utcnow())
        )
        return result.rowcount > 0

    async def delete(self, media_id: uuid.UUID) -> bool:
        """Delete a media record."""
        result = await self.session.execute(
            delete(Media).where(Media.id == media_id)
        )
        return result.rowcount > 0
