"""
SQLAlchemy database models.

Defines the posts and media tables for the CMS.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps.

    updated_at stays NULL until the row is first modified.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )


# =============================================================================
# Media
# =============================================================================


class Media(Base, TimestampMixin):
    """Metadata for one stored blob."""

    __tablename__ = "media"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    # Reference returned by the provider that stored the bytes
    backend_path: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )


# =============================================================================
# Posts
# =============================================================================


class Post(Base, TimestampMixin):
    """A titled post with optional media and free-form JSON metadata."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    media_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("media.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    public_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        unique=True,
    )
    json_meta: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="{}",
    )

    # Relationships
    media: Mapped[Media | None] = relationship(
        "Media",
        lazy="raise",
    )

    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
    )
