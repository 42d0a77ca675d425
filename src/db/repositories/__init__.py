"""Database repositories for data access."""

from src.db.repositories.media import MediaRepository
from src.db.repositories.post import PostRepository

__all__ = ["MediaRepository", "PostRepository"]
