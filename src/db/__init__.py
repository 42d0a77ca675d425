"""Database module - SQLAlchemy models and repositories."""

from src.db.session import get_db, init_db
from src.db.models import Base, Media, Post

__all__ = ["get_db", "init_db", "Base", "Media", "Post"]
