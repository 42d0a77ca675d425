"""Core module - Configuration, authentication, and exceptions."""

from src.core.config import Settings, get_settings
from src.core.exceptions import (
    CMSAPIError,
    AuthenticationError,
    BlobNotFoundError,
    ConfigurationError,
    NotFoundError,
    PostNotFoundError,
    ValidationError,
    StorageError,
    UploadError,
)

__all__ = [
    "Settings",
    "get_settings",
    "CMSAPIError",
    "AuthenticationError",
    "BlobNotFoundError",
    "ConfigurationError",
    "NotFoundError",
    "PostNotFoundError",
    "ValidationError",
    "StorageError",
    "UploadError",
]
