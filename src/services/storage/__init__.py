"""Storage service abstraction for local filesystem, S3 and Azure Blob."""

from src.services.storage.base import StorageProvider, UploadResult, get_content_type
from src.services.storage.factory import (
    create_storage_provider,
    get_storage_provider,
    reset_storage_provider,
)
from src.services.storage.service import StorageService, get_storage_service

__all__ = [
    "StorageProvider",
    "UploadResult",
    "get_content_type",
    "create_storage_provider",
    "get_storage_provider",
    "reset_storage_provider",
    "StorageService",
    "get_storage_service",
]
