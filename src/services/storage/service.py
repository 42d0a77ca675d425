"""
Storage service: validation and naming policy on top of a provider.

Every upload entry point goes through StorageService so the same
file rules apply whichever route a file arrives by.
"""

import uuid
from pathlib import Path, PurePosixPath
from typing import Annotated, AsyncIterator, BinaryIO
from urllib.parse import unquote, urlparse

from fastapi import Depends

from src.core.config import Settings, get_settings
from src.core.exceptions import (
    EmptyFileError,
    FileTooLargeError,
    InvalidFileTypeError,
    StorageError,
    UploadError,
)
from src.core.logging import StorageLogger
from src.services.storage.base import StorageProvider, UploadResult, read_content
from src.services.storage.factory import get_storage_provider

DEFAULT_ALLOWED_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


class StorageService:
    """Validates, names and stores uploaded files."""

    def __init__(
        self,
        provider: StorageProvider,
        container: str = "uploads",
        allowed_extensions: list[str] | tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        self.provider = provider
        self.container = container
        self.allowed_extensions = [ext.lower().lstrip(".") for ext in allowed_extensions]
        self.max_file_size = max_file_size
        self.log = StorageLogger(provider.name)

    @property
    def provider_name(self) -> str:
        return self.provider.name

    def with_container(self, container: str) -> "StorageService":
        """Same provider and upload policy, targeting another container."""
        return StorageService(
            provider=self.provider,
            container=container,
            allowed_extensions=self.allowed_extensions,
            max_file_size=self.max_file_size,
        )

    def validate_file(self, file_name: str, size: int) -> None:
        """
        Check a file against the type and size policy.

        Raises:
            InvalidFileTypeError: Extension not in the allow-list.
            FileTooLargeError: Size above the limit.
        """
        extension = Path(file_name or "").suffix.lower().lstrip(".")
        if extension not in self.allowed_extensions:
            raise InvalidFileTypeError(extension, self.allowed_extensions)

        if size > self.max_file_size:
            raise FileTooLargeError(size, self.max_file_size)

    @staticmethod
    def generate_file_name(file_name: str) -> str:
        """Random storage name keeping only the original extension."""
        return f"{uuid.uuid4().hex}{Path(file_name).suffix.lower()}"

    @staticmethod
    def extract_key(reference: str) -> str:
        """
        Get the file name within the container from a stored reference.

        Accepts full URLs (query strings such as presigned signatures are
        dropped) as well as bare keys.
        """
        path = urlparse(reference).path if "://" in reference else reference.split("?", 1)[0]
        return PurePosixPath(unquote(path)).name

    async def upload(self, file_name: str, content: bytes | BinaryIO) -> UploadResult:
        """
        Validate and store a file under a freshly generated name.

        Raises:
            ValidationError: If the file breaks the upload policy.
            UploadError: If the backend fails to store it.
        """
        data = read_content(content)
        self.validate_file(file_name, len(data))
        if not data:
            raise EmptyFileError()

        key = self.generate_file_name(file_name)
        try:
            result = await self.provider.upload(self.container, key, data)
        except StorageError as e:
            self.log.log_failed("upload", key, e.message)
            raise UploadError(
                message="Failed to upload file",
                details={"file_name": key, "backend": self.provider_name},
            ) from e

        self.log.log_uploaded(key, result.size, result.content_type)
        return result

    async def delete(self, reference: str) -> bool:
        """Delete the blob behind a stored reference. Already-gone is fine."""
        key = self.extract_key(reference)
        try:
            existed = await self.provider.delete(self.container, key)
        except StorageError as e:
            self.log.log_failed("delete", key, e.message)
            raise

        self.log.log_deleted(key, existed)
        return existed

    async def download(self, reference: str) -> bytes:
        """Fetch the bytes behind a stored reference."""
        return await self.provider.download(self.container, self.extract_key(reference))

    def stream(self, reference: str, chunk_size: int = 8192) -> AsyncIterator[bytes]:
        """Stream the bytes behind a stored reference."""
        return self.provider.stream(self.container, self.extract_key(reference), chunk_size)

    async def get_url(self, reference: str) -> str:
        """Resolve a stored reference to a current URL."""
        return await self.provider.get_url(self.container, self.extract_key(reference))


def get_storage_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StorageService:
    """Dependency wrapping the process-wide provider with upload policy."""
    return StorageService(
        provider=get_storage_provider(settings),
        container=settings.storage_container,
        allowed_extensions=settings.upload_allowed_extensions,
        max_file_size=settings.upload_max_file_size,
    )


def get_store_storage_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StorageService:
    """Dependency for standalone uploads, kept apart from post media."""
    return get_storage_service(settings).with_container(settings.store_container)
