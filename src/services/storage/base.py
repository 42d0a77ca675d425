"""
Abstract base class for storage providers.

Provides a consistent interface for local filesystem, S3 and Azure Blob storage.
Objects are addressed by a container (folder, key prefix or blob container)
and a file name within it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator, BinaryIO

CONTENT_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def get_content_type(file_name: str) -> str:
    """Infer a MIME type from the file extension."""
    return CONTENT_TYPES.get(Path(file_name).suffix.lower(), DEFAULT_CONTENT_TYPE)


def read_content(content: bytes | BinaryIO) -> bytes:
    """Return the payload as bytes, draining file-like objects."""
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    return content.read()


@dataclass
class UploadResult:
    """Outcome of a successful upload."""

    file_name: str  # Name within the container
    url: str  # Absolute URL returned by the provider
    size: int  # Size in bytes
    content_type: str  # MIME type


class StorageProvider(ABC):
    """Abstract base class for storage providers."""

    #: Short backend identifier used in logs and health output
    name: str = "abstract"

    @abstractmethod
    async def upload(
        self,
        container: str,
        file_name: str,
        content: bytes | BinaryIO,
    ) -> UploadResult:
        """
        Upload a file to storage, creating the container if needed.

        Args:
            container: Target container.
            file_name: Name of the object within the container.
            content: File content as bytes or file-like object.

        Returns:
            UploadResult with upload details.

        Raises:
            StorageError: If the backend is unavailable or the write fails.
        """
        ...

    @abstractmethod
    async def download(self, container: str, file_name: str) -> bytes:
        """
        Download a file from storage.

        Returns:
            File content as bytes.

        Raises:
            BlobNotFoundError: If the file doesn't exist.
            StorageError: If download fails.
        """
        ...

    @abstractmethod
    def stream(
        self,
        container: str,
        file_name: str,
        chunk_size: int = 8192,
    ) -> AsyncIterator[bytes]:
        """
        Stream a file from storage in chunks.

        Yields:
            Chunks of file content.

        Raises:
            BlobNotFoundError: If the file doesn't exist.
        """
        ...

    @abstractmethod
    async def delete(self, container: str, file_name: str) -> bool:
        """
        Delete a file from storage. Missing files are not an error.

        Returns:
            True if file was deleted, False if it didn't exist.
        """
        ...

    @abstractmethod
    async def exists(self, container: str, file_name: str) -> bool:
        """Check if a file exists in storage."""
        ...

    @abstractmethod
    async def get_url(self, container: str, file_name: str) -> str:
        """
        Get an absolute URL for a file.

        Depending on the backend this may be a temporary signed URL, so
        callers must not persist it as a permanent address.
        """
        ...

    @abstractmethod
    async def list_files(self, container: str) -> list[str]:
        """List the file names stored in a container."""
        ...

    @abstractmethod
    async def last_modified(self, container: str, file_name: str) -> datetime:
        """
        Get the time a file was last written, as an aware UTC datetime.

        Raises:
            BlobNotFoundError: If the file doesn't exist.
        """
        ...

    async def close(self) -> None:
        """Release any pooled clients held by the provider."""
        return None
