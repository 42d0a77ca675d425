"""
Local filesystem storage provider.

Implements StorageProvider for local file system storage.
Used for development and small-scale deployments.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, BinaryIO

import aiofiles
import aiofiles.os

from src.core.exceptions import BlobNotFoundError, StorageError
from src.services.storage.base import (
    StorageProvider,
    UploadResult,
    get_content_type,
)


class LocalStorageProvider(StorageProvider):
    """Local filesystem storage implementation."""

    name = "local"

    def __init__(
        self,
        base_path: str | Path,
        public_base_url: str | None = None,
    ) -> None:
        """
        Initialize local storage provider.

        Args:
            base_path: Root directory for file storage.
            public_base_url: Base URL of the API serving stored files.
                Without it, URLs are file:// paths.
        """
        self.base_path = Path(base_path).resolve()
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        # Ensure base path exists
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, container: str, file_name: str) -> Path:
        """Get full filesystem path for a container and file name."""
        # Prevent directory traversal attacks
        clean_key = f"{container}/{file_name}".lstrip("/").lstrip("\\")
        full_path = (self.base_path / clean_key).resolve()

        if not full_path.is_relative_to(self.base_path) or full_path == self.base_path:
            raise StorageError(
                message="Invalid file key",
                details={"container": container, "file_name": file_name, "reason": "Path traversal detected"},
            )

        return full_path

    async def upload(
        self,
        container: str,
        file_name: str,
        content: bytes | BinaryIO,
    ) -> UploadResult:
        """Upload file to local storage."""
        full_path = self._get_full_path(container, file_name)

        try:
            await aiofiles.os.makedirs(full_path.parent, exist_ok=True)

            size = 0
            async with aiofiles.open(full_path, "wb") as f:
                if isinstance(content, (bytes, bytearray)):
                    await f.write(content)
                    size = len(content)
                else:
                    # Handle file-like object
                    while chunk := content.read(8192):
                        await f.write(chunk)
                        size += len(chunk)

        except OSError as e:
            raise StorageError(
                message=f"Failed to upload file: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

        return UploadResult(
            file_name=file_name,
            url=await self.get_url(container, file_name),
            size=size,
            content_type=get_content_type(file_name),
        )

    async def download(self, container: str, file_name: str) -> bytes:
        """Download file from local storage."""
        full_path = self._get_full_path(container, file_name)

        if not full_path.is_file():
            raise BlobNotFoundError(
                message=f"File {file_name} not found in container {container}",
                details={"container": container, "file_name": file_name},
            )

        try:
            async with aiofiles.open(full_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageError(
                message=f"Failed to download file: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

    async def stream(
        self,
        container: str,
        file_name: str,
        chunk_size: int = 8192,
    ) -> AsyncIterator[bytes]:
        """Stream file content in chunks."""
        full_path = self._get_full_path(container, file_name)

        if not full_path.is_file():
            raise BlobNotFoundError(
                message=f"File {file_name} not found in container {container}",
                details={"container": container, "file_name": file_name},
            )

        try:
            async with aiofiles.open(full_path, "rb") as f:
                while chunk := await f.read(chunk_size):
                    yield chunk
        except OSError as e:
            raise StorageError(
                message=f"Failed to stream file: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

    async def delete(self, container: str, file_name: str) -> bool:
        """Delete file from local storage."""
        full_path = self._get_full_path(container, file_name)

        if not full_path.exists():
            return False

        try:
            await aiofiles.os.remove(full_path)
            return True
        except FileNotFoundError:
            # Removed concurrently
            return False
        except OSError as e:
            raise StorageError(
                message=f"Failed to delete file: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

    async def exists(self, container: str, file_name: str) -> bool:
        """Check if file exists."""
        return self._get_full_path(container, file_name).is_file()

    async def get_url(self, container: str, file_name: str) -> str:
        """
        Generate a file URL.

        With a public base URL this points at the API's file route,
        otherwise a file:// URL for local access.
        """
        full_path = self._get_full_path(container, file_name)
        if self.public_base_url:
            return f"{self.public_base_url}/api/store/files/{container}/{file_name}"
        return full_path.as_uri()

    async def list_files(self, container: str) -> list[str]:
        """List files in a container."""
        container_path = self.base_path / container
        if not container_path.is_dir():
            return []

        return sorted(path.name for path in container_path.iterdir() if path.is_file())

    async def last_modified(self, container: str, file_name: str) -> datetime:
        """Get the file's modification time."""
        full_path = self._get_full_path(container, file_name)

        try:
            stat = await aiofiles.os.stat(full_path)
        except FileNotFoundError as e:
            raise BlobNotFoundError(
                message=f"File {file_name} not found in container {container}",
                details={"container": container, "file_name": file_name},
            ) from e

        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
