"""
Azure Blob Storage provider.

Implements StorageProvider on top of the async Azure Blob SDK.
Containers map directly to blob containers.
"""

from datetime import datetime
from typing import AsyncIterator, BinaryIO

from azure.core.exceptions import (
    AzureError,
    ResourceExistsError,
    ResourceNotFoundError,
)
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient

from src.core.exceptions import BlobNotFoundError, StorageError
from src.services.storage.base import (
    StorageProvider,
    UploadResult,
    get_content_type,
    read_content,
)


class AzureBlobStorageProvider(StorageProvider):
    """Azure Blob Storage implementation."""

    name = "azure"

    def __init__(
        self,
        connection_string: str | None = None,
        service_client: BlobServiceClient | None = None,
    ) -> None:
        """
        Initialize Azure storage provider.

        Args:
            connection_string: Storage account connection string.
            service_client: Pre-built service client, used instead of the
                connection string when given.
        """
        if service_client is None:
            if not connection_string:
                raise ValueError("Azure storage requires a connection string")
            service_client = BlobServiceClient.from_connection_string(connection_string)

        self.service_client = service_client
        self._ready_containers: set[str] = set()

    async def _ensure_container(self, container: str) -> None:
        """Create the blob container if it does not exist."""
        if container in self._ready_containers:
            return

        try:
            await self.service_client.get_container_client(container).create_container()
        except ResourceExistsError:
            pass
        self._ready_containers.add(container)

    async def upload(
        self,
        container: str,
        file_name: str,
        content: bytes | BinaryIO,
    ) -> UploadResult:
        """Upload file to Azure Blob Storage."""
        content_type = get_content_type(file_name)
        body = read_content(content)

        try:
            await self._ensure_container(container)
            blob_client = self.service_client.get_blob_client(container, file_name)
            await blob_client.upload_blob(
                body,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as e:
            raise StorageError(
                message=f"Failed to upload to Azure: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

        return UploadResult(
            file_name=file_name,
            url=await self.get_url(container, file_name),
            size=len(body),
            content_type=content_type,
        )

    async def download(self, container: str, file_name: str) -> bytes:
        """Download file from Azure Blob Storage."""
        blob_client = self.service_client.get_blob_client(container, file_name)

        try:
            downloader = await blob_client.download_blob()
            return await downloader.readall()
        except ResourceNotFoundError as e:
            raise BlobNotFoundError(
                message=f"File {file_name} not found in container {container}",
                details={"container": container, "file_name": file_name},
            ) from e
        except AzureError as e:
            raise StorageError(
                message=f"Failed to download from Azure: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

    async def stream(
        self,
        container: str,
        file_name: str,
        chunk_size: int = 8192,
    ) -> AsyncIterator[bytes]:
        """Stream file content in chunks."""
        blob_client = self.service_client.get_blob_client(container, file_name)

        try:
            downloader = await blob_client.download_blob()
            async for chunk in downloader.chunks():
                yield chunk
        except ResourceNotFoundError as e:
            raise BlobNotFoundError(
                message=f"File {file_name} not found in container {container}",
                details={"container": container, "file_name": file_name},
            ) from e
        except AzureError as e:
            raise StorageError(
                message=f"Failed to stream from Azure: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

    async def delete(self, container: str, file_name: str) -> bool:
        """Delete file from Azure Blob Storage."""
        blob_client = self.service_client.get_blob_client(container, file_name)

        try:
            await blob_client.delete_blob()
            return True
        except ResourceNotFoundError:
            return False
        except AzureError as e:
            raise StorageError(
                message=f"Failed to delete from Azure: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

    async def exists(self, container: str, file_name: str) -> bool:
        """Check if file exists in Azure Blob Storage."""
        blob_client = self.service_client.get_blob_client(container, file_name)

        try:
            return await blob_client.exists()
        except AzureError as e:
            raise StorageError(
                message=f"Failed to check file existence: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

    async def get_url(self, container: str, file_name: str) -> str:
        """Get the blob's URL."""
        return self.service_client.get_blob_client(container, file_name).url

    async def list_files(self, container: str) -> list[str]:
        """List blob names in a container."""
        container_client = self.service_client.get_container_client(container)

        try:
            return [blob.name async for blob in container_client.list_blobs()]
        except ResourceNotFoundError:
            return []
        except AzureError as e:
            raise StorageError(
                message=f"Failed to list files: {e}",
                details={"container": container},
            ) from e

    async def last_modified(self, container: str, file_name: str) -> datetime:
        """Get the blob's last-modified time."""
        blob_client = self.service_client.get_blob_client(container, file_name)

        try:
            properties = await blob_client.get_blob_properties()
        except ResourceNotFoundError as e:
            raise BlobNotFoundError(
                message=f"File {file_name} not found in container {container}",
                details={"container": container, "file_name": file_name},
            ) from e
        except AzureError as e:
            raise StorageError(
                message=f"Failed to read blob properties: {e}",
                details={"container": container, "file_name": file_name},
            ) from e

        return properties.last_modified

    async def close(self) -> None:
        """Close the underlying HTTP pipeline."""
        await self.service_client.close()
