"""
S3/MinIO storage provider.

Implements StorageProvider for Amazon S3 and S3-compatible services (MinIO, etc.).
Containers map to key prefixes inside a single bucket.
"""

from datetime import datetime
from typing import AsyncIterator, BinaryIO

import aioboto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from src.core.exceptions import BlobNotFoundError, StorageError
from src.services.storage.base import (
    StorageProvider,
    UploadResult,
    get_content_type,
    read_content,
)

NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


def _is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in NOT_FOUND_CODES


class S3StorageProvider(StorageProvider):
    """S3/MinIO storage implementation."""

    name = "s3"

    def __init__(
        self,
        bucket_name: str,
        access_key: str,
        secret_key: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        url_expire_seconds: int = 3600,
    ) -> None:
        """
        Initialize S3 storage provider.

        Args:
            bucket_name: S3 bucket name.
            access_key: AWS access key ID.
            secret_key: AWS secret access key.
            region: AWS region.
            endpoint_url: Custom endpoint URL (for MinIO/self-hosted).
            url_expire_seconds: Lifetime of presigned download URLs.
        """
        self.bucket_name = bucket_name
        self.region = region
        self.endpoint_url = endpoint_url
        self.url_expire_seconds = url_expire_seconds
        self._bucket_ready = False

        self.session = aioboto3.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )

        self.client_config = BotoConfig(
            signature_version="s3v4",
            s3={"addressing_style": "path" if endpoint_url else "auto"},
        )

    @staticmethod
    def _key(container: str, file_name: str) -> str:
        return f"{container}/{file_name}"

    def _get_client(self):
        """Get S3 client context manager."""
        return self.session.client(
            "s3",
            endpoint_url=self.endpoint_url,
            config=self.client_config,
        )

    async def _ensure_bucket(self, client) -> None:
        """Create the bucket on first use if it does not exist."""
        if self._bucket_ready:
            return

        try:
            await client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            if not _is_not_found(e):
                raise
            params: dict = {"Bucket": self.bucket_name}
            if self.region and self.region != "us-east-1":
                params["CreateBucketConfiguration"] = {
                    "LocationConstraint": self.region
                }
            await client.create_bucket(**params)

        self._bucket_ready = True

    async def upload(
        self,
        container: str,
        file_name: str,
        content: bytes | BinaryIO,
    ) -> UploadResult:
        """Upload file to S3."""
        key = self._key(container, file_name)
        content_type = get_content_type(file_name)
        body = read_content(content)

        try:
            async with self._get_client() as client:
                await self._ensure_bucket(client)
                await client.put_object(
                    Bucket=self.bucket_name,
                    Key=key,
                    Body=body,
                    ContentType=content_type,
                )

        except (ClientError, BotoCoreError) as e:
            raise StorageError(
                message=f"Failed to upload to S3: {e}",
                details={"key": key, "bucket": self.bucket_name},
            ) from e

        return UploadResult(
            file_name=file_name,
            url=await self.get_url(container, file_name),
            size=len(body),
            content_type=content_type,
        )

    async def download(self, container: str, file_name: str) -> bytes:
        """Download file from S3."""
        key = self._key(container, file_name)

        try:
            async with self._get_client() as client:
                response = await client.get_object(
                    Bucket=self.bucket_name,
                    Key=key,
                )
                async with response["Body"] as stream:
                    return await stream.read()

        except ClientError as e:
            if _is_not_found(e):
                raise BlobNotFoundError(
                    message=f"File {file_name} not found in container {container}",
                    details={"key": key},
                ) from e
            raise StorageError(
                message=f"Failed to download from S3: {e}",
                details={"key": key},
            ) from e
        except BotoCoreError as e:
            raise StorageError(
                message=f"Failed to download from S3: {e}",
                details={"key": key},
            ) from e

    async def stream(
        self,
        container: str,
        file_name: str,
        chunk_size: int = 8192,
    ) -> AsyncIterator[bytes]:
        """Stream file content in chunks."""
        key = self._key(container, file_name)

        try:
            async with self._get_client() as client:
                response = await client.get_object(
                    Bucket=self.bucket_name,
                    Key=key,
                )
                async with response["Body"] as stream:
                    while chunk := await stream.read(chunk_size):
                        yield chunk

        except ClientError as e:
            if _is_not_found(e):
                raise BlobNotFoundError(
                    message=f"File {file_name} not found in container {container}",
                    details={"key": key},
                ) from e
            raise StorageError(
                message=f"Failed to stream from S3: {e}",
                details={"key": key},
            ) from e

    async def delete(self, container: str, file_name: str) -> bool:
        """Delete file from S3."""
        key = self._key(container, file_name)

        try:
            async with self._get_client() as client:
                # Check if exists first
                try:
                    await client.head_object(Bucket=self.bucket_name, Key=key)
                except ClientError as e:
                    if _is_not_found(e):
                        return False
                    raise

                await client.delete_object(
                    Bucket=self.bucket_name,
                    Key=key,
                )
                return True

        except (ClientError, BotoCoreError) as e:
            raise StorageError(
                message=f"Failed to delete from S3: {e}",
                details={"key": key},
            ) from e

    async def exists(self, container: str, file_name: str) -> bool:
        """Check if file exists in S3."""
        key = self._key(container, file_name)

        try:
            async with self._get_client() as client:
                await client.head_object(
                    Bucket=self.bucket_name,
                    Key=key,
                )
                return True
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise StorageError(
                message=f"Failed to check file existence: {e}",
                details={"key": key},
            ) from e

    async def get_url(self, container: str, file_name: str) -> str:
        """Generate presigned URL for direct access."""
        key = self._key(container, file_name)

        try:
            async with self._get_client() as client:
                return await client.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.bucket_name, "Key": key},
                    ExpiresIn=self.url_expire_seconds,
                )

        except (ClientError, BotoCoreError) as e:
            raise StorageError(
                message=f"Failed to generate presigned URL: {e}",
                details={"key": key},
            ) from e

    async def list_files(self, container: str) -> list[str]:
        """List files under a container prefix."""
        prefix = f"{container}/"
        names: list[str] = []

        try:
            async with self._get_client() as client:
                paginator = client.get_paginator("list_objects_v2")
                async for page in paginator.paginate(
                    Bucket=self.bucket_name,
                    Prefix=prefix,
                ):
                    for obj in page.get("Contents", []):
                        names.append(obj["Key"][len(prefix):])

            return names

        except ClientError as e:
            raise StorageError(
                message=f"Failed to list files: {e}",
                details={"prefix": prefix},
            ) from e

    async def last_modified(self, container: str, file_name: str) -> datetime:
        """Get the object's LastModified time."""
        key = self._key(container, file_name)

        try:
            async with self._get_client() as client:
                response = await client.head_object(
                    Bucket=self.bucket_name,
                    Key=key,
                )
                return response["LastModified"]
        except ClientError as e:
            if _is_not_found(e):
                raise BlobNotFoundError(
                    message=f"File {file_name} not found in container {container}",
                    details={"key": key},
                ) from e
            raise StorageError(
                message=f"Failed to read object metadata: {e}",
                details={"key": key},
            ) from e
