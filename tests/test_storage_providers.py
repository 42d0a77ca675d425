"""
Storage provider tests.

The local provider runs against tmp_path; S3 and Azure run against
in-memory fakes of their SDK clients.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from botocore.exceptions import ClientError

from src.core.exceptions import BlobNotFoundError, StorageError
from src.services.storage.azure import AzureBlobStorageProvider
from src.services.storage.base import get_content_type
from src.services.storage.local import LocalStorageProvider
from src.services.storage.s3 import S3StorageProvider


# =============================================================================
# Content Types
# =============================================================================


@pytest.mark.parametrize(
    "file_name,expected",
    [
        ("photo.jpg", "image/jpeg"),
        ("photo.JPEG", "image/jpeg"),
        ("image.png", "image/png"),
        ("anim.gif", "image/gif"),
        ("doc.pdf", "application/pdf"),
        ("notes.txt", "text/plain"),
        ("archive.zip", "application/octet-stream"),
        ("no_extension", "application/octet-stream"),
    ],
)
def test_content_type_inferred_from_extension(file_name: str, expected: str):
    assert get_content_type(file_name) == expected


# =============================================================================
# Local Provider
# =============================================================================


@pytest.mark.asyncio
async def test_local_upload_then_download(local_provider: LocalStorageProvider):
    """Uploaded bytes come back unchanged."""
    result = await local_provider.upload("uploads", "a.png", b"png-bytes")

    assert result.file_name == "a.png"
    assert result.size == 9
    assert result.content_type == "image/png"
    assert result.url == "http://test/api/store/files/uploads/a.png"
    assert await local_provider.download("uploads", "a.png") == b"png-bytes"
    assert await local_provider.exists("uploads", "a.png")


@pytest.mark.asyncio
async def test_local_delete_then_download_not_found(local_provider: LocalStorageProvider):
    """A deleted file is gone; deleting it again reports False."""
    await local_provider.upload("uploads", "a.png", b"data")

    assert await local_provider.delete("uploads", "a.png") is True
    assert await local_provider.exists("uploads", "a.png") is False
    assert await local_provider.delete("uploads", "a.png") is False

    with pytest.raises(BlobNotFoundError):
        await local_provider.download("uploads", "a.png")


@pytest.mark.asyncio
async def test_local_stream_returns_all_chunks(local_provider: LocalStorageProvider):
    payload = b"x" * 20000
    await local_provider.upload("uploads", "big.png", payload)

    chunks = [chunk async for chunk in local_provider.stream("uploads", "big.png", chunk_size=4096)]

    assert b"".join(chunks) == payload
    assert len(chunks) > 1


@pytest.mark.asyncio
async def test_local_list_files(local_provider: LocalStorageProvider):
    assert await local_provider.list_files("uploads") == []

    await local_provider.upload("uploads", "b.png", b"1")
    await local_provider.upload("uploads", "a.png", b"2")

    assert await local_provider.list_files("uploads") == ["a.png", "b.png"]


@pytest.mark.asyncio
async def test_local_last_modified(local_provider: LocalStorageProvider):
    before = datetime.now(timezone.utc) - timedelta(seconds=5)
    await local_provider.upload("uploads", "a.png", b"1")

    modified = await local_provider.last_modified("uploads", "a.png")

    assert modified.tzinfo is not None
    assert modified >= before
    with pytest.raises(BlobNotFoundError):
        await local_provider.last_modified("uploads", "missing.png")


@pytest.mark.asyncio
async def test_local_rejects_path_traversal(local_provider: LocalStorageProvider):
    with pytest.raises(StorageError):
        await local_provider.upload("uploads", "../../escape.png", b"data")


@pytest.mark.asyncio
async def test_local_url_without_base_url_is_file_uri(tmp_path):
    provider = LocalStorageProvider(base_path=tmp_path)

    url = await provider.get_url("uploads", "a.png")

    assert url.startswith("file://")
    assert url.endswith("/uploads/a.png")


# =============================================================================
# S3 Provider
# =============================================================================


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeS3Body:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    async def read(self, size: int | None = None) -> bytes:
        end = len(self.data) if size is None else self.offset + size
        chunk = self.data[self.offset:end]
        self.offset += len(chunk)
        return chunk


class FakeS3Paginator:
    def __init__(self, objects: dict[str, bytes]) -> None:
        self.objects = objects

    async def paginate(self, Bucket: str, Prefix: str):
        yield {
            "Contents": [
                {"Key": key} for key in sorted(self.objects) if key.startswith(Prefix)
            ]
        }


class FakeS3Client:
    """In-memory stand-in for an aioboto3 S3 client."""

    def __init__(self) -> None:
        self.buckets: set[str] = set()
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.modified: dict[str, datetime] = {}

    async def head_bucket(self, Bucket: str):
        if Bucket not in self.buckets:
            raise _client_error("404", "HeadBucket")

    async def create_bucket(self, Bucket: str, **kwargs):
        self.buckets.add(Bucket)

    async def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str):
        self.objects[Key] = Body
        self.content_types[Key] = ContentType
        self.modified[Key] = datetime.now(timezone.utc)

    async def get_object(self, Bucket: str, Key: str):
        if Key not in self.objects:
            raise _client_error("NoSuchKey", "GetObject")
        return {"Body": FakeS3Body(self.objects[Key])}

    async def head_object(self, Bucket: str, Key: str):
        if Key not in self.objects:
            raise _client_error("404", "HeadObject")
        return {"ContentLength": len(self.objects[Key]), "LastModified": self.modified[Key]}

    async def delete_object(self, Bucket: str, Key: str):
        self.objects.pop(Key, None)

    async def generate_presigned_url(self, operation: str, Params: dict, ExpiresIn: int):
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}?X-Amz-Expires={ExpiresIn}"

    def get_paginator(self, operation: str):
        return FakeS3Paginator(self.objects)


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def s3_provider(s3_client: FakeS3Client, monkeypatch) -> S3StorageProvider:
    provider = S3StorageProvider(
        bucket_name="media",
        access_key="key",
        secret_key="secret",
        endpoint_url="http://minio:9000",
    )

    @asynccontextmanager
    async def fake_client():
        yield s3_client

    monkeypatch.setattr(provider, "_get_client", fake_client)
    return provider


@pytest.mark.asyncio
async def test_s3_upload_creates_bucket_and_stores_object(
    s3_provider: S3StorageProvider, s3_client: FakeS3Client
):
    result = await s3_provider.upload("uploads", "a.png", b"png")

    assert "media" in s3_client.buckets
    assert s3_client.objects["uploads/a.png"] == b"png"
    assert s3_client.content_types["uploads/a.png"] == "image/png"
    assert result.url.startswith("https://s3.test/media/uploads/a.png?")
    assert result.size == 3


@pytest.mark.asyncio
async def test_s3_download_and_stream(s3_provider: S3StorageProvider):
    await s3_provider.upload("uploads", "a.png", b"0123456789")

    assert await s3_provider.download("uploads", "a.png") == b"0123456789"
    chunks = [chunk async for chunk in s3_provider.stream("uploads", "a.png", chunk_size=4)]
    assert chunks == [b"0123", b"4567", b"89"]


@pytest.mark.asyncio
async def test_s3_missing_object_raises_not_found(s3_provider: S3StorageProvider):
    with pytest.raises(BlobNotFoundError):
        await s3_provider.download("uploads", "missing.png")


@pytest.mark.asyncio
async def test_s3_delete_reports_existence(s3_provider: S3StorageProvider):
    await s3_provider.upload("uploads", "a.png", b"png")

    assert await s3_provider.delete("uploads", "a.png") is True
    assert await s3_provider.exists("uploads", "a.png") is False
    assert await s3_provider.delete("uploads", "a.png") is False
    with pytest.raises(BlobNotFoundError):
        await s3_provider.download("uploads", "a.png")


@pytest.mark.asyncio
async def test_s3_list_files_strips_container_prefix(s3_provider: S3StorageProvider):
    await s3_provider.upload("uploads", "a.png", b"1")
    await s3_provider.upload("other", "b.png", b"2")

    assert await s3_provider.list_files("uploads") == ["a.png"]


@pytest.mark.asyncio
async def test_s3_last_modified(s3_provider: S3StorageProvider, s3_client: FakeS3Client):
    await s3_provider.upload("uploads", "a.png", b"1")

    assert await s3_provider.last_modified("uploads", "a.png") == s3_client.modified["uploads/a.png"]
    with pytest.raises(BlobNotFoundError):
        await s3_provider.last_modified("uploads", "missing.png")


@pytest.mark.asyncio
async def test_s3_backend_failure_raises_storage_error(
    s3_provider: S3StorageProvider, s3_client: FakeS3Client, monkeypatch
):
    async def failing_put(**kwargs):
        raise _client_error("InternalError", "PutObject")

    monkeypatch.setattr(s3_client, "put_object", failing_put)

    with pytest.raises(StorageError):
        await s3_provider.upload("uploads", "a.png", b"png")


# =============================================================================
# Azure Provider
# =============================================================================


class FakeBlob:
    def __init__(self, name: str) -> None:
        self.name = name


class FakeDownloader:
    def __init__(self, data: bytes) -> None:
        self.data = data

    async def readall(self) -> bytes:
        return self.data

    async def chunks(self):
        for i in range(0, len(self.data), 4):
            yield self.data[i:i + 4]


class FakeBlobClient:
    def __init__(self, service: "FakeBlobServiceClient", container: str, name: str) -> None:
        self.service = service
        self.container = container
        self.name = name

    @property
    def url(self) -> str:
        return f"https://account.blob.core.windows.net/{self.container}/{self.name}"

    def _blobs(self) -> dict[str, bytes]:
        return self.service.containers.setdefault(self.container, {})

    async def upload_blob(self, data: bytes, overwrite: bool = False, content_settings=None):
        self._blobs()[self.name] = data
        self.service.content_types[(self.container, self.name)] = content_settings.content_type
        self.service.modified[(self.container, self.name)] = datetime.now(timezone.utc)

    async def download_blob(self) -> FakeDownloader:
        if self.name not in self._blobs():
            raise ResourceNotFoundError("The specified blob does not exist.")
        return FakeDownloader(self._blobs()[self.name])

    async def delete_blob(self) -> None:
        if self.name not in self._blobs():
            raise ResourceNotFoundError("The specified blob does not exist.")
        del self._blobs()[self.name]

    async def exists(self) -> bool:
        return self.name in self._blobs()

    async def get_blob_properties(self):
        if self.name not in self._blobs():
            raise ResourceNotFoundError("The specified blob does not exist.")
        return SimpleNamespace(last_modified=self.service.modified[(self.container, self.name)])


class FakeContainerClient:
    def __init__(self, service: "FakeBlobServiceClient", container: str) -> None:
        self.service = service
        self.container = container

    async def create_container(self) -> None:
        if self.container in self.service.containers:
            raise ResourceExistsError("The specified container already exists.")
        self.service.containers[self.container] = {}

    async def list_blobs(self):
        if self.container not in self.service.containers:
            raise ResourceNotFoundError("The specified container does not exist.")
        for name in sorted(self.service.containers[self.container]):
            yield FakeBlob(name)


class FakeBlobServiceClient:
    """In-memory stand-in for azure.storage.blob.aio.BlobServiceClient."""

    def __init__(self) -> None:
        self.containers: dict[str, dict[str, bytes]] = {}
        self.content_types: dict[tuple[str, str], str] = {}
        self.modified: dict[tuple[str, str], datetime] = {}
        self.closed = False

    def get_container_client(self, container: str) -> FakeContainerClient:
        return FakeContainerClient(self, container)

    def get_blob_client(self, container: str, blob: str) -> FakeBlobClient:
        return FakeBlobClient(self, container, blob)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def azure_service() -> FakeBlobServiceClient:
    return FakeBlobServiceClient()


@pytest.fixture
def azure_provider(azure_service: FakeBlobServiceClient) -> AzureBlobStorageProvider:
    return AzureBlobStorageProvider(service_client=azure_service)


@pytest.mark.asyncio
async def test_azure_upload_creates_container(
    azure_provider: AzureBlobStorageProvider, azure_service: FakeBlobServiceClient
):
    result = await azure_provider.upload("uploads", "a.gif", b"gif")

    assert azure_service.containers["uploads"]["a.gif"] == b"gif"
    assert azure_service.content_types[("uploads", "a.gif")] == "image/gif"
    assert result.url == "https://account.blob.core.windows.net/uploads/a.gif"


@pytest.mark.asyncio
async def test_azure_existing_container_is_reused(
    azure_provider: AzureBlobStorageProvider, azure_service: FakeBlobServiceClient
):
    azure_service.containers["uploads"] = {"old.png": b"old"}

    await azure_provider.upload("uploads", "new.png", b"new")

    assert sorted(azure_service.containers["uploads"]) == ["new.png", "old.png"]


@pytest.mark.asyncio
async def test_azure_download_stream_and_delete(azure_provider: AzureBlobStorageProvider):
    await azure_provider.upload("uploads", "a.png", b"0123456789")

    assert await azure_provider.download("uploads", "a.png") == b"0123456789"
    chunks = [chunk async for chunk in azure_provider.stream("uploads", "a.png")]
    assert b"".join(chunks) == b"0123456789"

    assert await azure_provider.delete("uploads", "a.png") is True
    assert await azure_provider.delete("uploads", "a.png") is False
    with pytest.raises(BlobNotFoundError):
        await azure_provider.download("uploads", "a.png")


@pytest.mark.asyncio
async def test_azure_list_files(azure_provider: AzureBlobStorageProvider):
    assert await azure_provider.list_files("uploads") == []

    await azure_provider.upload("uploads", "b.png", b"1")
    await azure_provider.upload("uploads", "a.png", b"2")

    assert await azure_provider.list_files("uploads") == ["a.png", "b.png"]


@pytest.mark.asyncio
async def test_azure_last_modified(
    azure_provider: AzureBlobStorageProvider, azure_service: FakeBlobServiceClient
):
    await azure_provider.upload("uploads", "a.png", b"1")

    modified = await azure_provider.last_modified("uploads", "a.png")

    assert modified == azure_service.modified[("uploads", "a.png")]
    with pytest.raises(BlobNotFoundError):
        await azure_provider.last_modified("uploads", "missing.png")


@pytest.mark.asyncio
async def test_azure_close_closes_client(
    azure_provider: AzureBlobStorageProvider, azure_service: FakeBlobServiceClient
):
    await azure_provider.close()
    assert azure_service.closed


def test_azure_requires_connection_string():
    with pytest.raises(ValueError):
        AzureBlobStorageProvider()
