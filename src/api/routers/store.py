"""
Store API router.

Standalone uploads and retrieval of stored files.
"""

from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse

from src.core.exceptions import BlobNotFoundError
from src.models.store import ServiceHealthResponse, StoredFileResponse
from src.services.storage.base import get_content_type
from src.services.storage.service import (
    StorageService,
    get_storage_service,
    get_store_storage_service,
)

router = APIRouter(prefix="/api/store", tags=["Store"])


@router.post(
    "/upload",
    response_model=StoredFileResponse,
    summary="Upload file",
    description="Validate and store a single file under a generated name. "
    "Standalone uploads live in their own container, apart from post media.",
)
async def upload_file(
    storage: Annotated[StorageService, Depends(get_store_storage_service)],
    file: UploadFile = File(...),
) -> StoredFileResponse:
    """Store an uploaded file and return its location."""
    original_name = file.filename or ""
    try:
        content = await file.read()
    finally:
        await file.close()

    result = await storage.upload(original_name, content)

    return StoredFileResponse(
        file_name=result.file_name,
        original_file_name=original_name,
        file_url=result.url,
        size=result.size,
        storage_provider=storage.provider_name,
        uploaded_at=datetime.now(timezone.utc),
    )


@router.get(
    "/files/{container}/{file_name}",
    summary="Download file",
    description="Stream a stored file through the active storage provider.",
)
async def get_file(
    container: str,
    file_name: str,
    storage: Annotated[StorageService, Depends(get_storage_service)],
    store_storage: Annotated[StorageService, Depends(get_store_storage_service)],
) -> StreamingResponse:
    """Stream a stored file, 404 when it does not exist."""
    missing = (
        container not in (storage.container, store_storage.container)
        or PurePosixPath(file_name).name != file_name
        or not await storage.provider.exists(container, file_name)
    )
    if missing:
        raise BlobNotFoundError(
            message=f"File {file_name} not found in container {container}",
            details={"container": container, "file_name": file_name},
        )

    return StreamingResponse(
        storage.with_container(container).stream(file_name),
        media_type=get_content_type(file_name),
    )


@router.get(
    "/health",
    response_model=ServiceHealthResponse,
    response_model_exclude_none=True,
    summary="Store health",
)
async def store_health(
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> ServiceHealthResponse:
    """Report the upload service status and active provider."""
    return ServiceHealthResponse(
        service="store",
        status="healthy",
        storage_provider=storage.provider_name,
        timestamp=datetime.now(timezone.utc),
    )
