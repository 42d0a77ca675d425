"""
Media API router.

Serves stored images through the image processor. Resize and crop are
passthrough for now; parameters are still validated.
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from src.core.exceptions import BlobNotFoundError
from src.models.store import ServiceHealthResponse
from src.services.media import SUPPORTED_FORMATS, ImageProcessor, get_image_processor
from src.services.storage.service import (
    StorageService,
    get_storage_service,
    get_store_storage_service,
)

router = APIRouter(prefix="/api/media", tags=["Media"])


async def load_image(
    file_name: str,
    storage: StorageService,
    store_storage: StorageService,
) -> bytes:
    """Read an image from post media, falling back to standalone uploads."""
    try:
        return await storage.download(file_name)
    except BlobNotFoundError:
        return await store_storage.download(file_name)


@router.get(
    "/image/{file_name}",
    summary="Get image",
    description="Return a stored image, optionally resized.",
)
async def get_image(
    file_name: str,
    storage: Annotated[StorageService, Depends(get_storage_service)],
    store_storage: Annotated[StorageService, Depends(get_store_storage_service)],
    processor: Annotated[ImageProcessor, Depends(get_image_processor)],
    width: int | None = Query(None),
    height: int | None = Query(None),
    image_format: str = Query("jpeg", alias="format"),
    quality: int = Query(90),
) -> Response:
    """Return a stored image."""
    data = await load_image(file_name, storage, store_storage)
    image = processor.process(
        data,
        width=width,
        height=height,
        image_format=image_format,
        quality=quality,
    )
    return Response(content=image.content, media_type=image.content_type)


@router.get(
    "/crop/{file_name}",
    summary="Crop image",
    description="Return a region of a stored image.",
)
async def crop_image(
    file_name: str,
    storage: Annotated[StorageService, Depends(get_storage_service)],
    store_storage: Annotated[StorageService, Depends(get_store_storage_service)],
    processor: Annotated[ImageProcessor, Depends(get_image_processor)],
    x: int = Query(...),
    y: int = Query(...),
    width: int = Query(...),
    height: int = Query(...),
    image_format: str = Query("jpeg", alias="format"),
    quality: int = Query(90),
) -> Response:
    """Return a cropped stored image."""
    data = await load_image(file_name, storage, store_storage)
    image = processor.crop(
        data,
        x=x,
        y=y,
        width=width,
        height=height,
        image_format=image_format,
        quality=quality,
    )
    return Response(content=image.content, media_type=image.content_type)


@router.post(
    "/process",
    summary="Process image",
    description="Resize an uploaded image without storing it.",
)
async def process_image(
    storage: Annotated[StorageService, Depends(get_storage_service)],
    processor: Annotated[ImageProcessor, Depends(get_image_processor)],
    file: UploadFile = File(...),
    width: int | None = Query(None),
    height: int | None = Query(None),
    image_format: str = Query("jpeg", alias="format"),
    quality: int = Query(90),
) -> Response:
    """Validate an uploaded image against the upload policy and process it."""
    try:
        data = await file.read()
    finally:
        await file.close()

    storage.validate_file(file.filename or "", len(data))
    image = processor.process(
        data,
        width=width,
        height=height,
        image_format=image_format,
        quality=quality,
    )
    return Response(content=image.content, media_type=image.content_type)


@router.get(
    "/health",
    response_model=ServiceHealthResponse,
    response_model_exclude_none=True,
    summary="Media health",
)
async def media_health() -> ServiceHealthResponse:
    """Report the image service status."""
    return ServiceHealthResponse(
        service="media",
        status="healthy",
        supported_formats=list(SUPPORTED_FORMATS),
        timestamp=datetime.now(timezone.utc),
    )
