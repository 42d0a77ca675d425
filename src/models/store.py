"""
Pydantic models for the upload and media services.
"""

from datetime import datetime

from src.models.common import CamelModel


class StoredFileResponse(CamelModel):
    """Result of a standalone upload."""

    file_name: str
    original_file_name: str
    file_url: str
    size: int
    storage_provider: str
    uploaded_at: datetime


class ServiceHealthResponse(CamelModel):
    """Health of an individual sub-service."""

    service: str
    status: str
    storage_provider: str | None = None
    supported_formats: list[str] | None = None
    timestamp: datetime
