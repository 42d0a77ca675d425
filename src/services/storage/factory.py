"""
Storage provider factory.

Creates the appropriate storage provider based on configuration.
"""

from src.core.config import Settings, get_settings
from src.core.exceptions import ConfigurationError
from src.core.logging import get_logger
from src.services.storage.base import StorageProvider

logger = get_logger(__name__)

# Singleton instance
_storage_provider: StorageProvider | None = None

PROVIDER_ALIASES = {
    "local": "local",
    "aws": "s3",
    "s3": "s3",
    "azure": "azure",
}


def create_storage_provider(settings: Settings) -> StorageProvider:
    """
    Create a storage provider from settings.

    Args:
        settings: Application settings.

    Returns:
        Configured StorageProvider instance.

    Raises:
        ConfigurationError: If the provider type is unknown or misconfigured.
    """
    requested = (settings.storage_provider or "local").strip().lower() or "local"
    provider_type = PROVIDER_ALIASES.get(requested)

    if provider_type == "local":
        from src.services.storage.local import LocalStorageProvider

        return LocalStorageProvider(
            base_path=settings.local_storage_path,
            public_base_url=settings.public_base_url,
        )

    elif provider_type == "s3":
        if not settings.s3_access_key or not settings.s3_secret_key:
            raise ConfigurationError(
                message="S3 storage requires S3_ACCESS_KEY and S3_SECRET_KEY to be set",
                details={"storage_provider": requested},
            )

        from src.services.storage.s3 import S3StorageProvider

        return S3StorageProvider(
            bucket_name=settings.s3_bucket_name,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            url_expire_seconds=settings.s3_url_expire_seconds,
        )

    elif provider_type == "azure":
        if not settings.azure_storage_connection_string:
            raise ConfigurationError(
                message="Azure storage requires AZURE_STORAGE_CONNECTION_STRING to be set",
                details={"storage_provider": requested},
            )

        from src.services.storage.azure import AzureBlobStorageProvider

        return AzureBlobStorageProvider(
            connection_string=settings.azure_storage_connection_string,
        )

    raise ConfigurationError(
        message=f"Unsupported storage provider: {settings.storage_provider}",
        details={
            "storage_provider": settings.storage_provider,
            "supported": sorted(PROVIDER_ALIASES),
        },
    )


def get_storage_provider(settings: Settings | None = None) -> StorageProvider:
    """
    Get the configured storage provider.

    Built once per process and shared by every request afterwards.

    Args:
        settings: Application settings. Uses default if None.

    Returns:
        Configured StorageProvider instance.
    """
    global _storage_provider

    if _storage_provider is not None:
        return _storage_provider

    if settings is None:
        settings = get_settings()

    _storage_provider = create_storage_provider(settings)
    logger.info("storage_provider_created", provider=_storage_provider.name)
    return _storage_provider


def reset_storage_provider() -> None:
    """Reset the storage provider singleton (for testing)."""
    global _storage_provider
    _storage_provider = None
