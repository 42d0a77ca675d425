"""
Custom exceptions for the DockerX CMS API.

All exceptions inherit from CMSAPIError and include proper HTTP status codes
and error details for consistent API error responses.
"""

from typing import Any


class CMSAPIError(Exception):
    """Base exception for all CMS API errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        self.message = message or self.message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(CMSAPIError):
    """Raised when authentication fails."""

    status_code = 401
    error_code = "AUTHENTICATION_ERROR"
    message = "Authentication required"


class InvalidCredentialsError(AuthenticationError):
    """Raised when a login uses a wrong username or password."""

    error_code = "INVALID_CREDENTIALS"
    message = "Invalid username or password"


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is malformed, expired or forged."""

    error_code = "INVALID_TOKEN"
    message = "Invalid or expired token"


# =============================================================================
# Resource Errors
# =============================================================================


class NotFoundError(CMSAPIError):
    """Raised when a resource is not found."""

    status_code = 404
    error_code = "NOT_FOUND"
    message = "Resource not found"


class PostNotFoundError(NotFoundError):
    """Raised when a post is not found."""

    error_code = "POST_NOT_FOUND"
    message = "Post not found"

    def __init__(self, post_id: str) -> None:
        super().__init__(
            message=f"Post with ID '{post_id}' not found",
            details={"post_id": post_id},
        )


class BlobNotFoundError(NotFoundError):
    """Raised when an object does not exist in the storage backend."""

    error_code = "FILE_NOT_FOUND"
    message = "File not found in storage"


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(CMSAPIError):
    """Raised when request validation fails."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    message = "Request validation failed"


class InvalidFileTypeError(ValidationError):
    """Raised when an uploaded file has an extension outside the allow-list."""

    error_code = "INVALID_FILE_TYPE"
    message = "Invalid file type"

    def __init__(self, extension: str, allowed_extensions: list[str]) -> None:
        super().__init__(
            message=(
                f"Invalid file type '{extension or 'none'}'. "
                f"Allowed types: {', '.join(allowed_extensions)}"
            ),
            details={
                "extension": extension,
                "allowed_extensions": allowed_extensions,
            },
        )


class FileTooLargeError(ValidationError):
    """Raised when uploaded file exceeds size limit."""

    error_code = "FILE_TOO_LARGE"
    message = "File too large"

    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(
            message=(
                f"File too large: {size / (1024 * 1024):.2f} MB exceeds "
                f"maximum of {max_size / (1024 * 1024):.0f} MB"
            ),
            details={
                "file_size": size,
                "max_file_size": max_size,
            },
        )


class EmptyFileError(ValidationError):
    """Raised when an upload carries no content."""

    error_code = "EMPTY_FILE"
    message = "No file provided"


class InvalidJsonMetaError(ValidationError):
    """Raised when jsonMeta is not valid JSON text."""

    error_code = "INVALID_JSON_META"
    message = "jsonMeta must be valid JSON"


class InvalidImageParametersError(ValidationError):
    """Raised when resize or crop parameters are out of range."""

    error_code = "INVALID_IMAGE_PARAMETERS"
    message = "Invalid image processing parameters"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CMSAPIError):
    """Raised at startup when configuration is invalid."""

    status_code = 500
    error_code = "CONFIGURATION_ERROR"
    message = "Invalid configuration"


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(CMSAPIError):
    """Raised when storage operation fails."""

    status_code = 500
    error_code = "STORAGE_ERROR"
    message = "Storage operation failed"


class UploadError(StorageError):
    """Raised when file upload fails."""

    error_code = "FILE_UPLOAD_ERROR"
    message = "Failed to upload file"
