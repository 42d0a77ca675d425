"""
Image processing service.

Resize and crop currently return the source bytes unchanged; only the
request parameters are validated and the output content type chosen.
"""

from dataclasses import dataclass

from src.core.exceptions import InvalidImageParametersError

SUPPORTED_FORMATS = ("jpeg", "png", "gif", "webp")

FORMAT_CONTENT_TYPES = {
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


def format_content_type(image_format: str) -> str:
    """MIME type for an output format; unknown formats fall back to JPEG."""
    return FORMAT_CONTENT_TYPES.get(image_format.lower(), "image/jpeg")


@dataclass
class ProcessedImage:
    content: bytes
    content_type: str


class ImageProcessor:
    """Passthrough image processor."""

    def process(
        self,
        data: bytes,
        width: int | None = None,
        height: int | None = None,
        image_format: str = "jpeg",
        quality: int = 90,
    ) -> ProcessedImage:
        """Resize an image. Returns the input as-is."""
        if (width is not None and width <= 0) or (height is not None and height <= 0):
            raise InvalidImageParametersError(
                message="Width and height must be positive",
                details={"width": width, "height": height},
            )
        self._check_quality(quality)

        return ProcessedImage(content=data, content_type=format_content_type(image_format))

    def crop(
        self,
        data: bytes,
        x: int,
        y: int,
        width: int,
        height: int,
        image_format: str = "jpeg",
        quality: int = 90,
    ) -> ProcessedImage:
        """Crop an image. Returns the input as-is."""
        if width <= 0 or height <= 0 or x < 0 or y < 0:
            raise InvalidImageParametersError(
                message="Invalid crop parameters",
                details={"x": x, "y": y, "width": width, "height": height},
            )
        self._check_quality(quality)

        return ProcessedImage(content=data, content_type=format_content_type(image_format))

    @staticmethod
    def _check_quality(quality: int) -> None:
        if not 1 <= quality <= 100:
            raise InvalidImageParametersError(
                message="Quality must be between 1 and 100",
                details={"quality": quality},
            )


def get_image_processor() -> ImageProcessor:
    """Dependency returning the image processor."""
    return ImageProcessor()
