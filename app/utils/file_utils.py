"""
Image upload validation for hotel pictures and user avatars.
Images are kept in the database, so validation works on in-memory bytes.
"""

import io
from typing import Tuple, Optional
from PIL import Image, UnidentifiedImageError
from fastapi import UploadFile

from app.config import settings
from app.utils.exceptions import (
    FileUploadError,
    UnsupportedFileTypeError,
    FileSizeExceededError
)

# MIME type -> formats Pillow reports for it
PIL_FORMATS = {
    "image/jpeg": ["jpeg"],
    "image/png": ["png"],
    "image/webp": ["webp"],
}


class ImageValidator:
    """Utility class for uploaded image validation."""

    @classmethod
    def validate_content_type(cls, content_type: Optional[str]) -> str:
        """
        Validate the declared MIME type.

        Raises:
            UnsupportedFileTypeError: If the type is not allowed
        """
        if not content_type or content_type not in settings.allowed_image_types:
            raise UnsupportedFileTypeError(content_type or "unknown", settings.allowed_image_types)
        return content_type

    @classmethod
    def validate_size(cls, size: int) -> int:
        """
        Validate image size in bytes.

        Raises:
            FileUploadError: If the file is empty
            FileSizeExceededError: If the file is too large
        """
        if size <= 0:
            raise FileUploadError("Image file is empty")
        if size > settings.max_image_size:
            raise FileSizeExceededError(size, settings.max_image_size)
        return size

    @classmethod
    def validate_image_content(cls, content: bytes, content_type: str) -> None:
        """
        Check that the bytes decode as an image of the declared type.

        Raises:
            FileUploadError: If Pillow cannot read the image or the format differs
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                pil_format = img.format.lower() if img.format else ""
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise FileUploadError(f"Invalid image file: {str(e)}")

        if pil_format not in PIL_FORMATS.get(content_type, []):
            raise FileUploadError(
                f"Image format '{pil_format}' doesn't match MIME type '{content_type}'"
            )


async def read_image_upload(file: Optional[UploadFile]) -> Optional[Tuple[bytes, str]]:
    """
    Read and validate an optional image upload.

    Args:
        file: Uploaded file from a multipart form, or None

    Returns:
        Tuple of (image bytes, content type), or None when no image was sent
    """
    # Browsers send an empty part when the file input is left blank
    if file is None or not file.filename:
        return None

    content_type = ImageValidator.validate_content_type(file.content_type)
    content = await file.read()
    ImageValidator.validate_size(len(content))
    ImageValidator.validate_image_content(content, content_type)
    return content, content_type
