"""
Photo checks for user registration.

The API accepts JPEG photos under 5MB with a 70x70 minimum; the sign-up
form requires exactly 70x70.
"""

import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..utils.exceptions import PhotoValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB in bytes
REQUIRED_SIZE = (70, 70)
ALLOWED_EXTENSIONS = {".jpg", ".jpeg"}
# Multi-picture JPEGs from phone cameras are reported as MPO
ALLOWED_FORMATS = {"JPEG", "MPO"}


def validate_photo(data: bytes) -> bytes:
    """Return data unchanged if it is an acceptable photo, else raise PhotoValidationError"""
    if len(data) >= MAX_FILE_SIZE:
        raise PhotoValidationError("File size must be less than 5MB")

    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
            size = image.size
    except (UnidentifiedImageError, OSError):
        raise PhotoValidationError("Only JPG/JPEG are allowed")

    if image_format not in ALLOWED_FORMATS:
        raise PhotoValidationError("Only JPG/JPEG are allowed")
    if size != REQUIRED_SIZE:
        raise PhotoValidationError("Image must be exactly 70x70 pixels")
    return data


def load_photo(path: str) -> bytes:
    """Read and validate a photo file"""
    photo_path = Path(path)
    if photo_path.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise PhotoValidationError("Only JPG/JPEG are allowed")
    try:
        data = photo_path.read_bytes()
    except OSError as e:
        raise PhotoValidationError(f"Could not read photo: {e}")

    validate_photo(data)
    logger.info("Photo accepted", path=str(photo_path), size_bytes=len(data))
    return data
