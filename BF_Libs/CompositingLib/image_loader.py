"""
Image decoding for compositing sessions.

Banner and photo bytes arrive from external collaborators (storage, upload
forms). This module turns them into RGBA rasters or fails with DecodeError;
it never performs network I/O.

Functions:
    decode_image: Decode bytes (or pass through a decoded image) to RGBA
    load_image_file: Read an image file from disk and decode it
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Union

from BF_Libs.constants import MAX_IMAGE_BYTES, WORKING_MODE
from BF_Libs.errors import DecodeError
from BF_Libs.pillow_compat import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, memoryview, Any]

DECODE_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError)


def decode_image(
    data: ImageSource,
    label: str = "image",
    max_bytes: int = MAX_IMAGE_BYTES,
) -> Any:
    """
    Decode image bytes into an RGBA PIL Image.

    Already-opened images (anything with `convert`) are loaded, converted to
    RGBA and returned as a new image.

    Args:
        data: Encoded image bytes or a PIL Image
        label: Name used in error messages ('banner', 'photo', ...)
        max_bytes: Upper bound on the encoded size

    Returns:
        PIL Image in RGBA mode, fully loaded

    Raises:
        DecodeError: If the data is empty, too large, or not a decodable image
    """
    if hasattr(data, "convert"):
        # Opened-but-unloaded images decode lazily here
        try:
            data.load()
            return data.convert(WORKING_MODE)
        except DECODE_ERRORS as e:
            raise DecodeError(f"Failed to decode {label}: {str(e)}") from e

    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodeError(f"Cannot decode {label} from {type(data).__name__}")

    payload = bytes(data)
    if not payload:
        raise DecodeError(f"{label} is empty")
    if len(payload) > max_bytes:
        raise DecodeError(
            f"{label} is {len(payload)} bytes, larger than the {max_bytes} byte limit"
        )

    try:
        img = Image.open(BytesIO(payload))
        img.load()
        decoded = img.convert(WORKING_MODE)
    except DECODE_ERRORS as e:
        raise DecodeError(f"Failed to decode {label}: {str(e)}") from e

    logger.debug(f"Decoded {label}: {decoded.width}x{decoded.height}")
    return decoded


def load_image_file(file_path: Union[str, Path], max_bytes: int = MAX_IMAGE_BYTES) -> Any:
    """
    Read and decode an image file.

    Raises:
        FileNotFoundError: If the file does not exist
        DecodeError: If the file is not a decodable image
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"Image file not found: {path}")
    return decode_image(path.read_bytes(), label=path.name, max_bytes=max_bytes)
