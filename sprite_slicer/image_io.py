"""
Decoding of source images into RGBA pixel buffers.

OpenCV works in BGR(A) channel order; everything past this module uses RGBA.
"""

import logging
from pathlib import Path

import cv2
import numpy as np

from sprite_slicer.errors import DecodeError

logger = logging.getLogger(__name__)


def to_rgba(img: np.ndarray) -> np.ndarray:
    """
    Convert an image as returned by cv2.imread(..., IMREAD_UNCHANGED) to RGBA.

    Args:
        img: Grayscale, BGR or BGRA image (uint8)

    Returns:
        New (height, width, 4) RGBA array
    """
    if img.dtype == np.uint16:
        # 16-bit PNG/TIFF
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise DecodeError(f"Unsupported pixel depth {img.dtype}")

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    raise DecodeError(f"Unsupported image format with {img.shape[2]} channels")


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (PNG, JPEG, ...) into an RGBA buffer.

    Raises:
        DecodeError: If the bytes are not a decodable image.
    """
    buf = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED) if buf.size else None
    if img is None:
        raise DecodeError()
    logger.debug("Decoded image with shape %s", img.shape)
    return to_rgba(img)


def load_image(path: str | Path) -> np.ndarray:
    """
    Load an image file into an RGBA buffer.

    Raises:
        DecodeError: If the file is missing or cannot be decoded.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise DecodeError(f"Could not load image from {path}: {e}") from e
    try:
        return decode_image(data)
    except DecodeError as e:
        raise DecodeError(f"Could not load image from {path}. It may be corrupted.") from e
