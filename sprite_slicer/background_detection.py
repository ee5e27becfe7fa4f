"""
Functions for detecting the background color of a sprite sheet.
"""

import logging

import numpy as np

from sprite_slicer.pixel_buffer import ALPHA_THRESHOLD, Color, check_rgba_buffer

logger = logging.getLogger(__name__)


def pack_rgb(pixels: np.ndarray) -> np.ndarray:
    """Pack the RGB channels of (..., 4) RGBA pixels into single uint32 keys."""
    return ((pixels[..., 0].astype(np.uint32) << 16) |
            (pixels[..., 1].astype(np.uint32) << 8) |
            pixels[..., 2].astype(np.uint32))


def detect_background_color(pixels: np.ndarray, alpha_threshold: int = ALPHA_THRESHOLD) -> Color:
    """
    Find the most frequent color among the sufficiently opaque pixels.

    Alpha is ignored when grouping colors. When several colors share the highest
    count, the one that occurs first in row-major order wins.

    Args:
        pixels: RGBA image, shape (height, width, 4)
        alpha_threshold: Pixels with alpha below this are not counted

    Returns:
        The background color, or black if no pixel is opaque enough
    """
    check_rgba_buffer(pixels)

    # Row-major order is kept by boolean indexing
    flat = pixels.reshape(-1, 4)
    opaque = flat[flat[:, 3] >= alpha_threshold]
    if len(opaque) == 0:
        logger.debug("No pixel with alpha >= %d, defaulting background to black", alpha_threshold)
        return Color(0, 0, 0)

    keys, first_seen, counts = np.unique(pack_rgb(opaque), return_index=True, return_counts=True)

    tied = np.flatnonzero(counts == counts.max())
    winner = int(keys[tied[np.argmin(first_seen[tied])]])

    color = Color((winner >> 16) & 0xFF, (winner >> 8) & 0xFF, winner & 0xFF)
    logger.debug("Background color %s covers %d of %d counted pixels",
                 color.css(), int(counts.max()), len(opaque))
    return color
