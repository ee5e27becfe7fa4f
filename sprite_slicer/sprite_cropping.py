"""
Functions for cutting detected sprites out of the source image.
"""

import numpy as np

from sprite_slicer.errors import RenderContextError
from sprite_slicer.pixel_buffer import BoundingBox, is_rgba_buffer


def crop_sprites(pixels: np.ndarray, boxes: list[BoundingBox]) -> list[np.ndarray]:
    """
    Crop each bounding box out of the source image.

    Args:
        pixels: Source RGBA image; it is not modified
        boxes: Sprite bounding boxes, in sprite order

    Returns:
        One independent RGBA array per box, in the same order

    Raises:
        RenderContextError: If the source is not an RGBA pixel buffer
        ValueError: If a box does not fit inside the source image
    """
    if not is_rgba_buffer(pixels):
        raise RenderContextError()

    height, width = pixels.shape[:2]
    sprites = []
    for box in boxes:
        if not box.fits(width, height):
            raise ValueError(f"Bounding box {box.as_tuple()} is outside the {width}x{height} image")
        rows, cols = box.slices
        sprites.append(pixels[rows, cols].copy())
    return sprites
