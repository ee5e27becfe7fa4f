"""
Functions for giving a group of sprites a common canvas size.
"""

import logging
from collections.abc import Iterable

import numpy as np

from sprite_slicer.errors import EqualizationLoadError
from sprite_slicer.pixel_buffer import is_rgba_buffer

logger = logging.getLogger(__name__)


def center_on_canvas(sprite: np.ndarray, canvas_w: int, canvas_h: int) -> np.ndarray:
    """
    Draw a sprite centered on a fully transparent canvas.

    When the size difference is odd, the extra pixel of padding goes to the
    bottom/right (offsets are rounded down).

    Args:
        sprite: RGBA sprite no larger than the canvas
        canvas_w: Canvas width
        canvas_h: Canvas height

    Returns:
        New (canvas_h, canvas_w, 4) RGBA array
    """
    h, w = sprite.shape[:2]
    canvas = np.zeros((canvas_h, canvas_w, 4), dtype=np.uint8)

    x_offset = (canvas_w - w) // 2
    y_offset = (canvas_h - h) // 2
    canvas[y_offset:y_offset + h, x_offset:x_offset + w] = sprite
    return canvas


def equalize_sprites(sprites: list[np.ndarray], selection: Iterable[int]) -> list[np.ndarray]:
    """
    Resize the selected sprites to their largest common width and height by
    centering each one on a transparent canvas.

    Selected entries are replaced in place; all other sprites and all indices
    are left untouched. Either every selected sprite is replaced or none is.

    Args:
        sprites: Sprite list, modified in place
        selection: Indices of the sprites to equalize. Fewer than two is a no-op.

    Returns:
        The same list

    Raises:
        ValueError: If an index is out of range
        EqualizationLoadError: If a selected sprite is not usable pixel data
    """
    indices = sorted(set(selection))
    if len(indices) < 2:
        return sprites

    for i in indices:
        if not 0 <= i < len(sprites):
            raise ValueError(f"Sprite index {i} out of range (0..{len(sprites) - 1})")

    loaded = [sprites[i] for i in indices]
    if not all(is_rgba_buffer(sprite) for sprite in loaded):
        raise EqualizationLoadError()

    max_width = max(sprite.shape[1] for sprite in loaded)
    max_height = max(sprite.shape[0] for sprite in loaded)

    # Render everything first so a failure cannot leave a half-equalized list
    canvases = [center_on_canvas(sprite, max_width, max_height) for sprite in loaded]
    for i, canvas in zip(indices, canvases):
        sprites[i] = canvas

    logger.debug("Equalized %d sprite(s) to %dx%d", len(indices), max_width, max_height)
    return sprites
