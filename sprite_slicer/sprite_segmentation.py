"""
Functions for segmenting sprites in a sprite sheet.
"""

import logging
from collections import deque

import numpy as np

from sprite_slicer.pixel_buffer import MIN_SPRITE_SIZE, BoundingBox, Color, check_rgba_buffer

logger = logging.getLogger(__name__)


def foreground_mask(pixels: np.ndarray, background: Color) -> np.ndarray:
    """
    Mark the pixels that belong to sprites.

    A pixel is background if its RGB equals the background color exactly,
    or if it is fully transparent.

    Args:
        pixels: RGBA image
        background: Detected background color

    Returns:
        Boolean mask, True for foreground pixels
    """
    matches_bg = ((pixels[:, :, 0] == background.r) &
                  (pixels[:, :, 1] == background.g) &
                  (pixels[:, :, 2] == background.b))
    return ~matches_bg & (pixels[:, :, 3] > 0)


def segment_sprites(pixels: np.ndarray, background: Color,
                    min_size: int = MIN_SPRITE_SIZE) -> list[BoundingBox]:
    """
    Segment individual sprites from a sprite sheet by flood filling 4-connected
    regions of non-background pixels.

    Regions are discovered in row-major order of their first pixel, which is
    also the order of the returned boxes.

    Args:
        pixels: RGBA image, shape (height, width, 4)
        background: Background color to subtract
        min_size: Regions whose bounding box is at most this many pixels wide
                  or high are treated as noise and dropped

    Returns:
        List of sprite bounding boxes
    """
    check_rgba_buffer(pixels)
    height, width = pixels.shape[:2]

    mask = foreground_mask(pixels, background)
    foreground = mask.ravel().tolist()
    visited = [False] * (width * height)

    boxes = []
    num_noise = 0

    # Seeds in row-major order; flat indices are y * width + x
    for seed in np.flatnonzero(mask).tolist():
        if visited[seed]:
            continue

        visited[seed] = True
        queue = deque([seed])
        min_y, min_x = divmod(seed, width)
        max_y, max_x = min_y, min_x

        while queue:
            i = queue.popleft()
            y, x = divmod(i, width)
            if x < min_x:
                min_x = x
            elif x > max_x:
                max_x = x
            if y > max_y:
                max_y = y

            # Up, down, left, right
            for n, inside in ((i - width, y > 0), (i + width, y < height - 1),
                              (i - 1, x > 0), (i + 1, x < width - 1)):
                if inside and foreground[n] and not visited[n]:
                    visited[n] = True
                    queue.append(n)

        box = BoundingBox(min_x, min_y, max_x - min_x + 1, max_y - min_y + 1)
        if box.width > min_size and box.height > min_size:
            boxes.append(box)
        else:
            num_noise += 1

    logger.debug("Found %d sprite(s), dropped %d noise region(s)", len(boxes), num_noise)
    return boxes
