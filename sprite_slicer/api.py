#!/usr/bin/env python3
"""
Public API for the Sprite Slicer library.

This module provides the one-shot interface for programmatic use of the
sprite extraction functionality. For the interactive workflow (extraction in
a worker process, selection and size equalization) see sprite_slicer.session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generator

import cv2
import numpy as np

from sprite_slicer.background_detection import detect_background_color
from sprite_slicer.pixel_buffer import ALPHA_THRESHOLD, MIN_SPRITE_SIZE, BoundingBox, Color
from sprite_slicer.sprite_cropping import crop_sprites
from sprite_slicer.sprite_segmentation import foreground_mask, segment_sprites


@dataclass
class ProcessedImage:
    """
    An image with metadata from the sprite extraction pipeline.

    Attributes:
        image: The image data as a numpy array (RGBA format, uint8; debug masks are 2D)
        name: Descriptive name for the image (e.g., "sprite_0", "debug_segmented")
        bbox: Bounding box in the source image as (x, y, width, height), or None for debug images
        is_debug: True if this is a debug/intermediate image, False for output sprites
        metadata: Additional metadata (e.g., sprite index, background color)
    """
    image: np.ndarray
    name: str
    bbox: tuple[int, int, int, int] | None
    is_debug: bool
    metadata: dict[str, float | int] | None = None


def debug_images(
    img: np.ndarray,
    background: Color,
    boxes: list[BoundingBox]
) -> Generator[ProcessedImage, None, None]:
    """
    Yield the intermediate images of one extraction run.

    Args:
        img: Source RGBA image; it is not modified
        background: Detected background color
        boxes: Detected sprite bounding boxes

    Yields:
        The foreground mask and a copy of the source with the boxes outlined
    """
    mask = foreground_mask(img, background).astype(np.uint8) * 255
    yield ProcessedImage(
        image=mask,
        name="debug_foreground_mask",
        bbox=None,
        is_debug=True,
        metadata=None
    )

    segmented_img = img.copy()
    for box in boxes:
        cv2.rectangle(segmented_img, (box.x, box.y),
                      (box.x + box.width - 1, box.y + box.height - 1), (0, 255, 0, 255), 1)
    yield ProcessedImage(
        image=segmented_img,
        name="debug_segmented",
        bbox=None,
        is_debug=True,
        metadata={"num_sprites": len(boxes)}
    )


def process_spritesheet(
    image: np.ndarray | None,
    *,
    alpha_threshold: int = ALPHA_THRESHOLD,
    min_sprite_size: int = MIN_SPRITE_SIZE,
    debug: bool = False
) -> Generator[ProcessedImage, None, None]:
    """
    Split a spritesheet into sprites and yield them as they're produced.

    The most frequent opaque color is taken as the background. Every 4-connected
    group of other (non fully transparent) pixels becomes one sprite, cropped
    to its bounding box. Groups whose box is at most `min_sprite_size` pixels
    on either axis are dropped as noise.

    Args:
        image: Input image as numpy array in RGB or RGBA format (uint8).
               Must be 3D array with shape (height, width, 3) or (height, width, 4).
        alpha_threshold: Pixels with alpha below this don't count towards the
                         background color.
        min_sprite_size: Noise floor for sprite width and height.
        debug: If True, yield intermediate images for debugging.

    Yields:
        ProcessedImage objects. Debug images (if enabled) come first, followed
        by the sprites in row-major order of their first pixel.

    Raises:
        ValueError: If image is None or has invalid shape/dtype.

    Example:
        >>> from sprite_slicer import process_spritesheet, load_image
        >>>
        >>> for result in process_spritesheet(load_image("sheet.png")):
        >>>     print(f"{result.name} from {result.bbox}")
    """
    # Validate input
    if image is None:
        raise ValueError("image cannot be None")

    if not isinstance(image, np.ndarray):
        raise ValueError(f"image must be a numpy array, got {type(image)}")

    if image.ndim != 3:
        raise ValueError(f"image must be 3D array (height, width, channels), got shape {image.shape}")

    if image.shape[2] not in (3, 4):
        raise ValueError(f"image must have 3 (RGB) or 4 (RGBA) channels, got {image.shape[2]}")

    if image.dtype != np.uint8:
        raise ValueError(f"image must be uint8, got {image.dtype}")

    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"image must not be empty, got shape {image.shape}")

    # Add an opaque alpha channel if there is none; either way work on a copy
    if image.shape[2] == 3:
        img = cv2.cvtColor(image, cv2.COLOR_RGB2RGBA)
    else:
        img = image.copy()

    background = detect_background_color(img, alpha_threshold)
    boxes = segment_sprites(img, background, min_sprite_size)

    if debug:
        yield from debug_images(img, background, boxes)

    for i, (box, sprite) in enumerate(zip(boxes, crop_sprites(img, boxes))):
        yield ProcessedImage(
            image=sprite,
            name=f"sprite_{i}",
            bbox=box.as_tuple(),
            is_debug=False,
            metadata={
                "sprite_index": i,
                "background_r": background.r,
                "background_g": background.g,
                "background_b": background.b,
            }
        )
