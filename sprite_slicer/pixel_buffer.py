"""
Core value types shared by the slicing stages.

Pixel buffers themselves are plain numpy arrays of shape (height, width, 4)
holding RGBA channels as uint8.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

# Pixels with alpha below this are ignored when counting background colors
ALPHA_THRESHOLD = 128

# Components whose bounding box is this small (or smaller) on either axis are noise
MIN_SPRITE_SIZE = 4


class Color(NamedTuple):
    """An RGB color; alpha does not take part in color identity."""
    r: int
    g: int
    b: int

    def css(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned rectangle of one connected component.

    Attributes:
        x: Left column (inclusive)
        y: Top row (inclusive)
        width: Number of columns
        height: Number of rows
    """
    x: int
    y: int
    width: int
    height: int

    @property
    def slices(self) -> tuple[slice, slice]:
        """Row and column slices selecting this box from a (H, W, C) array."""
        return slice(self.y, self.y + self.height), slice(self.x, self.x + self.width)

    def fits(self, width: int, height: int) -> bool:
        return (self.x >= 0 and self.y >= 0 and self.width > 0 and self.height > 0 and
                self.x + self.width <= width and self.y + self.height <= height)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


def is_rgba_buffer(pixels: object) -> bool:
    """Check that `pixels` is a non-empty (H, W, 4) uint8 array."""
    return (isinstance(pixels, np.ndarray) and pixels.ndim == 3 and pixels.shape[2] == 4
            and pixels.dtype == np.uint8 and pixels.shape[0] > 0 and pixels.shape[1] > 0)


def check_rgba_buffer(pixels: np.ndarray, name: str = "pixels") -> None:
    """
    Validate an RGBA pixel buffer.

    Raises:
        ValueError: If the buffer has the wrong type, shape or dtype.
    """
    if not isinstance(pixels, np.ndarray):
        raise ValueError(f"{name} must be a numpy array, got {type(pixels)}")
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"{name} must have shape (height, width, 4), got shape {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"{name} must be uint8, got {pixels.dtype}")
