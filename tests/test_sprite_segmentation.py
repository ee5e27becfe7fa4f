"""
Tests for connected component segmentation of sprite sheets.
"""

import cv2
import numpy as np
import pytest

from sprite_slicer.background_detection import detect_background_color
from sprite_slicer.pixel_buffer import BoundingBox, Color
from sprite_slicer.sprite_segmentation import foreground_mask, segment_sprites

GRAY = (200, 200, 200)
GRAY_BG = Color(*GRAY)


def sheet(width: int, height: int, rgb: tuple[int, int, int] = GRAY) -> np.ndarray:
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[:, :, :3] = rgb
    img[:, :, 3] = 255
    return img


def test_uniform_image_has_no_sprites():
    img = sheet(16, 9)
    assert segment_sprites(img, detect_background_color(img)) == []


def test_single_block():
    """8x8 gray image with a 5x5 red block at (1,1)."""
    img = sheet(8, 8)
    img[1:6, 1:6, :3] = (255, 0, 0)
    assert segment_sprites(img, detect_background_color(img)) == [BoundingBox(1, 1, 5, 5)]


def test_small_block_is_noise():
    """A 3x3 block doesn't pass the noise floor."""
    img = sheet(8, 8)
    img[0:3, 0:3, :3] = (255, 0, 0)
    background = detect_background_color(img)
    assert background == GRAY_BG
    assert segment_sprites(img, background) == []


@pytest.mark.parametrize("w, h, kept", [(4, 10, False), (10, 4, False), (5, 5, True), (5, 10, True)])
def test_noise_floor_applies_to_both_axes(w, h, kept):
    img = sheet(20, 20)
    img[2:2 + h, 3:3 + w, :3] = (0, 0, 255)
    boxes = segment_sprites(img, GRAY_BG)
    assert boxes == ([BoundingBox(3, 2, w, h)] if kept else [])


def test_custom_min_size():
    img = sheet(12, 12)
    img[1:4, 1:4, :3] = (255, 0, 0)
    assert segment_sprites(img, GRAY_BG, min_size=2) == [BoundingBox(1, 1, 3, 3)]
    assert segment_sprites(img, GRAY_BG, min_size=3) == []


def test_two_blocks_in_discovery_order():
    """The block whose first pixel comes first in row-major order is first."""
    img = sheet(20, 16)
    img[8:14, 1:7, :3] = (255, 0, 0)      # lower left
    img[2:8, 12:18, :3] = (0, 255, 0)     # upper right, touches row 2 first
    boxes = segment_sprites(img, GRAY_BG)
    assert boxes == [BoundingBox(12, 2, 6, 6), BoundingBox(1, 8, 6, 6)]


def test_discovery_order_on_same_row():
    img = sheet(20, 10)
    img[2:8, 12:18, :3] = (0, 255, 0)
    img[2:8, 1:7, :3] = (255, 0, 0)
    boxes = segment_sprites(img, GRAY_BG)
    assert [box.x for box in boxes] == [1, 12]


def test_diagonal_pixels_are_not_connected():
    """Two blocks touching only at a corner are separate sprites."""
    img = sheet(16, 16)
    img[0:5, 0:5, :3] = (255, 0, 0)
    img[5:10, 5:10, :3] = (255, 0, 0)
    boxes = segment_sprites(img, GRAY_BG)
    assert boxes == [BoundingBox(0, 0, 5, 5), BoundingBox(5, 5, 5, 5)]


def test_multicolored_sprite_is_one_component():
    """Adjacent foreground pixels join regardless of their color."""
    img = sheet(10, 10)
    img[2:7, 2:4, :3] = (255, 0, 0)
    img[2:7, 4:7, :3] = (0, 0, 255)
    assert segment_sprites(img, GRAY_BG) == [BoundingBox(2, 2, 5, 5)]


def test_concave_shape_bounding_box():
    """A U shape reaches left of its seed pixel in later rows."""
    img = sheet(12, 12)
    img[1:8, 6, :3] = (9, 9, 9)     # right arm, seed at (6, 1)
    img[7, 1:7, :3] = (9, 9, 9)     # bottom
    img[3:8, 1, :3] = (9, 9, 9)     # left arm
    assert segment_sprites(img, GRAY_BG) == [BoundingBox(1, 1, 6, 7)]


def test_transparent_pixels_are_background():
    """Fully transparent pixels split sprites whatever their RGB."""
    img = sheet(12, 8)
    img[1:7, 1:11, :3] = (255, 0, 0)
    img[:, 6, 3] = 0
    # Right half is only 4 pixels wide and gets dropped
    assert segment_sprites(img, GRAY_BG) == [BoundingBox(1, 1, 5, 6)]


def test_partially_transparent_pixels_are_foreground():
    img = sheet(8, 8)
    img[1:7, 1:7] = (255, 0, 0, 1)
    assert segment_sprites(img, GRAY_BG) == [BoundingBox(1, 1, 6, 6)]


def test_background_color_match_is_exact():
    """A color one step away from the background is foreground."""
    img = sheet(8, 8)
    img[1:7, 1:7, :3] = (201, 200, 200)
    assert segment_sprites(img, GRAY_BG) == [BoundingBox(1, 1, 6, 6)]


def test_foreground_mask():
    img = sheet(3, 1)
    img[0, 1] = (1, 1, 1, 255)
    img[0, 2] = (1, 1, 1, 0)
    assert foreground_mask(img, GRAY_BG).tolist() == [[False, True, False]]


def random_sheet(seed: int, width: int = 64, height: int = 48) -> np.ndarray:
    """Gray sheet with random rectangles and speckle noise."""
    rng = np.random.default_rng(seed)
    img = sheet(width, height)
    for _ in range(12):
        x, y = rng.integers(0, width - 2), rng.integers(0, height - 2)
        w, h = rng.integers(1, 12), rng.integers(1, 12)
        img[y:y + h, x:x + w, :3] = rng.integers(0, 150, size=3)
    speckle = rng.random((height, width)) < 0.02
    img[speckle, :3] = (0, 0, 0)
    return img


@pytest.mark.parametrize("seed", range(5))
def test_matches_opencv_4_connectivity(seed):
    """Boxes agree with OpenCV's labeling, ordered by each component's first pixel."""
    img = random_sheet(seed)
    background = detect_background_color(img)
    mask = foreground_mask(img, background).astype(np.uint8)

    num_labels, labels, stats, _centroids = cv2.connectedComponentsWithStats(mask, connectivity=4)
    _, first_pixel = np.unique(labels.ravel(), return_index=True)

    expected = []
    for label in sorted(range(1, num_labels), key=lambda label: first_pixel[label]):
        x, y, w, h = (int(v) for v in stats[label, :4])
        if w > 4 and h > 4:
            expected.append(BoundingBox(x, y, w, h))

    assert segment_sprites(img, background) == expected


@pytest.mark.parametrize("seed", range(5))
def test_boxes_are_valid_and_hold_enough_foreground(seed):
    img = random_sheet(seed)
    background = detect_background_color(img)
    mask = foreground_mask(img, background)
    height, width = mask.shape

    for box in segment_sprites(img, background):
        assert box.fits(width, height)
        assert box.width > 4 and box.height > 4
        rows, cols = box.slices
        # A connected region spanning 5x5 has at least 5 + 5 - 1 pixels
        assert mask[rows, cols].sum() >= 9
        # The box is tight: every edge row/column holds a foreground pixel
        region = mask[rows, cols]
        assert region[0].any() and region[-1].any()
        assert region[:, 0].any() and region[:, -1].any()


def test_solid_blocks_exceed_noise_area():
    img = sheet(30, 30)
    img[2:8, 2:9, :3] = (1, 2, 3)
    img[15:20, 10:25, :3] = (3, 2, 1)
    mask = foreground_mask(img, GRAY_BG)
    for box in segment_sprites(img, GRAY_BG):
        rows, cols = box.slices
        assert mask[rows, cols].sum() > 16


def test_deterministic():
    img = random_sheet(11)
    background = detect_background_color(img)
    assert segment_sprites(img, background) == segment_sprites(img.copy(), background)


def test_input_not_modified():
    img = random_sheet(3)
    before = img.copy()
    segment_sprites(img, detect_background_color(img))
    assert np.array_equal(img, before)
