"""
Tests for decoding source images.
"""

import cv2
import numpy as np
import pytest

from sprite_slicer.errors import DecodeError
from sprite_slicer.image_io import decode_image, load_image, to_rgba


def encode(img: np.ndarray, ext: str = ".png") -> bytes:
    ok, data = cv2.imencode(ext, img)
    assert ok
    return data.tobytes()


def test_bgra_becomes_rgba():
    bgra = np.zeros((2, 3, 4), dtype=np.uint8)
    bgra[:, :] = (10, 20, 30, 40)
    rgba = decode_image(encode(bgra))
    assert rgba.shape == (2, 3, 4)
    assert tuple(rgba[0, 0]) == (30, 20, 10, 40)


def test_bgr_gets_opaque_alpha():
    bgr = np.zeros((4, 4, 3), dtype=np.uint8)
    bgr[:, :] = (1, 2, 3)
    rgba = decode_image(encode(bgr))
    assert tuple(rgba[3, 3]) == (3, 2, 1, 255)


def test_grayscale():
    rgba = to_rgba(np.full((2, 2), 77, dtype=np.uint8))
    assert tuple(rgba[1, 1]) == (77, 77, 77, 255)


def test_sixteen_bit():
    img = np.full((2, 2, 4), 0xABCD, dtype=np.uint16)
    rgba = decode_image(encode(img))
    assert rgba.dtype == np.uint8
    assert tuple(rgba[0, 0]) == (0xAB, 0xAB, 0xAB, 0xAB)


def test_jpeg_decodes():
    rgba = decode_image(encode(np.full((8, 8, 3), 128, dtype=np.uint8), ".jpg"))
    assert rgba.shape == (8, 8, 4)


@pytest.mark.parametrize("data", [b"", b"garbage bytes"])
def test_undecodable_bytes(data):
    with pytest.raises(DecodeError):
        decode_image(data)


def test_missing_file(tmp_path):
    with pytest.raises(DecodeError, match="Could not load image"):
        load_image(tmp_path / "missing.png")


def test_load_file(tmp_path):
    path = tmp_path / "sheet.png"
    cv2.imwrite(str(path), np.zeros((5, 6, 4), dtype=np.uint8))
    assert load_image(path).shape == (5, 6, 4)
