#!/usr/bin/env python3
"""
Functions for saving sprites as individual PNG files or as a ZIP archive.
"""

import io
import logging
import os
import tempfile
import zipfile
from pathlib import Path

import cv2
import numpy as np

from sprite_slicer.errors import ExportError
from sprite_slicer.pixel_buffer import is_rgba_buffer

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "sprites.zip"


def sprite_filename(index: int) -> str:
    return f"sprite_{index}.png"


def encode_png(sprite: np.ndarray) -> bytes:
    """
    Encode an RGBA sprite as PNG.

    Raises:
        ExportError: If the sprite is not an RGBA buffer or encoding fails
    """
    if not is_rgba_buffer(sprite):
        raise ExportError("Sprite is not an RGBA image and cannot be encoded as PNG")
    ok, encoded = cv2.imencode(".png", cv2.cvtColor(sprite, cv2.COLOR_RGBA2BGRA))
    if not ok:
        raise ExportError("PNG encoding failed")
    return encoded.tobytes()


def save_individual_sprites(
    sprites: list[np.ndarray],
    output_dir: str | Path
) -> list[Path]:
    """
    Save each sprite as an individual file named sprite_<index>.png.

    Args:
        sprites: List of RGBA sprite images
        output_dir: Directory for the files, created if missing

    Returns:
        Paths of the written files, in sprite order
    """
    output_dir = Path(output_dir)
    paths = []
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for i, sprite in enumerate(sprites):
            sprite_path = output_dir / sprite_filename(i)
            sprite_path.write_bytes(encode_png(sprite))
            paths.append(sprite_path)
    except OSError as e:
        raise ExportError(f"Failed to save sprites to {output_dir}: {e}") from e
    return paths


def create_sprite_archive(sprites: list[np.ndarray]) -> bytes:
    """
    Build a ZIP archive with one sprite_<index>.png entry per sprite.

    Args:
        sprites: List of RGBA sprite images

    Returns:
        The archive contents
    """
    # Encode everything up front so a bad sprite fails before any bytes are produced
    entries = [(sprite_filename(i), encode_png(sprite)) for i, sprite in enumerate(sprites)]

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buffer.getvalue()


def save_sprite_archive(
    sprites: list[np.ndarray],
    output_path: str | Path
) -> Path:
    """
    Write all sprites into a ZIP archive.

    The archive is written to a temporary file next to `output_path` and renamed
    into place, so a failed export never leaves a partial archive behind.

    Args:
        sprites: List of RGBA sprite images
        output_path: Archive path, or a directory to hold sprites.zip

    Returns:
        Path of the written archive
    """
    output_path = Path(output_path)
    if output_path.is_dir():
        output_path = output_path / ARCHIVE_NAME

    content = create_sprite_archive(sprites)

    tmp_name = None
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=output_path.parent, suffix=".zip.tmp", delete=False) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
        os.replace(tmp_name, output_path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ExportError(f"Failed to create ZIP file {output_path}: {e}") from e

    logger.debug("Wrote %d sprite(s) to %s", len(sprites), output_path)
    return output_path


def save_sprites(
    sprites: list[np.ndarray],
    output_dir: str | Path,
    create_archive: bool = True,
    individual_files: bool = False
) -> list[Path]:
    """
    Save sprites as a sprites.zip archive and/or as individual files.

    Args:
        sprites: List of RGBA sprite images
        output_dir: Output directory
        create_archive: Write OUTPUT_DIR/sprites.zip
        individual_files: Write OUTPUT_DIR/sprite_<index>.png files

    Returns:
        Paths of everything written
    """
    written = []
    if individual_files:
        written.extend(save_individual_sprites(sprites, output_dir))
    if create_archive:
        written.append(save_sprite_archive(sprites, Path(output_dir) / ARCHIVE_NAME))
    return written
