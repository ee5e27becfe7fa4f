"""
Interactive slicing session.

Holds the state of one sprite sheet being worked on: the source image, the
detected background, the extracted sprites and the current selection. Every
operation either completes or leaves that state as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import numpy as np

from sprite_slicer.equalization import equalize_sprites
from sprite_slicer.errors import ErrorKind, WorkerError, error_for
from sprite_slicer.image_io import decode_image, load_image
from sprite_slicer.pixel_buffer import ALPHA_THRESHOLD, MIN_SPRITE_SIZE, BoundingBox, Color
from sprite_slicer.sprite_cropping import crop_sprites
from sprite_slicer.sprite_save import ARCHIVE_NAME, save_individual_sprites, save_sprite_archive
from sprite_slicer.worker import BackgroundColorReady, BoxesReady, ExtractionWorker, Failed

logger = logging.getLogger(__name__)


class SlicerSession:
    def __init__(self, *, alpha_threshold: int = ALPHA_THRESHOLD, min_size: int = MIN_SPRITE_SIZE):
        self.alpha_threshold = alpha_threshold
        self.min_size = min_size

        self.source: np.ndarray | None = None
        self.background: Color | None = None
        self.boxes: list[BoundingBox] = []
        self.sprites: list[np.ndarray] = []
        self.selection_mode = False
        self.selected: set[int] = set()

    @property
    def background_css(self) -> str | None:
        return self.background.css() if self.background is not None else None

    def _reset_results(self) -> None:
        self.background = None
        self.boxes = []
        self.sprites = []
        self.selection_mode = False
        self.selected = set()

    def load(self, source: str | Path | bytes) -> None:
        """
        Load a new sprite sheet from a file path or encoded image bytes.

        Previous results are discarded only once the new image has decoded.

        Raises:
            DecodeError: If the image cannot be decoded
        """
        pixels = decode_image(source) if isinstance(source, bytes) else load_image(source)
        self._reset_results()
        self.source = pixels
        logger.debug("Loaded %dx%d sprite sheet", pixels.shape[1], pixels.shape[0])

    def extract(self, on_background: Callable[[Color], None] | None = None) -> list[np.ndarray]:
        """
        Detect and crop the sprites of the loaded sheet.

        Background detection and labeling run in a worker process. The
        background color is available (and passed to `on_background`) before
        the sprites are cropped.

        Returns:
            The new sprite list

        Raises:
            ValueError: If no image has been loaded
            WorkerError: If the worker fails; no partial results are kept
            SpriteSlicerError: Matching the failure kind the worker reported
            RenderContextError: If the source cannot be cropped
        """
        if self.source is None:
            raise ValueError("No image loaded")

        self._reset_results()
        try:
            with ExtractionWorker(self.source, alpha_threshold=self.alpha_threshold,
                                  min_size=self.min_size) as worker:
                for message in worker.messages():
                    match message:
                        case BackgroundColorReady(color=color):
                            self.background = color
                            if on_background is not None:
                                on_background(color)
                        case BoxesReady(boxes=boxes):
                            sprites = crop_sprites(self.source, boxes)
                            self.boxes = boxes
                            self.sprites = sprites
                        case Failed(kind=ErrorKind.WORKER_FAILURE, message=text):
                            raise WorkerError(f"An error occurred in the slicing worker: {text}")
                        case Failed(kind=kind, message=text):
                            raise error_for(kind)(text)
        except Exception:
            self._reset_results()
            raise

        logger.debug("Extracted %d sprite(s)", len(self.sprites))
        return self.sprites

    def set_selection_mode(self, enabled: bool) -> None:
        self.selection_mode = enabled
        if not enabled:
            self.selected = set()

    def toggle_selection(self, index: int) -> None:
        """Add or remove a sprite from the selection. Ignored outside selection mode."""
        if not self.selection_mode:
            return
        if not 0 <= index < len(self.sprites):
            raise IndexError(f"Sprite index {index} out of range")
        self.selected ^= {index}

    def equalize(self) -> bool:
        """
        Equalize the sizes of the selected sprites.

        On success the selection is cleared and selection mode is left. With
        fewer than two sprites selected nothing happens.

        Returns:
            True if sprites were equalized
        """
        if len(self.selected) < 2:
            return False

        sprites = list(self.sprites)
        equalize_sprites(sprites, self.selected)
        self.sprites = sprites
        self.set_selection_mode(False)
        return True

    def export_zip(self, output_path: str | Path) -> Path | None:
        """Write all sprites to a ZIP archive; returns None when there is nothing to export."""
        if not self.sprites:
            return None
        output_path = Path(output_path)
        if output_path.is_dir():
            output_path = output_path / ARCHIVE_NAME
        return save_sprite_archive(self.sprites, output_path)

    def export_files(self, output_dir: str | Path) -> list[Path]:
        return save_individual_sprites(self.sprites, output_dir)
