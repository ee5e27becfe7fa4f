"""
Sprite Slicer

Detects the background color of a spritesheet and splits it into individual
sprites, one per connected group of non-background pixels.

Public API:
    - process_spritesheet: Generator splitting an image into sprites
    - ProcessedImage: Result object containing images with metadata
    - SlicerSession: Extraction in a worker process, selection and size equalization
    - detect_background_color, segment_sprites, crop_sprites, equalize_sprites: Pipeline stages
"""

import logging

from sprite_slicer.api import ProcessedImage, debug_images, process_spritesheet
from sprite_slicer.background_detection import detect_background_color
from sprite_slicer.equalization import equalize_sprites
from sprite_slicer.errors import (DecodeError, EqualizationLoadError, ErrorKind, ExportError, RenderContextError,
                                  SpriteSlicerError, WorkerError, error_for)
from sprite_slicer.image_io import decode_image, load_image
from sprite_slicer.pixel_buffer import ALPHA_THRESHOLD, MIN_SPRITE_SIZE, BoundingBox, Color
from sprite_slicer.session import SlicerSession
from sprite_slicer.sprite_cropping import crop_sprites
from sprite_slicer.sprite_save import create_sprite_archive, save_sprite_archive, save_sprites
from sprite_slicer.sprite_segmentation import segment_sprites

# Silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "process_spritesheet", "debug_images", "ProcessedImage", "SlicerSession",
    "detect_background_color", "segment_sprites", "crop_sprites", "equalize_sprites",
    "decode_image", "load_image", "create_sprite_archive", "save_sprite_archive", "save_sprites",
    "Color", "BoundingBox", "ALPHA_THRESHOLD", "MIN_SPRITE_SIZE",
    "SpriteSlicerError", "DecodeError", "RenderContextError", "WorkerError",
    "EqualizationLoadError", "ExportError", "ErrorKind", "error_for", "__version__",
]
