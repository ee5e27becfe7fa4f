"""
Exceptions raised by the sprite slicer.

Each error kind carries a default human-readable message so that callers
(the session and the CLI) can show one message per failure kind.
"""

from enum import Enum


class ErrorKind(Enum):
    """Failure kinds, as reported by the extraction worker."""
    DECODE_FAILURE = "decode_failure"
    RENDER_CONTEXT_UNAVAILABLE = "render_context_unavailable"
    WORKER_FAILURE = "worker_failure"
    EQUALIZATION_LOAD_FAILURE = "equalization_load_failure"
    EXPORT_FAILURE = "export_failure"


class SpriteSlicerError(Exception):
    """Base class for all sprite slicer failures."""

    kind = ErrorKind.WORKER_FAILURE
    default_message = "Sprite slicing failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class DecodeError(SpriteSlicerError):
    """The source image could not be decoded into pixels."""

    kind = ErrorKind.DECODE_FAILURE
    default_message = "Failed to load image for slicing. It may be corrupted."


class RenderContextError(SpriteSlicerError):
    """Pixel data needed for cropping or equalization is not a usable RGBA buffer."""

    kind = ErrorKind.RENDER_CONTEXT_UNAVAILABLE
    default_message = "Could not create cropping canvas."


class WorkerError(SpriteSlicerError):
    """The offloaded labeling worker terminated abnormally."""

    kind = ErrorKind.WORKER_FAILURE
    default_message = "An error occurred in the slicing worker."


class EqualizationLoadError(SpriteSlicerError):
    """A selected sprite could not be realized as pixel data."""

    kind = ErrorKind.EQUALIZATION_LOAD_FAILURE
    default_message = "Failed to load one of the selected sprites for processing."


class ExportError(SpriteSlicerError):
    """Encoding sprites or writing the archive failed."""

    kind = ErrorKind.EXPORT_FAILURE
    default_message = "Failed to create ZIP file."


_ERRORS_BY_KIND = {
    cls.kind: cls
    for cls in (DecodeError, RenderContextError, WorkerError, EqualizationLoadError, ExportError)
}


def error_for(kind: ErrorKind) -> type[SpriteSlicerError]:
    """Exception class raised for a failure of the given kind."""
    return _ERRORS_BY_KIND[kind]
