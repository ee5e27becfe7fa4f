"""
Background analysis of a sprite sheet in a separate process.

The worker owns its own copy of the pixel buffer and talks to the caller only
through messages: first the background color, then either the bounding boxes
or a failure.
"""

from __future__ import annotations

import logging
import multiprocessing
import queue
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from sprite_slicer.background_detection import detect_background_color
from sprite_slicer.errors import ErrorKind, SpriteSlicerError
from sprite_slicer.pixel_buffer import ALPHA_THRESHOLD, MIN_SPRITE_SIZE, BoundingBox, Color, check_rgba_buffer
from sprite_slicer.sprite_segmentation import segment_sprites

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackgroundColorReady:
    color: Color


@dataclass(frozen=True)
class BoxesReady:
    boxes: list[BoundingBox]


@dataclass(frozen=True)
class Failed:
    kind: ErrorKind
    message: str


WorkerMessage = BackgroundColorReady | BoxesReady | Failed


def _analyze(pixels: np.ndarray, alpha_threshold: int, min_size: int,
             results: multiprocessing.Queue) -> None:
    """Worker process entry point."""
    try:
        background = detect_background_color(pixels, alpha_threshold)
        results.put(BackgroundColorReady(background))
        boxes = segment_sprites(pixels, background, min_size)
        results.put(BoxesReady(boxes))
    except SpriteSlicerError as e:
        results.put(Failed(e.kind, str(e)))
    except Exception as e:
        # Anything else raised here would otherwise die with the process
        results.put(Failed(ErrorKind.WORKER_FAILURE, f"{type(e).__name__}: {e}"))


class ExtractionWorker:
    """
    Runs background detection and component labeling in a child process.

    Usage:
        with ExtractionWorker(pixels) as worker:
            for message in worker.messages():
                match message:
                    case BackgroundColorReady(color=color): ...
                    case BoxesReady(boxes=boxes): ...
                    case Failed(message=text): ...

    The process and its queue are torn down once the final message
    (BoxesReady or Failed) has been received, or when the worker is closed.
    """

    def __init__(self, pixels: np.ndarray, *, alpha_threshold: int = ALPHA_THRESHOLD,
                 min_size: int = MIN_SPRITE_SIZE, poll_interval: float = 0.1):
        check_rgba_buffer(pixels)
        ctx = multiprocessing.get_context()
        self._results = ctx.Queue()
        self._process = ctx.Process(
            target=_analyze,
            args=(pixels, alpha_threshold, min_size, self._results),
            daemon=True,
        )
        self._poll_interval = poll_interval
        self._started = False
        self._closed = False

    def __enter__(self) -> ExtractionWorker:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def start(self) -> None:
        if self._closed:
            raise RuntimeError("worker already closed")
        if not self._started:
            self._process.start()
            self._started = True
            logger.debug("Started extraction worker pid=%s", self._process.pid)

    def _next_message(self) -> WorkerMessage:
        while True:
            try:
                return self._results.get(timeout=self._poll_interval)
            except queue.Empty:
                if self._process.is_alive():
                    continue
            # Process is gone; pick up anything it flushed right before exiting
            try:
                return self._results.get(timeout=self._poll_interval)
            except queue.Empty:
                return Failed(ErrorKind.WORKER_FAILURE,
                              f"worker process exited with code {self._process.exitcode}")

    def messages(self) -> Iterator[WorkerMessage]:
        """
        Yield messages from the worker until a final one arrives.

        Starts the worker if needed. A worker that dies without reporting
        produces a Failed message.
        """
        self.start()
        try:
            while True:
                message = self._next_message()
                yield message
                if isinstance(message, (BoxesReady, Failed)):
                    return
        finally:
            self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._started:
            self._process.join(timeout=1.0)
            if self._process.is_alive():
                self._process.terminate()
                self._process.join()
            self._process.close()
        self._results.close()
        self._results.join_thread()
