"""
Video capture for the face tracking pipeline.

Responsibility:
    Open, read from and release a live video device (or a video file/URL)
    on behalf of the acquisition scheduler.

Non-goals:
    - No detection, drawing, or output writing.
    - No retry loop; the scheduler decides what to do with a missed frame.

Robustness:
    - read_frame() returns None for a failed read instead of raising.
    - release() is idempotent and serialized with reads.
"""

import logging
import threading
from typing import Any, Callable, Optional, Union

import cv2
import numpy as np

from facetrack.errors import FrameReadError

logger = logging.getLogger(__name__)


def _parse_source(source: Union[str, int]) -> Union[str, int]:
    """Turn a digit string into a device index; leave paths/URLs as is."""
    if isinstance(source, int):
        return source
    source_str = str(source).strip()
    return int(source_str) if source_str.isdigit() else source_str


class CaptureSource:
    """Lifecycle wrapper around cv2.VideoCapture.

    Usage:
        capture = CaptureSource(source="0")
        if capture.open():
            frame = capture.read_frame()   # None if no frame was available
        capture.release()

    The source can be reopened after release; each open creates a new
    underlying capture handle.
    """

    def __init__(
        self,
        source: Union[str, int] = 0,
        resize_width: Optional[int] = None,
        capture_factory: Callable[[Union[str, int]], Any] = cv2.VideoCapture,
    ) -> None:
        """
        Args:
            source: Device index (int or digit string), video path, or URL.
            resize_width: Optional width to downscale frames. Aspect ratio
                          is preserved. None means no resizing.
            capture_factory: Builds the underlying capture object. Defaults
                             to cv2.VideoCapture.
        """
        self._source = _parse_source(source)
        self._resize_width = resize_width
        self._factory = capture_factory
        self._cap: Optional[Any] = None
        self._lock = threading.Lock()

    @property
    def source(self) -> Union[str, int]:
        return self._source

    def open(self) -> bool:
        """Open the device. Returns True if it is ready to deliver frames."""
        with self._lock:
            if self._cap is not None and self._cap.isOpened():
                return True

            self._cap = self._factory(self._source)
            if not self._cap.isOpened():
                logger.error("Failed to open video source: %s", self._source)
                self._cap.release()
                self._cap = None
                return False

        logger.info("Video source opened: %s", self._source)
        return True

    def is_open(self) -> bool:
        with self._lock:
            return self._cap is not None and self._cap.isOpened()

    def read_frame(self) -> Optional[np.ndarray]:
        """Read the next frame.

        Returns:
            A BGR frame, or None if the device is closed or produced no frame.

        Raises:
            FrameReadError: If the underlying capture raised an OpenCV error.
        """
        with self._lock:
            if self._cap is None:
                return None
            try:
                ret, frame = self._cap.read()
            except cv2.error as e:
                raise FrameReadError(f"Failed to read from {self._source}: {e}") from e

        if not ret or frame is None or frame.size == 0:
            return None

        return self._maybe_resize(frame)

    def _maybe_resize(self, frame: np.ndarray) -> np.ndarray:
        """Resize frame if resize_width is configured, preserving aspect ratio."""
        if self._resize_width is None:
            return frame

        h, w = frame.shape[:2]
        if w <= self._resize_width:
            return frame

        scale = self._resize_width / w
        new_w = self._resize_width
        new_h = int(h * scale)
        return cv2.resize(frame, (new_w, new_h), interpolation=cv2.INTER_AREA)

    def release(self) -> None:
        """Release the capture handle. Safe to call when already closed."""
        with self._lock:
            if self._cap is None:
                return
            self._cap.release()
            self._cap = None
        logger.info("Video source released: %s", self._source)
