"""
Hand-off of annotated frames from the acquisition worker to the display.

The worker calls publish(); the display loop on the main thread polls
take(). Only the newest frame is kept: a frame the display has not picked
up yet is replaced rather than queued.
"""

import logging
import threading
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)


class FramePublisher:
    """Single-slot, thread-safe mailbox for the latest annotated frame."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._dropped = 0

    def publish(self, image: np.ndarray) -> None:
        """Store ``image`` for the display, replacing any unconsumed frame.

        The publisher takes ownership of ``image``; the caller must not
        modify it afterwards.
        """
        with self._lock:
            if self._frame is not None:
                self._dropped += 1
            self._frame = image

    def take(self) -> Optional[np.ndarray]:
        """Return and clear the pending frame, or None if there is none."""
        with self._lock:
            frame, self._frame = self._frame, None
            return frame

    @property
    def dropped_count(self) -> int:
        """Frames replaced before the display consumed them."""
        with self._lock:
            return self._dropped
