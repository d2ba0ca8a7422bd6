"""
Shared fakes for the OpenCV collaborators.

The pipeline only needs detectMultiScale from a cascade and
isOpened/read/release from a capture, so the tests stand in simple
objects for both.
"""

import threading

import numpy as np
import pytest


class FakeCascade:
    """Cascade double returning canned rectangles and recording calls."""

    def __init__(self, results=None, error=None):
        self._results = results if results is not None else ()
        self._error = error
        self.calls = []

    def detectMultiScale(self, image, *args, **kwargs):
        self.calls.append((image.shape, kwargs))
        if self._error is not None:
            raise self._error
        if callable(self._results):
            return self._results(image)
        return self._results

    def empty(self):
        return False


class FakeVideoCapture:
    """cv2.VideoCapture double serving a list of frames then failing reads."""

    def __init__(self, frames=None, opened=True, error=None):
        self._frames = list(frames or [])
        self._opened = opened
        self._openable = opened
        self._error = error
        self.release_count = 0
        self.read_count = 0
        self._lock = threading.Lock()

    def reopen(self):
        """Mimic constructing a new capture on the same device."""
        self._opened = self._openable
        return self

    def isOpened(self):
        return self._opened

    def read(self):
        with self._lock:
            self.read_count += 1
            if self._error is not None:
                raise self._error
            if not self._frames:
                return False, None
            frame = self._frames.pop(0) if len(self._frames) > 1 else self._frames[0]
            return True, frame.copy()

    def release(self):
        self.release_count += 1
        self._opened = False


def make_frame(height=480, width=640, value=0):
    return np.full((height, width, 3), value, dtype=np.uint8)


@pytest.fixture
def frame():
    return make_frame()
