"""
Per-session pipeline state.

A CaptureSession spans one successful start to the following stop. It is
created by the scheduler and passed to the detection stage on every tick,
so independent sessions can be built in tests.
"""

import itertools
import time
from dataclasses import dataclass, field
from typing import Optional

_session_ids = itertools.count(1)


@dataclass
class CaptureSession:
    """Mutable state and counters for one capture session.

    Attributes:
        session_id: Monotonic session number within the process.
        started_at: time.monotonic() at session start.
        min_face_size: Minimum face size in pixels, None until derived
                       from the first captured frame.
        ticks: Ticks executed.
        frames_published: Annotated frames handed to the publisher.
        frames_missed: Ticks where the device returned no frame.
        detection_failures: Ticks dropped because processing raised.
        ticks_skipped: Period boundaries missed because a tick overran.
    """

    session_id: int = field(default_factory=lambda: next(_session_ids))
    started_at: float = field(default_factory=time.monotonic)
    min_face_size: Optional[int] = None
    ticks: int = 0
    frames_published: int = 0
    frames_missed: int = 0
    detection_failures: int = 0
    ticks_skipped: int = 0

    @property
    def elapsed(self) -> float:
        """Seconds since the session started."""
        return time.monotonic() - self.started_at

    def summary(self) -> dict:
        return {
            "session_id": self.session_id,
            "elapsed_sec": round(self.elapsed, 3),
            "min_face_size": self.min_face_size,
            "ticks": self.ticks,
            "frames_published": self.frames_published,
            "frames_missed": self.frames_missed,
            "detection_failures": self.detection_failures,
            "ticks_skipped": self.ticks_skipped,
        }
