"""
AcquisitionScheduler: the periodic capture → detect → publish loop.

States:
    IDLE --start--> RUNNING   only if a face model is ready and the
                              capture device opens
    RUNNING --stop--> IDLE    always; the capture device is released

While RUNNING a single background thread fires ticks at a fixed period,
the first one immediately. Ticks never overlap: a tick that overruns its
slot pushes the next one to the first period boundary after it finishes,
and the missed boundaries are dropped, not queued.

Per-tick failures are logged and counted on the session; they never stop
the loop.
"""

import enum
import logging
import threading
import time
from typing import Optional, Tuple

from facetrack.capture import CaptureSource
from facetrack.config import SchedulerConfig, VisualizationConfig
from facetrack.detector import DetectionStage
from facetrack.errors import CaptureUnavailableError, FrameReadError, ModelNotReadyError
from facetrack.publisher import FramePublisher
from facetrack.registry import ClassifierRegistry
from facetrack.session import CaptureSession
from facetrack.visualizer import draw_detections

logger = logging.getLogger(__name__)

_PROGRESS_EVERY = 30


class SessionState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


def next_deadline(deadline: float, now: float, period: float) -> Tuple[float, int]:
    """Return the next tick deadline and how many boundaries were missed.

    ``deadline`` is when the tick that just finished was due. The next tick
    is due one period later, or at the first boundary after ``now`` if the
    tick overran.
    """
    deadline += period
    if now <= deadline:
        return deadline, 0
    missed = int((now - deadline) // period) + 1
    return deadline + missed * period, missed


class AcquisitionScheduler:
    """Drives the capture/detection loop and owns its start/stop lifecycle.

    Usage:
        scheduler = AcquisitionScheduler(capture, registry, stage, publisher)
        scheduler.start()      # raises CaptureUnavailableError / ModelNotReadyError
        ...
        scheduler.stop()

    start() and stop() may be called from any thread; they are serialized
    by an internal lock.
    """

    def __init__(
        self,
        capture: CaptureSource,
        registry: ClassifierRegistry,
        detector: DetectionStage,
        publisher: FramePublisher,
        config: Optional[SchedulerConfig] = None,
        visualization: Optional[VisualizationConfig] = None,
    ) -> None:
        config = config or SchedulerConfig()

        self._capture = capture
        self._registry = registry
        self._detector = detector
        self._publisher = publisher
        self._visualization = visualization or VisualizationConfig()
        self._period = config.period_ms / 1000.0
        self._drain_timeout = config.drain_timeout_ms / 1000.0

        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._session: Optional[CaptureSession] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state is SessionState.RUNNING

    @property
    def session(self) -> Optional[CaptureSession]:
        """The current session, or the last one after stop."""
        with self._lock:
            return self._session

    def start(self) -> CaptureSession:
        """Open the capture device and begin ticking.

        Returns:
            The new session, or the current one if already running.

        Raises:
            ModelNotReadyError: If no face model has been loaded.
            CaptureUnavailableError: If the device cannot be opened.
        """
        with self._lock:
            if self._state is SessionState.RUNNING:
                return self._session

            if not self._registry.is_ready():
                raise ModelNotReadyError(
                    "Select a face classifier before starting the camera."
                )

            if not self._capture.open():
                raise CaptureUnavailableError(
                    f"Failed to open the camera connection ({self._capture.source})."
                )

            session = CaptureSession()
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(session, stop_event),
                name=f"acquisition-{session.session_id}",
                daemon=True,
            )

            self._session = session
            self._stop_event = stop_event
            self._thread = thread
            self._state = SessionState.RUNNING
            thread.start()

        logger.info(
            "Acquisition started (session %d, period=%.0fms)",
            session.session_id, self._period * 1000,
        )
        return session

    def stop(self) -> None:
        """Stop ticking and release the capture device.

        Waits at most the drain timeout for an in-flight tick; the device
        is released whether or not that tick finished.
        """
        with self._lock:
            if self._state is SessionState.IDLE:
                return

            self._state = SessionState.IDLE
            self._stop_event.set()
            thread, self._thread = self._thread, None
            session = self._session

            try:
                if thread is not None and thread is not threading.current_thread():
                    thread.join(timeout=self._drain_timeout)
                    if thread.is_alive():
                        logger.warning(
                            "In-flight tick still running after %.0fms, "
                            "releasing the camera anyway.",
                            self._drain_timeout * 1000,
                        )
            except RuntimeError as e:
                logger.error(
                    "Exception in stopping the frame capture, trying to "
                    "release the camera now: %s", e,
                )
            finally:
                self._capture.release()

        logger.info(
            "Acquisition stopped: %s (%d frame(s) replaced before display)",
            session.summary() if session else {}, self._publisher.dropped_count,
        )

    def toggle(self) -> SessionState:
        """Start if idle, stop if running. Returns the resulting state."""
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.state

    def shutdown(self) -> None:
        """Stop acquisition on application close."""
        self.stop()

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _run(self, session: CaptureSession, stop_event: threading.Event) -> None:
        deadline = time.monotonic()

        while not stop_event.is_set():
            self._tick(session, stop_event)

            now = time.monotonic()
            deadline, missed = next_deadline(deadline, now, self._period)
            if missed:
                session.ticks_skipped += missed
                logger.debug(
                    "Tick overran its slot, skipped %d period(s)", missed
                )
            stop_event.wait(max(0.0, deadline - now))

        logger.debug("Acquisition worker exiting (session %d)", session.session_id)

    def _tick(self, session: CaptureSession, stop_event: threading.Event) -> None:
        """Read one frame, detect, annotate and publish it."""
        session.ticks += 1

        try:
            frame = self._capture.read_frame()
        except FrameReadError as e:
            session.frames_missed += 1
            logger.warning("Skipping tick %d: %s", session.ticks, e)
            return
        except Exception:
            session.frames_missed += 1
            logger.exception("Exception during the frame capture (tick %d)", session.ticks)
            return

        if frame is None:
            session.frames_missed += 1
            logger.debug("No frame available at tick %d", session.ticks)
            return

        try:
            detections = self._detector.detect(
                frame, self._registry.face_cascade(), session
            )
            draw_detections(frame, detections, self._visualization)
        except Exception:
            session.detection_failures += 1
            logger.exception("Exception during the image elaboration (tick %d)", session.ticks)
            return

        if stop_event.is_set():
            return

        self._publisher.publish(frame)
        session.frames_published += 1

        if session.frames_published % _PROGRESS_EVERY == 0:
            logger.debug(
                "Session %d: published %d frames (%d missed, %d failed)",
                session.session_id, session.frames_published,
                session.frames_missed, session.detection_failures,
            )
