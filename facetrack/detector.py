"""
DetectionStage: two-stage face and eye detection.

Public contract:
    DetectionStage.detect(frame, face_cascade, session) -> list[FaceDetection]

Constraints:
    - Input must be a BGR numpy array (as returned by OpenCV).
    - The eye cascade is loaded once when the stage is built; nothing is
      read from disk per frame.
    - The only state touched is session.min_face_size, set on the first
      frame of a session.

Non-goals:
    - No camera access or output writing.
    - No drawing (see visualizer).
"""

import logging
from typing import Any, List, Optional

import cv2
import numpy as np

from facetrack.config import AppConfig, DetectionConfig, load_config
from facetrack.detection import FaceDetection
from facetrack.errors import DetectionError
from facetrack.model_loader import load_cascade
from facetrack.postprocessor import to_regions
from facetrack.preprocessor import compute_min_face_size, to_equalized_gray
from facetrack.session import CaptureSession

logger = logging.getLogger(__name__)


class DetectionStage:
    """Face detector followed by an eye detector inside each face.

    Usage:
        stage = DetectionStage(config)                      # loads eye cascade
        faces = stage.detect(frame, registry.face_cascade(), session)

    The face cascade is passed per call because the user may switch it
    at any time through the ClassifierRegistry.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        eye_cascade: Any = None,
    ) -> None:
        """Initialize the stage and load the eye cascade.

        Args:
            config: Application configuration. If None, safe defaults
                    are used.
            eye_cascade: Preloaded eye matcher. If None, it is loaded from
                         config.model.eye_path.

        Raises:
            ModelLoadError: If the eye cascade cannot be loaded.
        """
        if config is None:
            config = load_config()

        self._params: DetectionConfig = config.detection
        self._eye_cascade = (
            eye_cascade if eye_cascade is not None
            else load_cascade(config.model.eye_path)
        )

        logger.info(
            "DetectionStage initialized (scale_factor=%.2f, min_neighbors=%d, "
            "min_face_ratio=%.2f)",
            self._params.scale_factor,
            self._params.min_neighbors,
            self._params.min_face_ratio,
        )

    def detect(
        self,
        frame: np.ndarray,
        face_cascade: Any,
        session: CaptureSession,
    ) -> List[FaceDetection]:
        """Detect faces, then eyes inside each face.

        Args:
            frame: BGR image with shape (H, W, 3).
            face_cascade: Loaded face matcher of the active model.
            session: Current capture session. Its min_face_size is derived
                     from this frame if still unset.

        Returns:
            One FaceDetection per face, in matcher order. Eye rectangles
            are in full-frame coordinates. Empty list when no face matched.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame has incorrect shape or is empty.
            DetectionError: If a matcher raises.
        """
        self._validate_frame(frame)

        gray = to_equalized_gray(frame)

        if session.min_face_size is None:
            height = gray.shape[0]
            if height > 0:
                session.min_face_size = compute_min_face_size(
                    height, self._params.min_face_ratio
                )
                logger.debug(
                    "Session %d: min face size set to %dpx (frame height %d)",
                    session.session_id, session.min_face_size, height,
                )
        min_size = session.min_face_size or 0

        try:
            raw_faces = face_cascade.detectMultiScale(
                gray,
                scaleFactor=self._params.scale_factor,
                minNeighbors=self._params.min_neighbors,
                flags=cv2.CASCADE_SCALE_IMAGE,
                minSize=(min_size, min_size),
            )
        except cv2.error as e:
            raise DetectionError(f"Face matcher failed: {e}") from e

        results: List[FaceDetection] = []
        for face in to_regions(raw_faces, "face"):
            face_roi = gray[face.y:face.y2, face.x:face.x2]
            try:
                raw_eyes = self._eye_cascade.detectMultiScale(face_roi)
            except cv2.error as e:
                raise DetectionError(f"Eye matcher failed: {e}") from e

            eyes = to_regions(raw_eyes, "eye", offset=face.top_left)
            results.append(FaceDetection(face=face, eyes=tuple(eyes)))

        return results

    @staticmethod
    def _validate_frame(frame: np.ndarray) -> None:
        """Validate that the input frame meets the API contract.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame is empty or has wrong dimensions.
        """
        if not isinstance(frame, np.ndarray):
            raise TypeError(
                f"Expected frame to be a numpy ndarray, "
                f"got {type(frame).__name__}."
            )

        if frame.size == 0:
            raise ValueError(
                "Frame is empty (zero size). "
                "Ensure the capture source is providing valid frames."
            )

        if frame.ndim != 3:
            raise ValueError(
                f"Expected a 3-dimensional frame (H, W, C), "
                f"got {frame.ndim} dimensions with shape {frame.shape}."
            )

        if frame.shape[2] != 3:
            raise ValueError(
                f"Expected 3 channels (BGR), got {frame.shape[2]} channels."
            )
