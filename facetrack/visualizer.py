"""
Visualization for the face tracking pipeline.

Responsibility:
    Draw face and eye rectangles with their labels onto a frame, and show
    frames in the display window.

Non-goals:
    - No detection or model logic.
    - No file writing.
"""

from typing import Iterable, Optional

import cv2
import numpy as np

from facetrack.config import VisualizationConfig
from facetrack.detection import DetectionRegion, FaceDetection

# Hard-coded rendering constants (cosmetic internals, not user-facing)
_FONT = cv2.FONT_HERSHEY_DUPLEX
_PLACEHOLDER_SIZE = (360, 600)


def face_label(region: DetectionRegion) -> str:
    return f"face{region.x},{region.y}"


def eye_label(region: DetectionRegion) -> str:
    return f"Eye{region.x},{region.y}"


def _draw_region(frame, region, label, color, config) -> None:
    cv2.rectangle(
        frame,
        region.top_left,
        region.bottom_right,
        color=color,
        thickness=config.thickness,
    )
    cv2.putText(
        frame,
        label,
        region.top_left,
        _FONT,
        config.font_scale,
        color,
    )


def draw_detections(
    frame: np.ndarray,
    detections: Iterable[FaceDetection],
    config: VisualizationConfig,
) -> np.ndarray:
    """Draw faces and eyes onto ``frame`` in place.

    Args:
        frame: BGR image owned by the current tick. It is modified.
        detections: FaceDetection objects to render.
        config: Visualization parameters (colors, thickness, font scale).

    Returns:
        The same ``frame`` object, for chaining.
    """
    for detection in detections:
        _draw_region(frame, detection.face, face_label(detection.face),
                     config.face_color, config)
        for eye in detection.eyes:
            _draw_region(frame, eye, eye_label(eye), config.eye_color, config)

    return frame


def fit_to_width(frame: np.ndarray, width: Optional[int]) -> np.ndarray:
    """Scale ``frame`` to ``width`` preserving aspect ratio."""
    if width is None:
        return frame

    h, w = frame.shape[:2]
    if w == width:
        return frame

    new_h = max(1, int(round(h * width / w)))
    interpolation = cv2.INTER_AREA if width < w else cv2.INTER_LINEAR
    return cv2.resize(frame, (width, new_h), interpolation=interpolation)


def placeholder_frame(lines: Iterable[str]) -> np.ndarray:
    """Blank frame with help text, shown before the first captured frame."""
    h, w = _PLACEHOLDER_SIZE
    frame = np.zeros((h, w, 3), dtype=np.uint8)
    for i, line in enumerate(lines):
        cv2.putText(
            frame,
            line,
            (20, 40 + i * 30),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            (200, 200, 200),
            1,
            cv2.LINE_AA,
        )
    return frame


def show_frame(
    frame: np.ndarray,
    config: VisualizationConfig,
) -> None:
    """Show a frame in the display window, fitted to the display width.

    Must be called from the thread that owns the window.
    """
    cv2.imshow(config.window_name, fit_to_width(frame, config.display_width))
