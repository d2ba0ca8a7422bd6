"""
Preprocessing for the face tracking pipeline.

Responsibility:
    Convert a raw BGR frame into the histogram-equalized grayscale image
    the cascade matchers run on, and derive the minimum face size from
    the frame height.

Non-goals:
    - No frame acquisition or I/O.
    - No matching or coordinate mapping.
"""

import math

import cv2
import numpy as np


def to_equalized_gray(frame: np.ndarray) -> np.ndarray:
    """Convert a BGR frame to an equalized single-channel image.

    Args:
        frame: Input image as a BGR numpy array (H, W, 3).

    Returns:
        A uint8 numpy array of shape (H, W).

    Raises:
        ValueError: If the frame is empty.
    """
    if frame is None or frame.size == 0:
        raise ValueError(
            "Cannot preprocess an empty frame. "
            "Ensure the capture source is providing valid frames."
        )

    gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    # Equalize to reduce the effect of lighting on the matchers
    return cv2.equalizeHist(gray)


def compute_min_face_size(height: int, ratio: float) -> int:
    """Return the minimum face size in pixels for a frame of ``height``.

    The value is ``height * ratio`` rounded half up, and never less than 1
    for a non-empty frame. A zero height yields 0.
    """
    if height <= 0:
        return 0
    size = int(math.floor(height * ratio + 0.5))
    return max(1, size)
