"""
Postprocessing for the face tracking pipeline.

Responsibility:
    Convert raw detectMultiScale output into DetectionRegion objects, offsetting
    rectangles found inside a face sub-image to full-frame coordinates.

Non-goals:
    - No drawing, saving, or display logic.
    - No model loading or matching.

Hard-coded:
    - Matcher output layout: an empty tuple when nothing matched, otherwise
      an (N, 4) integer array whose rows are [x, y, w, h].
"""

from typing import List, Tuple

import numpy as np

from facetrack.detection import DetectionRegion


def to_regions(
    rects,
    label: str,
    offset: Tuple[int, int] = (0, 0),
) -> List[DetectionRegion]:
    """Parse raw matcher output into a list of DetectionRegion objects.

    Args:
        rects: Output of CascadeClassifier.detectMultiScale.
        label: Label carried by every produced region.
        offset: (dx, dy) added to each rectangle origin. Used to express
                rectangles found in a sub-image in the parent's coordinates.

    Returns:
        Regions in matcher order. Empty list if nothing matched.
    """
    if rects is None or len(rects) == 0:
        return []

    dx, dy = offset
    raw = np.asarray(rects).reshape(-1, 4)

    return [
        DetectionRegion(
            x=int(x) + dx,
            y=int(y) + dy,
            width=int(w),
            height=int(h),
            label=label,
        )
        for (x, y, w, h) in raw
    ]
