"""
Tests for the postprocessing module.
"""

import numpy as np

from facetrack.detection import DetectionRegion
from facetrack.postprocessor import to_regions


def test_empty_matcher_output():
    """detectMultiScale returns an empty tuple when nothing matched."""
    assert to_regions((), "face") == []
    assert to_regions(np.empty((0, 4), dtype=np.int32), "face") == []


def test_regions_from_array():
    rects = np.array([[10, 20, 100, 110], [300, 40, 80, 80]], dtype=np.int32)

    regions = to_regions(rects, "face")

    assert regions == [
        DetectionRegion(10, 20, 100, 110, "face"),
        DetectionRegion(300, 40, 80, 80, "face"),
    ]
    assert all(isinstance(r.x, int) for r in regions)


def test_offset_and_inverse():
    """Offset rectangles map back to the sub-image exactly."""
    local = np.array([[5, 6, 20, 10], [50, 6, 22, 11]], dtype=np.int32)

    regions = to_regions(local, "eye", offset=(100, 200))

    assert [r.top_left for r in regions] == [(105, 206), (150, 206)]
    assert [(r.width, r.height) for r in regions] == [(20, 10), (22, 11)]

    back = [region.translated(-100, -200) for region in regions]
    assert [(r.x, r.y, r.width, r.height) for r in back] == [tuple(row) for row in local.tolist()]
