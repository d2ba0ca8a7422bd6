"""
Detection data transfer objects.

This module defines the DetectionRegion and FaceDetection dataclasses, the
output types returned by DetectionStage.detect(). They are frozen
containers with no rendering or matching behavior.

Non-goals:
    - No rendering logic.
    - No file I/O.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class DetectionRegion:
    """An axis-aligned rectangle with a label.

    Attributes:
        x: Top-left x coordinate (absolute pixels).
        y: Top-left y coordinate (absolute pixels).
        width: Rectangle width in pixels.
        height: Rectangle height in pixels.
        label: What the rectangle contains ("face", "eye").
    """

    x: int
    y: int
    width: int
    height: int
    label: str

    @property
    def x2(self) -> int:
        """Bottom-right x coordinate."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Bottom-right y coordinate."""
        return self.y + self.height

    @property
    def top_left(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def bottom_right(self) -> Tuple[int, int]:
        return (self.x2, self.y2)

    def translated(self, dx: int, dy: int) -> "DetectionRegion":
        """Return a copy moved by (dx, dy)."""
        return DetectionRegion(
            x=self.x + dx,
            y=self.y + dy,
            width=self.width,
            height=self.height,
            label=self.label,
        )


@dataclass(frozen=True, slots=True)
class FaceDetection:
    """A detected face and the eyes found inside it.

    Attributes:
        face: The face rectangle in full-frame coordinates.
        eyes: Eye rectangles in full-frame coordinates, in matcher order.
    """

    face: DetectionRegion
    eyes: Tuple[DetectionRegion, ...] = ()
