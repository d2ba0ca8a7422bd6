"""
facetrack: live face and eye detection with OpenCV cascades.

Public API:
    - AcquisitionScheduler: Periodic capture → detect → publish loop.
    - DetectionStage: Face detection followed by eye detection per face.
    - ClassifierRegistry / FaceModel: Face model selection.
    - CaptureSource: Video device wrapper.
    - FramePublisher: Hand-off of annotated frames to the display.
    - DetectionRegion / FaceDetection: Detection results.

Usage:
    from facetrack import (
        AcquisitionScheduler, CaptureSource, ClassifierRegistry,
        DetectionStage, FaceModel, FramePublisher,
    )

    registry = ClassifierRegistry.from_config(config.model)
    registry.select(FaceModel.HAAR)
    scheduler = AcquisitionScheduler(
        CaptureSource("0"), registry, DetectionStage(config), FramePublisher(),
    )
    scheduler.start()
"""

from facetrack.capture import CaptureSource
from facetrack.detection import DetectionRegion, FaceDetection
from facetrack.detector import DetectionStage
from facetrack.publisher import FramePublisher
from facetrack.registry import ClassifierRegistry, FaceModel
from facetrack.scheduler import AcquisitionScheduler, SessionState
from facetrack.session import CaptureSession

__all__ = [
    "AcquisitionScheduler",
    "CaptureSession",
    "CaptureSource",
    "ClassifierRegistry",
    "DetectionRegion",
    "DetectionStage",
    "FaceDetection",
    "FaceModel",
    "FramePublisher",
    "SessionState",
]
