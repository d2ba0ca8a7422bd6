"""
Tests for the detection stage.
"""

import cv2
import numpy as np
import pytest

from conftest import FakeCascade, make_frame
from facetrack.config import AppConfig
from facetrack.detection import DetectionRegion
from facetrack.detector import DetectionStage
from facetrack.errors import DetectionError
from facetrack.session import CaptureSession

FACE = np.array([[100, 50, 200, 200]], dtype=np.int32)
EYES = np.array([[30, 60, 40, 20], [120, 62, 42, 21]], dtype=np.int32)


def _stage(eye_results=()):
    eye = FakeCascade(eye_results)
    return DetectionStage(AppConfig(), eye_cascade=eye), eye


def test_empty_scene(frame):
    """No faces: empty result and the eye matcher is never called."""
    stage, eye = _stage(EYES)
    session = CaptureSession()

    detections = stage.detect(frame, FakeCascade(()), session)

    assert detections == []
    assert eye.calls == []


def test_one_face_two_eyes(frame):
    stage, eye = _stage(EYES)
    session = CaptureSession()

    detections = stage.detect(frame, FakeCascade(FACE), session)

    assert len(detections) == 1
    det = detections[0]
    assert det.face == DetectionRegion(100, 50, 200, 200, "face")
    assert det.eyes == (
        DetectionRegion(130, 110, 40, 20, "eye"),
        DetectionRegion(220, 112, 42, 21, "eye"),
    )
    # Eye matcher ran on the exact face sub-image with default parameters
    assert eye.calls == [((200, 200), {})]


def test_eye_translation_round_trip(frame):
    stage, _ = _stage(EYES)

    det = stage.detect(frame, FakeCascade(FACE), CaptureSession())[0]

    local = [eye.translated(-det.face.x, -det.face.y) for eye in det.eyes]
    assert [(e.x, e.y, e.width, e.height) for e in local] == [tuple(r) for r in EYES.tolist()]


def test_face_matcher_parameters(frame):
    stage, _ = _stage()
    face = FakeCascade(())

    stage.detect(frame, face, CaptureSession())

    shape, kwargs = face.calls[0]
    assert shape == (480, 640)  # grayscale input
    assert kwargs["scaleFactor"] == 1.1
    assert kwargs["minNeighbors"] == 2
    assert kwargs["flags"] == cv2.CASCADE_SCALE_IMAGE
    assert kwargs["minSize"] == (96, 96)
    assert "maxSize" not in kwargs


def test_min_face_size_computed_once_per_session():
    stage, _ = _stage()
    face = FakeCascade(())
    session = CaptureSession()

    stage.detect(make_frame(480, 640), face, session)
    stage.detect(make_frame(720, 1280), face, session)

    assert session.min_face_size == 96
    assert [kwargs["minSize"] for _, kwargs in face.calls] == [(96, 96), (96, 96)]

    # A new session derives it again
    fresh = CaptureSession()
    stage.detect(make_frame(720, 1280), face, fresh)
    assert fresh.min_face_size == 144


def test_eye_cascade_loaded_once(monkeypatch, frame):
    loads = []

    def fake_load(path):
        loads.append(path)
        return FakeCascade(EYES)

    monkeypatch.setattr("facetrack.detector.load_cascade", fake_load)
    config = AppConfig()

    stage = DetectionStage(config)
    session = CaptureSession()
    for _ in range(5):
        stage.detect(frame, FakeCascade(FACE), session)

    assert loads == [config.model.eye_path]


def test_matcher_error_wrapped(frame):
    stage, _ = _stage()
    broken = FakeCascade(error=cv2.error("matcher exploded"))

    with pytest.raises(DetectionError, match="Face matcher"):
        stage.detect(frame, broken, CaptureSession())


def test_input_validation():
    """Test strict input validation."""
    stage, _ = _stage()
    face = FakeCascade(())
    session = CaptureSession()

    with pytest.raises(TypeError):
        stage.detect("not a frame", face, session)

    with pytest.raises(ValueError):
        stage.detect(np.array([]), face, session)

    with pytest.raises(ValueError, match="3-dimensional"):
        stage.detect(np.zeros((100, 100), dtype=np.uint8), face, session)

    with pytest.raises(ValueError, match="3 channels"):
        stage.detect(np.zeros((100, 100, 4), dtype=np.uint8), face, session)
