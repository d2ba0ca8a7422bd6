"""
Tests for cascade loading.
"""

from pathlib import Path

import cv2
import pytest

from facetrack.config import ModelConfig
from facetrack.errors import ModelLoadError
from facetrack.model_loader import load_cascade, resolve_cascade_path
from facetrack.registry import ClassifierRegistry, FaceModel

_HAAR_DATA = getattr(getattr(cv2, "data", None), "haarcascades", None)
_HAAR_AVAILABLE = bool(_HAAR_DATA) and (
    Path(_HAAR_DATA) / "haarcascade_frontalface_alt.xml"
).is_file()


def test_missing_cascade(tmp_path):
    with pytest.raises(ModelLoadError, match="not found"):
        load_cascade(str(tmp_path / "missing.xml"))


def test_missing_relative_cascade_lists_search_paths():
    with pytest.raises(ModelLoadError, match="Searched"):
        resolve_cascade_path("resources/nowhere/no_such_cascade.xml")


def test_corrupt_cascade(tmp_path):
    path = tmp_path / "broken.xml"
    path.write_text("this is not a cascade", encoding="utf-8")

    with pytest.raises(ModelLoadError):
        load_cascade(str(path))


@pytest.mark.skipif(not _HAAR_AVAILABLE, reason="OpenCV haarcascades not bundled")
def test_default_paths_fall_back_to_opencv_data():
    """Default Haar face and eye cascades resolve to the bundled copies."""
    config = ModelConfig()

    face = load_cascade(config.haar_path)
    eye = load_cascade(config.eye_path)

    assert not face.empty()
    assert not eye.empty()


@pytest.mark.skipif(not _HAAR_AVAILABLE, reason="OpenCV haarcascades not bundled")
def test_corrupt_cascade_keeps_previous_selection(tmp_path):
    """A broken cascade file is rejected and the loaded model stays active."""
    broken = tmp_path / "lbpcascade_frontalface.xml"
    broken.write_text("<opencv_storage><cascade>", encoding="utf-8")
    registry = ClassifierRegistry({
        FaceModel.HAAR: ModelConfig().haar_path,
        FaceModel.LBP: str(broken),
    })
    registry.select(FaceModel.HAAR)

    with pytest.raises(ModelLoadError):
        registry.select(FaceModel.LBP)

    assert registry.active_model() is FaceModel.HAAR
    assert registry.is_ready()


def test_lbp_default_path_found_in_opencv_share_dir(monkeypatch, tmp_path):
    """The default LBP path resolves against an OpenCV data install."""
    installed = tmp_path / "lbpcascades" / "lbpcascade_frontalface.xml"
    installed.parent.mkdir()
    installed.write_text("<opencv_storage/>", encoding="utf-8")
    monkeypatch.setattr("facetrack.model_loader._SYSTEM_DATA_DIRS", (tmp_path,))

    assert resolve_cascade_path(ModelConfig().lbp_path) == installed


def test_lbp_default_path_missing_is_a_load_error(monkeypatch):
    """Without an LBP cascade installed, selecting LBP fails cleanly."""
    monkeypatch.setattr("facetrack.model_loader._SYSTEM_DATA_DIRS", ())
    try:
        resolve_cascade_path(ModelConfig().lbp_path)
    except ModelLoadError:
        pass
    else:
        pytest.skip("an LBP cascade is installed on this machine")

    registry = ClassifierRegistry.from_config(ModelConfig())

    with pytest.raises(ModelLoadError, match="lbpcascade_frontalface.xml"):
        registry.select(FaceModel.LBP)
    assert not registry.is_ready()
