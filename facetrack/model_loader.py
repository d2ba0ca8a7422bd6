"""
Cascade model loading for the face tracking pipeline.

Responsibility:
    Resolve a cascade definition on disk and return a ready-to-match
    cv2.CascadeClassifier.

Non-goals:
    - No matching or frame-level logic.
    - No automatic model downloading.

Failure behavior:
    - Missing cascade files raise ModelLoadError listing every location
      that was searched.
    - Unparseable cascade files raise ModelLoadError.
"""

import logging
from pathlib import Path
from typing import List

import cv2

from facetrack.config import get_project_root
from facetrack.errors import ModelLoadError

logger = logging.getLogger(__name__)


# OpenCV source and distro installs keep the LBP cascades next to the Haar ones
_SYSTEM_DATA_DIRS = (
    Path("/usr/share/opencv4"),
    Path("/usr/local/share/opencv4"),
    Path("/usr/share/opencv"),
)


def _candidate_paths(path: str) -> List[Path]:
    """Return the locations searched for ``path``, in order."""
    requested = Path(path)
    if requested.is_absolute():
        return [requested]

    candidates = [get_project_root() / requested]
    subdir = requested.parent.name

    # opencv-python ships the stock Haar cascades under cv2.data
    data_dir = getattr(getattr(cv2, "data", None), "haarcascades", None)
    if data_dir:
        data_dir = Path(data_dir)
        candidates.append(data_dir / requested.name)
        if subdir:
            candidates.append(data_dir.parent / subdir / requested.name)

    if subdir:
        candidates.extend(root / subdir / requested.name for root in _SYSTEM_DATA_DIRS)

    return candidates


def resolve_cascade_path(path: str) -> Path:
    """Return the first existing location for a cascade file.

    Raises:
        ModelLoadError: If no candidate location exists.
    """
    candidates = _candidate_paths(path)
    for candidate in candidates:
        if candidate.is_file():
            return candidate

    searched = "\n".join(f"  - {c}" for c in candidates)
    raise ModelLoadError(
        f"Cascade file not found: '{path}'.\n"
        f"  Searched:\n{searched}\n"
        f"  Provide the file or update the model paths in your config."
    )


def load_cascade(path: str) -> cv2.CascadeClassifier:
    """Load a cascade classifier from disk.

    Args:
        path: Cascade XML path, absolute or relative to the project root.

    Returns:
        A loaded cv2.CascadeClassifier.

    Raises:
        ModelLoadError: If the file is missing or cannot be parsed.
    """
    resolved = resolve_cascade_path(path)

    logger.info("Loading cascade: %s", resolved)
    cascade = cv2.CascadeClassifier()
    try:
        loaded = cascade.load(str(resolved))
    except (cv2.error, SystemError) as e:
        raise ModelLoadError(f"Failed to parse cascade '{resolved}': {e}") from e

    if not loaded or cascade.empty():
        raise ModelLoadError(
            f"Cascade loaded empty (corrupt file or wrong format): {resolved}"
        )

    return cascade
