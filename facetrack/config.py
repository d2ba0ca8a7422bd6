"""
Configuration management for the face tracking pipeline.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI arguments > Environment variables > YAML config file > Defaults

Design constraints:
    - The system MUST run with zero configuration (safe defaults only).
    - Missing or invalid values fail early and loudly.
    - No detection logic, capture, or model loading belongs here.

Non-goals:
    - No dynamic reloading.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root resolution
# ---------------------------------------------------------------------------
# Resolved relative to this file's location: facetrack/config.py → project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Return the resolved project root directory."""
    return _PROJECT_ROOT


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CaptureConfig:
    """Video source configuration.

    Attributes:
        source: Device index (as a digit string) or a video file path / URL.
        resize_width: Optional width to downscale captured frames.
                      None means no resizing.
    """

    source: str = "0"
    resize_width: Optional[int] = None


@dataclass(frozen=True)
class ModelConfig:
    """Cascade model locations.

    Attributes:
        haar_path: Haar frontal face cascade (relative to project root).
        lbp_path: LBP frontal face cascade (relative to project root).
                  opencv-python wheels only bundle Haar cascades, so this
                  file must be supplied, or come from an OpenCV data
                  install (e.g. /usr/share/opencv4/lbpcascades).
        eye_path: Eye cascade used inside each detected face.
        default_model: Face model selected at startup ('haar', 'lbp'),
                       or None to wait for the user to pick one.
    """

    haar_path: str = "resources/haarcascades/haarcascade_frontalface_alt.xml"
    lbp_path: str = "resources/lbpcascades/lbpcascade_frontalface.xml"
    eye_path: str = "resources/haarcascades/haarcascade_eye_tree_eyeglasses.xml"
    default_model: Optional[str] = None


@dataclass(frozen=True)
class DetectionConfig:
    """Face matcher parameters.

    Attributes:
        scale_factor: Pyramid scale step passed to detectMultiScale.
        min_neighbors: Neighbor count a candidate needs to be retained.
        min_face_ratio: Minimum face size as a fraction of frame height.
    """

    scale_factor: float = 1.1
    min_neighbors: int = 2
    min_face_ratio: float = 0.2


@dataclass(frozen=True)
class SchedulerConfig:
    """Acquisition loop timing.

    Attributes:
        period_ms: Tick period (33 ms is ~30 frames/sec).
        drain_timeout_ms: Upper bound on waiting for an in-flight tick at stop.
    """

    period_ms: int = 33
    drain_timeout_ms: int = 33


@dataclass(frozen=True)
class VisualizationConfig:
    """Annotation and display parameters.

    Attributes:
        face_color: BGR color for face rectangles and labels.
        eye_color: BGR color for eye rectangles and labels.
        thickness: Rectangle line thickness in pixels.
        font_scale: Label font scale.
        display_width: Width the displayed frame is fitted to (aspect
                       ratio preserved). None shows frames unscaled.
        window_name: Title of the display window.
    """

    face_color: Tuple[int, int, int] = (0, 255, 0)
    eye_color: Tuple[int, int, int] = (0, 0, 255)
    thickness: int = 3
    font_scale: float = 2.0
    display_width: Optional[int] = 600
    window_name: str = "Face Detection"


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Aggregates all sub-configurations into a single, frozen object.
    """

    capture: CaptureConfig = field(default_factory=CaptureConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

_VALID_MODELS = {"haar", "lbp"}


def _validate(config: AppConfig) -> None:
    """Validate configuration values. Raises ValueError on invalid state."""

    if (config.model.default_model is not None
            and config.model.default_model not in _VALID_MODELS):
        raise ValueError(
            f"Invalid model.default_model: '{config.model.default_model}'. "
            f"Must be one of {_VALID_MODELS} or null."
        )

    if config.detection.scale_factor <= 1.0:
        raise ValueError(
            f"detection.scale_factor must be greater than 1.0, "
            f"got {config.detection.scale_factor}."
        )

    if config.detection.min_neighbors < 0:
        raise ValueError(
            f"detection.min_neighbors must be non-negative, "
            f"got {config.detection.min_neighbors}."
        )

    if not (0.0 < config.detection.min_face_ratio <= 1.0):
        raise ValueError(
            f"detection.min_face_ratio must be in (0.0, 1.0], "
            f"got {config.detection.min_face_ratio}."
        )

    if config.scheduler.period_ms <= 0:
        raise ValueError(
            f"scheduler.period_ms must be positive, "
            f"got {config.scheduler.period_ms}."
        )

    if config.scheduler.drain_timeout_ms < 0:
        raise ValueError(
            f"scheduler.drain_timeout_ms must be non-negative, "
            f"got {config.scheduler.drain_timeout_ms}."
        )

    if config.capture.resize_width is not None and config.capture.resize_width <= 0:
        raise ValueError(
            f"capture.resize_width must be positive or None, "
            f"got {config.capture.resize_width}."
        )

    if config.visualization.thickness <= 0:
        raise ValueError(
            f"visualization.thickness must be positive, "
            f"got {config.visualization.thickness}."
        )

    if (config.visualization.display_width is not None
            and config.visualization.display_width <= 0):
        raise ValueError(
            f"visualization.display_width must be positive or None, "
            f"got {config.visualization.display_width}."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _parse_tuple(value, expected_len: int, cast_type=float):
    """Convert a list from YAML into a tuple of the expected type and length."""
    if isinstance(value, (list, tuple)):
        if len(value) != expected_len:
            raise ValueError(
                f"Expected {expected_len} values, got {len(value)}: {value}"
            )
        return tuple(cast_type(v) for v in value)
    return value


def _optional_int(value) -> Optional[int]:
    if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none", "null")):
        return None
    return int(value)


def _build_capture_config(raw: dict) -> CaptureConfig:
    """Build CaptureConfig from a raw YAML dict."""
    kwargs = {}
    if "source" in raw:
        kwargs["source"] = str(raw["source"])
    if "resize_width" in raw:
        kwargs["resize_width"] = _optional_int(raw["resize_width"])
    return CaptureConfig(**kwargs)


def _build_model_config(raw: dict) -> ModelConfig:
    """Build ModelConfig from a raw YAML dict."""
    kwargs = {}
    for key in ("haar_path", "lbp_path", "eye_path"):
        if key in raw:
            kwargs[key] = str(raw[key])
    if "default_model" in raw:
        val = raw["default_model"]
        kwargs["default_model"] = str(val).lower() if val is not None else None
    return ModelConfig(**kwargs)


def _build_detection_config(raw: dict) -> DetectionConfig:
    """Build DetectionConfig from a raw YAML dict."""
    kwargs = {}
    if "scale_factor" in raw:
        kwargs["scale_factor"] = float(raw["scale_factor"])
    if "min_neighbors" in raw:
        kwargs["min_neighbors"] = int(raw["min_neighbors"])
    if "min_face_ratio" in raw:
        kwargs["min_face_ratio"] = float(raw["min_face_ratio"])
    return DetectionConfig(**kwargs)


def _build_scheduler_config(raw: dict) -> SchedulerConfig:
    """Build SchedulerConfig from a raw YAML dict."""
    kwargs = {}
    if "period_ms" in raw:
        kwargs["period_ms"] = int(raw["period_ms"])
    if "drain_timeout_ms" in raw:
        kwargs["drain_timeout_ms"] = int(raw["drain_timeout_ms"])
    return SchedulerConfig(**kwargs)


def _build_visualization_config(raw: dict) -> VisualizationConfig:
    """Build VisualizationConfig from a raw YAML dict."""
    kwargs = {}
    if "face_color" in raw:
        kwargs["face_color"] = _parse_tuple(raw["face_color"], 3, int)
    if "eye_color" in raw:
        kwargs["eye_color"] = _parse_tuple(raw["eye_color"], 3, int)
    if "thickness" in raw:
        kwargs["thickness"] = int(raw["thickness"])
    if "font_scale" in raw:
        kwargs["font_scale"] = float(raw["font_scale"])
    if "display_width" in raw:
        kwargs["display_width"] = _optional_int(raw["display_width"])
    if "window_name" in raw:
        kwargs["window_name"] = str(raw["window_name"])
    return VisualizationConfig(**kwargs)


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "FACETRACK_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        FACETRACK_CAPTURE_SOURCE=1
        FACETRACK_SCHEDULER_PERIOD_MS=50
    """
    env_map = {
        f"{_ENV_PREFIX}CAPTURE_SOURCE": ("capture", "source"),
        f"{_ENV_PREFIX}CAPTURE_RESIZE_WIDTH": ("capture", "resize_width"),
        f"{_ENV_PREFIX}MODEL_HAAR_PATH": ("model", "haar_path"),
        f"{_ENV_PREFIX}MODEL_LBP_PATH": ("model", "lbp_path"),
        f"{_ENV_PREFIX}MODEL_EYE_PATH": ("model", "eye_path"),
        f"{_ENV_PREFIX}MODEL_DEFAULT_MODEL": ("model", "default_model"),
        f"{_ENV_PREFIX}DETECTION_SCALE_FACTOR": ("detection", "scale_factor"),
        f"{_ENV_PREFIX}DETECTION_MIN_NEIGHBORS": ("detection", "min_neighbors"),
        f"{_ENV_PREFIX}DETECTION_MIN_FACE_RATIO": ("detection", "min_face_ratio"),
        f"{_ENV_PREFIX}SCHEDULER_PERIOD_MS": ("scheduler", "period_ms"),
        f"{_ENV_PREFIX}SCHEDULER_DRAIN_TIMEOUT_MS": ("scheduler", "drain_timeout_ms"),
        f"{_ENV_PREFIX}VISUALIZATION_DISPLAY_WIDTH": ("visualization", "display_width"),
    }

    for env_var, (section, key) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw.setdefault(section, {})[key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest → lowest):
        Environment variables > YAML file > Hard-coded defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the system runs entirely on defaults.

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    # --- Layer 1: YAML file ---
    if config_path is not None:
        resolved = Path(config_path)
        if not resolved.is_absolute():
            resolved = _PROJECT_ROOT / resolved

        if not resolved.is_file():
            raise FileNotFoundError(
                f"Configuration file not found: {resolved}. "
                f"Provide a valid path or omit to use defaults."
            )

        logger.info("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    # --- Layer 2: Environment variable overrides ---
    raw = _apply_env_overrides(raw)

    # --- Build typed configs ---
    config = AppConfig(
        capture=_build_capture_config(raw.get("capture", {})),
        model=_build_model_config(raw.get("model", {})),
        detection=_build_detection_config(raw.get("detection", {})),
        scheduler=_build_scheduler_config(raw.get("scheduler", {})),
        visualization=_build_visualization_config(raw.get("visualization", {})),
    )

    # --- Validate ---
    _validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config
