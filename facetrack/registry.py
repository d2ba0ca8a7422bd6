"""
Face classifier registry.

Holds the available face model variants, loads the one the user selects,
and exposes the loaded cascade to the acquisition worker. Exactly one
variant is active at a time, or none before the first successful
selection.

Each variant routes to its own cascade file. Earlier versions of this
tool loaded one fixed cascade whatever the user picked; selecting LBP now
really loads the LBP cascade.
"""

import enum
import logging
import threading
from typing import Any, Callable, Dict, Optional

from facetrack.config import ModelConfig
from facetrack.errors import ModelLoadError
from facetrack.model_loader import load_cascade

logger = logging.getLogger(__name__)


class FaceModel(str, enum.Enum):
    """Available face detection model variants."""

    HAAR = "haar"
    LBP = "lbp"


class ClassifierRegistry:
    """Thread-safe holder of the active face cascade.

    Usage:
        registry = ClassifierRegistry.from_config(config.model)
        registry.select(FaceModel.LBP)
        if registry.is_ready():
            cascade = registry.face_cascade()

    Selection is serialized with reads from the acquisition worker by an
    internal lock, so the UI may switch models while capture runs.
    """

    def __init__(
        self,
        paths: Dict[FaceModel, str],
        loader: Callable[[str], Any] = load_cascade,
    ) -> None:
        """
        Args:
            paths: Cascade path for each available model variant.
            loader: Callable turning a path into a loaded cascade. Must
                    raise ModelLoadError on failure.
        """
        self._paths = dict(paths)
        self._loader = loader
        self._lock = threading.Lock()
        self._active: Optional[FaceModel] = None
        self._cascade: Any = None

    @classmethod
    def from_config(
        cls,
        config: ModelConfig,
        loader: Callable[[str], Any] = load_cascade,
    ) -> "ClassifierRegistry":
        return cls(
            {FaceModel.HAAR: config.haar_path, FaceModel.LBP: config.lbp_path},
            loader=loader,
        )

    @property
    def available_models(self):
        return tuple(self._paths)

    def select(self, model) -> FaceModel:
        """Load the cascade for ``model`` and make it the only active one.

        Args:
            model: A FaceModel or its string value ('haar', 'lbp').

        Returns:
            The now active FaceModel.

        Raises:
            ModelLoadError: If the model is unknown or its cascade cannot be
                            loaded. The previous selection is kept.
        """
        try:
            model = FaceModel(model)
        except ValueError as e:
            raise ModelLoadError(f"Unknown face model: {model!r}") from e

        path = self._paths.get(model)
        if path is None:
            raise ModelLoadError(f"No cascade registered for model '{model.value}'")

        # Loading happens outside the lock so the worker keeps ticking with
        # the previous cascade meanwhile.
        try:
            cascade = self._loader(path)
        except ModelLoadError:
            logger.error(
                "Failed to load %s cascade, keeping %s", model.value,
                self._active.value if self._active else "no selection",
            )
            raise

        with self._lock:
            self._active = model
            self._cascade = cascade

        logger.info("Face model selected: %s (%s)", model.value, path)
        return model

    def active_model(self) -> Optional[FaceModel]:
        with self._lock:
            return self._active

    def is_ready(self) -> bool:
        """True once a model has been selected and its cascade loaded."""
        with self._lock:
            return self._cascade is not None

    def face_cascade(self) -> Any:
        """Return the loaded cascade of the active model, or None."""
        with self._lock:
            return self._cascade
