"""
User control surface for the display window.

ControlPanel holds the state of the on-screen controls (camera toggle and
the two face model selectors) and routes user actions to the registry and
the scheduler. The display loop feeds it key presses; the state can also
be driven directly, which is how the tests exercise it.

Control rules:
    - The camera button stays disabled until a face model is loaded.
    - Selecting a model unchecks the other one.
    - Model selectors are disabled while the camera runs.
"""

import logging
from typing import Dict, Optional

from facetrack.errors import CaptureUnavailableError, FaceTrackError, ModelLoadError
from facetrack.registry import ClassifierRegistry, FaceModel
from facetrack.scheduler import AcquisitionScheduler, SessionState

logger = logging.getLogger(__name__)

START_LABEL = "Start Camera"
STOP_LABEL = "Stop Camera"

KEY_BINDINGS = {
    ord("s"): "camera",
    ord(" "): "camera",
    ord("h"): FaceModel.HAAR,
    ord("l"): FaceModel.LBP,
}
QUIT_KEYS = {ord("q"), 27}  # 'q' or ESC

HELP_LINES = (
    "h: Haar classifier   l: LBP classifier",
    "s / space: start or stop the camera",
    "q / ESC: quit",
)


class ControlPanel:
    """State and handlers of the camera toggle and model selectors."""

    def __init__(
        self,
        registry: ClassifierRegistry,
        scheduler: AcquisitionScheduler,
    ) -> None:
        self._registry = registry
        self._scheduler = scheduler
        self._checked: Dict[FaceModel, bool] = {m: False for m in registry.available_models}
        self.last_error: Optional[FaceTrackError] = None

    # ------------------------------------------------------------------
    # Control state
    # ------------------------------------------------------------------

    @property
    def camera_button_label(self) -> str:
        return STOP_LABEL if self._scheduler.is_running else START_LABEL

    @property
    def camera_button_enabled(self) -> bool:
        return self._registry.is_ready()

    def is_checked(self, model: FaceModel) -> bool:
        return self._checked.get(FaceModel(model), False)

    def is_selector_enabled(self, model: FaceModel) -> bool:
        return FaceModel(model) in self._checked and not self._scheduler.is_running

    def status_text(self) -> str:
        active = self._registry.active_model()
        model = active.value if active else "none"
        return f"{self.camera_button_label} | model: {model}"

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def on_model_selected(self, model) -> bool:
        """Handle a click on a model selector. Returns True on success."""
        model = FaceModel(model)
        if not self.is_selector_enabled(model):
            logger.info("Model selector '%s' is disabled", model.value)
            return False

        try:
            self._registry.select(model)
        except ModelLoadError as e:
            self.last_error = e
            logger.error("Classifier not loaded: %s", e)
            return False

        for other in self._checked:
            self._checked[other] = other is model
        self.last_error = None
        return True

    def on_camera_button(self) -> SessionState:
        """Handle a click on the camera toggle. Returns the resulting state."""
        if not self.camera_button_enabled:
            logger.info("Camera button is disabled until a classifier is loaded")
            return self._scheduler.state

        if self._scheduler.is_running:
            self._scheduler.stop()
            return self._scheduler.state

        try:
            self._scheduler.start()
        except CaptureUnavailableError as e:
            self.last_error = e
            logger.error("%s", e)
        else:
            self.last_error = None
        return self._scheduler.state

    def handle_key(self, key: int) -> bool:
        """Dispatch a key press. Returns False if the user asked to quit."""
        if key in QUIT_KEYS:
            logger.info("Quit signal received (key press).")
            return False

        action = KEY_BINDINGS.get(key)
        if action == "camera":
            self.on_camera_button()
        elif isinstance(action, FaceModel):
            self.on_model_selected(action)
        return True

    def close(self) -> None:
        """On application close, stop the acquisition from the camera."""
        self._scheduler.shutdown()
