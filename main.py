"""
Face Tracking Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, wire together
    the capture source, classifier registry, detection stage and scheduler,
    and run the display loop on the main thread.

Usage:
    python main.py                                # Webcam 0, pick a model with h / l
    python main.py --model haar                   # Preselect the Haar classifier
    python main.py --source 1 --period-ms 50
    python main.py --config my_config.yaml

Keys in the display window:
    h / l       select the Haar / LBP face classifier
    s / space   start or stop the camera
    q / ESC     quit

This module is the executable entry point. It should not be imported
by other modules.
"""

import argparse
import dataclasses
import logging
import sys

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

import cv2

from facetrack.capture import CaptureSource
from facetrack.config import _validate, load_config
from facetrack.controls import HELP_LINES, ControlPanel
from facetrack.detector import DetectionStage
from facetrack.errors import FaceTrackError
from facetrack.publisher import FramePublisher
from facetrack.registry import ClassifierRegistry
from facetrack.scheduler import AcquisitionScheduler
from facetrack.visualizer import placeholder_frame, show_frame

# Poll interval of the display loop (ms)
_DISPLAY_POLL_MS = 10


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Live face and eye detection",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--source",
        type=str,
        help="Video source: device index like '0', or a video file path / URL.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--model",
        type=str,
        choices=["haar", "lbp"],
        help="Face classifier to load at startup. Overrides config.",
    )
    parser.add_argument(
        "--period-ms",
        type=int,
        help="Acquisition tick period in milliseconds. Overrides config.",
    )
    parser.add_argument(
        "--autostart",
        action="store_true",
        help="Start the camera as soon as a classifier is loaded.",
    )

    return parser.parse_args()


def _apply_cli_overrides(config, args):
    if args.source is not None:
        config = dataclasses.replace(
            config, capture=dataclasses.replace(config.capture, source=args.source)
        )
    if args.model is not None:
        config = dataclasses.replace(
            config, model=dataclasses.replace(config.model, default_model=args.model)
        )
    if args.period_ms is not None:
        config = dataclasses.replace(
            config, scheduler=dataclasses.replace(config.scheduler, period_ms=args.period_ms)
        )
    _validate(config)
    return config


def main() -> int:
    """Main execution loop."""
    args = parse_args()

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = _apply_cli_overrides(load_config(args.config), args)
        logger.info("Configuration active for this run.")
    except Exception as e:
        logger.error("Configuration error: %s", e)
        return 1

    # 2. Initialize Components
    try:
        registry = ClassifierRegistry.from_config(config.model)
        detector = DetectionStage(config)
        publisher = FramePublisher()
        capture = CaptureSource(
            source=config.capture.source,
            resize_width=config.capture.resize_width,
        )
        scheduler = AcquisitionScheduler(
            capture,
            registry,
            detector,
            publisher,
            config=config.scheduler,
            visualization=config.visualization,
        )
        controls = ControlPanel(registry, scheduler)
    except (FaceTrackError, ValueError) as e:
        logger.error("Initialization failed: %s", e)
        return 1

    if config.model.default_model is not None:
        controls.on_model_selected(config.model.default_model)
    if args.autostart:
        controls.on_camera_button()

    # 3. Display Loop (main thread owns the window)
    window = config.visualization.window_name
    show_frame(placeholder_frame(HELP_LINES), config.visualization)
    logger.info("Display ready. Press 'h' or 'l' to pick a classifier, 's' to start.")

    status = None
    try:
        while True:
            frame = publisher.take()
            if frame is not None:
                show_frame(frame, config.visualization)

            text = controls.status_text()
            if text != status:
                status = text
                cv2.setWindowTitle(window, f"{window} - {status}")

            key = cv2.waitKey(_DISPLAY_POLL_MS) & 0xFF
            if key != 0xFF and not controls.handle_key(key):
                break

            if cv2.getWindowProperty(window, cv2.WND_PROP_VISIBLE) < 1:
                logger.info("Display window closed.")
                break

    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    except Exception as e:
        logger.exception("Runtime error in display loop: %s", e)
        return 1
    finally:
        # 4. Cleanup
        controls.close()
        cv2.destroyAllWindows()
        session = scheduler.session
        if session is not None:
            logger.info("Last session: %s", session.summary())

    return 0


if __name__ == "__main__":
    sys.exit(main())
