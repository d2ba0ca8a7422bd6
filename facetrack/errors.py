"""
Exception hierarchy for the face tracking pipeline.

All pipeline errors inherit from FaceTrackError. Per-tick errors
(FrameReadError, DetectionError) are caught by the scheduler and never
terminate the acquisition loop; lifecycle errors are raised to the caller.
"""


class FaceTrackError(Exception):
    """Base exception for all face tracking errors."""


class CaptureUnavailableError(FaceTrackError):
    """Raised when the video device cannot be opened. Start is aborted."""


class FrameReadError(FaceTrackError):
    """Raised when reading a frame fails. The tick is skipped."""


class DetectionError(FaceTrackError):
    """Raised when the matcher fails on a single frame. The tick is dropped."""


class ModelLoadError(FaceTrackError):
    """Raised when a cascade resource cannot be loaded.

    The previous classifier selection stays in place.
    """


class ModelNotReadyError(FaceTrackError):
    """Raised when capture is started before a face model is loaded."""
