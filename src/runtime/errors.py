"""
Error taxonomy for the detection pipeline.

Startup errors (ConfigurationError, DetectorUnavailable, SourceUnavailable)
abort before streaming. InferenceFailure aborts a running stream after an
orderly cleanup. An unavailable video sink is not an error at all, and
end-of-stream is signalled by the source returning None.
"""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """
    Base class for pipeline errors.

    Attributes:
        code: Backend-specific error code (-1 when there is none).
    """

    stage = "pipeline"

    def __init__(self, message: str = "", code: int = -1):
        super().__init__(message)
        self.code = code


class ConfigurationError(PipelineError):
    """Invalid configuration, e.g. a zero model input resolution."""

    stage = "config"


class DetectorUnavailable(PipelineError):
    """The inference backend could not be loaded."""

    stage = "detector-init"


class SourceUnavailable(PipelineError):
    """The camera or video file could not be opened."""

    stage = "source-open"


class InferenceFailure(PipelineError):
    """
    The detector failed on a frame.

    Attributes:
        frame_index: Pipeline frame counter at the time of failure, if known.
    """

    stage = "detect"

    def __init__(self, message: str, code: int = -1, frame_index: Optional[int] = None):
        super().__init__(message, code=code)
        self.frame_index = frame_index
