"""
Observation layer for pluggable video sources.

This layer abstracts where frames come from (capture device, video file,
network stream) from the processing pipeline. Each source implements the
ObservationSource interface and returns FrameData objects.
"""

from .base import DEFAULT_FPS, ObservationConfig, ObservationSource, effective_fps
from .opencv_source import OpenCVSource, OpenCVSourceConfig, parse_source_spec

__all__ = [
    "DEFAULT_FPS",
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "effective_fps",
    "parse_source_spec",
]
