"""
Output sinks for annotated frames.
"""

from .base import FrameSink
from .opencv_sink import OpenCVVideoSink, VideoSinkConfig

__all__ = [
    "FrameSink",
    "OpenCVVideoSink",
    "VideoSinkConfig",
]
