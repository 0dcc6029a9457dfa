"""
Typed models for the detection pipeline.
"""

from .frame import FrameData
from .detection import BoundingBox, Detection, RescaledBox
from .config import (
    AnnotationConfig,
    AppConfig,
    DetectorConfig,
    OutputConfig,
    SourceConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "BoundingBox",
    "Detection",
    "RescaledBox",
    # Config
    "AppConfig",
    "AnnotationConfig",
    "DetectorConfig",
    "OutputConfig",
    "SourceConfig",
]
