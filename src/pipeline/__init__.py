"""
Pipeline module for the video detection pipeline.

The pipeline orchestrates the per-frame flow:
- Frame acquisition from an observation source
- Fixed-size preprocessing and detection
- Detection logging
- Rescaling, annotation and video output
"""

from .engine import (
    EXIT_FAILURE,
    EXIT_OK,
    PipelineEngine,
    PipelineResult,
    PipelineState,
    PipelineStats,
    create_engine_from_config,
)
from .stages.annotate import AnnotationStyle, Annotator
from .stages.report import DetectionReporter

__all__ = [
    "EXIT_FAILURE",
    "EXIT_OK",
    "PipelineEngine",
    "PipelineResult",
    "PipelineState",
    "PipelineStats",
    "create_engine_from_config",
    "AnnotationStyle",
    "Annotator",
    "DetectionReporter",
]
