"""
Pipeline stages for the detection pipeline.

Each stage handles a specific part of the per-frame flow:
- annotate: Draw boxes, labels and the FPS readout on a frame copy
- report: Per-frame detection log lines
"""

from .annotate import AnnotationStyle, Annotator
from .report import DetectionReporter, format_detection_lines

__all__ = ["AnnotationStyle", "Annotator", "DetectionReporter", "format_detection_lines"]
