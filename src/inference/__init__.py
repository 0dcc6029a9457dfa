"""
Inference layer: backends, preprocessing and coordinate mapping.

Backends see only the fixed-size model input; CoordinateMapper converts
between that space and the original frame.
"""

from .adapter import DetectorAdapter, create_backend, create_detector
from .backend import InferenceBackend
from .coordinates import CoordinateMapper
from .labels import COCO_CLASSES, class_name

__all__ = [
    "COCO_CLASSES",
    "CoordinateMapper",
    "DetectorAdapter",
    "InferenceBackend",
    "class_name",
    "create_backend",
    "create_detector",
]
