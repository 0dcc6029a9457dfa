"""
Detection models for object detection results.

Two coordinate spaces are involved:
- Detection boxes are always in model-input space (the detector's fixed
  input resolution), as produced by the inference backend.
- RescaledBox is a detection box mapped into, and clamped to, the source
  frame's pixel space.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in pixel coordinates.

    Attributes:
        x1: Left edge x coordinate.
        y1: Top edge y coordinate.
        x2: Right edge x coordinate.
        y2: Bottom edge y coordinate.
    """
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class Detection:
    """
    A single detection from the object detector.

    The box is in model-input coordinates (integer pixels), never in
    frame coordinates. Use CoordinateMapper.to_frame_space() to draw it.

    Attributes:
        bbox: Bounding box (left, top, right, bottom) in model-input space.
        confidence: Detection confidence score (0-1).
        class_id: Class ID from the detector.
        class_name: Optional human-readable class name.
    """
    bbox: BoundingBox
    confidence: float = 1.0
    class_id: Optional[int] = None
    class_name: Optional[str] = None

    @property
    def left(self) -> int:
        return int(self.bbox.x1)

    @property
    def top(self) -> int:
        return int(self.bbox.y1)

    @property
    def right(self) -> int:
        return int(self.bbox.x2)

    @property
    def bottom(self) -> int:
        return int(self.bbox.y2)

    @classmethod
    def from_ltrb(
        cls,
        left: float,
        top: float,
        right: float,
        bottom: float,
        confidence: float = 1.0,
        class_id: Optional[int] = None,
        class_name: Optional[str] = None,
    ) -> "Detection":
        """Create Detection from left, top, right, bottom model-space coordinates."""
        return cls(
            bbox=BoundingBox(x1=int(left), y1=int(top), x2=int(right), y2=int(bottom)),
            confidence=float(confidence),
            class_id=class_id,
            class_name=class_name,
        )


@dataclass(frozen=True)
class RescaledBox:
    """
    A detection box in frame space, clamped to the frame bounds.

    Always satisfies 0 <= x1 <= x2 <= width-1 and 0 <= y1 <= y2 <= height-1.
    """
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def top_left(self) -> Tuple[int, int]:
        return (self.x1, self.y1)

    @property
    def bottom_right(self) -> Tuple[int, int]:
        return (self.x2, self.y2)
