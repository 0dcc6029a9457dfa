"""
Annotation stage: draws detections and the performance readout.

Works on a copy of the frame; the captured frame is never drawn on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import cv2
import numpy as np

from inference.coordinates import CoordinateMapper
from models.config import AnnotationConfig
from models.detection import Detection, RescaledBox

Color = Tuple[int, int, int]


@dataclass(frozen=True)
class AnnotationStyle:
    """Colors are BGR."""
    box_color: Color = (255, 0, 0)
    box_thickness: int = 3
    label_color: Color = (0, 255, 0)
    label_scale: float = 0.8
    label_thickness: int = 2
    label_offset: int = 10
    overlay_color: Color = (0, 0, 255)
    overlay_scale: float = 1.2
    overlay_thickness: int = 3
    overlay_anchor: Tuple[int, int] = (10, 40)
    font: int = cv2.FONT_HERSHEY_SIMPLEX

    @classmethod
    def from_config(cls, cfg: AnnotationConfig) -> "AnnotationStyle":
        return cls(
            box_color=tuple(cfg.box_color),
            box_thickness=int(cfg.box_thickness),
            label_color=tuple(cfg.label_color),
            label_scale=float(cfg.label_scale),
            label_thickness=int(cfg.label_thickness),
            label_offset=int(cfg.label_offset),
            overlay_color=tuple(cfg.overlay_color),
            overlay_scale=float(cfg.overlay_scale),
            overlay_thickness=int(cfg.overlay_thickness),
            overlay_anchor=tuple(cfg.overlay_anchor),
        )


def format_label(name: str, confidence: float) -> str:
    return f"{name} {confidence * 100:.1f}%"


def format_overlay(fps: float, frame_index: int) -> str:
    return f"FPS: {fps:.1f}  Frame: {frame_index}"


class Annotator:
    """
    Draws rescaled detection boxes, class labels and an FPS/frame readout.

    Example:
        annotator = Annotator(AnnotationStyle(), label_for=detector.class_name)
        out = annotator.annotate(frame, detections, detector.mapper, fps, n)
    """

    def __init__(
        self,
        style: Optional[AnnotationStyle] = None,
        label_for: Optional[Callable[[Detection], str]] = None,
    ):
        self.style = style or AnnotationStyle()
        self._label_for = label_for or (lambda d: d.class_name or str(d.class_id))

    def label_origin(self, box: RescaledBox, text: str) -> Tuple[int, int]:
        """
        Baseline origin for a box label.

        Sits label_offset pixels above the box, but never so high that the
        text would start above the top edge of the frame.
        """
        s = self.style
        (_, text_h), _ = cv2.getTextSize(text, s.font, s.label_scale, s.label_thickness)
        return (box.x1, max(box.y1 - s.label_offset, text_h))

    def annotate(
        self,
        frame: np.ndarray,
        detections: Sequence[Detection],
        mapper: CoordinateMapper,
        fps: float,
        frame_index: int,
    ) -> np.ndarray:
        """Return an annotated copy of a BGR frame."""
        s = self.style
        out = frame.copy()
        frame_h, frame_w = frame.shape[:2]

        for det in detections:
            box = mapper.to_frame_space(det, frame_w, frame_h)
            cv2.rectangle(out, box.top_left, box.bottom_right, s.box_color, s.box_thickness)

            text = format_label(self._label_for(det), det.confidence)
            cv2.putText(
                out, text, self.label_origin(box, text),
                s.font, s.label_scale, s.label_color, s.label_thickness,
            )

        cv2.putText(
            out, format_overlay(fps, frame_index), s.overlay_anchor,
            s.font, s.overlay_scale, s.overlay_color, s.overlay_thickness,
        )
        return out

