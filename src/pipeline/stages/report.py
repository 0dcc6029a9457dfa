"""
Detection report stage: one header line per frame plus one line per object.

Lines are emitted through the `detections` logger so they can be routed
separately from the rest of the application log.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence

from models.detection import Detection

NO_OBJECTS_LINE = "  no objects detected"

logger = logging.getLogger("detections")


def format_detection_lines(
    frame_index: int,
    detections: Sequence[Detection],
    label_for: Callable[[Detection], str],
) -> List[str]:
    """
    Build the log lines for one frame.

    Boxes are printed in model-input coordinates, exactly as the detector
    reported them. An empty batch still yields a header and a
    "no objects detected" line.
    """
    lines = [f"Frame {frame_index} detections ({len(detections)} objects):"]
    for det in detections:
        lines.append(
            f"  {label_for(det)} @ ({det.left} {det.top} {det.right} {det.bottom}) "
            f"{det.confidence:.3f}"
        )
    if not detections:
        lines.append(NO_OBJECTS_LINE)
    return lines


class DetectionReporter:
    """Logs per-frame detection lines."""

    def __init__(self, label_for: Callable[[Detection], str], level: int = logging.INFO):
        self._label_for = label_for
        self._level = level

    def report(self, frame_index: int, detections: Sequence[Detection]) -> List[str]:
        lines = format_detection_lines(frame_index, detections, self._label_for)
        for line in lines:
            logger.log(self._level, line)
        return lines
