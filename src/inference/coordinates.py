"""
Mapping between frame space and model-input space.

The detector runs at a fixed input resolution. Frames are resized to that
resolution with independent per-axis scaling (no letterboxing), so the
inverse is a plain per-axis multiply. Boxes coming back are truncated to
integer pixels and clamped into the frame.
"""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from models.detection import BoundingBox, Detection, RescaledBox
from runtime.errors import ConfigurationError


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class CoordinateMapper:
    """
    Converts images and boxes between frame space and model-input space.

    Example:
        mapper = CoordinateMapper(640, 640)
        view = mapper.to_model_space(frame)
        box = mapper.to_frame_space(detection, frame_w, frame_h)
    """

    interpolation = cv2.INTER_LINEAR

    def __init__(self, model_width: int, model_height: int):
        if model_width <= 0 or model_height <= 0:
            raise ConfigurationError(
                f"Invalid model input resolution {model_width}x{model_height}"
            )
        self.model_width = int(model_width)
        self.model_height = int(model_height)

    @property
    def model_size(self) -> Tuple[int, int]:
        """Return (width, height) of the model input."""
        return (self.model_width, self.model_height)

    def to_model_space(self, frame: np.ndarray) -> np.ndarray:
        """
        Build the detector input view of a BGR frame.

        Returns a new RGB array of shape (model_height, model_width, 3).
        The input frame is left untouched.
        """
        resized = cv2.resize(frame, self.model_size, interpolation=self.interpolation)
        return cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)

    def scale_factors(self, frame_width: int, frame_height: int) -> Tuple[float, float]:
        """Return (scale_x, scale_y) from model space to frame space."""
        return (
            frame_width / self.model_width,
            frame_height / self.model_height,
        )

    def to_frame_space(
        self, detection: Detection, frame_width: int, frame_height: int
    ) -> RescaledBox:
        """Scale a model-space detection box into the frame and clamp it."""
        scale_x, scale_y = self.scale_factors(frame_width, frame_height)
        bbox = detection.bbox

        x1 = int(bbox.x1 * scale_x)
        y1 = int(bbox.y1 * scale_y)
        x2 = int(bbox.x2 * scale_x)
        y2 = int(bbox.y2 * scale_y)

        x1, x2 = sorted((_clamp(x1, 0, frame_width - 1), _clamp(x2, 0, frame_width - 1)))
        y1, y2 = sorted((_clamp(y1, 0, frame_height - 1), _clamp(y2, 0, frame_height - 1)))

        return RescaledBox(x1=x1, y1=y1, x2=x2, y2=y2)

    def to_model_box(
        self, box: RescaledBox, frame_width: int, frame_height: int
    ) -> BoundingBox:
        """Map a frame-space box back into model space (float coordinates)."""
        scale_x, scale_y = self.scale_factors(frame_width, frame_height)
        return BoundingBox(
            x1=box.x1 / scale_x,
            y1=box.y1 / scale_y,
            x2=box.x2 / scale_x,
            y2=box.y2 / scale_y,
        )
