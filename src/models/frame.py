"""
FrameData model for captured video frames.

A frame is owned by the pipeline for exactly one iteration. Stages read it,
and anything that draws on it works on a copy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class FrameData:
    """
    Metadata and payload for a captured video frame.

    Attributes:
        frame: Pixel buffer, shape (height, width, 3), BGR order.
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Unix timestamp when the frame was captured.
        frame_index: Sequential frame number since the source was opened.
        source: Identifier for the camera/video source.
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    def __post_init__(self) -> None:
        if self.frame.ndim != 3 or self.frame.shape[2] != 3:
            raise ValueError(f"Expected a 3-channel frame, got shape {self.frame.shape}")
        if self.frame.shape[:2] != (self.height, self.width):
            raise ValueError(
                f"Frame shape {self.frame.shape[:2]} does not match "
                f"declared size {self.width}x{self.height}"
            )

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
        read_only: bool = False,
    ) -> "FrameData":
        """
        Create FrameData from a numpy array.

        With read_only=True the pixel buffer is locked so any stage that
        tries to draw on the original (instead of a copy) fails loudly.
        """
        if read_only:
            frame.setflags(write=False)
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
        )

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
