"""
FrameSink interface for annotated video output.

Opening a sink is best effort: open() returns False instead of raising, and
every later write() on an unopened sink is a no-op. The pipeline keeps
detecting and logging even when no video is being saved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np


class FrameSink(ABC):
    """
    Abstract base class for frame sinks.

    Lifecycle:
        1. open(fps, size) once; returns whether the sink is usable
        2. write(frame) per annotated frame, in capture order
        3. close() to flush; idempotent
    """

    def __init__(self):
        self._frames_written = 0

    @property
    def frames_written(self) -> int:
        return self._frames_written

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether frames written now will be kept."""

    @abstractmethod
    def open(self, fps: float, size: Tuple[int, int]) -> bool:
        """
        Try to open the sink.

        Args:
            fps: Output frame rate.
            size: Output (width, height).

        Returns:
            True if the sink is ready, False if it is unavailable.
        """

    @abstractmethod
    def write(self, frame: np.ndarray) -> None:
        """Append a frame; no-op if the sink is not open."""

    @abstractmethod
    def close(self) -> None:
        """Flush and finalize output. Safe to call multiple times."""

    def __enter__(self) -> "FrameSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
