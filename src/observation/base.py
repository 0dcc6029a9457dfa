"""
ObservationSource interface for pluggable video sources.

The pipeline pulls frames from an ObservationSource one at a time:
- open() either succeeds or raises SourceUnavailable
- read() blocks until the next frame and returns None at end of stream
- close() releases the underlying capture and is idempotent

End of stream is the normal way a run finishes, so it is a return value,
not an exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from models.frame import FrameData

DEFAULT_FPS = 30.0


def effective_fps(reported: Optional[float], default: float = DEFAULT_FPS) -> float:
    """Return the reported frame rate, or the default if it is unknown or <= 0."""
    if reported is None or reported != reported or reported <= 0:
        return float(default)
    return float(reported)


@dataclass
class ObservationConfig:
    """
    Base configuration for observation sources.

    Attributes:
        source_id: Identifier used in logs and FrameData.source.
        default_fps: Frame rate assumed when the source reports none.
    """
    source_id: str = "default"
    default_fps: float = DEFAULT_FPS


class ObservationSource(ABC):
    """
    Abstract base class for observation sources.

    Lifecycle:
        1. Create instance with config
        2. Call open(); width, height and fps become available
        3. Call read() until it returns None
        4. Call close() to release resources

    Can also be used as a context manager:
        with OpenCVSource(config) as source:
            for frame_data in source:
                process(frame_data)
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0
        self._width = 0
        self._height = 0
        self._reported_fps: Optional[float] = None

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Number of frames read since open."""
        return self._frame_index

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> Tuple[int, int]:
        return (self._width, self._height)

    @property
    def fps(self) -> float:
        """Input frame rate, falling back to config.default_fps when unknown."""
        return effective_fps(self._reported_fps, self._config.default_fps)

    @abstractmethod
    def open(self) -> None:
        """
        Open the source.

        Raises:
            SourceUnavailable: If the source cannot be opened.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """
        Read the next frame, blocking until it is available.

        Returns:
            FrameData, or None at end of stream.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the source. Safe to call multiple times."""

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[FrameData]:
        if not self._is_open:
            raise RuntimeError("Source must be open before iterating")

        while True:
            frame_data = self.read()
            if frame_data is None:
                break
            yield frame_data
