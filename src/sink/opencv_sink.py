"""
OpenCV VideoWriter sink.

Writes annotated frames to a single video file. If the writer cannot be
opened (codec missing from the OpenCV build, unwritable path) the sink
logs a warning once and stays absent for the rest of the run.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from models.config import OutputConfig
from .base import FrameSink


@dataclass
class VideoSinkConfig:
    """
    Attributes:
        path: Output file path.
        fourcc: Four-character codec code, e.g. "H264", "mp4v", "XVID".
    """
    path: str = "output.mp4"
    fourcc: str = "H264"

    @classmethod
    def from_output_config(cls, output_cfg: OutputConfig) -> "VideoSinkConfig":
        return cls(path=output_cfg.path, fourcc=output_cfg.fourcc)


class OpenCVVideoSink(FrameSink):
    """
    FrameSink backed by cv2.VideoWriter.

    The writer handle is Optional: None means the sink is unavailable, and
    write() checks it on every call.
    """

    def __init__(self, config: VideoSinkConfig):
        super().__init__()
        self.config = config
        self._writer: Optional[cv2.VideoWriter] = None

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    def open(self, fps: float, size: Tuple[int, int]) -> bool:
        if self._writer is not None:
            return True

        if len(self.config.fourcc) != 4:
            logging.warning(
                f"Invalid fourcc {self.config.fourcc!r}; VideoWriter failed to open, will not save video."
            )
            return False

        out_dir = os.path.dirname(self.config.path)
        if out_dir and not os.path.exists(out_dir):
            try:
                os.makedirs(out_dir)
            except OSError as e:
                logging.warning(f"Cannot create output directory {out_dir}: {e}")

        fourcc = cv2.VideoWriter_fourcc(*self.config.fourcc)
        try:
            writer = cv2.VideoWriter(self.config.path, fourcc, float(fps), tuple(size), True)
        except cv2.error as e:
            logging.warning(f"VideoWriter failed to open ({e}), will not save video.")
            return False

        if not writer.isOpened():
            writer.release()
            logging.warning("VideoWriter failed to open, will not save video.")
            return False

        self._writer = writer
        logging.info(
            f"Saving inference result to {self.config.path} "
            f"(FPS: {fps:.1f}, Size: {size[0]}x{size[1]}, codec: {self.config.fourcc})"
        )
        return True

    def write(self, frame: np.ndarray) -> None:
        if self._writer is None:
            return
        try:
            self._writer.write(frame)
            self._frames_written += 1
        except cv2.error as e:
            logging.warning(f"Failed to write frame to {self.config.path}: {e}")

    def close(self) -> None:
        if self._writer is None:
            return
        writer, self._writer = self._writer, None
        writer.release()
        logging.info(f"Video saved successfully: {self.config.path} ({self._frames_written} frames)")
