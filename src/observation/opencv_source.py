"""
OpenCV-based observation source.

Supports:
- Live capture devices (a single-digit source spec, e.g. "0")
- Video files and network streams (any other source spec)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlparse, urlunparse

import cv2

from models.config import SourceConfig
from models.frame import FrameData
from runtime.errors import SourceUnavailable
from .base import ObservationConfig, ObservationSource

CAMERA_APIS = {
    "any": cv2.CAP_ANY,
    "v4l2": cv2.CAP_V4L2,
}


def parse_source_spec(spec: Union[int, str]) -> Union[int, str]:
    """
    Interpret a source specifier.

    A single digit selects a capture device by index; anything else is a
    file path or stream URL and is returned unchanged.
    """
    if isinstance(spec, int):
        return spec
    if len(spec) == 1 and spec.isdigit():
        return int(spec)
    return spec


def mask_credentials(device: Union[int, str]) -> str:
    """Hide user:password in stream URLs before logging them."""
    if not isinstance(device, str) or "@" not in device:
        return str(device)
    parsed = urlparse(device)
    if not parsed.password:
        return device
    netloc = f"{parsed.username}:***@{parsed.hostname}"
    if parsed.port:
        netloc += f":{parsed.port}"
    return urlunparse(parsed._replace(netloc=netloc))


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV-based observation sources.

    Attributes:
        device: Capture device index (int) or file path / stream URL (str).
        camera_api: VideoCapture backend for device indices ("v4l2" or "any").
    """
    device: Union[int, str] = 0
    camera_api: str = "v4l2"

    @classmethod
    def from_spec(cls, spec: str, source_cfg: Optional[SourceConfig] = None) -> "OpenCVSourceConfig":
        """
        Adapter: Build a config from a CLI source spec and the `source` config section.
        """
        source_cfg = source_cfg or SourceConfig()
        return cls(
            source_id=source_cfg.source_id,
            default_fps=source_cfg.default_fps,
            device=parse_source_spec(spec),
            camera_api=source_cfg.camera_api,
        )


class OpenCVSource(ObservationSource):
    """
    Wraps cv2.VideoCapture to provide frames as FrameData objects.

    A failed read is reported as end of stream: for files that means the
    file is exhausted, for devices that the camera went away.
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def device(self) -> Union[int, str]:
        return self._opencv_config.device

    @property
    def is_live(self) -> bool:
        """True for capture devices selected by index."""
        return isinstance(self.device, int)

    def open(self) -> None:
        if self._is_open:
            return

        if self.is_live:
            api = CAMERA_APIS.get(self._opencv_config.camera_api, cv2.CAP_ANY)
            cap = cv2.VideoCapture(self.device, api)
        else:
            cap = cv2.VideoCapture(self.device)

        if not cap.isOpened():
            cap.release()
            raise SourceUnavailable(f"Failed to open video source: {mask_credentials(self.device)}")

        self._cap = cap
        self._width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self._height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self._reported_fps = cap.get(cv2.CAP_PROP_FPS)
        self._is_open = True
        self._frame_index = 0

        logging.info(
            f"OpenCVSource opened: source_id={self.source_id}, "
            f"device={mask_credentials(self.device)}, size={self._width}x{self._height}, "
            f"fps={self.fps:.1f} (reported {self._reported_fps})"
        )

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None or frame.size == 0:
            logging.info(f"End of stream: source_id={self.source_id}")
            return None

        self._frame_index += 1
        return FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
            read_only=True,
        )

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logging.info(f"OpenCVSource closed: source_id={self.source_id}")
        self._is_open = False
