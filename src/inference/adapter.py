"""
Detector adapter: the pipeline's single entry point into inference.

Owns the inference backend and the CoordinateMapper built from the model's
input resolution. Each call to detect() resizes and color-converts a copy
of the frame, runs the backend once, and returns the raw model-space
detections. Failures are surfaced as InferenceFailure and never retried.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, Sequence

import numpy as np

from models.config import DetectorConfig
from models.detection import Detection
from runtime.errors import ConfigurationError, DetectorUnavailable, InferenceFailure
from .backend import InferenceBackend
from .coordinates import CoordinateMapper
from .labels import class_name


class DetectorAdapter:
    """
    Wraps an InferenceBackend with fixed-size preprocessing.

    Example:
        detector = DetectorAdapter(create_backend("yolov8n.hef", DetectorConfig()))
        detector.open()
        detections = detector.detect(frame)
        detector.release()
    """

    def __init__(
        self,
        backend: InferenceBackend,
        input_size: Optional[Sequence[int]] = None,
        class_name_overrides: Optional[Dict[int, str]] = None,
    ):
        self.backend = backend
        self._input_size_override = tuple(input_size) if input_size else None
        self._class_name_overrides = class_name_overrides
        self._mapper: Optional[CoordinateMapper] = None
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def mapper(self) -> CoordinateMapper:
        if self._mapper is None:
            raise RuntimeError("Detector not opened")
        return self._mapper

    def open(self) -> None:
        """
        Load the backend and fix the model input resolution.

        Raises:
            DetectorUnavailable: If the backend fails to load.
            ConfigurationError: If the model input resolution is unusable.
        """
        if self._is_open:
            return
        try:
            self.backend.open()
        except Exception as e:
            code = getattr(e, "code", -1)
            raise DetectorUnavailable(
                f"Failed to load detector: {e}",
                code=code if isinstance(code, int) else -1,
            ) from e

        reported = self.backend.input_size
        size = self._input_size_override or reported
        try:
            if not size or len(size) != 2:
                raise ConfigurationError(f"Model input size unavailable: {size!r}")
            if self._input_size_override and reported and tuple(reported) != self._input_size_override:
                raise ConfigurationError(
                    f"Configured input size {self._input_size_override} does not match "
                    f"the model's {tuple(reported)}"
                )
            self._mapper = CoordinateMapper(int(size[0]), int(size[1]))
        except ConfigurationError:
            self.backend.release()
            raise

        self._is_open = True
        logging.info(f"Detector ready: input={self._mapper.model_width}x{self._mapper.model_height}")

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """Run the detector on a BGR frame; boxes come back in model space."""
        mapper = self.mapper
        try:
            return list(self.backend.detect(mapper.to_model_space(frame)))
        except InferenceFailure:
            raise
        except Exception as e:
            code = getattr(e, "code", -1)
            raise InferenceFailure(
                f"Detector call failed: {e}",
                code=code if isinstance(code, int) else -1,
            ) from e

    def class_name(self, detection: Detection) -> str:
        """Display name for a detection."""
        if detection.class_name:
            return detection.class_name
        return class_name(detection.class_id, self._class_name_overrides)

    def release(self) -> None:
        """Release the backend. Safe to call multiple times."""
        if not self._is_open:
            return
        self._is_open = False
        try:
            self.backend.release()
        except Exception as e:
            logging.warning(f"Error releasing detector: {e}")


def create_backend(model_ref: str, cfg: DetectorConfig) -> InferenceBackend:
    """
    Pick an inference backend for a model reference.

    `.hef` models run on the Hailo NPU, everything else goes through
    Ultralytics on the CPU. cfg.backend ("hailo" / "cpu") overrides the guess.
    """
    backend = cfg.backend
    if backend == "auto":
        backend = "hailo" if os.path.splitext(model_ref)[1].lower() == ".hef" else "cpu"

    if backend == "hailo":
        from .hailo_backend import HailoBackend, HailoConfig

        return HailoBackend(
            HailoConfig(
                hef_path=model_ref,
                conf_threshold=float(cfg.conf_threshold),
                class_name_overrides=cfg.class_name_overrides,
            )
        )
    if backend == "cpu":
        from .cpu_backend import CpuYoloConfig, UltralyticsCpuBackend

        return UltralyticsCpuBackend(
            CpuYoloConfig(
                model=model_ref,
                input_size=tuple(cfg.input_size) if cfg.input_size else (640, 640),
                conf_threshold=float(cfg.conf_threshold),
                iou_threshold=float(cfg.iou_threshold),
                class_name_overrides=cfg.class_name_overrides,
            )
        )
    raise ConfigurationError(f"Unknown detector backend: {backend}")


def create_detector(model_ref: str, cfg: DetectorConfig) -> DetectorAdapter:
    """Build an unopened DetectorAdapter from config."""
    return DetectorAdapter(
        create_backend(model_ref, cfg),
        input_size=cfg.input_size,
        class_name_overrides=cfg.class_name_overrides,
    )
