"""
Hailo AI accelerator inference backend.

Runs a compiled HEF model with on-chip NMS through HailoRT's Python API
(`hailo_platform`, installed with the vendor's `hailo-all` package rather
than from PyPI, so it is imported lazily in open()).

The NMS output is, per batch item, one array per class of rows
(ymin, xmin, ymax, xmax, score) normalized to [0, 1]. These are scaled to
model-input pixels here; scaling to the frame is left to the pipeline.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from models.detection import Detection
from .backend import InferenceBackend


@dataclass(frozen=True)
class HailoConfig:
    hef_path: str
    conf_threshold: float = 0.25
    class_name_overrides: Optional[Dict[int, str]] = None


class HailoBackend(InferenceBackend):
    """
    HEF model on a Hailo-8/8L device.

    Lifecycle follows the pipeline: open() acquires the device and activates
    the network group, release() tears both down.
    """

    def __init__(self, cfg: HailoConfig):
        self.cfg = cfg
        self._stack: Optional[ExitStack] = None
        self._pipeline: Any = None
        self._input_name: Optional[str] = None
        self._output_name: Optional[str] = None
        self._input_size: Optional[Tuple[int, int]] = None

    @property
    def input_size(self) -> Optional[Tuple[int, int]]:
        return self._input_size

    def open(self) -> None:  # pragma: no cover - requires Hailo hardware
        from hailo_platform import (
            HEF,
            ConfigureParams,
            FormatType,
            HailoStreamInterface,
            InferVStreams,
            InputVStreamParams,
            OutputVStreamParams,
            VDevice,
        )

        hef = HEF(self.cfg.hef_path)
        stack = ExitStack()
        try:
            device = stack.enter_context(VDevice())
            configure_params = ConfigureParams.create_from_hef(
                hef=hef, interface=HailoStreamInterface.PCIe
            )
            network_group = device.configure(hef, configure_params)[0]
            network_group_params = network_group.create_params()

            input_params = InputVStreamParams.make(network_group, format_type=FormatType.UINT8)
            output_params = OutputVStreamParams.make(network_group, format_type=FormatType.FLOAT32)

            input_info = hef.get_input_vstream_infos()[0]
            output_info = hef.get_output_vstream_infos()[0]
            height, width = input_info.shape[0], input_info.shape[1]

            self._pipeline = stack.enter_context(
                InferVStreams(network_group, input_params, output_params)
            )
            stack.enter_context(network_group.activate(network_group_params))
        except Exception:
            stack.close()
            raise

        self._stack = stack
        self._input_name = input_info.name
        self._output_name = output_info.name
        self._input_size = (int(width), int(height))
        logging.info(
            f"Hailo model loaded: {self.cfg.hef_path} "
            f"(input={width}x{height}, output={self._output_name})"
        )

    def detect(self, image: np.ndarray) -> List[Detection]:
        if self._pipeline is None:
            raise RuntimeError("Hailo backend not opened")

        batch = np.expand_dims(np.ascontiguousarray(image, dtype=np.uint8), axis=0)
        results = self._pipeline.infer({self._input_name: batch})
        return self._parse_nms(results[self._output_name][0])

    def _parse_nms(self, per_class: List[np.ndarray]) -> List[Detection]:
        """Convert normalized per-class NMS rows to model-space detections."""
        width, height = self._input_size
        out: List[Detection] = []
        for class_id, rows in enumerate(per_class):
            for ymin, xmin, ymax, xmax, score in np.asarray(rows).reshape(-1, 5):
                if score < self.cfg.conf_threshold:
                    continue
                out.append(
                    Detection.from_ltrb(
                        xmin * width,
                        ymin * height,
                        xmax * width,
                        ymax * height,
                        confidence=float(score),
                        class_id=class_id,
                        class_name=(self.cfg.class_name_overrides or {}).get(class_id),
                    )
                )
        return out

    def release(self) -> None:
        if self._stack is not None:
            self._stack.close()
            self._stack = None
            logging.info("Hailo device released")
        self._pipeline = None
