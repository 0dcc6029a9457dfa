"""
CPU inference backend (development path).

Uses Ultralytics if installed. This keeps the pipeline runnable on machines
without an NPU; boxes are reported in the coordinates of the model-input
image it was given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from models.detection import Detection
from .backend import InferenceBackend


@dataclass(frozen=True)
class CpuYoloConfig:
    model: str
    input_size: Tuple[int, int] = (640, 640)
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    classes: Optional[Sequence[int]] = None
    class_name_overrides: Optional[Dict[int, str]] = None


class UltralyticsCpuBackend(InferenceBackend):
    def __init__(self, cfg: CpuYoloConfig):
        self.cfg = cfg
        self._model = None

    @property
    def input_size(self) -> Optional[Tuple[int, int]]:
        return tuple(self.cfg.input_size)

    def open(self) -> None:
        try:
            from ultralytics import YOLO  # type: ignore
        except ImportError as e:  # pragma: no cover
            raise ImportError(
                "Ultralytics is not installed. Install with `pip install ultralytics` "
                "or use a .hef model on a Hailo device."
            ) from e

        self._model = YOLO(self.cfg.model)

    def detect(self, image: np.ndarray) -> List[Detection]:
        if self._model is None:
            raise RuntimeError("Model not loaded; call open() first")

        width, height = self.cfg.input_size
        # Ultralytics treats raw arrays as BGR
        results = self._model.predict(
            source=cv2.cvtColor(image, cv2.COLOR_RGB2BGR),
            imgsz=(height, width),
            conf=self.cfg.conf_threshold,
            iou=self.cfg.iou_threshold,
            classes=list(self.cfg.classes) if self.cfg.classes is not None else None,
            verbose=False,
        )
        if not results:
            return []

        r0 = results[0]
        names = getattr(r0, "names", None) or {}
        boxes = getattr(r0, "boxes", None)
        if boxes is None:
            return []

        xyxy = boxes.xyxy.cpu().numpy() if hasattr(boxes.xyxy, "cpu") else np.asarray(boxes.xyxy)
        conf = boxes.conf.cpu().numpy() if hasattr(boxes.conf, "cpu") else np.asarray(boxes.conf)
        cls = boxes.cls.cpu().numpy() if hasattr(boxes.cls, "cpu") else np.asarray(boxes.cls)

        out: List[Detection] = []
        for (x1, y1, x2, y2), c, k in zip(xyxy, conf, cls):
            class_id = int(k)
            name = (self.cfg.class_name_overrides or {}).get(class_id) or names.get(class_id)
            out.append(
                Detection.from_ltrb(x1, y1, x2, y2, confidence=float(c), class_id=class_id, class_name=name)
            )

        return out

    def release(self) -> None:
        self._model = None
