"""
Inference backend interface.

Backends take an RGB image already sized to the model input and return
detections in that same model-input coordinate system. Mapping back to
the original frame is the caller's job (see CoordinateMapper).
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

import numpy as np

from models.detection import Detection


class InferenceBackend(Protocol):
    def open(self) -> None:
        """Load the model. Raises on failure."""
        ...

    @property
    def input_size(self) -> Optional[Tuple[int, int]]:
        """Model input (width, height), known after open()."""
        ...

    def detect(self, image: np.ndarray) -> List[Detection]:
        ...

    def release(self) -> None:
        ...
