from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from inference.adapter import DetectorAdapter
from observation.base import ObservationSource
from sink.base import FrameSink


@dataclass
class RuntimeContext:
    """
    Owns the detector, frame source and frame sink for one run; avoids global singletons.

    The pipeline acquires these in order (detector, source, sink) and
    release_all() gives them back in reverse dependency order: sink first so
    the video is flushed, then detector, then source. Each resource is
    released at most once.
    """

    detector: DetectorAdapter
    source: ObservationSource
    sink: FrameSink
    released: List[str] = field(default_factory=list)

    def release_all(self) -> None:
        self._release("sink", self.sink.close)
        self._release("detector", self.detector.release)
        self._release("source", self.source.close)

    def _release(self, name: str, close) -> None:
        if name in self.released:
            return
        self.released.append(name)
        try:
            close()
        except Exception as e:
            logging.warning(f"Error releasing {name}: {e}")
