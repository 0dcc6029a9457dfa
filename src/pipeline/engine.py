"""
Pipeline engine for the video detection pipeline.

Runs the per-frame loop: capture, preprocess, detect, log, rescale,
annotate, encode. Frames are handled strictly one at a time, in capture
order, on the calling thread.

States:
    INITIALIZING -> STREAMING -> DRAINING -> TERMINATED

A detector or source that fails to open ends the run before streaming.
An unavailable sink only disables video output. A detector failure while
streaming ends the run after the same cleanup as a normal end of stream.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from inference.adapter import create_detector
from models.config import AppConfig
from models.detection import Detection
from models.frame import FrameData
from observation.opencv_source import OpenCVSource, OpenCVSourceConfig
from pipeline.stages.annotate import AnnotationStyle, Annotator
from pipeline.stages.report import DetectionReporter
from runtime.context import RuntimeContext
from runtime.errors import InferenceFailure, PipelineError
from sink.opencv_sink import OpenCVVideoSink, VideoSinkConfig

EXIT_OK = 0
EXIT_FAILURE = -1


class PipelineState(Enum):
    INITIALIZING = "initializing"
    STREAMING = "streaming"
    DRAINING = "draining"
    TERMINATED = "terminated"


@dataclass
class PipelineStats:
    """Runtime counters for one run."""
    frame_count: int = 0
    detection_count: int = 0
    iteration_start: Optional[float] = None
    last_fps: float = 0.0
    start_time: float = field(default_factory=time.time)


@dataclass
class PipelineResult:
    """Outcome of PipelineEngine.run()."""
    exit_code: int
    frames_processed: int
    video_saved: bool
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == EXIT_OK


class PipelineEngine:
    """
    Drives frames from the source through the detector into the sink.

    Example:
        ctx = RuntimeContext(detector=detector, source=source, sink=sink)
        result = PipelineEngine(ctx).run()
        sys.exit(result.exit_code)
    """

    def __init__(
        self,
        ctx: RuntimeContext,
        annotator: Optional[Annotator] = None,
        reporter: Optional[DetectionReporter] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.ctx = ctx
        self.annotator = annotator or Annotator(label_for=ctx.detector.class_name)
        self.reporter = reporter or DetectionReporter(label_for=ctx.detector.class_name)
        self.stats = PipelineStats()
        self._clock = clock
        self._state = PipelineState.INITIALIZING
        self._video_saved = False
        self._callbacks: List[Callable[[FrameData, List[Detection]], None]] = []

    @property
    def state(self) -> PipelineState:
        return self._state

    def add_callback(self, callback: Callable[[FrameData, List[Detection]], None]) -> None:
        """
        Add a callback to be called after each frame is written.

        Args:
            callback: Function taking (frame_data, detections) as arguments.
        """
        self._callbacks.append(callback)

    def run(self) -> PipelineResult:
        """
        Run the pipeline to completion.

        Returns:
            PipelineResult with exit code 0 on end of stream, -1 on a
            startup failure or a detector failure mid-stream.
        """
        if self._state is not PipelineState.INITIALIZING:
            raise RuntimeError(f"Pipeline cannot run from state {self._state.value}")

        self.stats = PipelineStats()

        try:
            self._initialize()
        except PipelineError as e:
            logging.error(f"Startup failed (stage={e.stage}, code={e.code}): {e}")
            self._abort_startup()
            return PipelineResult(EXIT_FAILURE, 0, False, error=e)
        except BaseException:
            # Whatever was acquired before the failure is still released
            self._abort_startup()
            raise

        self._state = PipelineState.STREAMING
        logging.info(f"Pipeline started: source={self.ctx.source.source_id}")

        failure: Optional[InferenceFailure] = None
        ended_cleanly = False
        try:
            self._stream()
            ended_cleanly = True
        except InferenceFailure as e:
            failure = e
            logging.error(
                f"Inference failed on frame {e.frame_index} (stage={e.stage}, code={e.code}): {e}"
            )
        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
            ended_cleanly = True
        finally:
            if ended_cleanly:
                self._state = PipelineState.DRAINING
            self._drain(summary=ended_cleanly)
            self._state = PipelineState.TERMINATED

        if failure is not None:
            return PipelineResult(EXIT_FAILURE, self.stats.frame_count, self._video_saved, error=failure)
        return PipelineResult(EXIT_OK, self.stats.frame_count, self._video_saved)

    def _initialize(self) -> None:
        """Acquire detector, source and sink; only the first two are fatal."""
        self.ctx.detector.open()
        self.ctx.source.open()

        try:
            self._video_saved = self.ctx.sink.open(self.ctx.source.fps, self.ctx.source.size)
        except Exception as e:
            logging.warning(f"Frame sink unavailable: {e}")
            self._video_saved = False

    def _abort_startup(self) -> None:
        self.ctx.release_all()
        self._state = PipelineState.TERMINATED

    def _stream(self) -> None:
        while True:
            frame_data = self.ctx.source.read()
            if frame_data is None:
                return
            self._process_frame(frame_data)

    def _process_frame(self, frame_data: FrameData) -> None:
        """Run one frame through detect, report, annotate and write."""
        self.stats.frame_count += 1
        frame_index = self.stats.frame_count
        self.stats.iteration_start = self._clock()

        try:
            detections = self.ctx.detector.detect(frame_data.frame)
        except InferenceFailure as e:
            e.frame_index = frame_index
            raise

        self.reporter.report(frame_index, detections)
        self.stats.detection_count += len(detections)

        elapsed = self._clock() - self.stats.iteration_start
        self.stats.last_fps = 1.0 / elapsed if elapsed > 0 else 0.0

        annotated = self.annotator.annotate(
            frame_data.frame,
            detections,
            self.ctx.detector.mapper,
            self.stats.last_fps,
            frame_index,
        )
        self.ctx.sink.write(annotated)

        for callback in self._callbacks:
            try:
                callback(frame_data, detections)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

    def _drain(self, summary: bool) -> None:
        """Release resources; on a clean end also log the run summary."""
        self.ctx.release_all()

        if not self._video_saved:
            logging.warning("No video artifact written: output sink was unavailable")

        if summary:
            runtime = time.time() - self.stats.start_time
            logging.info(f"End of video. Total processed frames: {self.stats.frame_count}")
            logging.info(
                f"Pipeline stats: frames={self.stats.frame_count}, "
                f"detections={self.stats.detection_count}, runtime={runtime:.1f}s"
            )
        logging.info("Pipeline stopped")


def create_engine_from_config(model_ref: str, source_spec: str, config: AppConfig) -> PipelineEngine:
    """
    Factory function to build a PipelineEngine from CLI arguments and config.

    Nothing is opened here; all resources are acquired inside run().

    Raises:
        ConfigurationError: If the detector backend name is unknown.
    """
    detector = create_detector(model_ref, config.detector)
    source = OpenCVSource(OpenCVSourceConfig.from_spec(source_spec, config.source))
    sink = OpenCVVideoSink(VideoSinkConfig.from_output_config(config.output))

    ctx = RuntimeContext(detector=detector, source=source, sink=sink)
    annotator = Annotator(AnnotationStyle.from_config(config.annotation), label_for=detector.class_name)
    return PipelineEngine(ctx, annotator=annotator)
