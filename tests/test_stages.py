"""
Tests for the annotate and report pipeline stages.
"""

import logging

import cv2
import numpy as np
import pytest

from inference.coordinates import CoordinateMapper
from models.config import AnnotationConfig
from models.detection import Detection, RescaledBox
from pipeline.stages.annotate import AnnotationStyle, Annotator, format_label, format_overlay
from pipeline.stages.report import NO_OBJECTS_LINE, DetectionReporter, format_detection_lines


def _label(det):
    return {0: "person", 2: "car"}.get(det.class_id, str(det.class_id))


class TestFormatting:
    def test_label_text(self):
        assert format_label("person", 0.8766) == "person 87.7%"

    def test_overlay_text(self):
        assert format_overlay(29.97, 12) == "FPS: 30.0  Frame: 12"


class TestAnnotator:
    def test_returns_copy_and_leaves_frame_untouched(self):
        frame = np.zeros((360, 640, 3), dtype=np.uint8)
        frame.setflags(write=False)
        det = Detection.from_ltrb(10, 10, 100, 100, confidence=0.9, class_id=0)

        out = Annotator(label_for=_label).annotate(frame, [det], CoordinateMapper(320, 320), 12.5, 1)

        assert out is not frame
        assert out.shape == frame.shape
        assert frame.max() == 0
        assert out.max() > 0

    def test_box_drawn_in_frame_space(self):
        frame = np.zeros((400, 800, 3), dtype=np.uint8)
        mapper = CoordinateMapper(400, 400)  # scale x2 horizontally, x1 vertically
        det = Detection.from_ltrb(100, 200, 300, 350, confidence=0.5, class_id=2)
        style = AnnotationStyle(box_thickness=1)

        out = Annotator(style, label_for=_label).annotate(frame, [det], mapper, 0.0, 1)

        # Left edge of the box at x=200, midway down the box
        assert tuple(out[275, 200]) == (255, 0, 0)
        # Inside the box stays untouched
        assert tuple(out[275, 400]) == (0, 0, 0)

    def test_edge_box_is_clamped_onto_canvas(self):
        frame = np.zeros((100, 200, 3), dtype=np.uint8)
        mapper = CoordinateMapper(100, 100)
        det = Detection.from_ltrb(0, 0, 100, 100, confidence=0.5, class_id=0)
        style = AnnotationStyle(box_thickness=1)

        out = Annotator(style, label_for=_label).annotate(frame, [det], mapper, 0.0, 1)

        assert tuple(out[50, 199]) == (255, 0, 0)
        assert tuple(out[99, 100]) == (255, 0, 0)

    def test_label_origin_never_above_top_edge(self):
        annotator = Annotator()
        s = annotator.style
        (_, text_h), _ = cv2.getTextSize("person 90.0%", s.font, s.label_scale, s.label_thickness)

        top = annotator.label_origin(RescaledBox(5, 0, 50, 50), "person 90.0%")
        lower = annotator.label_origin(RescaledBox(5, 200, 50, 250), "person 90.0%")

        assert top == (5, text_h)
        assert lower == (5, 190)

    def test_empty_batch_still_gets_overlay(self):
        frame = np.zeros((120, 400, 3), dtype=np.uint8)
        out = Annotator().annotate(frame, [], CoordinateMapper(64, 64), 30.0, 7)
        # Overlay text is red (BGR) near the fixed anchor
        region = out[10:45, 10:300]
        assert (region[..., 2] > 0).any()
        assert region[..., 0].max() == 0

    def test_style_from_config(self):
        style = AnnotationStyle.from_config(AnnotationConfig(box_color=[1, 2, 3], overlay_anchor=[5, 25]))
        assert style.box_color == (1, 2, 3)
        assert style.overlay_anchor == (5, 25)
        assert style.label_scale == 0.8


class TestDetectionReport:
    def test_lines_for_detections(self):
        dets = [
            Detection.from_ltrb(12, 34, 56, 78, confidence=0.91234, class_id=0),
            Detection.from_ltrb(1, 2, 3, 4, confidence=0.5, class_id=2),
        ]
        lines = format_detection_lines(3, dets, _label)
        assert lines == [
            "Frame 3 detections (2 objects):",
            "  person @ (12 34 56 78) 0.912",
            "  car @ (1 2 3 4) 0.500",
        ]

    def test_empty_batch_has_exactly_one_detail_line(self):
        lines = format_detection_lines(1, [], _label)
        assert lines == ["Frame 1 detections (0 objects):", NO_OBJECTS_LINE]
        assert NO_OBJECTS_LINE == "  no objects detected"

    def test_reporter_logs_every_line(self, caplog):
        reporter = DetectionReporter(_label)
        with caplog.at_level(logging.INFO, logger="detections"):
            reporter.report(5, [])
        messages = [r.getMessage() for r in caplog.records if r.name == "detections"]
        assert messages == ["Frame 5 detections (0 objects):", "  no objects detected"]
