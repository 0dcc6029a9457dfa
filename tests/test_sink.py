"""
Tests for the OpenCV video sink.
"""

import logging
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from models.config import OutputConfig
from sink.opencv_sink import OpenCVVideoSink, VideoSinkConfig


def _fake_writer(opened=True):
    writer = MagicMock()
    writer.isOpened.return_value = opened
    return writer


@pytest.fixture
def frame():
    return np.zeros((72, 128, 3), dtype=np.uint8)


class TestVideoSinkConfig:
    def test_defaults(self):
        cfg = VideoSinkConfig()
        assert cfg.path == "output.mp4"
        assert cfg.fourcc == "H264"

    def test_from_output_config(self):
        cfg = VideoSinkConfig.from_output_config(OutputConfig(path="out/run.avi", fourcc="XVID"))
        assert cfg.path == "out/run.avi"
        assert cfg.fourcc == "XVID"


class TestOpenCVVideoSink:
    def test_open_configures_writer(self, tmp_path):
        path = str(tmp_path / "out.mp4")
        writer = _fake_writer()
        with patch("sink.opencv_sink.cv2.VideoWriter", return_value=writer) as ctor:
            sink = OpenCVVideoSink(VideoSinkConfig(path=path, fourcc="mp4v"))
            assert sink.open(30.0, (128, 72)) is True

        ctor.assert_called_once_with(path, cv2.VideoWriter_fourcc(*"mp4v"), 30.0, (128, 72), True)
        assert sink.is_open

    def test_writes_in_order_and_counts(self, tmp_path, frame):
        writer = _fake_writer()
        with patch("sink.opencv_sink.cv2.VideoWriter", return_value=writer):
            sink = OpenCVVideoSink(VideoSinkConfig(path=str(tmp_path / "out.mp4")))
            sink.open(25.0, (128, 72))

        frames = [frame + i for i in range(3)]
        for f in frames:
            sink.write(f)

        assert sink.frames_written == 3
        written = [call.args[0] for call in writer.write.call_args_list]
        assert [int(f[0, 0, 0]) for f in written] == [0, 1, 2]

    def test_unavailable_writer_is_not_fatal(self, tmp_path, frame, caplog):
        writer = _fake_writer(opened=False)
        with patch("sink.opencv_sink.cv2.VideoWriter", return_value=writer):
            sink = OpenCVVideoSink(VideoSinkConfig(path=str(tmp_path / "out.mp4")))
            with caplog.at_level(logging.WARNING):
                assert sink.open(30.0, (128, 72)) is False

        assert "will not save video" in caplog.text
        assert not sink.is_open
        writer.release.assert_called_once()

        sink.write(frame)
        sink.close()
        writer.write.assert_not_called()
        assert sink.frames_written == 0

    def test_writer_constructor_error_is_not_fatal(self, tmp_path):
        with patch("sink.opencv_sink.cv2.VideoWriter", side_effect=cv2.error("bad codec")):
            sink = OpenCVVideoSink(VideoSinkConfig(path=str(tmp_path / "out.mp4")))
            assert sink.open(30.0, (128, 72)) is False

    def test_invalid_fourcc_is_not_fatal(self, tmp_path):
        with patch("sink.opencv_sink.cv2.VideoWriter") as ctor:
            sink = OpenCVVideoSink(VideoSinkConfig(path=str(tmp_path / "out.mp4"), fourcc="H26"))
            assert sink.open(30.0, (128, 72)) is False
        ctor.assert_not_called()

    def test_write_error_is_swallowed(self, tmp_path, frame):
        writer = _fake_writer()
        writer.write.side_effect = cv2.error("encoder died")
        with patch("sink.opencv_sink.cv2.VideoWriter", return_value=writer):
            sink = OpenCVVideoSink(VideoSinkConfig(path=str(tmp_path / "out.mp4")))
            sink.open(30.0, (128, 72))
        sink.write(frame)
        assert sink.frames_written == 0

    def test_close_is_idempotent(self, tmp_path, caplog):
        writer = _fake_writer()
        with patch("sink.opencv_sink.cv2.VideoWriter", return_value=writer):
            sink = OpenCVVideoSink(VideoSinkConfig(path=str(tmp_path / "out.mp4")))
            sink.open(30.0, (128, 72))

        with caplog.at_level(logging.INFO):
            sink.close()
            sink.close()

        writer.release.assert_called_once()
        assert caplog.text.count("Video saved successfully") == 1
        assert not sink.is_open

    def test_close_without_open(self):
        sink = OpenCVVideoSink(VideoSinkConfig())
        sink.close()
        assert not sink.is_open

    def test_creates_output_directory(self, tmp_path):
        out_dir = tmp_path / "videos"
        with patch("sink.opencv_sink.cv2.VideoWriter", return_value=_fake_writer()):
            sink = OpenCVVideoSink(VideoSinkConfig(path=str(out_dir / "out.mp4")))
            sink.open(30.0, (128, 72))
        assert out_dir.is_dir()
