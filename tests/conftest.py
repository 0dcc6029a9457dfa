"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
detector:
  backend: "auto"
  conf_threshold: 0.25
  iou_threshold: 0.45

source:
  source_id: "main"
  camera_api: "v4l2"
  default_fps: 30.0

output:
  path: "output.mp4"
  fourcc: "H264"

log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "detector": {
            "backend": "auto",
            "conf_threshold": 0.25,
            "iou_threshold": 0.45,
        },
        "source": {
            "source_id": "main",
            "camera_api": "v4l2",
            "default_fps": 30.0,
        },
        "output": {
            "path": "output.mp4",
            "fourcc": "H264",
        },
        "log_level": "INFO",
    }


@pytest.fixture
def frame_1080p():
    """A blank 1920x1080 BGR frame."""
    return np.zeros((1080, 1920, 3), dtype=np.uint8)
