"""
Video object detection pipeline.

Reads frames from a capture device or video file, runs an object detector
on each frame, logs the detections, and writes the annotated video.

Usage:
    python src/main.py <model> <video_source> [--config config/config.yaml]

Arguments:
    model: Detector model (.hef for the Hailo NPU, anything else runs on CPU)
    video_source: Capture device index (e.g. 0) or video file path / stream URL
    --config: Path to configuration file
    --output: Output video path (overrides output.path)
    --fourcc: Output codec (overrides output.fourcc)
    --log-level: Log level (overrides log_level)
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import yaml

from models.config import AppConfig
from ops.logging import setup_logging
from pipeline.engine import EXIT_FAILURE, create_engine_from_config
from runtime.errors import ConfigurationError

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_BACKENDS = ["auto", "hailo", "cpu"]
VALID_CAMERA_APIS = ["any", "v4l2"]


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - built-in defaults (AppConfig)
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)

    Raises:
        ConfigurationError: If a config file cannot be read or parsed.
    """
    config_dir = os.path.dirname(config_path)
    base_path = os.path.join(config_dir, "default.yaml")
    local_overrides_path = os.path.join(config_dir, "config.yaml")

    merged = AppConfig().to_dict()
    try:
        if os.path.exists(base_path):
            merged = _deep_merge(merged, _read_yaml(base_path))

        if os.path.exists(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        # Finally apply explicit config_path if it's not one of the files above
        if os.path.exists(config_path) and os.path.abspath(config_path) not in (
            os.path.abspath(base_path),
            os.path.abspath(local_overrides_path),
        ):
            merged = _deep_merge(merged, _read_yaml(config_path))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e

    return merged


def _is_color(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) == 3
        and all(isinstance(c, int) and 0 <= c <= 255 for c in value)
    )


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ["detector", "source", "output", "log_level"]
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Detector
    detector = config.get("detector") or {}
    if detector.get("backend", "auto") not in VALID_BACKENDS:
        return False, f"detector.backend must be one of: {', '.join(VALID_BACKENDS)}"
    input_size = detector.get("input_size")
    if input_size is not None:
        if not isinstance(input_size, list) or len(input_size) != 2:
            return False, "detector.input_size must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in input_size):
            return False, "detector.input_size values must be positive integers"
    for key in ("conf_threshold", "iou_threshold"):
        value = detector.get(key)
        if value is not None and (not isinstance(value, (int, float)) or not (0 <= value <= 1)):
            return False, f"detector.{key} must be a number between 0 and 1"

    # Source
    source = config.get("source") or {}
    if source.get("camera_api", "v4l2") not in VALID_CAMERA_APIS:
        return False, f"source.camera_api must be one of: {', '.join(VALID_CAMERA_APIS)}"
    default_fps = source.get("default_fps", 30.0)
    if not isinstance(default_fps, (int, float)) or default_fps <= 0:
        return False, "source.default_fps must be a positive number"

    # Output
    output = config.get("output") or {}
    if not isinstance(output.get("path"), str) or not output.get("path"):
        return False, "output.path must be a non-empty string"
    fourcc = output.get("fourcc")
    if not isinstance(fourcc, str) or len(fourcc) != 4:
        return False, "output.fourcc must be a four-character code"

    # Annotation (optional)
    annotation = config.get("annotation") or {}
    for key in ("box_color", "label_color", "overlay_color"):
        if key in annotation and not _is_color(annotation[key]):
            return False, f"annotation.{key} must be a [B, G, R] list of 0-255 integers"

    if config["log_level"] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Video object detection pipeline")
    parser.add_argument("model", help="Detector model (.hef for Hailo, otherwise CPU YOLO)")
    parser.add_argument("source", help="Camera id (e.g. 0) or video file path")
    parser.add_argument("--config", type=str, default="config/config.yaml",
                        help="Path to configuration file")
    parser.add_argument("--output", type=str, default=None,
                        help="Output video path")
    parser.add_argument("--fourcc", type=str, default=None,
                        help="Output video codec (four characters)")
    parser.add_argument("--log-level", type=str, default=None, choices=VALID_LOG_LEVELS,
                        help="Log level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main application function. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logging.error(str(e))
        return EXIT_FAILURE

    if args.output or args.fourcc:
        # An empty `output:` section loads as None
        output = config.get("output") or {}
        if args.output:
            output["path"] = args.output
        if args.fourcc:
            output["fourcc"] = args.fourcc
        config["output"] = output
    if args.log_level:
        config["log_level"] = args.log_level

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        return EXIT_FAILURE

    app_config = AppConfig.from_dict(config)
    setup_logging(app_config.log_level, app_config.log_path)

    logging.info(f"Starting detection pipeline: model={args.model}, source={args.source}")

    try:
        engine = create_engine_from_config(args.model, args.source, app_config)
    except ConfigurationError as e:
        logging.error(f"Configuration error: {e}")
        return EXIT_FAILURE

    result = engine.run()
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
