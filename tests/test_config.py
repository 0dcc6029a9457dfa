"""
Smoke tests for configuration loading, validation and the CLI entry point.
"""

from unittest.mock import MagicMock, patch

import pytest

from main import build_parser, load_config, main, validate_config
from models.config import AppConfig
from pipeline.engine import EXIT_FAILURE, EXIT_OK, PipelineResult
from runtime.errors import ConfigurationError


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize("section", ["detector", "source", "output", "log_level"])
    def test_missing_section(self, valid_config, section):
        del valid_config[section]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert section in error

    def test_invalid_backend(self, valid_config):
        valid_config["detector"]["backend"] = "tpu"
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "detector.backend" in error

    @pytest.mark.parametrize("size", [[640], [0, 640], [640, -1], "640x640"])
    def test_invalid_input_size(self, valid_config, size):
        valid_config["detector"]["input_size"] = size
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "input_size" in error

    def test_threshold_range(self, valid_config):
        valid_config["detector"]["conf_threshold"] = 1.5
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "conf_threshold" in error

    def test_invalid_fourcc(self, valid_config):
        valid_config["output"]["fourcc"] = "H2645"
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "fourcc" in error

    def test_invalid_default_fps(self, valid_config):
        valid_config["source"]["default_fps"] = 0
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "default_fps" in error

    def test_invalid_camera_api(self, valid_config):
        valid_config["source"]["camera_api"] = "dshow"
        is_valid, _ = validate_config(valid_config)
        assert is_valid is False

    def test_invalid_color(self, valid_config):
        valid_config["annotation"] = {"box_color": [255, 0]}
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "box_color" in error

    def test_invalid_log_level(self, valid_config):
        valid_config["log_level"] = "VERBOSE"
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "log_level" in error


class TestLoadConfig:
    def test_builtin_defaults_without_files(self, tmp_path):
        config = load_config(str(tmp_path / "config" / "config.yaml"))
        assert config["output"] == {"path": "output.mp4", "fourcc": "H264"}
        assert config["source"]["default_fps"] == 30.0
        assert validate_config(config) == (True, None)

    def test_layering(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("""
output:
  path: "local.mp4"
""")
        explicit = temp_config_dir / "run.yaml"
        explicit.write_text("""
output:
  fourcc: "mp4v"
log_level: "DEBUG"
""")

        config = load_config(str(explicit))

        assert config["output"] == {"path": "local.mp4", "fourcc": "mp4v"}
        assert config["log_level"] == "DEBUG"
        assert config["detector"]["backend"] == "auto"

    def test_invalid_yaml(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("output: [unclosed")
        with pytest.raises(ConfigurationError):
            load_config(str(temp_config_dir / "config.yaml"))

    def test_non_mapping_yaml(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(str(temp_config_dir / "config.yaml"))


class TestAppConfig:
    def test_round_trip(self, valid_config):
        cfg = AppConfig.from_dict(valid_config)
        assert cfg.output.fourcc == "H264"
        assert cfg.source.default_fps == 30.0
        assert cfg.annotation.box_color == [255, 0, 0]
        assert AppConfig.from_dict(cfg.to_dict()) == cfg


class TestMain:
    def test_wrong_argument_count_exits_nonzero(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["model.hef"])
        assert exc_info.value.code != 0

    def test_invalid_config_returns_failure(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("log_level: \"LOUD\"\n")
        with patch("main.create_engine_from_config") as factory:
            code = main(["model.hef", "0", "--config", str(temp_config_dir / "config.yaml")])
        assert code == EXIT_FAILURE
        factory.assert_not_called()

    def test_cli_overrides_and_exit_code(self, temp_config_dir):
        engine = MagicMock()
        engine.run.return_value = PipelineResult(exit_code=EXIT_OK, frames_processed=3, video_saved=True)

        with patch("main.create_engine_from_config", return_value=engine) as factory, \
                patch("main.setup_logging"):
            code = main([
                "yolov8s.hef", "clip.mp4",
                "--config", str(temp_config_dir / "config.yaml"),
                "--output", "out.avi",
                "--fourcc", "XVID",
            ])

        assert code == EXIT_OK
        model_ref, source_spec, app_config = factory.call_args.args
        assert (model_ref, source_spec) == ("yolov8s.hef", "clip.mp4")
        assert app_config.output.path == "out.avi"
        assert app_config.output.fourcc == "XVID"

    def test_pipeline_failure_propagates_exit_code(self, temp_config_dir):
        engine = MagicMock()
        engine.run.return_value = PipelineResult(exit_code=EXIT_FAILURE, frames_processed=0, video_saved=False)

        with patch("main.create_engine_from_config", return_value=engine), patch("main.setup_logging"):
            code = main(["yolov8s.hef", "9", "--config", str(temp_config_dir / "config.yaml")])

        assert code == EXIT_FAILURE

    def test_output_overrides_with_empty_output_section(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("output:\n")
        engine = MagicMock()
        engine.run.return_value = PipelineResult(exit_code=EXIT_OK, frames_processed=1, video_saved=True)

        with patch("main.create_engine_from_config", return_value=engine) as factory, \
                patch("main.setup_logging"):
            code = main([
                "yolov8n.pt", "0",
                "--config", str(temp_config_dir / "config.yaml"),
                "--output", "out.mp4",
                "--fourcc", "mp4v",
            ])

        assert code == EXIT_OK
        app_config = factory.call_args.args[2]
        assert app_config.output.path == "out.mp4"
        assert app_config.output.fourcc == "mp4v"

    def test_empty_output_section_without_overrides_fails_validation(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("output:\n")
        with patch("main.create_engine_from_config") as factory:
            code = main(["yolov8n.pt", "0", "--config", str(temp_config_dir / "config.yaml")])
        assert code == EXIT_FAILURE
        factory.assert_not_called()
