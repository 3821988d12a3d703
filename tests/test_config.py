"""Tests for HandPoseConfig validation and YAML loading."""

import math

import pytest

from handpose.config import HandPoseConfig
from handpose.errors import ConfigError


class TestDefaults:
    def test_defaults(self):
        config = HandPoseConfig()

        assert config.max_continuous_checks == math.inf
        assert config.detection_confidence == 0.8
        assert config.iou_threshold == 0.3
        assert config.score_threshold == 0.5
        assert config.mesh_input_width == 256
        assert config.device == "cpu"


class TestValidation:
    @pytest.mark.parametrize("field", [
        "detection_confidence",
        "iou_threshold",
        "score_threshold",
        "min_score",
        "update_iou_threshold",
    ])
    @pytest.mark.parametrize("value", [-0.01, 1.01])
    def test_unit_interval(self, field, value):
        with pytest.raises(ConfigError):
            HandPoseConfig(**{field: value})

    @pytest.mark.parametrize("value", [0, 0.5, -3, float("nan"), "often", True])
    def test_bad_continuous_checks(self, value):
        with pytest.raises(ConfigError):
            HandPoseConfig(max_continuous_checks=value)

    @pytest.mark.parametrize("value", ["inf", ".inf", "Infinity"])
    def test_inf_strings(self, value):
        assert HandPoseConfig(max_continuous_checks=value).max_continuous_checks == math.inf

    @pytest.mark.parametrize("value", [0, -256, 25.5])
    def test_bad_input_size(self, value):
        with pytest.raises(ConfigError):
            HandPoseConfig(mesh_input_width=value)

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            HandPoseConfig(iou_threshold=2.0)


class TestSerialization:
    def test_from_dict(self):
        config = HandPoseConfig.from_dict({"max_continuous_checks": 5, "score_threshold": 0.75})

        assert config.max_continuous_checks == 5
        assert config.score_threshold == 0.75

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="score_treshold"):
            HandPoseConfig.from_dict({"score_treshold": 0.75})

    def test_round_trip(self):
        config = HandPoseConfig(max_continuous_checks=7, device="cuda")
        assert HandPoseConfig.from_dict(config.to_dict()) == config

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "handpose.yaml"
        path.write_text(
            "max_continuous_checks: .inf\n"
            "detection_confidence: 0.9\n"
            "iou_threshold: 0.4\n"
        )

        config = HandPoseConfig.from_yaml(str(path))

        assert config.max_continuous_checks == math.inf
        assert config.detection_confidence == 0.9
        assert config.iou_threshold == 0.4

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert HandPoseConfig.from_yaml(str(path)) == HandPoseConfig()

    def test_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigError):
            HandPoseConfig.from_yaml(str(path))

    def test_yaml_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            HandPoseConfig.from_yaml(str(tmp_path / "nope.yaml"))
