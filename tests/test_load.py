"""Tests for handpose.load() wiring."""

import json
import math

import pytest

import handpose
from handpose.errors import ConfigError

from helpers import MockModel


@pytest.fixture
def models_dir(tmp_path):
    (tmp_path / "handdetector.onnx").write_bytes(b"")
    (tmp_path / "handskeleton.onnx").write_bytes(b"")
    (tmp_path / "anchors.json").write_text(json.dumps([{"x_center": 0.5, "y_center": 0.5}] * 4))
    return tmp_path


@pytest.fixture
def fake_backend(monkeypatch):
    """Replace the onnxruntime backend with mocks keyed by model file name."""
    created = {}

    def factory(path):
        model = MockModel()
        created[path.name] = model
        return model

    monkeypatch.setattr(handpose, "OnnxModelBackend", factory)
    return created


class TestLoad:
    def test_wires_pipeline(self, models_dir, fake_backend):
        hand_pose = handpose.load(models_dir=models_dir, max_continuous_checks=4)

        assert isinstance(hand_pose, handpose.HandPose)
        assert hand_pose.tracker.max_continuous_checks == 4
        assert set(fake_backend) == {"handdetector.onnx", "handskeleton.onnx"}
        assert all(m.initialized_with == "cpu" for m in fake_backend.values())

    def test_device_override(self, models_dir, fake_backend):
        handpose.load(models_dir=models_dir, device="cuda:0")
        assert fake_backend["handskeleton.onnx"].initialized_with == "cuda:0"

    def test_yaml_config(self, models_dir, fake_backend, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("detection_confidence: 0.6\n")

        hand_pose = handpose.load(config=path, models_dir=models_dir)

        assert hand_pose.tracker.detection_confidence == 0.6
        assert hand_pose.tracker.max_continuous_checks == math.inf

    def test_missing_files(self, tmp_path, fake_backend):
        (tmp_path / "handdetector.onnx").write_bytes(b"")

        with pytest.raises(FileNotFoundError, match="handskeleton.onnx"):
            handpose.load(models_dir=tmp_path)
        assert fake_backend == {}

    def test_bad_override(self, models_dir, fake_backend):
        with pytest.raises(ConfigError):
            handpose.load(models_dir=models_dir, iou_threshold=3.0)

    def test_models_dir_from_env(self, models_dir, fake_backend, monkeypatch):
        monkeypatch.setenv("HANDPOSE_MODELS_DIR", str(models_dir))

        assert isinstance(handpose.load(), handpose.HandPose)
