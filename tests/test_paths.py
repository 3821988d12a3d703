"""Tests for model directory resolution."""

import pytest

from handpose.paths import ModelFiles, find_model_files, get_home_dir, get_models_dir


class TestPaths:
    def test_home_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HANDPOSE_HOME", str(tmp_path / "home"))

        assert get_home_dir() == tmp_path / "home"
        assert (tmp_path / "home").is_dir()

    def test_models_under_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv("HANDPOSE_MODELS_DIR", raising=False)
        monkeypatch.setenv("HANDPOSE_HOME", str(tmp_path))

        assert get_models_dir() == tmp_path / "models"

    def test_models_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HANDPOSE_MODELS_DIR", str(tmp_path / "weights"))

        assert get_models_dir() == tmp_path / "weights"
        assert (tmp_path / "weights").is_dir()

    def test_relative_models_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HANDPOSE_MODELS_DIR", "models")

        assert get_models_dir() == tmp_path / "models"


class TestModelFiles:
    def test_in_dir(self, tmp_path):
        files = ModelFiles.in_dir(str(tmp_path))

        assert files.detector == tmp_path / "handdetector.onnx"
        assert files.mesh == tmp_path / "handskeleton.onnx"
        assert files.anchors == tmp_path / "anchors.json"

    def test_status_and_missing(self, tmp_path):
        (tmp_path / "anchors.json").write_text("[]")
        (tmp_path / "handskeleton.onnx").mkdir()

        files = ModelFiles.in_dir(tmp_path)

        assert files.status() == {
            "handdetector.onnx": False,
            "handskeleton.onnx": False,
            "anchors.json": True,
        }
        assert files.missing == ["handdetector.onnx", "handskeleton.onnx"]

    def test_find_all_present(self, tmp_path):
        for name in ("handdetector.onnx", "handskeleton.onnx", "anchors.json"):
            (tmp_path / name).write_bytes(b"")

        assert find_model_files(tmp_path) == ModelFiles.in_dir(tmp_path)

    def test_find_lists_every_missing_file(self, tmp_path):
        (tmp_path / "handskeleton.onnx").write_bytes(b"")

        with pytest.raises(FileNotFoundError, match="handdetector.onnx, anchors.json"):
            find_model_files(tmp_path)

    def test_find_defaults_to_models_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HANDPOSE_MODELS_DIR", str(tmp_path))

        with pytest.raises(FileNotFoundError, match="Missing model files"):
            find_model_files()
