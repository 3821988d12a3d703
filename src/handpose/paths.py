"""Where handpose looks for its model files.

A HandPose is built from three local files: the palm detector graph, the
hand mesh graph and the detector's anchor table. They are never fetched
over the network; place them in the models directory
(``~/.handpose/models`` unless ``HANDPOSE_MODELS_DIR`` or ``HANDPOSE_HOME``
says otherwise) before calling :func:`handpose.load`.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

HOME_ENV = "HANDPOSE_HOME"
MODELS_DIR_ENV = "HANDPOSE_MODELS_DIR"

DETECTOR_MODEL_FILENAME = "handdetector.onnx"
MESH_MODEL_FILENAME = "handskeleton.onnx"
ANCHORS_FILENAME = "anchors.json"


def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_home_dir() -> Path:
    """``$HANDPOSE_HOME``, else ``~/.handpose``. Created on first use."""
    home = os.environ.get(HOME_ENV)
    return _ensure_dir(Path(home) if home else Path.home() / ".handpose")


def get_models_dir() -> Path:
    """``$HANDPOSE_MODELS_DIR``, else ``<home>/models``. Created on first use.

    A relative ``HANDPOSE_MODELS_DIR`` is taken from the working directory.
    """
    override = os.environ.get(MODELS_DIR_ENV)
    if not override:
        return _ensure_dir(get_home_dir() / "models")
    path = Path(override)
    return _ensure_dir(path if path.is_absolute() else Path.cwd() / path)


@dataclass(frozen=True)
class ModelFiles:
    """Paths of the files a HandPose is loaded from.

    Attributes:
        detector: Palm detector ONNX graph.
        mesh: Hand mesh (21 keypoints) ONNX graph.
        anchors: Anchor table matching the detector's output rows.
    """

    detector: Path
    mesh: Path
    anchors: Path

    @classmethod
    def in_dir(cls, models_dir: Union[str, Path]) -> "ModelFiles":
        models_dir = Path(models_dir)
        return cls(
            detector=models_dir / DETECTOR_MODEL_FILENAME,
            mesh=models_dir / MESH_MODEL_FILENAME,
            anchors=models_dir / ANCHORS_FILENAME,
        )

    def status(self) -> Dict[str, bool]:
        """File name -> present on disk."""
        return {path.name: path.is_file() for path in (self.detector, self.mesh, self.anchors)}

    @property
    def missing(self) -> List[str]:
        return [name for name, present in self.status().items() if not present]


def find_model_files(models_dir: Optional[Union[str, Path]] = None) -> ModelFiles:
    """Resolve the model files and check that all of them are present.

    Args:
        models_dir: Directory holding the files (default: :func:`get_models_dir`).

    Raises:
        FileNotFoundError: One or more files are missing; all of them are named.
    """
    root = Path(models_dir) if models_dir is not None else get_models_dir()
    files = ModelFiles.in_dir(root)
    missing = files.missing
    if missing:
        raise FileNotFoundError(f"Missing model files in {root}: {', '.join(missing)}")
    return files


__all__ = [
    "get_home_dir",
    "get_models_dir",
    "find_model_files",
    "ModelFiles",
    "DETECTOR_MODEL_FILENAME",
    "MESH_MODEL_FILENAME",
    "ANCHORS_FILENAME",
]
