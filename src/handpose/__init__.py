"""handpose - real-time 3-D hand pose estimation.

Two-stage pipeline: an anchor-based palm detector locates the hand, a
landmark mesh model regresses 21 3-D keypoints inside a rotated crop, and
a tracker reuses the previous region while mesh confidence stays high.

Example:
    >>> import handpose
    >>> hand_pose = handpose.load(max_continuous_checks=5)
    >>> hand = hand_pose.estimate_hand(frame_rgb)
    >>> if hand is not None:
    ...     print(hand.landmarks.shape)  # (21, 3)
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from handpose.anchors import Anchor, AnchorTable
from handpose.backends import ModelBackend, OnnxModelBackend, evaluate
from handpose.box import BoundingBox, Detection, iou
from handpose.config import HandPoseConfig
from handpose.decoder import BoxDecoder
from handpose.detector import HandDetector
from handpose.errors import (
    ConfigError,
    DegenerateRegionError,
    HandPoseError,
    InferenceError,
)
from handpose.landmarks import LandmarkPipeline
from handpose.nms import NonMaxSuppressor, suppress
from handpose.paths import ModelFiles, find_model_files
from handpose.pipeline import HandPose
from handpose.tracker import RegionTracker, TrackerState, TrackerStatus
from handpose.types import MESH_ANNOTATIONS, HandLandmarkIndex, HandLandmarks

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def _resolve_config(
    config: Union[HandPoseConfig, Dict[str, Any], str, Path, None],
    overrides: Dict[str, Any],
) -> HandPoseConfig:
    if config is None:
        config = HandPoseConfig()
    elif isinstance(config, dict):
        config = HandPoseConfig.from_dict(config)
    elif isinstance(config, (str, Path)):
        config = HandPoseConfig.from_yaml(str(config))

    if overrides:
        config = HandPoseConfig.from_dict({**config.to_dict(), **overrides})
    return config


def load(
    config: Union[HandPoseConfig, Dict[str, Any], str, Path, None] = None,
    models_dir: Optional[Union[str, Path]] = None,
    device: Optional[str] = None,
    **overrides: Any,
) -> HandPose:
    """Build a ready-to-use HandPose from local model files.

    The models directory must hold ``handdetector.onnx``,
    ``handskeleton.onnx`` and ``anchors.json``. Nothing is downloaded.

    Args:
        config: HandPoseConfig, a dict, or a path to a YAML file.
        models_dir: Directory with the model files (default: :func:`get_models_dir`).
        device: Runtime device; overrides ``config.device``.
        **overrides: Individual config fields, e.g. ``max_continuous_checks=5``.

    Raises:
        FileNotFoundError: A model file or the anchor table is missing.
        ConfigError: Invalid configuration.
    """
    config = _resolve_config(config, overrides)
    device = device or config.device
    files = find_model_files(models_dir)

    anchors = AnchorTable.from_file(files.anchors)

    detector_model = OnnxModelBackend(files.detector)
    mesh_model = OnnxModelBackend(files.mesh)
    detector_model.initialize(device)
    try:
        mesh_model.initialize(device)
    except Exception:
        detector_model.cleanup()
        raise

    tracker = RegionTracker(
        max_continuous_checks=config.max_continuous_checks,
        detection_confidence=config.detection_confidence,
        update_iou_threshold=config.update_iou_threshold,
    )
    detector = HandDetector(
        detector_model,
        config.detector_input_width,
        config.detector_input_height,
        anchors,
        iou_threshold=config.iou_threshold,
        score_threshold=config.score_threshold,
        min_score=config.min_score,
    )
    landmark_pipeline = LandmarkPipeline(
        mesh_model,
        config.mesh_input_width,
        config.mesh_input_height,
        tracker,
    )
    logger.info("HandPose loaded from %s (device=%s)", files.detector.parent, device)
    return HandPose(detector, landmark_pipeline, tracker)


__all__ = [
    "load",
    "ModelFiles",
    "find_model_files",
    "HandPose",
    "HandPoseConfig",
    "HandDetector",
    "LandmarkPipeline",
    "RegionTracker",
    "TrackerState",
    "TrackerStatus",
    "HandLandmarks",
    "HandLandmarkIndex",
    "MESH_ANNOTATIONS",
    "Anchor",
    "AnchorTable",
    "BoundingBox",
    "Detection",
    "iou",
    "BoxDecoder",
    "NonMaxSuppressor",
    "suppress",
    "ModelBackend",
    "OnnxModelBackend",
    "evaluate",
    "HandPoseError",
    "InferenceError",
    "ConfigError",
    "DegenerateRegionError",
    "__version__",
]
