"""Configuration for the hand pose pipeline.

Example:
    >>> from handpose.config import HandPoseConfig
    >>> config = HandPoseConfig(max_continuous_checks=5, detection_confidence=0.9)
    >>> config = HandPoseConfig.from_yaml("handpose.yaml")
"""

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

from handpose.errors import ConfigError

_UNIT_INTERVAL_FIELDS = (
    "detection_confidence",
    "iou_threshold",
    "score_threshold",
    "min_score",
    "update_iou_threshold",
)
_SIZE_FIELDS = (
    "detector_input_width",
    "detector_input_height",
    "mesh_input_width",
    "mesh_input_height",
)


@dataclass
class HandPoseConfig:
    """Tuning parameters for detection and tracking.

    Attributes:
        max_continuous_checks: Frames to track without re-running the palm
            detector. ``math.inf`` re-detects only after the hand is lost.
        detection_confidence: Mesh hand-in-view confidence below which the
            hand is considered lost.
        iou_threshold: Overlap threshold for non-max suppression.
        score_threshold: Minimum palm detection score.
        min_score: Decoder floor applied before suppression.
        update_iou_threshold: IoU above which the previous region is kept
            instead of the newly computed one.
        detector_input_width: Palm detector input width in pixels.
        detector_input_height: Palm detector input height in pixels.
        mesh_input_width: Hand mesh input width in pixels.
        mesh_input_height: Hand mesh input height in pixels.
        device: Runtime device ("cpu", "cuda", "cuda:0").
    """

    max_continuous_checks: float = math.inf
    detection_confidence: float = 0.8
    iou_threshold: float = 0.3
    score_threshold: float = 0.5
    min_score: float = 0.1
    update_iou_threshold: float = 0.8
    detector_input_width: int = 256
    detector_input_height: int = 256
    mesh_input_width: int = 256
    mesh_input_height: int = 256
    device: str = "cpu"

    def __post_init__(self) -> None:
        self.max_continuous_checks = _parse_checks(self.max_continuous_checks)

        for name in _UNIT_INTERVAL_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be in [0, 1], got {value}")

        for name in _SIZE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HandPoseConfig":
        """Create a config from a dictionary (e.g., loaded from YAML).

        Raises:
            ConfigError: Unknown keys or invalid values.
        """
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "HandPoseConfig":
        """Load a config from a YAML file.

        Raises:
            ImportError: If PyYAML is not installed.
            FileNotFoundError: If the file doesn't exist.
            ConfigError: If the file content is invalid.
        """
        try:
            import yaml
        except ImportError:
            raise ImportError(
                "PyYAML is required for YAML config support. "
                "Install it with: pip install pyyaml"
            )

        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"{yaml_path}: expected a mapping, got {type(data).__name__}")
        return cls.from_dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        return asdict(self)


def _parse_checks(value: Any) -> float:
    if isinstance(value, str):
        if value.strip().lower() not in ("inf", ".inf", "infinity"):
            raise ConfigError(f"max_continuous_checks must be a number or 'inf', got {value!r}")
        return math.inf
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"max_continuous_checks must be a number, got {value!r}")
    if math.isnan(value) or value < 1:
        raise ConfigError(f"max_continuous_checks must be >= 1, got {value}")
    return value


__all__ = ["HandPoseConfig"]
