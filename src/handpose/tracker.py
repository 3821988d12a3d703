"""Cross-frame tracking policy for a hand slot.

A slot is either EMPTY (the palm detector must run on the next frame) or
TRACKED (the region derived from the previous mesh output is reused).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from handpose.box import BoundingBox, Detection, iou
from handpose.errors import ConfigError

logger = logging.getLogger(__name__)

UPDATE_REGION_OF_INTEREST_IOU_THRESHOLD = 0.8


class TrackerStatus(Enum):
    EMPTY = "empty"
    TRACKED = "tracked"


@dataclass
class TrackerState:
    """Mutable per-slot tracking state.

    Owned by a single caller and passed explicitly to every pipeline call,
    one frame at a time.

    Attributes:
        region: Last known region, None when the slot is empty.
        frames_since_detection: Frames processed since the last detector pass.
        last_confidence: Hand-in-view confidence of the last mesh evaluation.
        from_detector: True while ``region`` is a raw palm box that still
            has to be expanded into a hand box before cropping.
    """

    region: Optional[BoundingBox] = None
    frames_since_detection: int = 0
    last_confidence: float = 0.0
    from_detector: bool = False

    @property
    def status(self) -> TrackerStatus:
        return TrackerStatus.EMPTY if self.region is None else TrackerStatus.TRACKED


class RegionTracker:
    """Decides between running the detector and reusing the last region.

    Args:
        max_continuous_checks: Frames to go without running the detector.
            ``math.inf`` disables count-driven re-detection.
        detection_confidence: Mesh confidence below which the slot is reset.
        update_iou_threshold: A new region overlapping the previous one by
            more than this IoU is discarded in favour of the previous one.

    Raises:
        ConfigError: ``max_continuous_checks`` is below 1 or NaN, or a
            threshold is outside [0, 1].

    Example:
        >>> tracker = RegionTracker(max_continuous_checks=3)
        >>> state = TrackerState()
        >>> tracker.should_detect(state)
        True
    """

    def __init__(
        self,
        max_continuous_checks: float = math.inf,
        detection_confidence: float = 0.8,
        update_iou_threshold: float = UPDATE_REGION_OF_INTEREST_IOU_THRESHOLD,
    ):
        if (
            isinstance(max_continuous_checks, bool)
            or not isinstance(max_continuous_checks, (int, float))
            or math.isnan(max_continuous_checks)
            or max_continuous_checks < 1
        ):
            raise ConfigError(f"max_continuous_checks must be >= 1, got {max_continuous_checks!r}")
        for name, value in (
            ("detection_confidence", detection_confidence),
            ("update_iou_threshold", update_iou_threshold),
        ):
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be in [0, 1], got {value!r}")
        self.max_continuous_checks = max_continuous_checks
        self.detection_confidence = detection_confidence
        self.update_iou_threshold = update_iou_threshold

    def should_detect(self, state: TrackerState) -> bool:
        return (
            state.status is TrackerStatus.EMPTY
            or state.frames_since_detection >= self.max_continuous_checks
        )

    def on_detection(self, state: TrackerState, detection: Detection) -> None:
        """Adopt a fresh detector result (EMPTY/TRACKED -> TRACKED)."""
        state.region = detection.box
        state.frames_since_detection = 0
        state.from_detector = True
        logger.debug("Tracker: fresh detection (score=%.3f)", detection.score)

    def on_tracked_frame(self, state: TrackerState) -> None:
        state.frames_since_detection += 1

    def update(self, state: TrackerState, box: BoundingBox, confidence: float) -> bool:
        """Feed back the mesh result.

        Returns:
            True when the slot stays TRACKED, False when it was reset.
        """
        state.last_confidence = confidence
        if not math.isfinite(confidence) or confidence < self.detection_confidence:
            logger.debug(
                "Tracker: confidence %.3f < %.3f, resetting",
                confidence, self.detection_confidence,
            )
            self.reset(state)
            return False

        previous = state.region
        if (
            previous is not None
            and not state.from_detector
            and iou(previous, box) > self.update_iou_threshold
        ):
            state.region = previous
        else:
            state.region = box
        state.from_detector = False
        return True

    def reset(self, state: TrackerState) -> None:
        """Force re-detection on the next frame (-> EMPTY)."""
        state.region = None
        state.frames_since_detection = 0
        state.from_detector = False


__all__ = [
    "TrackerStatus",
    "TrackerState",
    "RegionTracker",
    "UPDATE_REGION_OF_INTEREST_IOU_THRESHOLD",
]
