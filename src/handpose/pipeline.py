"""Per-frame hand pose API."""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Dict, List, Optional

import numpy as np

from handpose.box import Detection
from handpose.detector import HandDetector
from handpose.errors import InferenceError
from handpose.landmarks import LandmarkPipeline
from handpose.steps import ProcessingStep, get_processing_steps, processing_step
from handpose.tracker import RegionTracker, TrackerState
from handpose.types import MESH_ANNOTATIONS, HandLandmarks

logger = logging.getLogger(__name__)


class HandPose:
    """Two-stage hand pose estimator with cross-frame tracking.

    Each frame either runs the palm detector (when the tracked slot is
    empty, or after ``max_continuous_checks`` tracked frames) or reuses the
    region computed from the previous frame's landmarks, then regresses the
    21-landmark mesh inside that region.

    Frames must be fed in order, one at a time, per TrackerState. The
    instance owns a default state; pass an explicit one from
    :meth:`new_state` to track several independent streams with the same
    models.

    Args:
        detector: Palm detector.
        landmark_pipeline: Hand mesh stage.
        tracker: Tracking policy shared with ``landmark_pipeline``.

    Example:
        >>> hand_pose = handpose.load()
        >>> with hand_pose:
        ...     for frame in frames:
        ...         hand = hand_pose.estimate_hand(frame)
        ...         if hand is not None:
        ...             print(hand.landmarks[HandLandmarkIndex.INDEX_FINGER_TIP])
    """

    def __init__(
        self,
        detector: HandDetector,
        landmark_pipeline: LandmarkPipeline,
        tracker: Optional[RegionTracker] = None,
    ):
        self._detector = detector
        self._landmarks = landmark_pipeline
        self._tracker = tracker if tracker is not None else landmark_pipeline.tracker
        self._state = TrackerState()

        # Step timing tracking (auto-populated by @processing_step decorator)
        self._step_timings: Dict[str, float] = {}

    def __enter__(self) -> "HandPose":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup()

    @property
    def state(self) -> TrackerState:
        """Default tracking state used when no explicit state is given."""
        return self._state

    @property
    def tracker(self) -> RegionTracker:
        return self._tracker

    @property
    def step_timings(self) -> Dict[str, float]:
        """Milliseconds spent per processing step on the last frame."""
        return dict(self._step_timings)

    @property
    def processing_steps(self) -> List[ProcessingStep]:
        """Get the list of internal processing steps (auto-extracted from decorators)."""
        return get_processing_steps(self)

    def new_state(self) -> TrackerState:
        """Fresh, empty tracking state for an independent stream."""
        return TrackerState()

    def reset(self) -> None:
        """Forget the tracked hand of the default state."""
        self._tracker.reset(self._state)

    def cleanup(self) -> None:
        """Release model resources."""
        self._detector.cleanup()
        self._landmarks.cleanup()
        logger.info("HandPose cleaned up")

    @staticmethod
    def get_annotations() -> Dict[str, List[int]]:
        """Finger name -> landmark indices."""
        return {name: list(indices) for name, indices in MESH_ANNOTATIONS.items()}

    def estimate_hand(self, image: np.ndarray, state: Optional[TrackerState] = None) -> Optional[HandLandmarks]:
        """Estimate the landmarks of the primary hand in one frame.

        Args:
            image: RGB frame of shape (H, W, 3).
            state: Tracking state to read and update (default: the
                instance's own state).

        Returns:
            The hand landmarks, or None when no hand is in view.

        Raises:
            ValueError: ``image`` is not an (H, W, 3) array.
            InferenceError: A model evaluation failed. The state is left as
                it was before the failing call.
        """
        _check_image(image)
        if state is None:
            state = self._state
        self._step_timings.clear()
        snapshot = replace(state)

        try:
            if self._tracker.should_detect(state):
                detection = self._detect(image)
                if detection is None:
                    self._tracker.reset(state)
                    return None
                self._tracker.on_detection(state, detection)
            else:
                self._tracker.on_tracked_frame(state)

            return self._estimate_landmarks(image, state)
        except InferenceError:
            _restore(state, snapshot)
            raise

    def estimate_hands(self, image: np.ndarray, flip_horizontal: bool = False) -> List[HandLandmarks]:
        """Estimate hands in one frame using the default state.

        Args:
            image: RGB frame of shape (H, W, 3).
            flip_horizontal: Mirror the results (``x' = width - 1 - x``), for
                display of a mirrored camera feed.

        Returns:
            List with zero or one HandLandmarks.
        """
        hand = self.estimate_hand(image)
        if hand is None:
            return []
        if flip_horizontal:
            hand = hand.flip_horizontal(image.shape[1])
        return [hand]

    # ========== Processing Steps (decorated methods) ==========

    @processing_step(
        name="palm_detection",
        description="Detect the strongest palm with 7 palm keypoints",
        backend="HandDetector",
    )
    def _detect(self, image: np.ndarray) -> Optional[Detection]:
        return self._detector.detect(image)

    @processing_step(
        name="landmark_estimation",
        description="Regress 21 hand landmarks inside the tracked region",
        backend="LandmarkPipeline",
        depends_on=["palm_detection"],
    )
    def _estimate_landmarks(self, image: np.ndarray, state: TrackerState) -> Optional[HandLandmarks]:
        return self._landmarks.process(image, state)


def _check_image(image) -> None:
    if not isinstance(image, np.ndarray) or image.ndim != 3 or image.shape[2] != 3:
        shape = getattr(image, "shape", None)
        raise ValueError(f"Expected an (H, W, 3) image array, got shape {shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"Empty image of shape {image.shape}")


def _restore(state: TrackerState, snapshot: TrackerState) -> None:
    for f in fields(TrackerState):
        setattr(state, f.name, getattr(snapshot, f.name))


__all__ = ["HandPose"]
