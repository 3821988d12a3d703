"""Hand mesh stage: crop the hand region, evaluate the mesh, map back to pixels."""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import cv2
import numpy as np

from handpose.backends.base import ModelBackend, ModelOutputs, evaluate
from handpose.box import BoundingBox
from handpose.errors import DegenerateRegionError, InferenceError
from handpose.tracker import RegionTracker, TrackerState
from handpose.transform import (
    build_rotation_matrix,
    invert_transform_matrix,
    rotate_points,
)
from handpose.types import NUM_HAND_LANDMARKS, HandLandmarks

logger = logging.getLogger(__name__)

# The detector box only surrounds the palm: shift it towards the fingers
# before squarifying and enlarging.
PALM_BOX_SHIFT_VECTOR = (0.0, -0.4)
PALM_BOX_ENLARGE_FACTOR = 3.0
# The mesh model is trained on hands with margin around them.
HAND_BOX_SHIFT_VECTOR = (0.0, -0.1)
HAND_BOX_ENLARGE_FACTOR = 1.65
# Mesh landmarks that play the role of the detector's palm keypoints.
PALM_LANDMARK_IDS = (0, 5, 9, 13, 17, 1, 2)


class LandmarkPipeline:
    """Regress 21 3-D hand landmarks inside a tracked region.

    The frame is rotated about the palm center so the hand points up, the
    hand box is cropped and resized to the mesh input, and the mesh output
    is mapped back to source pixels by inverting that transform.

    Args:
        model: Backend wrapping the hand mesh model.
        mesh_width: Mesh model input width in pixels.
        mesh_height: Mesh model input height in pixels.
        tracker: Tracking policy updated after every mesh evaluation.
        confidence_output: Name of the hand-in-view tensor (default: the
            output with a single element).
        landmarks_output: Name of the keypoint tensor (default: the output
            with 63 elements).
    """

    def __init__(
        self,
        model: ModelBackend,
        mesh_width: int,
        mesh_height: int,
        tracker: RegionTracker,
        confidence_output: Optional[str] = None,
        landmarks_output: Optional[str] = None,
    ):
        self._model = model
        self._mesh_width = mesh_width
        self._mesh_height = mesh_height
        self._tracker = tracker
        self._confidence_output = confidence_output
        self._landmarks_output = landmarks_output

    @property
    def tracker(self) -> RegionTracker:
        return self._tracker

    def cleanup(self) -> None:
        """Release the mesh model."""
        self._model.cleanup()

    def process(self, image: np.ndarray, state: TrackerState) -> Optional[HandLandmarks]:
        """Estimate landmarks in the state's region and update the state.

        Returns:
            The landmarks, or None when the mesh confidence is too low, or
            the region or the mesh output is degenerate. Either way the slot
            is then EMPTY.

        Raises:
            InferenceError: Mesh evaluation failed.
        """
        if state.region is None:
            return None

        try:
            result = self.estimate(image, state.region, state.from_detector)
        except DegenerateRegionError as e:
            logger.warning("Degenerate hand region, forcing re-detection: %s", e)
            self._tracker.reset(state)
            return None

        if not self._tracker.update(state, result.bounding_box, result.confidence):
            return None
        return result

    def estimate(self, image: np.ndarray, region: BoundingBox, from_detector: bool = False) -> HandLandmarks:
        """Run the mesh model on ``region`` without touching tracker state.

        Args:
            image: RGB frame (H, W, 3).
            region: Palm box (``from_detector``) or hand box from the last frame.
            from_detector: Build the hand box from the region's palm keypoints.

        Raises:
            DegenerateRegionError: The region or the mesh result is not usable.
            InferenceError: Mesh evaluation failed.
        """
        if region.is_degenerate:
            raise DegenerateRegionError(f"region {region.start_point}-{region.end_point}")
        angle = region.rotation
        palm_center = region.center
        rotation_matrix = build_rotation_matrix(-angle, palm_center)

        if from_detector:
            box = self.box_for_palm_landmarks(region, rotation_matrix)
        else:
            box = region

        crop = self.crop(image, box, rotation_matrix)
        outputs = evaluate(self._model, crop)
        confidence, raw_coords = self._split_outputs(outputs)
        if not math.isfinite(confidence) or not np.all(np.isfinite(raw_coords)):
            raise DegenerateRegionError("mesh returned non-finite values")

        coords = self.denormalize(raw_coords, box, angle, rotation_matrix)
        next_box = self.box_for_hand_landmarks(coords)
        return HandLandmarks(landmarks=coords, confidence=confidence, bounding_box=next_box)

    def crop(self, image: np.ndarray, box: BoundingBox, rotation_matrix: np.ndarray) -> np.ndarray:
        """Rotate, crop and resize ``box`` to a (1, H, W, 3) batch in ``[0, 1]``.

        ``box`` is expressed in the rotated frame.
        """
        if box.is_degenerate:
            raise DegenerateRegionError(f"box {box.start_point}-{box.end_point}")

        box_w, box_h = box.size
        sx = self._mesh_width / box_w
        sy = self._mesh_height / box_h
        crop_matrix = np.array([
            [sx, 0.0, -box.start_point[0] * sx],
            [0.0, sy, -box.start_point[1] * sy],
            [0.0, 0.0, 1.0],
        ])
        affine = (crop_matrix @ rotation_matrix)[:2]

        warped = cv2.warpAffine(
            image,
            affine,
            (self._mesh_width, self._mesh_height),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=0,
        )
        return (warped.astype(np.float32) / 255.0)[np.newaxis, ...]

    def denormalize(
        self,
        raw_coords: np.ndarray,
        box: BoundingBox,
        angle: float,
        rotation_matrix: np.ndarray,
    ) -> np.ndarray:
        """Map mesh-space keypoints back to source image pixels.

        Args:
            raw_coords: (N, 3) keypoints in mesh input pixels.
            box: Crop box in the rotated frame.
            angle: Hand rotation in radians.
            rotation_matrix: Source -> rotated frame transform used for the crop.
        """
        raw_coords = np.asarray(raw_coords, dtype=np.float64)
        box_w, box_h = box.size
        scaled = np.empty_like(raw_coords)
        scaled[:, 0] = box_w / self._mesh_width * (raw_coords[:, 0] - self._mesh_width / 2)
        scaled[:, 1] = box_h / self._mesh_height * (raw_coords[:, 1] - self._mesh_height / 2)
        scaled[:, 2] = raw_coords[:, 2]

        coords_rotation = build_rotation_matrix(angle, (0.0, 0.0))
        rotated = rotate_points(scaled, coords_rotation)

        inverse = invert_transform_matrix(rotation_matrix)
        original_center = rotate_points(np.array([box.center]), inverse)[0]

        coords = np.empty_like(scaled)
        coords[:, :2] = rotated + original_center
        coords[:, 2] = scaled[:, 2]
        return coords

    @staticmethod
    def box_for_palm_landmarks(region: BoundingBox, rotation_matrix: np.ndarray) -> BoundingBox:
        """Hand box around the rotated palm keypoints of a detector region."""
        if region.palm_landmarks is None:
            palm_box = region
        else:
            rotated = rotate_points(region.palm_landmarks, rotation_matrix)
            palm_box = BoundingBox.from_landmarks(rotated)
        return (
            palm_box.shift(PALM_BOX_SHIFT_VECTOR)
            .squarify()
            .enlarge(PALM_BOX_ENLARGE_FACTOR)
        )

    @staticmethod
    def box_for_hand_landmarks(coords: np.ndarray) -> BoundingBox:
        """Next-frame region around a full set of hand landmarks."""
        box = (
            BoundingBox.from_landmarks(coords)
            .shift(HAND_BOX_SHIFT_VECTOR)
            .squarify()
            .enlarge(HAND_BOX_ENLARGE_FACTOR)
        )
        palm = np.asarray(coords, dtype=np.float64)[list(PALM_LANDMARK_IDS), :2]
        return box.with_palm_landmarks(palm)

    def _split_outputs(self, outputs: ModelOutputs) -> Tuple[float, np.ndarray]:
        expected = NUM_HAND_LANDMARKS * 3
        confidence = self._named_or_sized(outputs, self._confidence_output, 1, "confidence")
        keypoints = self._named_or_sized(outputs, self._landmarks_output, expected, "landmarks")
        return float(confidence.reshape(-1)[0]), keypoints.reshape(NUM_HAND_LANDMARKS, 3)

    @staticmethod
    def _named_or_sized(outputs: ModelOutputs, name: Optional[str], size: int, label: str) -> np.ndarray:
        if name is not None:
            if name not in outputs:
                raise InferenceError(f"Mesh output '{name}' missing; got {sorted(outputs)}")
            value = outputs[name]
            if value.size != size:
                raise InferenceError(f"Mesh output '{name}' has {value.size} values, expected {size}")
            return value
        for value in outputs.values():
            if value.size == size:
                return value
        shapes = {k: v.shape for k, v in outputs.items()}
        raise InferenceError(f"No mesh {label} output with {size} values in {shapes}")


__all__ = [
    "LandmarkPipeline",
    "PALM_BOX_SHIFT_VECTOR",
    "PALM_BOX_ENLARGE_FACTOR",
    "HAND_BOX_SHIFT_VECTOR",
    "HAND_BOX_ENLARGE_FACTOR",
    "PALM_LANDMARK_IDS",
]
