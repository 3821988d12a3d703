"""Axis-aligned boxes, detections and box geometry."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from handpose.transform import compute_rotation

Point = tuple[float, float]

# Palm keypoints emitted by the detector (and rebuilt from the hand mesh).
PALM_LANDMARKS_INDEX_OF_PALM_BASE = 0
PALM_LANDMARKS_INDEX_OF_MIDDLE_FINGER_BASE = 2


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned region in image pixel space.

    Boxes are never mutated; every geometry helper returns a new box that
    carries the same palm landmarks.

    Attributes:
        start_point: Top-left corner (x, y).
        end_point: Bottom-right corner (x, y).
        palm_landmarks: Optional (7, 2) palm keypoints used for orientation.
    """

    start_point: Point
    end_point: Point
    palm_landmarks: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    @property
    def size(self) -> Point:
        return (
            abs(self.end_point[0] - self.start_point[0]),
            abs(self.end_point[1] - self.start_point[1]),
        )

    @property
    def center(self) -> Point:
        return (
            self.start_point[0] + (self.end_point[0] - self.start_point[0]) / 2,
            self.start_point[1] + (self.end_point[1] - self.start_point[1]) / 2,
        )

    @property
    def area(self) -> float:
        w, h = self.size
        return w * h

    @property
    def rotation(self) -> float:
        """Hand orientation in radians from palm base to middle finger base."""
        if self.palm_landmarks is None:
            return 0.0
        return compute_rotation(
            self.palm_landmarks[PALM_LANDMARKS_INDEX_OF_PALM_BASE],
            self.palm_landmarks[PALM_LANDMARKS_INDEX_OF_MIDDLE_FINGER_BASE],
        )

    @property
    def is_degenerate(self) -> bool:
        """Zero area, or a non-finite corner or palm keypoint."""
        coords = (*self.start_point, *self.end_point)
        if not all(math.isfinite(c) for c in coords):
            return True
        if self.palm_landmarks is not None and not np.all(np.isfinite(self.palm_landmarks)):
            return True
        w, h = self.size
        return w <= 0.0 or h <= 0.0

    def with_palm_landmarks(self, palm_landmarks: Optional[np.ndarray]) -> "BoundingBox":
        return BoundingBox(self.start_point, self.end_point, palm_landmarks)

    def scale(self, factor: Sequence[float]) -> "BoundingBox":
        """Scale coordinates (and palm landmarks) by ``(fx, fy)``."""
        fx, fy = factor
        palm = None
        if self.palm_landmarks is not None:
            palm = self.palm_landmarks * np.array([fx, fy], dtype=np.float64)
        return BoundingBox(
            (self.start_point[0] * fx, self.start_point[1] * fy),
            (self.end_point[0] * fx, self.end_point[1] * fy),
            palm,
        )

    def enlarge(self, factor: float = 1.5) -> "BoundingBox":
        cx, cy = self.center
        w, h = self.size
        half_w, half_h = factor * w / 2, factor * h / 2
        return BoundingBox((cx - half_w, cy - half_h), (cx + half_w, cy + half_h), self.palm_landmarks)

    def squarify(self) -> "BoundingBox":
        cx, cy = self.center
        half = max(self.size) / 2
        return BoundingBox((cx - half, cy - half), (cx + half, cy + half), self.palm_landmarks)

    def shift(self, shift_factor: Sequence[float]) -> "BoundingBox":
        """Move the box by a fraction of its own size."""
        dx = (self.end_point[0] - self.start_point[0]) * shift_factor[0]
        dy = (self.end_point[1] - self.start_point[1]) * shift_factor[1]
        return BoundingBox(
            (self.start_point[0] + dx, self.start_point[1] + dy),
            (self.end_point[0] + dx, self.end_point[1] + dy),
            self.palm_landmarks,
        )

    @classmethod
    def from_landmarks(cls, points: np.ndarray) -> "BoundingBox":
        """Tight box around an (N, 2+) point array."""
        points = np.asarray(points, dtype=np.float64)
        xs, ys = points[:, 0], points[:, 1]
        return cls((float(xs.min()), float(ys.min())), (float(xs.max()), float(ys.max())))


@dataclass(frozen=True)
class Detection:
    """A detector box with its confidence.

    Attributes:
        box: Palm bounding box in pixel space.
        score: Confidence in [0, 1].
        index: Anchor row the detection was decoded from (-1 if unknown).
    """

    box: BoundingBox
    score: float
    index: int = -1

    @property
    def rotation(self) -> float:
        return self.box.rotation

    def scale(self, factor: Sequence[float]) -> "Detection":
        return Detection(self.box.scale(factor), self.score, self.index)


def iou(a: BoundingBox, b: BoundingBox) -> float:
    """Intersection over union; 0.0 when the union is empty."""
    ix1 = max(a.start_point[0], b.start_point[0])
    iy1 = max(a.start_point[1], b.start_point[1])
    ix2 = min(a.end_point[0], b.end_point[0])
    iy2 = min(a.end_point[1], b.end_point[1])
    inter = max(0.0, ix2 - ix1) * max(0.0, iy2 - iy1)
    union = a.area + b.area - inter
    return inter / union if union > 0 else 0.0


__all__ = [
    "Point",
    "BoundingBox",
    "Detection",
    "iou",
    "PALM_LANDMARKS_INDEX_OF_PALM_BASE",
    "PALM_LANDMARKS_INDEX_OF_MIDDLE_FINGER_BASE",
]
