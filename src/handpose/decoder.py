"""Decode raw palm detector output into pixel-space detections."""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from handpose.anchors import AnchorTable
from handpose.box import BoundingBox, Detection

# Palm keypoints per anchor row (x, y pairs after the 4 box values).
NUM_PALM_LANDMARKS = 7

DEFAULT_MIN_SCORE = 0.1


def sigmoid(x: np.ndarray) -> np.ndarray:
    x = np.clip(np.asarray(x, dtype=np.float64), -80.0, 80.0)
    return 1.0 / (1.0 + np.exp(-x))


class BoxDecoder:
    """Turn detector regression/classification output into detections.

    Box offsets are relative to the anchor center and expressed in input
    pixels; the decoded boxes are in input pixel space
    (``input_width`` x ``input_height``).

    Args:
        input_width: Detector input width in pixels.
        input_height: Detector input height in pixels.
        min_score: Viability floor. Rows scoring below it are dropped before
            any Detection is built; keep it at or below the suppression
            score threshold.
    """

    def __init__(self, input_width: int, input_height: int, min_score: float = DEFAULT_MIN_SCORE):
        self._input_size = np.array([input_width, input_height], dtype=np.float64)
        self._min_score = min_score

    @property
    def min_score(self) -> float:
        return self._min_score

    def decode(
        self,
        raw_scores: np.ndarray,
        raw_box_offsets: np.ndarray,
        anchors: AnchorTable,
        raw_landmarks: Optional[np.ndarray] = None,
    ) -> List[Detection]:
        """Decode one frame of detector output.

        Args:
            raw_scores: (N,) classification logits.
            raw_box_offsets: (N, 4) ``(dx, dy, w, h)`` per anchor.
            anchors: Table with exactly N anchors.
            raw_landmarks: Optional (N, 14) palm keypoint offsets.

        Returns:
            Detections above the viability floor, in anchor order. Rows with
            a non-finite box or palm keypoint are dropped.
        """
        scores = sigmoid(np.asarray(raw_scores).reshape(-1))
        offsets = np.asarray(raw_box_offsets, dtype=np.float64).reshape(-1, 4)
        centers = anchors.centers.astype(np.float64)

        if not (scores.shape[0] == offsets.shape[0] == centers.shape[0]):
            raise ValueError(
                f"Row count mismatch: scores={scores.shape[0]}, "
                f"boxes={offsets.shape[0]}, anchors={centers.shape[0]}"
            )

        finite = np.all(np.isfinite(offsets), axis=1)
        if raw_landmarks is not None:
            raw_landmarks = np.asarray(raw_landmarks, dtype=np.float64)
            raw_landmarks = raw_landmarks.reshape(centers.shape[0], NUM_PALM_LANDMARKS, 2)
            finite &= np.all(np.isfinite(raw_landmarks), axis=(1, 2))

        keep = np.nonzero((scores >= self._min_score) & finite)[0]
        if keep.size == 0:
            return []

        box_centers = offsets[keep, :2] / self._input_size + centers[keep]
        half_sizes = offsets[keep, 2:4] / (2 * self._input_size)
        starts = (box_centers - half_sizes) * self._input_size
        ends = (box_centers + half_sizes) * self._input_size

        palms = None
        if raw_landmarks is not None:
            palms = (raw_landmarks[keep] / self._input_size + centers[keep][:, None, :]) * self._input_size

        detections = []
        for row, idx in enumerate(keep):
            box = BoundingBox(
                (float(starts[row, 0]), float(starts[row, 1])),
                (float(ends[row, 0]), float(ends[row, 1])),
                palms[row] if palms is not None else None,
            )
            detections.append(Detection(box=box, score=float(scores[idx]), index=int(idx)))
        return detections


__all__ = ["BoxDecoder", "sigmoid", "NUM_PALM_LANDMARKS", "DEFAULT_MIN_SCORE"]
