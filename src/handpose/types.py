"""Hand landmark result types."""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from handpose.box import BoundingBox

NUM_HAND_LANDMARKS = 21


class HandLandmarkIndex:
    """Hand mesh landmark indices.

    21 landmarks per hand, wrist first, then four joints per finger from
    the base outwards.

    Example:
        >>> lms = hand.landmarks
        >>> index_tip = lms[HandLandmarkIndex.INDEX_FINGER_TIP]
    """

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


MESH_ANNOTATIONS: Dict[str, List[int]] = {
    "thumb": [1, 2, 3, 4],
    "index_finger": [5, 6, 7, 8],
    "middle_finger": [9, 10, 11, 12],
    "ring_finger": [13, 14, 15, 16],
    "pinky": [17, 18, 19, 20],
    "palm_base": [0],
}


@dataclass
class HandLandmarks:
    """Landmark mesh for one hand in one frame.

    Attributes:
        landmarks: Array of shape (21, 3) with (x, y, z) in image pixels
            (z is relative depth in the same units as the mesh model).
        confidence: Hand-in-view confidence of the mesh model [0, 1].
        bounding_box: Hand box derived from the landmarks.
    """

    landmarks: np.ndarray  # Shape: (21, 3)
    confidence: float
    bounding_box: BoundingBox

    @property
    def annotations(self) -> Dict[str, np.ndarray]:
        """Landmarks grouped by finger."""
        return {name: self.landmarks[idx] for name, idx in MESH_ANNOTATIONS.items()}

    def flip_horizontal(self, width: int) -> "HandLandmarks":
        """Mirror the result for a horizontally flipped display."""
        landmarks = self.landmarks.copy()
        landmarks[:, 0] = width - 1 - landmarks[:, 0]
        box = self.bounding_box
        flipped_box = BoundingBox(
            (width - 1 - box.start_point[0], box.start_point[1]),
            (width - 1 - box.end_point[0], box.end_point[1]),
        )
        return HandLandmarks(landmarks=landmarks, confidence=self.confidence, bounding_box=flipped_box)


__all__ = ["HandLandmarks", "HandLandmarkIndex", "MESH_ANNOTATIONS", "NUM_HAND_LANDMARKS"]
