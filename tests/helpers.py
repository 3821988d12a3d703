"""Shared test helpers for handpose tests.

All model outputs are synthetic: NO model files needed.
"""

import math

import numpy as np

INPUT_SIZE = 256
MESH_SIZE = 256

# Palm keypoint offsets (in detector input pixels) around the anchor center.
# Keypoint 0 (palm base) sits straight below keypoint 2 (middle finger base),
# so the detection has zero rotation.
UPRIGHT_PALM = [(0, 20), (-15, -5), (0, -20), (10, -18), (20, -10), (-20, 10), (-25, 0)]


class MockModel:
    """Fake ModelBackend returning canned outputs.

    ``responses`` is a list of output dicts consumed one per call; the last
    one repeats once the list is exhausted.
    """

    def __init__(self, responses=None, error=None):
        self._responses = list(responses or [])
        self._error = error
        self.calls = []
        self.initialized_with = None
        self.cleaned_up = False

    def initialize(self, device: str = "cpu") -> None:
        self.initialized_with = device

    def predict(self, inputs):
        self.calls.append(inputs)
        if self._error is not None:
            raise self._error
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]

    def cleanup(self) -> None:
        self.cleaned_up = True


def logit(p: float) -> float:
    return math.log(p / (1.0 - p))


def make_detector_output(num_anchors, hits=None, box_size=64.0, palm=None):
    """Detector prediction of shape (1, num_anchors, 19).

    Args:
        hits: Mapping anchor row -> score in (0, 1). Other rows score ~0.
        box_size: Width/height of every decoded box in input pixels.
        palm: Palm keypoint offsets for every row (default: UPRIGHT_PALM).
    """
    prediction = np.zeros((1, num_anchors, 19), dtype=np.float32)
    prediction[0, :, 0] = -20.0
    prediction[0, :, 3:5] = box_size
    prediction[0, :, 5:19] = np.asarray(palm or UPRIGHT_PALM, dtype=np.float32).reshape(-1)
    for row, score in (hits or {}).items():
        prediction[0, row, 0] = logit(score)
    return {"regressors": prediction}


# Upright hand in mesh pixels: the wrist sits straight below the middle
# finger base, and the 116 x 155 hull enlarged by 1.65 spans the whole mesh
# input, so repeated tracking keeps the region stable.
UPRIGHT_HAND = [
    (128, 221),
    (100, 205), (85, 190), (75, 175), (70, 160),
    (112, 140), (110, 110), (109, 90), (108, 72),
    (128, 135), (128, 105), (128, 85), (128, 66),
    (144, 140), (146, 112), (147, 94), (148, 78),
    (170, 150), (178, 128), (183, 112), (186, 98),
]


def make_hand_keypoints():
    """21 mesh-space keypoints (x, y, z) of an upright hand."""
    points = np.zeros((21, 3), dtype=np.float32)
    points[:, :2] = UPRIGHT_HAND
    points[:, 2] = np.linspace(0.0, -10.0, 21)
    return points


def make_mesh_output(confidence=0.95, keypoints=None):
    if keypoints is None:
        keypoints = make_hand_keypoints()
    return {
        "hand_flag": np.array([[confidence]], dtype=np.float32),
        "landmarks": np.asarray(keypoints, dtype=np.float32).reshape(1, 63),
    }

