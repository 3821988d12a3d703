"""Tests for HandLandmarks helpers."""

import numpy as np

from handpose.box import BoundingBox
from handpose.types import MESH_ANNOTATIONS, HandLandmarkIndex, HandLandmarks


def _hand():
    landmarks = np.zeros((21, 3), dtype=np.float64)
    landmarks[:, 0] = np.arange(21) * 10.0
    landmarks[:, 1] = 50.0
    landmarks[:, 2] = -1.0
    return HandLandmarks(landmarks, 0.9, BoundingBox((0.0, 40.0), (200.0, 60.0)))


class TestHandLandmarks:
    def test_annotations(self):
        hand = _hand()

        annotations = hand.annotations

        assert set(annotations) == set(MESH_ANNOTATIONS)
        assert annotations["index_finger"].shape == (4, 3)
        np.testing.assert_allclose(
            annotations["index_finger"][-1], hand.landmarks[HandLandmarkIndex.INDEX_FINGER_TIP],
        )
        assert annotations["palm_base"].shape == (1, 3)

    def test_flip_horizontal(self):
        hand = _hand()

        flipped = hand.flip_horizontal(640)

        np.testing.assert_allclose(flipped.landmarks[:, 0], 639.0 - hand.landmarks[:, 0])
        np.testing.assert_allclose(flipped.landmarks[:, 1:], hand.landmarks[:, 1:])
        assert flipped.bounding_box.start_point == (639.0, 40.0)
        assert flipped.bounding_box.end_point == (439.0, 60.0)
        assert flipped.confidence == 0.9

    def test_flip_does_not_mutate(self):
        hand = _hand()
        before = hand.landmarks.copy()

        hand.flip_horizontal(640)

        np.testing.assert_array_equal(hand.landmarks, before)
