"""Tests for drawing helpers."""

import numpy as np

from handpose.box import BoundingBox
from handpose.types import HandLandmarks
from handpose.viz import HAND_CONNECTIONS, HandOverlay, draw_box, draw_hand


def _hand():
    rng = np.random.default_rng(0)
    landmarks = np.zeros((21, 3))
    landmarks[:, :2] = rng.uniform(20, 100, size=(21, 2))
    return HandLandmarks(landmarks, 0.93, BoundingBox((10.0, 10.0), (110.0, 110.0)))


class TestDrawing:
    def test_connections_cover_all_landmarks(self):
        used = {i for pair in HAND_CONNECTIONS for i in pair}
        assert used == set(range(21))

    def test_draw_hand_in_place(self):
        image = np.zeros((128, 128, 3), dtype=np.uint8)

        draw_hand(image, _hand())

        assert image.any()

    def test_draw_box_handles_mirrored_box(self):
        image = np.zeros((64, 64, 3), dtype=np.uint8)

        draw_box(image, BoundingBox((50.0, 10.0), (10.0, 50.0)), color=(0, 255, 0), thickness=1)

        assert image[10, 30, 1] == 255
        assert image[30, 30].sum() == 0


class TestHandOverlay:
    def test_draws_on_copy(self):
        frame = np.zeros((128, 128, 3), dtype=np.uint8)

        output = HandOverlay().draw(frame, _hand())

        assert output.any()
        assert not frame.any()

    def test_no_hand(self):
        frame = np.zeros((32, 32, 3), dtype=np.uint8)

        output = HandOverlay().draw(frame, None)

        assert output is not frame
        assert not output.any()
