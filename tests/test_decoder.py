"""Tests for BoxDecoder."""

import numpy as np
import pytest

from handpose.anchors import AnchorTable
from handpose.decoder import BoxDecoder, sigmoid

from helpers import logit


class TestSigmoid:
    def test_stable_for_large_logits(self):
        values = sigmoid(np.array([-1e4, 0.0, 1e4]))

        assert np.all(np.isfinite(values))
        np.testing.assert_allclose(values, [0.0, 0.5, 1.0], atol=1e-12)


class TestBoxDecoder:
    def test_box_relative_to_anchor(self):
        anchors = AnchorTable([(0.5, 0.5)])
        decoder = BoxDecoder(256, 256)

        detections = decoder.decode(
            np.array([logit(0.9)]),
            np.array([[10.0, -20.0, 64.0, 32.0]]),
            anchors,
        )

        assert len(detections) == 1
        det = detections[0]
        assert det.score == pytest.approx(0.9)
        assert det.index == 0
        # center (128 + 10, 128 - 20), size (64, 32)
        assert det.box.start_point == pytest.approx((106.0, 92.0))
        assert det.box.end_point == pytest.approx((170.0, 124.0))
        assert det.box.palm_landmarks is None

    def test_non_square_input(self):
        anchors = AnchorTable([(0.5, 0.5)])
        decoder = BoxDecoder(200, 100)

        det = decoder.decode(np.array([5.0]), np.array([[0.0, 0.0, 20.0, 10.0]]), anchors)[0]

        assert det.box.center == pytest.approx((100.0, 50.0))
        assert det.box.size == pytest.approx((20.0, 10.0))

    def test_palm_landmarks(self):
        anchors = AnchorTable([(0.25, 0.75)])
        decoder = BoxDecoder(256, 256)
        raw_landmarks = np.arange(14, dtype=np.float32).reshape(1, 14)

        det = decoder.decode(np.array([5.0]), np.zeros((1, 4)), anchors, raw_landmarks)[0]

        assert det.box.palm_landmarks.shape == (7, 2)
        np.testing.assert_allclose(det.box.palm_landmarks[0], [64.0, 193.0])
        np.testing.assert_allclose(det.box.palm_landmarks[6], [76.0, 205.0])

    def test_viability_floor(self):
        anchors = AnchorTable([(0.5, 0.5), (0.2, 0.2), (0.8, 0.8)])
        decoder = BoxDecoder(256, 256, min_score=0.1)
        scores = np.array([logit(0.05), logit(0.5), logit(0.2)])

        detections = decoder.decode(scores, np.ones((3, 4)), anchors)

        assert [d.index for d in detections] == [1, 2]

    def test_row_mismatch(self):
        anchors = AnchorTable([(0.5, 0.5), (0.2, 0.2)])
        decoder = BoxDecoder(256, 256)

        with pytest.raises(ValueError):
            decoder.decode(np.zeros(3), np.zeros((3, 4)), anchors)

    def test_nothing_viable(self):
        anchors = AnchorTable([(0.5, 0.5)])
        decoder = BoxDecoder(256, 256)

        assert decoder.decode(np.array([-30.0]), np.zeros((1, 4)), anchors) == []

    def test_non_finite_rows_dropped(self):
        anchors = AnchorTable([(0.5, 0.5), (0.2, 0.2), (0.8, 0.8)])
        decoder = BoxDecoder(256, 256)
        offsets = np.ones((3, 4))
        offsets[0, 2] = np.inf
        raw_landmarks = np.zeros((3, 14))
        raw_landmarks[1, 3] = np.nan

        detections = decoder.decode(np.full(3, logit(0.9)), offsets, anchors, raw_landmarks)

        assert [d.index for d in detections] == [2]

    def test_nan_score_dropped(self):
        anchors = AnchorTable([(0.5, 0.5)])
        decoder = BoxDecoder(256, 256)

        assert decoder.decode(np.array([np.nan]), np.ones((1, 4)), anchors) == []
