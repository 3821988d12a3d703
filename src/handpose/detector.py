"""Palm detector: preprocessing, model evaluation, decoding and suppression."""

from __future__ import annotations

import logging
from typing import Optional

import cv2
import numpy as np

from handpose.anchors import AnchorTable
from handpose.backends.base import ModelBackend, evaluate
from handpose.box import Detection
from handpose.decoder import DEFAULT_MIN_SCORE, NUM_PALM_LANDMARKS, BoxDecoder
from handpose.errors import InferenceError
from handpose.nms import NonMaxSuppressor

logger = logging.getLogger(__name__)

# score logit + (dx, dy, w, h)
_BOX_COLUMNS = 5


class HandDetector:
    """Locate the strongest palm in a frame.

    The frame is resized to the model input, scaled to ``[-1, 1]`` and fed
    to the detector model, whose output is ``(1, N, 19)``: one score logit,
    four box values and seven palm keypoints per anchor. Only the primary
    hand is tracked, so suppression keeps a single box.

    Args:
        model: Backend wrapping the palm detector model.
        input_width: Detector input width in pixels.
        input_height: Detector input height in pixels.
        anchors: Anchor table matching the detector's output rows.
        iou_threshold: Suppression overlap threshold.
        score_threshold: Suppression score threshold.
        min_score: Decoder viability floor (clamped to ``score_threshold``).
        output_name: Name of the prediction tensor (default: first output).

    Example:
        >>> detector = HandDetector(backend, 256, 256, anchors, 0.3, 0.5)
        >>> detection = detector.detect(frame_rgb)
        >>> if detection is not None:
        ...     print(detection.box, detection.score)
    """

    def __init__(
        self,
        model: ModelBackend,
        input_width: int,
        input_height: int,
        anchors: AnchorTable,
        iou_threshold: float = 0.3,
        score_threshold: float = 0.5,
        min_score: float = DEFAULT_MIN_SCORE,
        output_name: Optional[str] = None,
    ):
        self._model = model
        self._width = input_width
        self._height = input_height
        self._anchors = anchors
        self._output_name = output_name
        self._decoder = BoxDecoder(input_width, input_height, min(min_score, score_threshold))
        self._suppressor = NonMaxSuppressor(iou_threshold, score_threshold, max_output_size=1)

    @property
    def anchors(self) -> AnchorTable:
        return self._anchors

    def cleanup(self) -> None:
        """Release the detector model."""
        self._model.cleanup()

    def preprocess(self, image: np.ndarray) -> np.ndarray:
        """Resize an RGB frame to the model input and scale to ``[-1, 1]``."""
        resized = cv2.resize(image, (self._width, self._height), interpolation=cv2.INTER_LINEAR)
        normalized = (resized.astype(np.float32) / 255.0 - 0.5) * 2.0
        return normalized[np.newaxis, ...]

    def detect(self, image: np.ndarray) -> Optional[Detection]:
        """Detect the primary hand.

        Args:
            image: RGB frame (H, W, 3).

        Returns:
            Strongest detection in source image pixels, or None when no
            candidate survives thresholding.

        Raises:
            InferenceError: Model evaluation failed or returned a malformed
                prediction.
        """
        input_h, input_w = image.shape[:2]
        outputs = evaluate(self._model, self.preprocess(image))
        prediction = self._select_output(outputs)

        if prediction.ndim == 3:
            if prediction.shape[0] != 1:
                raise InferenceError(f"Unexpected detector output shape {prediction.shape}")
            prediction = prediction[0]
        if prediction.ndim != 2 or prediction.shape[1] < _BOX_COLUMNS:
            raise InferenceError(f"Unexpected detector output shape {prediction.shape}")
        if prediction.shape[0] != len(self._anchors):
            raise InferenceError(
                f"Detector produced {prediction.shape[0]} rows for {len(self._anchors)} anchors"
            )

        raw_landmarks = None
        if prediction.shape[1] >= _BOX_COLUMNS + NUM_PALM_LANDMARKS * 2:
            raw_landmarks = prediction[:, _BOX_COLUMNS:_BOX_COLUMNS + NUM_PALM_LANDMARKS * 2]

        candidates = self._decoder.decode(
            prediction[:, 0], prediction[:, 1:_BOX_COLUMNS], self._anchors, raw_landmarks,
        )
        kept = self._suppressor.suppress(candidates)
        if not kept:
            return None

        best = kept[0].scale((input_w / self._width, input_h / self._height))
        logger.debug(
            "Palm detected: score=%.3f anchor=%d rotation=%.3f",
            best.score, best.index, best.rotation,
        )
        return best

    def _select_output(self, outputs) -> np.ndarray:
        if self._output_name is not None:
            if self._output_name not in outputs:
                raise InferenceError(
                    f"Detector output '{self._output_name}' missing; got {sorted(outputs)}"
                )
            return outputs[self._output_name]
        return next(iter(outputs.values()))


__all__ = ["HandDetector"]
