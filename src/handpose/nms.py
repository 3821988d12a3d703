"""Greedy non-maximum suppression over detections."""

from __future__ import annotations

from typing import List, Optional, Sequence

from handpose.box import Detection, iou
from handpose.errors import ConfigError


def suppress(
    detections: Sequence[Detection],
    iou_threshold: float,
    score_threshold: float,
    max_output_size: Optional[int] = None,
) -> List[Detection]:
    """Reduce overlapping detections to the strongest non-overlapping set.

    Detections scoring below ``score_threshold`` are dropped. The rest are
    ranked by score (ties by input position) and greedily selected; each
    selection removes every remaining box whose IoU with it exceeds
    ``iou_threshold``.

    Args:
        detections: Candidate detections.
        iou_threshold: Maximum IoU allowed between two kept boxes.
        score_threshold: Minimum score for a candidate to be considered.
        max_output_size: Stop after this many selections (None = no limit).

    Returns:
        Kept detections, highest score first.
    """
    if max_output_size is not None and max_output_size <= 0:
        return []

    ranked = sorted(
        ((i, d) for i, d in enumerate(detections) if d.score >= score_threshold),
        key=lambda item: (-item[1].score, item[0]),
    )
    remaining = [d for _, d in ranked]

    selected: List[Detection] = []
    while remaining:
        best = remaining.pop(0)
        selected.append(best)
        if max_output_size is not None and len(selected) >= max_output_size:
            break
        remaining = [d for d in remaining if iou(best.box, d.box) <= iou_threshold]
    return selected


class NonMaxSuppressor:
    """Suppression with fixed thresholds.

    Args:
        iou_threshold: Overlap above which the weaker box is removed.
        score_threshold: Minimum candidate score.
        max_output_size: Optional cap on the number of kept boxes.

    Raises:
        ConfigError: A threshold is outside [0, 1].
    """

    def __init__(
        self,
        iou_threshold: float = 0.3,
        score_threshold: float = 0.5,
        max_output_size: Optional[int] = None,
    ):
        for name, value in (("iou_threshold", iou_threshold), ("score_threshold", score_threshold)):
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be in [0, 1], got {value}")
        self.iou_threshold = iou_threshold
        self.score_threshold = score_threshold
        self.max_output_size = max_output_size

    def suppress(self, detections: Sequence[Detection]) -> List[Detection]:
        return suppress(
            detections,
            self.iou_threshold,
            self.score_threshold,
            max_output_size=self.max_output_size,
        )


__all__ = ["suppress", "NonMaxSuppressor"]
