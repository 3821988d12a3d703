"""Anchor table for the single-shot palm detector.

In single shot detector pipelines the output space is discretized into a
fixed set of boxes, each scored during prediction. Anchors hold the
normalized centers of those boxes, one per detector output row.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, NamedTuple, Union

import numpy as np

logger = logging.getLogger(__name__)


class Anchor(NamedTuple):
    """Box-center prior in normalized grid space."""

    x: float
    y: float


class AnchorTable:
    """Immutable ordered sequence of anchors.

    Accepts ``(x, y)`` pairs or records with ``x_center``/``y_center`` keys
    (the layout of the published ``anchors.json``; extra keys such as
    ``w``/``h`` are ignored).

    Example:
        >>> table = AnchorTable([(0.5, 0.5), (0.25, 0.75)])
        >>> len(table)
        2
        >>> table[1]
        Anchor(x=0.25, y=0.75)
    """

    def __init__(self, anchors: Iterable[Any]):
        centers = [_parse_anchor(a) for a in anchors]
        array = np.asarray(centers, dtype=np.float32).reshape(-1, 2)
        array.flags.writeable = False
        self._centers = array

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AnchorTable":
        """Load anchors from a local ``.json`` or ``.csv`` file.

        CSV rows are ``x_center, y_center[, w, h]`` without a header.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Anchor file not found: {path}")

        if path.suffix.lower() == ".csv":
            with open(path, newline="") as f:
                rows = [row for row in csv.reader(f) if row]
            table = cls((float(r[0]), float(r[1])) for r in rows)
        else:
            with open(path) as f:
                table = cls(json.load(f))

        logger.info("Loaded %d anchors from %s", len(table), path)
        return table

    @property
    def centers(self) -> np.ndarray:
        """Read-only (N, 2) float32 array of anchor centers."""
        return self._centers

    def __len__(self) -> int:
        return self._centers.shape[0]

    def __getitem__(self, index: int) -> Anchor:
        x, y = self._centers[index]
        return Anchor(float(x), float(y))

    def __iter__(self) -> Iterator[Anchor]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return f"AnchorTable(n={len(self)})"


def _parse_anchor(anchor: Any) -> tuple[float, float]:
    if isinstance(anchor, dict):
        try:
            return float(anchor["x_center"]), float(anchor["y_center"])
        except KeyError as e:
            raise ValueError(f"Anchor record missing key {e}: {anchor!r}") from e
    if len(anchor) < 2:
        raise ValueError(f"Anchor needs at least two coordinates: {anchor!r}")
    return float(anchor[0]), float(anchor[1])


__all__ = ["Anchor", "AnchorTable"]
