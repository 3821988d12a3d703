"""Rotation and homogeneous 2-D transform helpers.

Matrices are 3x3 float64 arrays acting on homogeneous column vectors
``(x, y, 1)`` in image pixel space (y axis pointing down).
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def normalize_radians(angle: float) -> float:
    """Wrap an angle into ``[-pi, pi)``."""
    return angle - 2 * math.pi * math.floor((angle + math.pi) / (2 * math.pi))


def compute_rotation(point1: Sequence[float], point2: Sequence[float]) -> float:
    """Angle that turns the ``point1 -> point2`` direction upright.

    Zero when ``point2`` is straight above ``point1`` in the image.
    """
    radians = math.pi / 2 - math.atan2(-(point2[1] - point1[1]), point2[0] - point1[0])
    return normalize_radians(radians)


def build_translation_matrix(x: float, y: float) -> np.ndarray:
    return np.array([[1.0, 0.0, x], [0.0, 1.0, y], [0.0, 0.0, 1.0]])


def build_rotation_matrix(rotation: float, center: Sequence[float]) -> np.ndarray:
    """Rotation by ``rotation`` radians about ``center``."""
    cos_a = math.cos(rotation)
    sin_a = math.sin(rotation)
    rotation_matrix = np.array([[cos_a, -sin_a, 0.0], [sin_a, cos_a, 0.0], [0.0, 0.0, 1.0]])
    translation = build_translation_matrix(center[0], center[1])
    negative_translation = build_translation_matrix(-center[0], -center[1])
    return translation @ rotation_matrix @ negative_translation


def invert_transform_matrix(matrix: np.ndarray) -> np.ndarray:
    """Invert a rigid (rotation + translation) transform."""
    rotation_t = matrix[:2, :2].T
    translation = matrix[:2, 2]
    inverted = np.eye(3)
    inverted[:2, :2] = rotation_t
    inverted[:2, 2] = -rotation_t @ translation
    return inverted


def rotate_point(point: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Apply ``matrix`` to a 2-D point and return the transformed ``(x, y)``."""
    homogeneous = np.array([point[0], point[1], 1.0])
    return (matrix @ homogeneous)[:2]


def rotate_points(points: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Vectorized :func:`rotate_point` for an ``(N, 2+)`` array (extra columns ignored)."""
    points = np.asarray(points, dtype=np.float64)
    homogeneous = np.hstack([points[:, :2], np.ones((points.shape[0], 1))])
    return homogeneous @ matrix[:2].T


__all__ = [
    "normalize_radians",
    "compute_rotation",
    "build_translation_matrix",
    "build_rotation_matrix",
    "invert_transform_matrix",
    "rotate_point",
    "rotate_points",
]
