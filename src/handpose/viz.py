"""OpenCV drawing helpers for hand pose results.

Example:
    >>> overlay = HandOverlay()
    >>> display = overlay.draw(frame_bgr, hand)
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import cv2
import numpy as np

from handpose.box import BoundingBox
from handpose.types import MESH_ANNOTATIONS, HandLandmarks

FONT = cv2.FONT_HERSHEY_SIMPLEX

# Bones of the hand skeleton as (from, to) landmark index pairs.
HAND_CONNECTIONS: List[Tuple[int, int]] = [
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (0, 17), (17, 18), (18, 19), (19, 20),
]

# BGR
FINGER_COLORS = {
    "thumb": (0, 200, 255),
    "index_finger": (0, 255, 0),
    "middle_finger": (255, 200, 0),
    "ring_finger": (255, 0, 200),
    "pinky": (0, 80, 255),
    "palm_base": (255, 255, 255),
}


def draw_box(
    image: np.ndarray,
    box: BoundingBox,
    color: Tuple[int, int, int] = (0, 255, 0),
    thickness: int = 2,
    label: Optional[str] = None,
) -> None:
    """Draw ``box`` onto ``image`` in place."""
    x1, x2 = sorted((box.start_point[0], box.end_point[0]))
    y1, y2 = sorted((box.start_point[1], box.end_point[1]))
    p1 = (int(round(x1)), int(round(y1)))
    p2 = (int(round(x2)), int(round(y2)))
    cv2.rectangle(image, p1, p2, color, thickness)

    if label:
        label_y = p1[1] - 5 if p1[1] > 25 else p2[1] + 15
        cv2.putText(image, label, (p1[0], label_y), FONT, 0.45, color, 1)


def draw_hand(
    image: np.ndarray,
    hand: HandLandmarks,
    line_color: Tuple[int, int, int] = (200, 200, 200),
    radius: int = 3,
) -> None:
    """Draw the hand skeleton onto ``image`` in place."""
    points = [(int(round(x)), int(round(y))) for x, y in hand.landmarks[:, :2]]

    for start, end in HAND_CONNECTIONS:
        cv2.line(image, points[start], points[end], line_color, 2)

    for name, indices in MESH_ANNOTATIONS.items():
        color = FINGER_COLORS.get(name, (255, 255, 255))
        for idx in indices:
            cv2.circle(image, points[idx], radius, color, -1)


class HandOverlay:
    """Renders a hand result (skeleton, box, confidence) on a frame copy.

    Args:
        show_box: Draw the hand bounding box.
        show_confidence: Label the box with the mesh confidence.
        box_color: BGR color of the box.
    """

    def __init__(
        self,
        show_box: bool = True,
        show_confidence: bool = True,
        box_color: Tuple[int, int, int] = (0, 255, 0),
    ):
        self._show_box = show_box
        self._show_confidence = show_confidence
        self._box_color = box_color

    def draw(self, frame: np.ndarray, hand: Optional[HandLandmarks]) -> np.ndarray:
        """Draw ``hand`` on a copy of ``frame`` (BGR).

        Returns:
            Annotated frame (copy). With no hand the copy is unannotated.
        """
        output = frame.copy()
        if hand is None:
            return output

        if self._show_box:
            label = f"hand {hand.confidence:.2f}" if self._show_confidence else None
            draw_box(output, hand.bounding_box, self._box_color, label=label)
        draw_hand(output, hand)
        return output


class FrameDisplay:
    """Live display window using cv2.imshow. ESC to quit.

    Args:
        title: Window title.
        wait_ms: cv2.waitKey delay in milliseconds.
    """

    def __init__(self, title: str = "handpose", wait_ms: int = 1):
        self._title = title
        self._wait_ms = wait_ms

    def show(self, frame: np.ndarray) -> bool:
        """Display ``frame``. Returns False if the user pressed ESC."""
        cv2.imshow(self._title, frame)
        key = cv2.waitKey(self._wait_ms) & 0xFF
        return key != 27  # ESC

    def close(self) -> None:
        """Close the display window."""
        cv2.destroyAllWindows()


class VideoSaver:
    """Write annotated frames to a video file.

    Args:
        path: Output file path (e.g., "output.mp4").
        fps: Output video FPS.
        width: Frame width.
        height: Frame height.
        codec: FourCC codec string (default "mp4v").
    """

    def __init__(self, path: str, fps: float, width: int, height: int, codec: str = "mp4v"):
        self._path = path
        fourcc = cv2.VideoWriter_fourcc(*codec)
        self._writer = cv2.VideoWriter(path, fourcc, fps, (width, height))
        if not self._writer.isOpened():
            raise IOError(f"Failed to open video writer: {path}")

    def write(self, frame: np.ndarray) -> None:
        self._writer.write(frame)

    def close(self) -> None:
        """Release the video writer."""
        self._writer.release()


__all__ = [
    "HAND_CONNECTIONS",
    "FINGER_COLORS",
    "draw_box",
    "draw_hand",
    "HandOverlay",
    "FrameDisplay",
    "VideoSaver",
]
