"""
View Module - Screen <-> World Transform
========================================
Pan/zoom mapping between the drawing surface and the display, driven by
the two-hand zoom gesture.

    screen = world * scale + offset
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .geometry import ScreenPoint, WorldPoint, distance, midpoint

logger = logging.getLogger(__name__)


def landmark_to_normalized(landmark, mirror: bool = False) -> Tuple[float, float]:
    """
    Detector landmark to normalized screen coordinates.

    Args:
        landmark: Object with normalized .x/.y
        mirror: Flip horizontally (when the displayed frame is mirrored
            but the detector saw the raw frame)
    """
    x = 1.0 - landmark.x if mirror else landmark.x
    return (x, landmark.y)


def landmark_to_screen(landmark, width: int, height: int, mirror: bool = False) -> ScreenPoint:
    """Detector landmark to display pixels."""
    x, y = landmark_to_normalized(landmark, mirror)
    return ScreenPoint(x * width, y * height)


class ViewTransform:
    """
    Uniform scale + offset between world and screen space.

    Only the zoom gesture mutates it. The first zoom frame records a
    baseline and never divides.
    """

    def __init__(self, min_scale: float = 0.5, max_scale: float = 5.0):
        self.min_scale = min_scale
        self.max_scale = max_scale

        self.offset_x = 0.0
        self.offset_y = 0.0
        self.scale = 1.0

        # Zoom baseline from the previous frame
        self._last_distance: Optional[float] = None

    @property
    def offset(self) -> Tuple[float, float]:
        return (self.offset_x, self.offset_y)

    @property
    def is_zooming(self) -> bool:
        return self._last_distance is not None

    def to_screen(self, point: WorldPoint) -> ScreenPoint:
        return ScreenPoint(
            point.x * self.scale + self.offset_x,
            point.y * self.scale + self.offset_y
        )

    def to_world(self, point: ScreenPoint) -> WorldPoint:
        return WorldPoint(
            (point.x - self.offset_x) / self.scale,
            (point.y - self.offset_y) / self.scale
        )

    def world_to_screen_array(self, points: np.ndarray) -> np.ndarray:
        """Vectorized to_screen for an (N, 2) array of world coordinates."""
        return points * self.scale + np.array([self.offset_x, self.offset_y])

    def apply_zoom(self, p1: ScreenPoint, p2: ScreenPoint) -> bool:
        """
        Update scale/offset from the two index-tip screen positions.

        The zoom center stays fixed on screen under the new scale.

        Returns:
            True if the transform changed, False on a calibration frame
        """
        current_distance = distance(p1, p2)
        center = midpoint(p1, p2)
        changed = False

        if self._last_distance is not None and self._last_distance > 0:
            new_scale = float(np.clip(
                self.scale * (current_distance / self._last_distance),
                self.min_scale, self.max_scale
            ))
            ratio = new_scale / self.scale
            self.offset_x = center.x - (center.x - self.offset_x) * ratio
            self.offset_y = center.y - (center.y - self.offset_y) * ratio
            changed = new_scale != self.scale
            self.scale = new_scale

        self._last_distance = current_distance
        return changed

    def end_zoom(self):
        """Forget the zoom baseline so the next zoom starts clean."""
        if self._last_distance is not None:
            logger.debug("Zoom ended at scale %.2f", self.scale)
        self._last_distance = None

    def reset(self):
        """Back to identity."""
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.scale = 1.0
        self.end_zoom()
