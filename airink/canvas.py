"""
Canvas Module - Ink Rendering
=============================
Renders the ink engine's strokes and particles into a transparent BGRA
layer under the current view transform, and composites that layer over
the camera feed.
"""

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from .geometry import WorldPoint
from .ink import InkEngine, Particle, Stroke
from .view import ViewTransform

BACKGROUND_COLOR = (17, 17, 17)


def quadratic_path(points: Sequence[WorldPoint], steps: int = 8) -> np.ndarray:
    """
    Expand raw stroke points into a smooth running quadratic curve.

    Each interior point is a control point; every segment ends at the
    midpoint between two consecutive raw points, and the path finishes with
    a straight segment to the last point.

    Args:
        points: Raw stroke points
        steps: Samples per curve segment

    Returns:
        (N, 2) float array, empty if fewer than two points
    """
    if len(points) < 2:
        return np.empty((0, 2), dtype=np.float64)

    raw = np.array([(p.x, p.y) for p in points], dtype=np.float64)
    path = [raw[:1]]
    t = np.linspace(0.0, 1.0, steps + 1)[1:, None]

    start = raw[0]
    for i in range(1, len(raw) - 1):
        control = raw[i]
        end = (raw[i] + raw[i + 1]) / 2
        curve = (1 - t) ** 2 * start + 2 * (1 - t) * t * control + t ** 2 * end
        path.append(curve)
        start = end

    path.append(raw[-1:])
    return np.vstack(path)


class InkCanvas:
    """
    Transparent layer the ink is drawn onto.

    Draw order per frame: sealed strokes in history order, the stroke in
    progress, then particles. Eraser strokes clear pixels on the layer so
    they subtract ink drawn before them.
    """

    def __init__(self, width: int = 1280, height: int = 720):
        """
        Args:
            width: Layer width in pixels
            height: Layer height in pixels
        """
        self.width = width
        self.height = height

    def resize(self, new_width: int, new_height: int):
        self.width = new_width
        self.height = new_height

    def render_frame(self, engine: InkEngine, view: ViewTransform, advance: bool = True) -> np.ndarray:
        """
        Render ink and particles, then step the particle simulation.

        Args:
            engine: Drawing state to render
            view: Current world -> screen transform
            advance: Step the particle simulation after drawing

        Returns:
            BGRA layer
        """
        layer = np.zeros((self.height, self.width, 4), dtype=np.uint8)

        for stroke in engine.strokes:
            self._draw_stroke(layer, stroke, view)
        if engine.current_stroke is not None:
            self._draw_stroke(layer, engine.current_stroke, view)

        for particle in engine.particles:
            self._draw_particle(layer, particle, view)

        if advance:
            engine.step_particles()

        return layer

    def _draw_stroke(self, layer: np.ndarray, stroke: Stroke, view: ViewTransform):
        if not stroke.is_renderable():
            return

        path = view.world_to_screen_array(quadratic_path(stroke.points))
        pts = np.round(path).astype(np.int32).reshape(-1, 1, 2)
        thickness = max(1, int(round(stroke.size * view.scale)))

        if stroke.is_eraser:
            color = (0, 0, 0, 0)
            line_type = cv2.LINE_8
        else:
            color = (*stroke.color, 255)
            line_type = cv2.LINE_AA

        cv2.polylines(layer, [pts], False, color, thickness, line_type)

        # Round caps
        radius = thickness // 2
        if radius > 0:
            for end in (pts[0, 0], pts[-1, 0]):
                cv2.circle(layer, (int(end[0]), int(end[1])), radius, color, -1, line_type)

    def _draw_particle(self, layer: np.ndarray, particle: Particle, view: ViewTransform):
        opacity = particle.opacity
        if opacity <= 0:
            return

        cx, cy = view.to_screen(WorldPoint(particle.x, particle.y)).to_tuple()
        r = max(1, int(round(particle.size / 2 * view.scale)))

        x0, y0 = max(0, cx - r), max(0, cy - r)
        x1, y1 = min(self.width, cx + r + 1), min(self.height, cy + r + 1)
        if x0 >= x1 or y0 >= y1:
            return

        roi = layer[y0:y1, x0:x1]
        patch = roi.copy()
        cv2.circle(patch, (cx - x0, cy - y0), r, (*particle.color, 255), -1, cv2.LINE_AA)
        layer[y0:y1, x0:x1] = cv2.addWeighted(patch, opacity, roi, 1 - opacity, 0)

    def overlay_on_frame(
        self,
        frame: Optional[np.ndarray],
        layer: np.ndarray,
        alpha: float = 0.85
    ) -> np.ndarray:
        """
        Overlay the ink layer on a video frame.

        Args:
            frame: BGR video frame, None for a plain background
            layer: BGRA layer from render_frame
            alpha: Opacity of the ink (0-1)

        Returns:
            Composited BGR image
        """
        if frame is None:
            frame = np.full((self.height, self.width, 3), BACKGROUND_COLOR, dtype=np.uint8)
        elif frame.shape[:2] != layer.shape[:2]:
            layer = cv2.resize(layer, (frame.shape[1], frame.shape[0]))

        ink_alpha = (layer[:, :, 3:4].astype(np.float32) / 255.0) * alpha
        blended = frame.astype(np.float32) * (1 - ink_alpha) + layer[:, :, :3].astype(np.float32) * ink_alpha
        return blended.astype(np.uint8)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)
