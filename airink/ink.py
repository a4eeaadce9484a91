"""
Ink Module - Strokes, Smoothing and Dissolve Particles
======================================================
Owns the drawing state: sealed stroke history, the stroke in progress and
the particle set produced when ink is dissolved. Pure state and simulation;
rendering lives in canvas.py.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple

import numpy as np

from .config import Settings
from .geometry import WorldPoint, distance, lerp_point
from .gestures import Gesture

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]


class Tool(Enum):
    """Drawing tools selectable from the menu."""
    PEN = auto()
    ERASER = auto()


class ColorPalette:
    """Menu color palette (BGR)."""

    RED = (68, 68, 239)
    ORANGE = (22, 115, 249)
    YELLOW = (8, 179, 234)
    GREEN = (94, 197, 34)
    BLUE = (246, 130, 59)
    PURPLE = (247, 85, 168)
    WHITE = (255, 255, 255)
    BLACK = (0, 0, 0)

    @classmethod
    def get_all(cls) -> List[Color]:
        """Get all palette colors."""
        return [
            cls.RED, cls.ORANGE, cls.YELLOW, cls.GREEN,
            cls.BLUE, cls.PURPLE, cls.WHITE, cls.BLACK
        ]


BRUSH_SIZES = [2, 6, 12, 24]


@dataclass
class Stroke:
    """
    A single stroke on the drawing surface.

    Attributes:
        points: World-space points in drawing order
        color: BGR color
        size: Line width in world units
        is_eraser: Eraser strokes remove ink instead of painting
    """
    points: List[WorldPoint] = field(default_factory=list)
    color: Color = ColorPalette.WHITE
    size: int = 6
    is_eraser: bool = False

    def add_point(self, point: WorldPoint):
        self.points.append(point)

    @property
    def last_point(self) -> Optional[WorldPoint]:
        return self.points[-1] if self.points else None

    def is_renderable(self) -> bool:
        """Fewer than two points draws nothing."""
        return len(self.points) >= 2


@dataclass
class Particle:
    """One dissolve particle in world space."""
    x: float
    y: float
    vx: float
    vy: float
    color: Color
    size: float
    life: float

    @property
    def opacity(self) -> float:
        return float(np.clip(self.life, 0.0, 1.0))


class InkEngine:
    """
    Stroke accumulation and the dissolve particle simulation.

    Incoming pen positions are smoothed with a speed-adaptive exponential
    filter: slow movement is smoothed heavily for stability, fast movement
    passes through for responsiveness. Points closer than the minimum
    spacing to the stroke's last point are dropped.
    """

    def __init__(self, settings: Optional[Settings] = None, rng: Optional[np.random.Generator] = None):
        """
        Args:
            settings: Thresholds and particle constants
            rng: Random generator used for particle velocities
        """
        self.settings = settings or Settings()
        self._rng = rng if rng is not None else np.random.default_rng()

        self._strokes: List[Stroke] = []
        self._current_stroke: Optional[Stroke] = None
        self._particles: List[Particle] = []

        # Smoothing anchor (last emitted point)
        self._last_point: Optional[WorldPoint] = None

        # Tool settings for the next stroke
        self._tool = Tool.PEN
        self._color: Color = ColorPalette.WHITE
        self._size = self.settings.default_size

    # Read access for rendering

    @property
    def strokes(self) -> List[Stroke]:
        return list(self._strokes)

    @property
    def current_stroke(self) -> Optional[Stroke]:
        return self._current_stroke

    @property
    def particles(self) -> List[Particle]:
        return list(self._particles)

    @property
    def is_drawing(self) -> bool:
        return self._current_stroke is not None

    # Tool settings

    @property
    def tool(self) -> Tool:
        return self._tool

    @property
    def color(self) -> Color:
        return self._color

    @property
    def size(self) -> int:
        return self._size

    def set_tool(self, tool: Tool):
        self._tool = tool

    def set_color(self, color: Color):
        self._color = tuple(color)

    def set_size(self, size: int):
        self._size = max(1, min(int(size), 50))

    # Drawing

    def smooth_point(self, target: WorldPoint, last: Optional[WorldPoint]) -> WorldPoint:
        """
        Distance-adaptive exponential smoothing.

        alpha = clamp(d / speed, min_alpha, max_alpha), so a 2 unit jitter
        moves the pen 15% of the way while a 20 unit jump moves it 80%.
        """
        if last is None:
            return target
        s = self.settings
        alpha = float(np.clip(distance(target, last) / s.smoothing_speed,
                              s.smoothing_min_alpha, s.smoothing_max_alpha))
        return lerp_point(last, target, alpha)

    def begin_or_continue_stroke(self, gesture: Gesture, target: Optional[WorldPoint]):
        """
        Advance the pen for one canvas frame.

        Args:
            gesture: The active (stabilized) gesture
            target: Raw index-tip position in world space, None if unknown
        """
        if gesture != Gesture.PINCH_DRAW or target is None:
            self.end_stroke()
            return

        point = self.smooth_point(target, self._last_point)
        self._last_point = point

        if self._current_stroke is None:
            self.start_stroke(point)
        else:
            self.continue_stroke(point)

    def start_stroke(self, point: WorldPoint):
        """Open a new stroke with the current tool settings."""
        eraser = self._tool == Tool.ERASER
        self._current_stroke = Stroke(
            points=[point],
            color=ColorPalette.BLACK if eraser else self._color,
            size=self._size,
            is_eraser=eraser
        )

    def continue_stroke(self, point: WorldPoint) -> bool:
        """
        Append a point if it is far enough from the last one.

        Returns:
            True if the point was added
        """
        if self._current_stroke is None:
            self.start_stroke(point)
            return True

        last = self._current_stroke.last_point
        if last is not None and distance(last, point) <= self.settings.min_point_spacing:
            return False

        self._current_stroke.add_point(point)
        return True

    def end_stroke(self):
        """Seal the open stroke into history and reset the smoothing anchor."""
        if self._current_stroke is not None:
            self._strokes.append(self._current_stroke)
            logger.debug("Stroke sealed (%d points)", len(self._current_stroke.points))
        self._current_stroke = None
        self._last_point = None

    def cancel_stroke(self):
        """Discard the open stroke without sealing it."""
        self._current_stroke = None
        self._last_point = None

    # Dissolve

    def dissolve(self) -> int:
        """
        Turn every sealed stroke into particles and clear the history.

        Returns:
            Number of particles spawned
        """
        s = self.settings
        spawned: List[Particle] = []

        for stroke in self._strokes:
            for point in stroke.points[::s.dissolve_stride]:
                spawned.append(Particle(
                    x=point.x,
                    y=point.y,
                    vx=float(self._rng.uniform(-2.0, 2.0)),
                    vy=float(self._rng.uniform(-4.0, -1.0)),
                    color=stroke.color,
                    size=float(self._rng.uniform(0.0, stroke.size * 0.8)),
                    life=float(self._rng.uniform(1.05, 2.0))
                ))

        self._particles.extend(spawned)
        self._strokes = []

        logger.info("Dissolved ink into %d particles", len(spawned))
        return len(spawned)

    def step_particles(self):
        """Advance the simulation one frame and drop dead particles."""
        s = self.settings
        for p in self._particles:
            p.x += p.vx
            p.y += p.vy
            p.vy += s.particle_gravity
            p.vx *= s.particle_drag
            p.life -= s.particle_decay
            p.size *= s.particle_shrink

        self._particles = [p for p in self._particles if p.life > 0]

    # Queries

    def has_content(self) -> bool:
        return len(self._strokes) > 0

    def get_stroke_count(self) -> int:
        return len(self._strokes)

    def get_point_count(self) -> int:
        """Total points across sealed strokes."""
        return sum(len(s.points) for s in self._strokes)
