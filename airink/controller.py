"""
Controller Module - Per-Frame Mode State Machine
================================================
Owns every piece of mutable session state and routes the stabilized
gesture to the view transform, the ink engine or the menu cursor.

Frame flow:
    hands -> PoseClassifier -> raw gesture -> GestureStabilizer
          -> active gesture -> CANVAS (zoom / dissolve / draw)
                            or MENU (cursor)
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from .config import Settings
from .geometry import Hand, HandLandmark, ScreenPoint, is_valid_hand
from .gestures import Gesture, GestureStabilizer, PoseClassifier
from .ink import InkEngine
from .menu import MenuSelection
from .view import ViewTransform, landmark_to_normalized, landmark_to_screen

logger = logging.getLogger(__name__)


class Mode(Enum):
    CANVAS = 'CANVAS'
    MENU = 'MENU'


@dataclass
class MenuState:
    """
    Menu toggle bookkeeping.

    Attributes:
        is_open: Whether the menu is shown
        progress: Open-palm dwell accumulator (0-1)
        last_toggle: Clock time of the last toggle
        armed: False after a toggle until the palm is released
    """
    is_open: bool = False
    progress: float = 0.0
    last_toggle: Optional[float] = None
    armed: bool = True


@dataclass
class FrameResult:
    """What the presentation layer needs after one frame."""
    mode: Mode
    raw_gesture: Gesture
    active_gesture: Gesture
    cursor: Optional[Tuple[float, float]]
    menu_progress: float
    dwell_anchor: Optional[ScreenPoint]
    toggled: bool = False


class DrawingSession:
    """
    One drawing session fed by the frame loop.

    All state (stabilizer buffer, view transform, ink, menu flags) lives
    here and is mutated only inside process_frame and apply_selection.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        width: int = 1280,
        height: int = 720,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Args:
            settings: Canonical thresholds
            width: Screen width in pixels
            height: Screen height in pixels
            clock: Time source for the toggle cooldown
            rng: Random generator for dissolve particles
        """
        self.settings = settings or Settings()
        self.width = width
        self.height = height
        self._clock = clock

        self.classifier = PoseClassifier(self.settings)
        self.stabilizer = GestureStabilizer(self.settings.buffer_size)
        self.view = ViewTransform(self.settings.min_scale, self.settings.max_scale)
        self.ink = InkEngine(self.settings, rng=rng)
        self.menu = MenuState()

        self._cursor: Optional[Tuple[float, float]] = None

    @property
    def mode(self) -> Mode:
        return Mode.MENU if self.menu.is_open else Mode.CANVAS

    @property
    def active_gesture(self) -> Gesture:
        return self.stabilizer.active

    @property
    def cursor(self) -> Optional[Tuple[float, float]]:
        return self._cursor

    def resize(self, width: int, height: int):
        self.width = width
        self.height = height

    def _to_screen(self, landmark) -> ScreenPoint:
        return landmark_to_screen(landmark, self.width, self.height, self.settings.mirror)

    def process_frame(self, hands: Optional[Sequence[Hand]], now: Optional[float] = None) -> FrameResult:
        """
        Run classification, stabilization and dispatch for one frame.

        Args:
            hands: Hands reported by the detector (None or empty for none)
            now: Clock time for this frame (defaults to the session clock)

        Returns:
            FrameResult for the presentation layer
        """
        now = self._clock() if now is None else now
        hands = list(hands or [])[:2]

        raw = self.classifier.classify(hands, self.stabilizer.pinch_active)
        active = self.stabilizer.push(raw)

        # A degenerate primary hand never hands control to the secondary
        primary = hands[0] if hands and is_valid_hand(hands[0]) else None
        secondary = None
        if primary is not None and len(hands) > 1 and is_valid_hand(hands[1]):
            secondary = hands[1]

        toggled = self._update_menu_toggle(active, now)

        if self.menu.is_open:
            self._menu_frame(active, primary)
        else:
            self._canvas_frame(active, primary, secondary)

        anchor = None
        if primary is not None and self.menu.progress > 0:
            anchor = self._to_screen(primary[HandLandmark.MIDDLE_MCP])

        return FrameResult(
            mode=self.mode,
            raw_gesture=raw,
            active_gesture=active,
            cursor=self._cursor,
            menu_progress=self.menu.progress,
            dwell_anchor=anchor,
            toggled=toggled
        )

    def _update_menu_toggle(self, active: Gesture, now: float) -> bool:
        """
        Open-palm dwell accumulator with latch and cooldown.

        Returns:
            True if the menu toggled this frame
        """
        s = self.settings
        menu = self.menu

        if active != Gesture.OPEN_PALM:
            menu.progress = max(menu.progress - s.dwell_step, 0.0)
            cooled = menu.last_toggle is None or now - menu.last_toggle >= s.toggle_cooldown
            if not menu.armed and cooled:
                menu.armed = True
            return False

        if not menu.armed:
            return False

        menu.progress = min(menu.progress + s.dwell_step, 1.0)
        if menu.progress < 1.0 - 1e-9:
            return False

        self._toggle(now)
        menu.armed = False
        return True

    def _toggle(self, now: float):
        self.menu.is_open = not self.menu.is_open
        self.menu.progress = 0.0
        self.menu.last_toggle = now
        self.stabilizer.clear()
        self.ink.end_stroke()
        self.view.end_zoom()
        self._cursor = None
        logger.info("Menu %s", "opened" if self.menu.is_open else "closed")

    def _menu_frame(self, active: Gesture, primary: Optional[Hand]):
        """Only pointing moves the cursor; everything else hides it."""
        if active != Gesture.POINTING or primary is None:
            self._cursor = None
            return

        raw_x, raw_y = landmark_to_normalized(primary[HandLandmark.INDEX_TIP], self.settings.mirror)
        if self._cursor is None:
            self._cursor = (raw_x, raw_y)
            return

        k = self.settings.cursor_smoothing
        px, py = self._cursor
        self._cursor = (px + (raw_x - px) * k, py + (raw_y - py) * k)

    def _canvas_frame(self, active: Gesture, primary: Optional[Hand], secondary: Optional[Hand]):
        self._cursor = None

        # Zoom
        if active == Gesture.TWO_FINGER_ZOOM and primary is not None and secondary is not None:
            self.view.apply_zoom(
                self._to_screen(primary[HandLandmark.INDEX_TIP]),
                self._to_screen(secondary[HandLandmark.INDEX_TIP])
            )
            self.ink.cancel_stroke()
        else:
            self.view.end_zoom()

        # Dissolve
        if active == Gesture.PEACE_CLEAR:
            self.ink.end_stroke()
            if self.ink.has_content():
                self.ink.dissolve()

        # Draw
        target = None
        if active == Gesture.PINCH_DRAW and primary is not None:
            target = self.view.to_world(self._to_screen(primary[HandLandmark.INDEX_TIP]))
        self.ink.begin_or_continue_stroke(active, target)

    def apply_selection(self, selection: MenuSelection):
        """
        Apply a menu selection to subsequent strokes.

        Raises:
            ValueError: for an unknown selection kind
        """
        if selection.kind == 'tool':
            self.ink.set_tool(selection.value)
        elif selection.kind == 'color':
            self.ink.set_color(selection.value)
        elif selection.kind == 'size':
            self.ink.set_size(selection.value)
        else:
            raise ValueError(f"Unknown selection kind: {selection.kind}")
        logger.debug("Selected %s = %s", selection.kind, selection.value)

    def toggle_menu(self, now: Optional[float] = None):
        """Keyboard shortcut: toggle the menu immediately."""
        self._toggle(self._clock() if now is None else now)

    def dissolve(self) -> int:
        """Keyboard shortcut: dissolve all sealed ink."""
        self.ink.end_stroke()
        return self.ink.dissolve() if self.ink.has_content() else 0
