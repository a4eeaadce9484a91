"""
App Module - Main Application Interface
=======================================
Real-time gesture drawing window. Wires the camera, the hand tracker, the
drawing session, the ink renderer and the toolbox menu into one frame loop.
"""

import argparse
import logging
import time
from dataclasses import replace
from typing import List, Optional

import cv2
import numpy as np
from dotenv import load_dotenv

from .camera import Camera
from .canvas import InkCanvas
from .config import Settings
from .controller import DrawingSession, FrameResult, Mode
from .geometry import Hand
from .gestures import GESTURE_INFO, Gesture
from .hand_tracking import HandTracker, draw_landmarks
from .menu import ToolboxMenu

logger = logging.getLogger(__name__)

WINDOW_NAME = "AirInk"


class AirInkApp:
    """
    Main application class for gesture-based drawing.

    The frame loop is single-threaded: each camera frame is classified,
    dispatched and rendered before the next one is read.
    """

    UI_BG_COLOR = (30, 30, 30)
    UI_TEXT_COLOR = (255, 255, 255)
    UI_OPEN_COLOR = (94, 197, 34)
    UI_CLOSE_COLOR = (68, 68, 239)
    UI_ERROR_COLOR = (0, 0, 255)

    def __init__(self, settings: Settings):
        """
        Args:
            settings: Validated application settings
        """
        self.settings = settings

        self.camera = Camera(
            camera_id=settings.camera_id,
            width=settings.frame_width,
            height=settings.frame_height,
            fps=settings.fps
        )
        self.session = DrawingSession(settings, settings.frame_width, settings.frame_height)
        self.canvas = InkCanvas(settings.frame_width, settings.frame_height)
        self.menu = ToolboxMenu(settings.menu_select_step)

        self.hand_tracker: Optional[HandTracker] = None
        self._status = "Initializing Camera..."
        self._running = False

        # Performance tracking
        self._fps_counter = 0
        self._fps_time = time.time()
        self._current_fps = 0.0

    def _init_tracker(self):
        """Build the detector; on failure keep running without gestures."""
        try:
            self.hand_tracker = HandTracker(
                max_hands=self.settings.max_hands,
                min_detection_confidence=self.settings.detection_confidence,
                min_tracking_confidence=self.settings.tracking_confidence
            )
        except (OSError, RuntimeError, ValueError) as e:
            logger.error("Hand tracker unavailable: %s", e)
            self.hand_tracker = None
            self._status = "Hand tracking unavailable"

    def _update_fps(self):
        self._fps_counter += 1
        current_time = time.time()
        elapsed = current_time - self._fps_time

        if elapsed >= 1.0:
            self._current_fps = self._fps_counter / elapsed
            self._fps_counter = 0
            self._fps_time = current_time

    def _process_frame(self, frame: np.ndarray) -> np.ndarray:
        """Detect, dispatch and render one frame."""
        h, w = frame.shape[:2]
        if (w, h) != self.canvas.size:
            self.canvas.resize(w, h)
            self.session.resize(w, h)

        hands: List[Hand] = self.hand_tracker.process(frame) if self.hand_tracker else []
        result = self.session.process_frame(hands)

        if result.toggled:
            self.menu.reset()

        if result.mode == Mode.MENU:
            selection = self.menu.update(result.cursor)
            if selection is not None:
                self.session.apply_selection(selection)

        layer = self.canvas.render_frame(self.session.ink, self.session.view)
        display = self.canvas.overlay_on_frame(frame, layer)

        for hand in hands:
            display = draw_landmarks(display, hand, self.settings.mirror)

        if self.hand_tracker is not None and result.mode == Mode.CANVAS:
            self._status = f"Gesture: {result.active_gesture.label}"

        display = self._draw_ui(display, result)

        if result.mode == Mode.MENU:
            ink = self.session.ink
            display = self.menu.draw(display, ink.tool, ink.color, ink.size, result.cursor)

        return display

    def _draw_ui(self, frame: np.ndarray, result: FrameResult) -> np.ndarray:
        """Status bar, instructions and the menu dwell ring."""
        h, w = frame.shape[:2]

        cv2.rectangle(frame, (0, 0), (w, 50), self.UI_BG_COLOR, -1)
        cv2.putText(frame, f"FPS: {self._current_fps:.1f}", (10, 35),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, self.UI_OPEN_COLOR, 2)

        status_color = self.UI_ERROR_COLOR if "unavailable" in self._status else self.UI_TEXT_COLOR
        cv2.putText(frame, self._status, (150, 35),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, status_color, 2)

        view = self.session.view
        cv2.putText(frame, f"Zoom: {view.scale:.2f}x", (w - 160, 35),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, self.UI_TEXT_COLOR, 2)

        instructions = [
            GESTURE_INFO[Gesture.OPEN_PALM],
            GESTURE_INFO[Gesture.PINCH_DRAW],
            GESTURE_INFO[Gesture.PEACE_CLEAR],
            GESTURE_INFO[Gesture.TWO_FINGER_ZOOM],
        ]
        y_pos = h - 90
        for inst in instructions:
            cv2.putText(frame, inst, (10, y_pos),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, (200, 200, 200), 1)
            y_pos += 20

        if result.dwell_anchor is not None and result.menu_progress > 0:
            color = self.UI_CLOSE_COLOR if result.mode == Mode.MENU else self.UI_OPEN_COLOR
            cv2.ellipse(frame, result.dwell_anchor.to_tuple(), (40, 40), -90, 0,
                        360 * result.menu_progress, color, 5, cv2.LINE_AA)

        return frame

    def _handle_keyboard(self, key: int) -> bool:
        """
        Handle keyboard input.

        Returns:
            False if should quit, True otherwise
        """
        if key == ord('q') or key == 27:
            return False
        elif key == ord('c'):
            self.session.dissolve()
        elif key == ord('r'):
            self.session.view.reset()
        elif key == ord('m'):
            self.session.toggle_menu()
            self.menu.reset()
        return True

    def run(self):
        """Run the main application loop."""
        self._init_tracker()

        if not self.camera.start():
            logger.error("Failed to start camera")
            if self.hand_tracker:
                self.hand_tracker.release()
            return

        if self.hand_tracker is not None:
            self._status = "Camera Active"

        self._running = True
        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
        width, height = self.camera.get_resolution()
        self.canvas.resize(width, height)
        self.session.resize(width, height)
        cv2.resizeWindow(WINDOW_NAME, width, height)

        try:
            while self._running:
                frame = self.camera.get_frame()
                if frame is None:
                    time.sleep(0.001)
                    continue

                try:
                    display = self._process_frame(frame)
                except Exception:
                    logger.exception("Frame skipped")
                    display = frame

                self._update_fps()
                cv2.imshow(WINDOW_NAME, display)

                key = cv2.waitKey(1) & 0xFF
                if not self._handle_keyboard(key):
                    break
        finally:
            self._running = False
            self.camera.stop()
            if self.hand_tracker:
                self.hand_tracker.release()
            cv2.destroyAllWindows()
            logger.info("Application closed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AirInk - Draw in the air with hand gestures")
    parser.add_argument('--camera', type=int, default=None, help='Camera device index')
    parser.add_argument('--width', type=int, default=None, help='Capture width')
    parser.add_argument('--height', type=int, default=None, help='Capture height')
    parser.add_argument('--hands', type=int, choices=(1, 2), default=None, help='Maximum hands to track')
    parser.add_argument('--mirror', action='store_true', help='Mirror landmarks horizontally')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()

    overrides = {
        'camera_id': args.camera,
        'frame_width': args.width,
        'frame_height': args.height,
        'max_hands': args.hands,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if args.mirror:
        overrides['mirror'] = True
    if args.verbose:
        overrides['log_level'] = 'DEBUG'
    settings = replace(settings, **overrides).validate()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="[%(levelname)s] %(name)s: %(message)s"
    )

    print("\n" + "=" * 60)
    print("  AirInk - Gesture-Controlled Drawing")
    print("=" * 60)
    for gesture in Gesture:
        if gesture != Gesture.NONE:
            print(f"  {GESTURE_INFO[gesture]}")
    print("\nKeyboard:")
    print("  [C] Dissolve | [R] Reset zoom | [M] Menu | [Q] Quit")
    print("=" * 60 + "\n")

    AirInkApp(settings).run()


if __name__ == "__main__":
    main()
