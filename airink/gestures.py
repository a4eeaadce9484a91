"""
Gesture Module - Pose Classification and Stabilization
======================================================
Maps one or two hands to a single raw gesture per frame and debounces the
raw stream into the active gesture that drives every downstream decision.
"""

import logging
from collections import Counter, deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List, Optional, Sequence, Tuple

from .config import Settings
from .geometry import (
    FINGER_JOINTS, Hand,
    is_finger_extended, is_finger_folded, is_thumb_open, is_valid_hand,
    pinch_distance,
)

logger = logging.getLogger(__name__)


class Gesture(Enum):
    """Recognized gestures for the drawing surface."""
    NONE = 'NONE'                        # No recognized gesture
    PINCH_DRAW = 'PINCH_DRAW'            # Thumb + index touching - draw
    OPEN_PALM = 'OPEN_PALM'              # All five fingers open - menu toggle
    POINTING = 'POINTING'                # Index only - menu cursor
    PEACE_CLEAR = 'PEACE_CLEAR'          # Index + middle - dissolve ink
    TWO_FINGER_ZOOM = 'TWO_FINGER_ZOOM'  # Both hands pointing - zoom

    @property
    def label(self) -> str:
        return self.value.replace('_', ' ')


GESTURE_INFO = {
    Gesture.NONE: 'No gesture detected',
    Gesture.PINCH_DRAW: 'Pinch index + thumb - Draw',
    Gesture.OPEN_PALM: 'Hold open palm - Toggle menu',
    Gesture.POINTING: 'Index finger only - Move menu cursor',
    Gesture.PEACE_CLEAR: 'Peace sign - Dissolve art',
    Gesture.TWO_FINGER_ZOOM: 'Both index fingers - Zoom',
}


# predicate(primary, secondary, pinch_active) -> bool
RulePredicate = Callable[[Hand, Optional[Hand], bool], bool]


@dataclass(frozen=True)
class GestureRule:
    """One entry of the classifier's priority chain."""
    gesture: Gesture
    predicate: RulePredicate


class PoseClassifier:
    """
    Classifies the current frame's hands into one raw gesture.

    Rules are evaluated in a fixed order and the first match wins, so an
    open palm always beats a peace sign and a pointing hand only becomes a
    pinch once the fingers actually close.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.rules: List[GestureRule] = [
            GestureRule(Gesture.TWO_FINGER_ZOOM, self.is_two_finger_zoom),
            GestureRule(Gesture.OPEN_PALM, self.is_open_palm),
            GestureRule(Gesture.PEACE_CLEAR, self.is_peace_sign),
            GestureRule(Gesture.POINTING, self.is_pointing),
            GestureRule(Gesture.PINCH_DRAW, self.is_pinch),
        ]

    def classify(self, hands: Sequence[Hand], pinch_active: bool = False) -> Gesture:
        """
        Classify the hands reported for this frame.

        Args:
            hands: Zero or more hands in detector order (first is primary)
            pinch_active: Whether the stabilized gesture is currently a pinch

        Returns:
            The raw Gesture for the frame (NONE for missing/degenerate input)
        """
        if not hands or not is_valid_hand(hands[0]):
            return Gesture.NONE

        primary = hands[0]
        secondary = hands[1] if len(hands) > 1 and is_valid_hand(hands[1]) else None

        for rule in self.rules:
            if rule.predicate(primary, secondary, pinch_active):
                return rule.gesture
        return Gesture.NONE

    # Finger helpers

    def _extended(self, hand: Hand, finger: str) -> bool:
        tip, pip, _ = FINGER_JOINTS[finger]
        return is_finger_extended(hand, tip, pip, self.settings.extension_margin)

    def _folded(self, hand: Hand, finger: str) -> bool:
        tip, pip, mcp = FINGER_JOINTS[finger]
        return is_finger_folded(hand, tip, pip, mcp, self.settings.fold_mcp_threshold)

    def _only_index(self, hand: Hand) -> bool:
        return (
            self._extended(hand, 'index')
            and self._folded(hand, 'middle')
            and self._folded(hand, 'ring')
            and self._folded(hand, 'pinky')
        )

    # Rules, highest priority first

    def is_two_finger_zoom(self, primary: Hand, secondary: Optional[Hand], pinch_active: bool = False) -> bool:
        if secondary is None:
            return False
        return self._extended(primary, 'index') and self._extended(secondary, 'index')

    def is_open_palm(self, primary: Hand, secondary: Optional[Hand] = None, pinch_active: bool = False) -> bool:
        fingers_open = all(
            self._extended(primary, finger)
            for finger in ('index', 'middle', 'ring', 'pinky')
        )
        return (
            fingers_open
            and is_thumb_open(primary)
            and pinch_distance(primary) > self.settings.open_palm_min_pinch
        )

    def is_peace_sign(self, primary: Hand, secondary: Optional[Hand] = None, pinch_active: bool = False) -> bool:
        return (
            self._extended(primary, 'index')
            and self._extended(primary, 'middle')
            and self._folded(primary, 'ring')
            and self._folded(primary, 'pinky')
        )

    def is_pointing(self, primary: Hand, secondary: Optional[Hand] = None, pinch_active: bool = False) -> bool:
        return (
            self._only_index(primary)
            and pinch_distance(primary) > self.settings.pointing_min_pinch
        )

    def is_pinch(self, primary: Hand, secondary: Optional[Hand] = None, pinch_active: bool = False) -> bool:
        """Thumb-index pinch with enter/exit hysteresis."""
        threshold = self.settings.pinch_exit if pinch_active else self.settings.pinch_enter
        return pinch_distance(primary) < threshold


class GestureStabilizer:
    """
    Debounces the raw gesture stream with a majority vote.

    The active gesture only changes when one label holds more than half of
    the buffer; otherwise the previous active gesture is kept.
    """

    def __init__(self, buffer_size: int = 6):
        """
        Args:
            buffer_size: Number of recent raw gestures kept for voting
        """
        self.buffer_size = buffer_size
        self._buffer: Deque[Gesture] = deque(maxlen=buffer_size)
        self._active = Gesture.NONE

    @property
    def active(self) -> Gesture:
        return self._active

    @property
    def pinch_active(self) -> bool:
        """Feeds the classifier's pinch hysteresis."""
        return self._active == Gesture.PINCH_DRAW

    @property
    def confidence_floor(self) -> int:
        """Votes a label needs before it can take over."""
        return self.buffer_size // 2

    def __len__(self) -> int:
        return len(self._buffer)

    def majority(self) -> Tuple[Gesture, int]:
        """
        Most common label in the buffer and its count.

        Ties go to the label seen first in the buffer.
        """
        if not self._buffer:
            return Gesture.NONE, 0
        return Counter(self._buffer).most_common(1)[0]

    def push(self, gesture: Gesture) -> Gesture:
        """
        Add a raw gesture and return the (possibly updated) active gesture.
        """
        self._buffer.append(gesture)
        majority, count = self.majority()

        if count > self.confidence_floor and majority != self._active:
            logger.debug("Active gesture %s -> %s (%d/%d)",
                         self._active.name, majority.name, count, len(self._buffer))
            self._active = majority

        return self._active

    def clear(self):
        """Empty the vote buffer, keeping the active gesture."""
        self._buffer.clear()

    def reset(self):
        """Empty the buffer and return to NONE."""
        self._buffer.clear()
        self._active = Gesture.NONE
