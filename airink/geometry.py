"""
Geometry Module - Landmark Math and Finger Predicates
=====================================================
Point types for the three coordinate spaces used by the pipeline and the
pure functions that inspect a hand's landmark set.

Coordinate spaces:
- Landmark: normalized [0,1] detector space
- ScreenPoint: display pixels
- WorldPoint: drawing surface units, independent of pan/zoom
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence, Tuple, Any

import numpy as np


class HandLandmark(IntEnum):
    """
    MediaPipe hand landmark indices.
    Reference: https://mediapipe.dev/images/mobile/hand_landmarks.png
    """
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


LANDMARK_COUNT = len(HandLandmark)

# (tip, pip, mcp) per non-thumb finger
FINGER_JOINTS = {
    'index': (HandLandmark.INDEX_TIP, HandLandmark.INDEX_PIP, HandLandmark.INDEX_MCP),
    'middle': (HandLandmark.MIDDLE_TIP, HandLandmark.MIDDLE_PIP, HandLandmark.MIDDLE_MCP),
    'ring': (HandLandmark.RING_TIP, HandLandmark.RING_PIP, HandLandmark.RING_MCP),
    'pinky': (HandLandmark.PINKY_TIP, HandLandmark.PINKY_PIP, HandLandmark.PINKY_MCP),
}


@dataclass(frozen=True)
class Landmark:
    """One detector landmark (normalized x/y, relative depth z)."""
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class ScreenPoint:
    """A point in display pixel space."""
    x: float
    y: float

    def to_tuple(self) -> Tuple[int, int]:
        """Return integer pixel coordinates."""
        return (int(round(self.x)), int(round(self.y)))


@dataclass(frozen=True)
class WorldPoint:
    """A point on the drawing surface."""
    x: float
    y: float

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


# A hand is any ordered sequence of 21 objects exposing .x and .y
Hand = Sequence[Any]


def distance(a, b) -> float:
    """
    Euclidean distance over x/y.

    Both points must live in the same space; depth is ignored so the
    normalized thresholds stay calibrated to the image plane.
    """
    return float(np.hypot(a.x - b.x, a.y - b.y))


def lerp(start: float, end: float, t: float) -> float:
    """Linear interpolation, t=0 -> start, t=1 -> end."""
    return start * (1 - t) + end * t


def lerp_point(a, b, t: float):
    """Interpolate between two points of the same type."""
    return type(a)(lerp(a.x, b.x, t), lerp(a.y, b.y, t))


def midpoint(a, b):
    return lerp_point(a, b, 0.5)


def is_valid_hand(hand) -> bool:
    """True if the hand carries the full landmark set."""
    return hand is not None and len(hand) >= LANDMARK_COUNT


def is_finger_extended(hand: Hand, tip_idx: int, pip_idx: int, margin: float = 1.1) -> bool:
    """
    Check if a finger is extended.

    The tip must be further from the wrist than the PIP joint by the
    robustness margin.
    """
    wrist = hand[HandLandmark.WRIST]
    return distance(wrist, hand[tip_idx]) > distance(wrist, hand[pip_idx]) * margin


def is_finger_folded(
    hand: Hand,
    tip_idx: int,
    pip_idx: int,
    mcp_idx: int,
    threshold: float = 0.05
) -> bool:
    """
    Check if a finger is curled.

    Folded when the tip is nearer the wrist than the PIP joint (hand seen
    flat) or when it sits on top of the MCP knuckle (hand seen edge-on).
    """
    wrist = hand[HandLandmark.WRIST]
    tip = hand[tip_idx]
    closer_than_pip = distance(wrist, tip) < distance(wrist, hand[pip_idx])
    return closer_than_pip or distance(tip, hand[mcp_idx]) < threshold


def is_thumb_open(hand: Hand) -> bool:
    """Thumb tip reaches further from the pinky knuckle than the palm is wide."""
    pinky_mcp = hand[HandLandmark.PINKY_MCP]
    palm_width = distance(hand[HandLandmark.INDEX_MCP], pinky_mcp)
    return distance(hand[HandLandmark.THUMB_TIP], pinky_mcp) > palm_width


def pinch_distance(hand: Hand) -> float:
    """Normalized distance between thumb tip and index tip."""
    return distance(hand[HandLandmark.THUMB_TIP], hand[HandLandmark.INDEX_TIP])
