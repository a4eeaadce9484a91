"""Shared fixtures: synthetic 21-point hands in normalized coordinates."""

import numpy as np
import pytest

from airink.config import Settings
from airink.geometry import HandLandmark, Landmark

FINGER_COLUMNS = {'index': 0.44, 'middle': 0.50, 'ring': 0.56, 'pinky': 0.62}
FINGER_BASE = {'index': 5, 'middle': 9, 'ring': 13, 'pinky': 17}


def make_hand(extended=(), thumb=False, pinch=None, offset=(0.0, 0.0)):
    """
    Build an upright hand (wrist at the bottom, fingers pointing up).

    Args:
        extended: Names of non-thumb fingers to extend; the rest are curled
        thumb: Extend the thumb sideways
        pinch: If set, place the thumb tip this far to the right of the
            index tip
        offset: Translation applied to every landmark
    """
    points = [None] * 21
    points[HandLandmark.WRIST] = (0.5, 0.8)

    # Thumb: CMC, MCP, IP, TIP
    points[1] = (0.45, 0.75)
    points[2] = (0.40, 0.70)
    points[3] = (0.35, 0.65)
    points[4] = (0.30, 0.60) if thumb else (0.55, 0.70)

    for finger, x in FINGER_COLUMNS.items():
        base = FINGER_BASE[finger]
        points[base] = (x, 0.60)             # MCP
        if finger in extended:
            points[base + 1] = (x, 0.50)     # PIP
            points[base + 2] = (x, 0.45)     # DIP
            points[base + 3] = (x, 0.40)     # TIP
        else:
            points[base + 1] = (x, 0.55)
            points[base + 2] = (x, 0.60)
            points[base + 3] = (x, 0.63)

    if pinch is not None:
        ix, iy = points[HandLandmark.INDEX_TIP]
        points[HandLandmark.THUMB_TIP] = (ix + pinch, iy)

    dx, dy = offset
    return [Landmark(x + dx, y + dy) for x, y in points]


@pytest.fixture
def hand():
    return make_hand


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
