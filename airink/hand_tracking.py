"""
Hand Tracking Module - MediaPipe Hand Landmark Detection
========================================================
Adapter around the MediaPipe Hand Landmarker (Tasks API, VIDEO mode).
Turns each camera frame into zero, one or two hands, each a list of 21
normalized Landmark points in detector order.
"""

import logging
import time
import urllib.request
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from .geometry import Hand, HandLandmark, Landmark
from .view import landmark_to_screen

logger = logging.getLogger(__name__)

MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)

FINGERTIPS = (
    HandLandmark.THUMB_TIP, HandLandmark.INDEX_TIP, HandLandmark.MIDDLE_TIP,
    HandLandmark.RING_TIP, HandLandmark.PINKY_TIP,
)

CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),          # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),          # Index
    (0, 9), (9, 10), (10, 11), (11, 12),     # Middle
    (0, 13), (13, 14), (14, 15), (15, 16),   # Ring
    (0, 17), (17, 18), (18, 19), (19, 20),   # Pinky
    (5, 9), (9, 13), (13, 17),               # Palm
]


def _download_model(model_path: Path) -> None:
    """Download the hand landmarker model if not present."""
    logger.info("Downloading hand landmarker model...")
    model_path.parent.mkdir(parents=True, exist_ok=True)
    urllib.request.urlretrieve(MODEL_URL, model_path)
    logger.info("Model downloaded to %s", model_path)


class HandTracker:
    """
    Hand tracking using MediaPipe Hand Landmarker (Tasks API).

    VIDEO running mode tracks between frames, which keeps detection cost
    low for a continuous webcam stream.
    """

    def __init__(
        self,
        max_hands: int = 2,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.7,
        model_path: Optional[Path] = None
    ):
        """
        Initialize the hand tracker.

        Args:
            max_hands: Maximum number of hands to detect
            min_detection_confidence: Minimum confidence for detection
            min_tracking_confidence: Minimum confidence for tracking
            model_path: Landmarker .task file (downloaded if missing)

        Raises:
            OSError: if the model cannot be downloaded or read
            RuntimeError: if MediaPipe fails to build the landmarker
        """
        self.max_hands = max_hands
        self._model_path = model_path or Path(__file__).parent.parent / "models" / "hand_landmarker.task"

        if not self._model_path.exists():
            _download_model(self._model_path)

        base_options = python.BaseOptions(model_asset_path=str(self._model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_hands=max_hands,
            min_hand_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
            min_hand_presence_confidence=min_detection_confidence
        )
        self.detector = vision.HandLandmarker.create_from_options(options)

        # Timestamps must be monotonically increasing in VIDEO mode
        self._start_time = time.monotonic()
        self._last_timestamp_ms = -1

        logger.info("Hand tracker ready (%d hands)", max_hands)

    def process(self, frame: np.ndarray) -> List[Hand]:
        """
        Detect hands in a BGR frame.

        Returns:
            Hands in detector order, each a list of 21 Landmarks
        """
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)

        timestamp_ms = int((time.monotonic() - self._start_time) * 1000)
        timestamp_ms = max(timestamp_ms, self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        results = self.detector.detect_for_video(mp_image, timestamp_ms)

        hands: List[Hand] = []
        for hand_landmarks in results.hand_landmarks or []:
            hands.append([
                Landmark(lm.x, lm.y, getattr(lm, 'z', 0.0))
                for lm in hand_landmarks
            ])
        return hands

    def release(self):
        """Release the detector handle."""
        if self.detector:
            self.detector.close()
            self.detector = None


def draw_landmarks(
    frame: np.ndarray,
    hand: Hand,
    mirror: bool = False,
    landmark_color: Tuple[int, int, int] = (0, 255, 0),
    connection_color: Tuple[int, int, int] = (255, 255, 255),
    thickness: int = 2
) -> np.ndarray:
    """
    Draw hand landmarks on a frame (screen space).

    Returns:
        Frame with landmarks drawn
    """
    h, w = frame.shape[:2]
    points = [landmark_to_screen(lm, w, h, mirror).to_tuple() for lm in hand]

    for start, end in CONNECTIONS:
        cv2.line(frame, points[start], points[end], connection_color, thickness)

    for idx, point in enumerate(points):
        if idx in FINGERTIPS:
            color, radius = (0, 0, 255), 6
        else:
            color, radius = landmark_color, 4
        cv2.circle(frame, point, radius, color, -1)
        cv2.circle(frame, point, radius, (0, 0, 0), 1)

    return frame
