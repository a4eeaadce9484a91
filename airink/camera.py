"""
Camera Module - Webcam Stream Handler
=====================================
Captures webcam frames on a background thread and hands the latest one to
the frame loop. The drawing core never touches this module directly.
"""

import logging
import sys
import threading
import time
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class Camera:
    """
    Webcam stream handler with a capture thread.

    Only the most recent frame is kept, so a slow consumer always gets the
    newest image instead of a backlog.
    """

    def __init__(
        self,
        camera_id: int = 0,
        width: int = 1280,
        height: int = 720,
        fps: int = 30,
        flip: bool = True
    ):
        """
        Args:
            camera_id: Camera device index
            width: Desired frame width
            height: Desired frame height
            fps: Target frame rate
            flip: Mirror frames horizontally (selfie view)
        """
        self.camera_id = camera_id
        self.width = width
        self.height = height
        self.fps = fps
        self.flip = flip

        self.cap: Optional[cv2.VideoCapture] = None

        self._frame: Optional[np.ndarray] = None
        self._frame_lock = threading.Lock()
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> bool:
        """
        Open the device and start the capture thread.

        Returns:
            True if camera started successfully, False otherwise
        """
        backend = cv2.CAP_DSHOW if sys.platform == "win32" else cv2.CAP_ANY
        self.cap = cv2.VideoCapture(self.camera_id, backend)

        if not self.cap.isOpened():
            logger.error("Failed to open camera %d", self.camera_id)
            self.cap.release()
            self.cap = None
            return False

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.fps)
        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        # Actual resolution may differ from requested
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        logger.info("Camera started: %dx%d @ %dfps", self.width, self.height, self.fps)

        self._running = True
        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()
        return True

    def _capture_loop(self):
        while self._running:
            ret, frame = self.cap.read()

            if ret:
                if self.flip:
                    frame = cv2.flip(frame, 1)
                with self._frame_lock:
                    self._frame = frame
            else:
                time.sleep(0.001)

    def get_frame(self) -> Optional[np.ndarray]:
        """
        Latest frame, or None if nothing has been captured yet.
        """
        with self._frame_lock:
            if self._frame is None:
                return None
            return self._frame.copy()

    def get_resolution(self) -> Tuple[int, int]:
        return self.width, self.height

    def stop(self):
        """Stop the capture thread and release the device."""
        self._running = False

        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self.cap is not None:
            self.cap.release()
            self.cap = None

        logger.info("Camera stopped")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
