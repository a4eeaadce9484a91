# AirInk - Gesture-Controlled Freehand Drawing Surface
# Author: AirInk Team
# Version: 1.0.0

"""
Core modules for the gesture drawing surface:
- geometry: Landmark math and finger predicates
- gestures: Pose classification and gesture stabilization
- view: Screen <-> world pan/zoom transform
- ink: Strokes, smoothing and the dissolve particle simulation
- canvas: OpenCV rendering of ink and particles
- controller: Per-frame mode state machine (canvas / menu)
- menu: Toolbox menu with hover-to-select
- hand_tracking: MediaPipe hand landmark detection
- camera: Webcam stream handler
- app: Main application interface
"""

__version__ = "1.0.0"
__author__ = "AirInk Team"
