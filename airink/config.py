"""
Config Module - Tunable Thresholds and Settings
===============================================
Every threshold used by the gesture pipeline lives here so that the
classifier, stabilizer, ink engine and controller share one canonical set.
Values can be overridden from AIRINK_* environment variables (a .env file
next to main.py is loaded before the settings are read).
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional


ENV_PREFIX = "AIRINK_"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """
    Canonical constants for the whole application.

    Distances marked "normalized" are in the detector's [0,1] image space,
    "world" distances are in drawing units (pixels at scale 1.0).
    """

    # Finger predicates (normalized)
    extension_margin: float = 1.1
    fold_mcp_threshold: float = 0.05

    # Pose classifier (normalized thumb-index distances)
    open_palm_min_pinch: float = 0.1
    pointing_min_pinch: float = 0.1
    pinch_enter: float = 0.035
    pinch_exit: float = 0.065

    # Gesture stabilizer
    buffer_size: int = 6

    # Menu toggle dwell
    dwell_step: float = 0.05
    toggle_cooldown: float = 1.0
    cursor_smoothing: float = 0.3
    menu_select_step: float = 0.04

    # View transform
    min_scale: float = 0.5
    max_scale: float = 5.0

    # Ink engine (world units)
    min_point_spacing: float = 2.0
    smoothing_min_alpha: float = 0.15
    smoothing_max_alpha: float = 0.8
    smoothing_speed: float = 20.0
    default_size: int = 6

    # Dissolve particles
    dissolve_stride: int = 2
    particle_gravity: float = 0.2
    particle_drag: float = 0.95
    particle_decay: float = 0.02
    particle_shrink: float = 0.98

    # Capture / detector
    camera_id: int = 0
    frame_width: int = 1280
    frame_height: int = 720
    fps: int = 30
    max_hands: int = 2
    detection_confidence: float = 0.7
    tracking_confidence: float = 0.7
    mirror: bool = False
    log_level: str = "INFO"

    def validate(self) -> "Settings":
        """
        Check value ranges.

        Raises:
            ValueError: if a setting would break an invariant
        """
        if self.buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        if not 0 < self.min_scale <= self.max_scale:
            raise ValueError("scale bounds must satisfy 0 < min_scale <= max_scale")
        if self.pinch_enter > self.pinch_exit:
            raise ValueError("pinch_enter must not exceed pinch_exit")
        if self.extension_margin < 1.0:
            raise ValueError("extension_margin must be >= 1.0")
        if self.dissolve_stride < 1:
            raise ValueError("dissolve_stride must be at least 1")
        if not 0 < self.particle_decay:
            raise ValueError("particle_decay must be positive")
        if not 0 < self.dwell_step <= 1:
            raise ValueError("dwell_step must be in (0, 1]")
        if self.max_hands not in (1, 2):
            raise ValueError("max_hands must be 1 or 2")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from AIRINK_<FIELD> environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated Settings instance
        """
        environ = os.environ if environ is None else environ
        overrides = {}

        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.type in (bool, "bool"):
                overrides[f.name] = _parse_bool(raw)
            elif f.type in (int, "int"):
                overrides[f.name] = int(raw)
            elif f.type in (float, "float"):
                overrides[f.name] = float(raw)
            else:
                overrides[f.name] = raw

        return replace(cls(), **overrides).validate()
