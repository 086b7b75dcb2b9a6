"""
Orbit Camera Controller
=======================
Spherical orbit camera around a look-at target:

    eye = target + distance · [sin(az)·cos(el), sin(el), cos(az)·cos(el)]

Inputs:
  - pointer drag  → incremental azimuth / elevation change
  - wheel         → distance change
  - preset select → logical pose jumps to the preset, the rendered eye
                    eases toward it over 500 ms (cubic ease-out)
  - follow mode   → target tracks the live projectile every frame

The logical pose (azimuth, elevation, distance, target) always holds the
final values; only the rendered eye lags during a preset transition. A drag
started mid-transition therefore orbits from the preset pose.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np

from .config import (
    ORBIT_SPEED, ZOOM_SPEED, ELEVATION_LIMITS, DISTANCE_LIMITS,
    TRANSITION_MS, FOLLOW_RESET_MS, HOME_TARGET, CAMERA_MODES,
    DEFAULT_CAMERA_MODE,
)


logger = logging.getLogger(__name__)


def clamp(value: float, limits: Tuple[float, float]) -> float:
    lo, hi = limits
    return max(lo, min(hi, value))


def ease_out_cubic(progress: float) -> float:
    return 1 - (1 - progress) ** 3


def orbit_eye(target: np.ndarray, azimuth: float, elevation: float,
              distance: float) -> np.ndarray:
    """Spherical (azimuth, elevation, distance) about target → eye [x, y, z]."""
    return np.array([
        target[0] + distance * math.sin(azimuth) * math.cos(elevation),
        target[1] + distance * math.sin(elevation),
        target[2] + distance * math.cos(azimuth) * math.cos(elevation),
    ])


@dataclass(frozen=True)
class CameraPreset:
    name: str
    elevation: float
    azimuth: float
    distance: float
    target: Tuple[float, float, float]


PRESETS: Dict[str, CameraPreset] = {
    'overview': CameraPreset('overview', 0.3, 0.8, 30.0, HOME_TARGET),
    'follow':   CameraPreset('follow', 0.2, 0.0, 15.0, (10.0, 5.0, 0.0)),
    'side':     CameraPreset('side', 0.3, math.pi / 2, 35.0, HOME_TARGET),
    'closeup':  CameraPreset('closeup', 0.2, 0.5, 8.0, (0.0, 3.0, 0.0)),
}


@dataclass
class CameraPose:
    """Logical orbit state."""
    azimuth: float = PRESETS[DEFAULT_CAMERA_MODE].azimuth
    elevation: float = PRESETS[DEFAULT_CAMERA_MODE].elevation
    distance: float = PRESETS[DEFAULT_CAMERA_MODE].distance
    target: np.ndarray = field(
        default_factory=lambda: np.array(PRESETS[DEFAULT_CAMERA_MODE].target, dtype=float))

    @classmethod
    def from_preset(cls, preset: CameraPreset) -> 'CameraPose':
        return cls(preset.azimuth, preset.elevation, preset.distance,
                   np.array(preset.target, dtype=float))

    def eye(self) -> np.ndarray:
        return orbit_eye(self.target, self.azimuth, self.elevation, self.distance)


@dataclass(frozen=True)
class CameraView:
    """Rendered camera: eye position and look-at point."""
    eye: np.ndarray
    look_at: np.ndarray


@dataclass
class CameraTransition:
    """Eased blend of the rendered eye away from `start_eye`."""
    start_eye: np.ndarray
    start_ms: float
    duration_ms: float = TRANSITION_MS

    def progress(self, now_ms: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        return min(max(now_ms - self.start_ms, 0.0) / self.duration_ms, 1.0)

    def eye_at(self, now_ms: float, end_eye: np.ndarray) -> np.ndarray:
        eased = ease_out_cubic(self.progress(now_ms))
        return self.start_eye + (end_eye - self.start_eye) * eased


class OrbitCameraController:
    """
    Owns the CameraPose. `flight` is anything exposing
    `get_follow_target() -> Optional[np.ndarray]`; it is polled once per
    frame in follow mode.
    """

    def __init__(self, flight=None, mode: str = DEFAULT_CAMERA_MODE):
        if mode not in PRESETS:
            raise ValueError(f"Unknown camera mode {mode!r}; "
                             f"expected one of {CAMERA_MODES}")
        self.flight = flight
        self.mode = mode
        self.pose = CameraPose.from_preset(PRESETS[mode])
        self.transition: Optional[CameraTransition] = None
        self._eye = self.pose.eye()
        self._dragging = False
        self._last_pointer = (0.0, 0.0)
        self._tracking = False
        self._reset_at_ms: Optional[float] = None

    # ── outputs ───────────────────────────────────────────────────────────
    @property
    def eye(self) -> np.ndarray:
        return self._eye.copy()

    @property
    def view(self) -> CameraView:
        return CameraView(eye=self._eye.copy(), look_at=self.pose.target.copy())

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    @property
    def in_transition(self) -> bool:
        return self.transition is not None

    def _refresh(self) -> None:
        # An active transition owns the rendered eye until it finishes.
        if self.transition is None:
            self._eye = self.pose.eye()

    # ── pointer / wheel input ─────────────────────────────────────────────
    def on_pointer_down(self, x: float, y: float) -> None:
        self._dragging = True
        self._last_pointer = (x, y)

    def on_pointer_move(self, x: float, y: float) -> None:
        if not self._dragging:
            return
        dx = x - self._last_pointer[0]
        dy = y - self._last_pointer[1]
        self.pose.azimuth += dx * ORBIT_SPEED
        self.pose.elevation = clamp(self.pose.elevation + dy * ORBIT_SPEED,
                                    ELEVATION_LIMITS)
        self._last_pointer = (x, y)
        self._refresh()

    def on_pointer_up(self) -> None:
        self._dragging = False

    on_pointer_leave = on_pointer_up

    def on_wheel(self, delta_y: float) -> None:
        self.pose.distance = clamp(self.pose.distance + delta_y * ZOOM_SPEED,
                                   DISTANCE_LIMITS)
        self._refresh()

    # ── presets ───────────────────────────────────────────────────────────
    def set_mode(self, mode: str, now_ms: float) -> None:
        """Jump the logical pose to a preset and start the eased transition."""
        if mode not in PRESETS:
            raise ValueError(f"Unknown camera mode {mode!r}; "
                             f"expected one of {CAMERA_MODES}")
        self.mode = mode
        self.pose = CameraPose.from_preset(PRESETS[mode])
        self._reset_at_ms = None
        self.transition = CameraTransition(start_eye=self._eye.copy(),
                                           start_ms=now_ms)
        logger.info("Camera mode -> %s", mode)
        self._advance_transition(now_ms)

    # ── per-frame update ──────────────────────────────────────────────────
    def tick(self, now_ms: float) -> CameraView:
        self._update_follow(now_ms)
        self._advance_transition(now_ms)
        return self.view

    def _update_follow(self, now_ms: float) -> None:
        target = self.flight.get_follow_target() if self.flight is not None else None

        if self.mode == 'follow' and target is not None:
            self.pose.target = np.asarray(target, dtype=float).copy()
            self._tracking = True
            self._refresh()
        elif self._tracking:
            self._tracking = False
            if self.mode == 'follow':
                self._reset_at_ms = now_ms + FOLLOW_RESET_MS
                logger.debug("Follow target lost; home reset at %.0f ms",
                             self._reset_at_ms)

        if self._reset_at_ms is not None and now_ms >= self._reset_at_ms:
            self._reset_at_ms = None
            self.pose.target = np.array(HOME_TARGET, dtype=float)
            self._refresh()

    def _advance_transition(self, now_ms: float) -> None:
        if self.transition is None:
            return
        end_eye = self.pose.eye()
        self._eye = self.transition.eye_at(now_ms, end_eye)
        if self.transition.progress(now_ms) >= 1:
            self.transition = None
            self._eye = end_eye
