"""
Cannon Simulator
================
Facade consumed by the presentation layer. Wires the preview builder, the
flight controller and the orbit camera to one FrameScheduler and exposes
the inputs/outputs a UI needs:

  inputs : set_launch_parameters, fire, set_camera_mode,
           on_pointer_down/move/up/leave, on_wheel, tick, close
  outputs: current_preview, flight_state, camera_pose,
           controls_enabled, panel_open, projectile_visible
"""

import logging
from typing import Callable, Optional

import numpy as np

from .camera import CameraView, OrbitCameraController
from .config import DEFAULT_ANGLE, DEFAULT_VELOCITY, DEFAULT_CAMERA_MODE
from .flight import FlightEvent, FlightSnapshot, ProjectileFlightController
from .launch import LaunchParameters, MountGeometry
from .preview import TrajectoryPreviewBuilder
from .scheduler import FrameScheduler, monotonic_ms


logger = logging.getLogger(__name__)


class CannonSimulator:
    """
    One interactive session. All times are milliseconds from `clock`
    unless passed explicitly to `tick`.
    """

    def __init__(self, angle: float = DEFAULT_ANGLE,
                 velocity: float = DEFAULT_VELOCITY,
                 camera_mode: str = DEFAULT_CAMERA_MODE,
                 mount: MountGeometry = MountGeometry(),
                 clock: Callable[[], float] = monotonic_ms):
        self.mount = mount
        self.params = LaunchParameters(angle, velocity)
        self.preview_builder = TrajectoryPreviewBuilder(mount)
        self.flight = ProjectileFlightController(mount)
        self.camera = OrbitCameraController(self.flight, camera_mode)

        self.scheduler = FrameScheduler(clock)
        # Physics before camera within a frame.
        self.scheduler.register(self.flight)
        self.scheduler.register(self.camera)

        self.panel_open = False
        self.projectile_visible = False
        self.flight.add_listener(self._on_flight_event)
        self._preview = self.preview_builder.build(self.params)

    def _now(self) -> float:
        return self.scheduler.clock()

    def _on_flight_event(self, event: FlightEvent, snapshot: FlightSnapshot) -> None:
        if event is FlightEvent.LAUNCHED:
            self.projectile_visible = True
        elif event is FlightEvent.LANDED:
            self.projectile_visible = False
            self.panel_open = True

    # ── outputs ───────────────────────────────────────────────────────────
    @property
    def current_preview(self) -> np.ndarray:
        return self._preview.copy()

    @property
    def flight_state(self) -> FlightSnapshot:
        return self.flight.snapshot()

    @property
    def camera_pose(self) -> CameraView:
        return self.camera.view

    @property
    def camera_mode(self) -> str:
        return self.camera.mode

    @property
    def controls_enabled(self) -> bool:
        return not self.flight.is_flying

    @property
    def closed(self) -> bool:
        return self.scheduler.closed

    # ── inputs ────────────────────────────────────────────────────────────
    def set_launch_parameters(self, angle: float, velocity: float) -> bool:
        """
        Update angle/velocity and rebuild the preview. Ignored (returns
        False) while a flight is in progress.
        """
        if self.closed:
            return False
        if self.flight.is_flying:
            logger.debug("launch parameters locked during flight")
            return False
        self.params = LaunchParameters(angle, velocity)
        self._preview = self.preview_builder.build(self.params)
        return True

    def fire(self) -> bool:
        """Start a flight. No-op when already flying or closed."""
        if self.closed:
            return False
        self.panel_open = False
        return self.flight.fire(self.params, self._now())

    def set_camera_mode(self, mode: str) -> None:
        if self.closed:
            return
        self.camera.set_mode(mode, self._now())

    def toggle_panel(self) -> None:
        self.panel_open = not self.panel_open

    def on_pointer_down(self, x: float, y: float) -> None:
        if not self.closed:
            self.camera.on_pointer_down(x, y)

    def on_pointer_move(self, x: float, y: float) -> None:
        if not self.closed:
            self.camera.on_pointer_move(x, y)

    def on_pointer_up(self, x: Optional[float] = None,
                      y: Optional[float] = None) -> None:
        if not self.closed:
            self.camera.on_pointer_up()

    def on_pointer_leave(self) -> None:
        if not self.closed:
            self.camera.on_pointer_leave()

    def on_wheel(self, delta_y: float) -> None:
        if not self.closed:
            self.camera.on_wheel(delta_y)

    def tick(self, now_ms: Optional[float] = None) -> bool:
        """Advance flight, then camera, by one frame."""
        return self.scheduler.tick(now_ms)

    def run_until_landed(self, fps: float = 60.0,
                         max_frames: Optional[int] = None) -> int:
        """Real-time loop driven by the scheduler clock."""
        return self.scheduler.run(until=lambda: not self.flight.is_flying,
                                  fps=fps, max_frames=max_frames)

    def close(self) -> None:
        if self.closed:
            return
        self.flight.remove_listener(self._on_flight_event)
        self.scheduler.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
