"""
Projectile Flight Controller
============================
Per-frame state machine driving the live projectile:

    IDLE ──fire──▶ FLYING ──landing──▶ LANDED ──▶ IDLE

Elapsed time comes from the frame clock (milliseconds), not from a fixed
step, so the projectile follows wall-clock time. Each tick publishes an
immutable FlightSnapshot; observers read snapshots or subscribe to
FlightEvent notifications and never mutate controller state.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

import numpy as np

from .config import LANDING_GRACE
from .kinematics import Point
from .launch import LaunchParameters, LaunchSolution, MountGeometry


logger = logging.getLogger(__name__)


class FlightPhase(Enum):
    IDLE = 'idle'
    FLYING = 'flying'
    LANDED = 'landed'


class FlightEvent(Enum):
    LAUNCHED = 'launched'
    MOVED = 'moved'
    LANDED = 'landed'


@dataclass(frozen=True)
class FlightSnapshot:
    """Read-only view of the flight published to UI and camera."""
    phase: FlightPhase
    elapsed: float = 0.0           # s since launch
    position: Point = Point(0.0, 0.0)  # world x, y
    range: float = 0.0             # m
    max_height: float = 0.0        # m
    time_of_flight: float = 0.0    # s

    @property
    def is_flying(self) -> bool:
        return self.phase is FlightPhase.FLYING

    def readout(self) -> Dict[str, str]:
        """Formatted values for the physics data panel."""
        return {
            'range': f'{self.range:.2f}',
            'max_height': f'{self.max_height:.2f}',
            'time_of_flight': f'{self.time_of_flight:.2f}',
            'current_time': f'{self.elapsed:.2f}',
            'x': f'{self.position.x:.2f}',
            'y': f'{self.position.y:.2f}',
        }

    def summary(self) -> str:
        """Human-readable summary string."""
        r = self.readout()
        pos = f"({r['x']}, {r['y']})"
        lines = [
            f"╔════════════════════════════════════╗",
            f"║  FLIGHT — {self.phase.value.upper():<25s}║",
            f"╠════════════════════════════════════╣",
            f"║  Range        : {r['range']:>10s} m{'':<7s}║",
            f"║  Max height   : {r['max_height']:>10s} m{'':<7s}║",
            f"║  Flight time  : {r['time_of_flight']:>10s} s{'':<7s}║",
            f"║  Time         : {r['current_time']:>10s} s{'':<7s}║",
            f"║  Position     : {pos:>19s}║",
            f"╚════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


@dataclass
class FlightState:
    """Mutable flight record owned by ProjectileFlightController."""
    phase: FlightPhase = FlightPhase.IDLE
    start_ms: float = 0.0
    elapsed: float = 0.0
    solution: Optional[LaunchSolution] = None
    position: Point = Point(0.0, 0.0)


FlightListener = Callable[[FlightEvent, FlightSnapshot], None]


class ProjectileFlightController:
    """
    Owns at most one in-progress flight.

    `fire` snapshots the launch parameters, so later edits cannot disturb a
    flight. There is no cancel: a flight always runs until it lands (or the
    scheduler driving `tick` is torn down).
    """

    def __init__(self, mount: MountGeometry = MountGeometry(),
                 grace: float = LANDING_GRACE):
        self.mount = mount
        self.grace = grace
        self._state = FlightState()
        self._listeners: List[FlightListener] = []

    # ── observers ─────────────────────────────────────────────────────────
    def add_listener(self, listener: FlightListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: FlightListener) -> None:
        self._listeners.remove(listener)

    def _emit(self, event: FlightEvent, snapshot: FlightSnapshot) -> None:
        for listener in list(self._listeners):
            listener(event, snapshot)

    # ── state access ──────────────────────────────────────────────────────
    @property
    def phase(self) -> FlightPhase:
        return self._state.phase

    @property
    def is_flying(self) -> bool:
        return self._state.phase is FlightPhase.FLYING

    @property
    def solution(self) -> Optional[LaunchSolution]:
        return self._state.solution

    @property
    def start_ms(self) -> float:
        return self._state.start_ms

    def snapshot(self) -> FlightSnapshot:
        s = self._state
        if s.solution is None:
            return FlightSnapshot(phase=s.phase)
        return FlightSnapshot(
            phase=s.phase,
            elapsed=s.elapsed,
            position=s.position,
            range=s.solution.range,
            max_height=s.solution.max_height,
            time_of_flight=s.solution.time_of_flight,
        )

    def get_follow_target(self) -> Optional[np.ndarray]:
        """World position [x, y, z] while flying, else None."""
        if not self.is_flying:
            return None
        return np.array([self._state.position.x, self._state.position.y, 0.0])

    # ── commands ──────────────────────────────────────────────────────────
    def fire(self, params: LaunchParameters, now_ms: float) -> bool:
        """
        Launch a projectile. Returns False (and changes nothing) when a
        flight is already in progress.
        """
        if self._state.phase is not FlightPhase.IDLE:
            logger.debug("fire ignored: flight already in progress")
            return False

        solution = LaunchSolution.solve(params, self.mount)
        self._state = FlightState(
            phase=FlightPhase.FLYING,
            start_ms=now_ms,
            elapsed=0.0,
            solution=solution,
            position=Point(solution.origin_x, solution.origin_y),
        )
        logger.info("Fired: angle=%.1f° v0=%.1f m/s  range=%.2f m  "
                    "max height=%.2f m  time of flight=%.2f s",
                    params.angle_deg, params.velocity, solution.range,
                    solution.max_height, solution.time_of_flight)
        self._emit(FlightEvent.LAUNCHED, self.snapshot())
        return True

    def tick(self, now_ms: float) -> FlightSnapshot:
        """Advance the flight to frame time `now_ms`."""
        s = self._state
        if s.phase is not FlightPhase.FLYING:
            return self.snapshot()

        sol = s.solution
        elapsed = max(0.0, (now_ms - s.start_ms) / 1000.0)
        pos = sol.world_position(elapsed)

        if pos.y < 0 or elapsed > sol.time_of_flight + self.grace:
            self._land(elapsed)
            return self.snapshot()

        s.elapsed = elapsed
        s.position = pos
        snap = self.snapshot()
        self._emit(FlightEvent.MOVED, snap)
        return snap

    def _land(self, elapsed: float) -> None:
        s = self._state
        s.phase = FlightPhase.LANDED
        logger.info("Landed after %.2f s, impact at x=%.2f m",
                    elapsed, s.solution.impact_x)
        self._emit(FlightEvent.LANDED, self.snapshot())
        s.phase = FlightPhase.IDLE
