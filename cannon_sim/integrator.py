"""
Numerical Integration Cross-Check
=================================
Integrates drag-free projectile motion step by step so the closed-form
kinematics can be checked against an independent method:

1. **Euler Method** (1st order) — accumulates error with dt.
2. **Runge-Kutta 4th Order (RK4)** — exact to round-off for constant
   acceleration, so it should reproduce the closed form.

Both integrate
    dx/dt = v
    dv/dt = [0, -g]
from the muzzle and stop at the first step below ground, interpolating the
impact point linearly between the last two states.
"""

import numpy as np
from dataclasses import dataclass

from .config import GRAVITY
from .launch import LaunchParameters, MountGeometry


GRAVITY_VECTOR = np.array([0.0, -GRAVITY])


@dataclass
class TrajectoryResult:
    """Complete integrated trajectory (world coordinates)."""
    params: LaunchParameters
    method: str               # 'euler' or 'rk4'
    dt: float

    time: np.ndarray
    x: np.ndarray
    y: np.ndarray
    vx: np.ndarray
    vy: np.ndarray

    @property
    def flight_time(self) -> float:
        return float(self.time[-1])

    @property
    def impact_x(self) -> float:
        return float(self.x[-1])

    @property
    def range_total(self) -> float:
        """Horizontal distance from muzzle to impact (m)."""
        return float(self.x[-1] - self.x[0])

    @property
    def max_altitude(self) -> float:
        return float(np.max(self.y))


def _initial_state(params: LaunchParameters, mount: MountGeometry):
    angle = params.angle_rad
    pos = np.array([mount.muzzle_offset_x(params.angle_deg),
                    mount.muzzle_height(params.angle_deg)])
    vel = params.velocity * np.array([np.cos(angle), np.sin(angle)])
    return pos, vel


def _euler_step(pos, vel, dt):
    return pos + vel * dt, vel + GRAVITY_VECTOR * dt


def _rk4_step(pos, vel, dt):
    # Acceleration is constant, so the k-stages only differ in velocity.
    k1x, k1v = vel, GRAVITY_VECTOR
    k2x, k2v = vel + 0.5 * dt * k1v, GRAVITY_VECTOR
    k3x, k3v = vel + 0.5 * dt * k2v, GRAVITY_VECTOR
    k4x, k4v = vel + dt * k3v, GRAVITY_VECTOR

    pos = pos + (dt / 6.0) * (k1x + 2*k2x + 2*k3x + k4x)
    vel = vel + (dt / 6.0) * (k1v + 2*k2v + 2*k3v + k4v)
    return pos, vel


_STEPPERS = {'euler': _euler_step, 'rk4': _rk4_step}


def simulate(params: LaunchParameters, mount: MountGeometry = MountGeometry(),
             method: str = 'rk4', dt: float = 0.01,
             max_time: float = 60.0) -> TrajectoryResult:
    """Integrate from the muzzle until the projectile reaches the ground."""
    try:
        step = _STEPPERS[method]
    except KeyError:
        raise ValueError(f"Unknown method {method!r}; use one of {list(_STEPPERS)}")

    pos, vel = _initial_state(params, mount)
    t = 0.0
    history = [(t, pos, vel)]

    while t < max_time:
        new_pos, new_vel = step(pos, vel, dt)
        if new_pos[1] < 0:
            # Linear interpolation to y = 0 between the bracketing states.
            frac = pos[1] / (pos[1] - new_pos[1])
            history.append((t + frac * dt,
                            pos + frac * (new_pos - pos),
                            vel + frac * (new_vel - vel)))
            break
        pos, vel = new_pos, new_vel
        t += dt
        history.append((t, pos, vel))

    times, positions, velocities = zip(*history)
    positions = np.array(positions)
    velocities = np.array(velocities)
    return TrajectoryResult(
        params=params,
        method=method,
        dt=dt,
        time=np.array(times),
        x=positions[:, 0],
        y=positions[:, 1],
        vx=velocities[:, 0],
        vy=velocities[:, 1],
    )


def simulate_euler(params, mount=MountGeometry(), dt=0.01, max_time=60.0):
    """Forward Euler: x_{n+1} = x_n + v_n·dt, v_{n+1} = v_n + a·dt."""
    return simulate(params, mount, 'euler', dt, max_time)


def simulate_rk4(params, mount=MountGeometry(), dt=0.01, max_time=60.0):
    """4th-order Runge-Kutta."""
    return simulate(params, mount, 'rk4', dt, max_time)
