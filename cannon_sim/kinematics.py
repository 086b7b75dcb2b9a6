"""
Closed-Form Projectile Kinematics
=================================
Drag-free projectile motion from a launch height y0:

    x(t) = v0 · cos(θ) · t
    y(t) = y0 + v0 · sin(θ) · t − ½ · g · t²

Time of flight is the positive root of y(t) = 0:

    t_f = [v0 · sin(θ) + √((v0 · sin(θ))² + 2 · g · y0)] / g

All functions are pure. Every function evaluates the trig terms in the same
order as `position`, so `range_` equals `position(..., flight_time(...)).x`
exactly. Invalid numbers (NaN, inf) are not guarded and propagate.
"""

import math
from typing import NamedTuple

import numpy as np

from .config import GRAVITY


class Point(NamedTuple):
    """Position in the launch plane (x downrange, y up)."""
    x: float
    y: float


def _components(angle: float, v0: float):
    angle_rad = angle * math.pi / 180
    return v0 * math.cos(angle_rad), v0 * math.sin(angle_rad)


def position(angle: float, v0: float, t: float, y0: float = 0.0) -> Point:
    """Position relative to the launch point after `t` seconds."""
    vx, vy = _components(angle, v0)
    x = vx * t
    y = y0 + vy * t - 0.5 * GRAVITY * t * t
    return Point(x, y)


def flight_time(angle: float, v0: float, y0: float = 0.0) -> float:
    """
    Time until the projectile returns to y = 0.

    Returns 0.0 when the discriminant is negative (no real ground intercept).
    """
    _, vy = _components(angle, v0)
    discriminant = vy * vy + 2 * GRAVITY * y0
    if discriminant < 0:
        return 0.0
    return (vy + math.sqrt(discriminant)) / GRAVITY


def range_(angle: float, v0: float, y0: float = 0.0) -> float:
    """Horizontal distance travelled before landing."""
    t_flight = flight_time(angle, v0, y0)
    vx, _ = _components(angle, v0)
    return vx * t_flight


def max_height(angle: float, v0: float, y0: float = 0.0) -> float:
    """Apex height above ground."""
    _, vy = _components(angle, v0)
    return y0 + (vy * vy) / (2 * GRAVITY)


def positions(angle: float, v0: float, times: np.ndarray,
              y0: float = 0.0) -> np.ndarray:
    """
    Vectorised `position` over an array of times.

    Returns
    -------
    np.ndarray of shape (N, 2) with columns [x, y]
    """
    vx, vy = _components(angle, v0)
    t = np.asarray(times, dtype=float)
    x = vx * t
    y = y0 + vy * t - 0.5 * GRAVITY * t * t
    return np.column_stack((x, y))


EQUATIONS = {
    'horizontal': [
        'vₓ = v₀ cos θ (constant throughout flight)',
        'x = vₓ t = (v₀ cos θ) t',
        'R = (v₀² sin 2θ) / g (maximum range)',
    ],
    'vertical': [
        'v_y = v₀ sin θ - g t (final vertical velocity)',
        'y = (v₀ sin θ) t - (1/2) g t²',
        'H = (v₀² sin² θ) / (2 g) (maximum height)',
    ],
}
