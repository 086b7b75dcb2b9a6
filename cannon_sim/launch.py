"""
Launch Parameters & Cannon Geometry
===================================
Defines the user-controlled launch parameters, the fixed cannon mount and
the per-shot launch solution derived from both.

Coordinate system:
  x = downrange (horizontal, muzzle points toward +x)
  y = altitude  (vertical, up positive)
  z = lateral   (always 0 for the projectile)
"""

import math
from dataclasses import dataclass

from . import kinematics
from .config import (
    ANGLE_RANGE, VELOCITY_RANGE, DEFAULT_ANGLE, DEFAULT_VELOCITY,
    MOUNT_HEIGHT, BARREL_LENGTH,
)


@dataclass(frozen=True)
class LaunchParameters:
    """
    Angle and muzzle speed chosen by the user.

    Raises ValueError for non-finite values or values outside the slider
    ranges, so a flight never starts from NaN.
    """
    angle_deg: float = DEFAULT_ANGLE      # degrees above horizontal
    velocity: float = DEFAULT_VELOCITY    # m/s  muzzle speed

    def __post_init__(self):
        _check_range('angle_deg', self.angle_deg, ANGLE_RANGE)
        _check_range('velocity', self.velocity, VELOCITY_RANGE)

    @property
    def angle_rad(self) -> float:
        return self.angle_deg * math.pi / 180


def _check_range(name, value, limits):
    lo, hi = limits
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    if not lo <= value <= hi:
        raise ValueError(f"{name}={value} outside [{lo}, {hi}]")


@dataclass(frozen=True)
class MountGeometry:
    """Cannon pivot height and barrel length."""
    mount_height: float = MOUNT_HEIGHT    # m
    barrel_length: float = BARREL_LENGTH  # m

    def muzzle_offset_x(self, angle_deg: float) -> float:
        """Horizontal distance from pivot to muzzle."""
        return self.barrel_length * math.cos(angle_deg * math.pi / 180)

    def muzzle_height(self, angle_deg: float) -> float:
        """Muzzle height above ground (launch height y0)."""
        return self.mount_height + self.barrel_length * math.sin(angle_deg * math.pi / 180)


@dataclass(frozen=True)
class LaunchSolution:
    """Quantities computed once per shot."""
    params: LaunchParameters
    origin_x: float          # m  muzzle x
    origin_y: float          # m  muzzle height (y0)
    time_of_flight: float    # s
    range: float             # m  measured from the muzzle
    max_height: float        # m  above ground

    @classmethod
    def solve(cls, params: LaunchParameters,
              mount: MountGeometry = MountGeometry()) -> 'LaunchSolution':
        angle, v0 = params.angle_deg, params.velocity
        y0 = mount.muzzle_height(angle)
        return cls(
            params=params,
            origin_x=mount.muzzle_offset_x(angle),
            origin_y=y0,
            time_of_flight=kinematics.flight_time(angle, v0, y0),
            range=kinematics.range_(angle, v0, y0),
            max_height=kinematics.max_height(angle, v0, y0),
        )

    def world_position(self, t: float) -> kinematics.Point:
        """Projectile world position `t` seconds after launch."""
        rel = kinematics.position(self.params.angle_deg, self.params.velocity,
                                  t, self.origin_y)
        return kinematics.Point(self.origin_x + rel.x, rel.y)

    @property
    def impact_x(self) -> float:
        """World x of the landing point."""
        return self.origin_x + self.range
