"""
Trajectory Preview
==================
Samples the closed-form trajectory into a polyline shown while the cannon
is idle. The preview is a pure function of the current launch parameters,
so rebuilding it during a flight never touches the live projectile.
"""

import numpy as np

from . import kinematics
from .config import GROUND_TOLERANCE, PREVIEW_STEPS
from .launch import LaunchParameters, MountGeometry


class TrajectoryPreviewBuilder:
    """Builds preview polylines for a fixed cannon mount."""

    def __init__(self, mount: MountGeometry = MountGeometry(),
                 steps: int = PREVIEW_STEPS):
        if steps < 1:
            raise ValueError(f"steps must be >= 1, got {steps}")
        self.mount = mount
        self.steps = steps

    def sample_times(self, params: LaunchParameters) -> np.ndarray:
        """Evenly spaced times from launch to landing (steps + 1 values)."""
        y0 = self.mount.muzzle_height(params.angle_deg)
        t_flight = kinematics.flight_time(params.angle_deg, params.velocity, y0)
        return np.arange(self.steps + 1) / self.steps * t_flight

    def build(self, params: LaunchParameters) -> np.ndarray:
        """
        World-space preview points.

        Returns
        -------
        np.ndarray of shape (N, 2), columns [x, y], ordered by time.
        The final sample is the impact point and sits exactly on the ground;
        samples below ground are dropped.
        """
        angle, v0 = params.angle_deg, params.velocity
        y0 = self.mount.muzzle_height(angle)
        points = kinematics.positions(angle, v0, self.sample_times(params), y0)
        points[:, 0] += self.mount.muzzle_offset_x(angle)
        # The last sample is taken at the zero crossing; snap its residue.
        if abs(points[-1, 1]) <= GROUND_TOLERANCE:
            points[-1, 1] = 0.0
        return points[points[:, 1] >= 0]


def build_preview(params: LaunchParameters,
                  mount: MountGeometry = MountGeometry(),
                  steps: int = PREVIEW_STEPS) -> np.ndarray:
    """Convenience wrapper around TrajectoryPreviewBuilder.build."""
    return TrajectoryPreviewBuilder(mount, steps).build(params)
