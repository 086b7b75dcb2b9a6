"""
Validation Against Reference Values
===================================
Checks the closed-form kinematics against:
  - the textbook ground-launch formulas
        R = v0² · sin(2θ) / g
        H = v0² · sin²(θ) / (2g)
        T = 2 · v0 · sin(θ) / g
  - hand-computed scenario values (g = 9.81)
  - step-by-step RK4 / Euler integration from the cannon muzzle

Also finds the range-maximising launch angle numerically.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
from scipy.optimize import minimize_scalar

from . import kinematics
from .config import ANGLE_RANGE, GRAVITY
from .integrator import simulate
from .launch import LaunchParameters, LaunchSolution, MountGeometry


# Ground launch (y0 = 0): no mount offset.
GROUND_MOUNT = MountGeometry(mount_height=0.0, barrel_length=0.0)


def textbook_values(angle_deg: float, v0: float) -> tuple:
    """(range, max height, time of flight) from the ground-launch formulas."""
    theta = math.radians(angle_deg)
    return (v0 ** 2 * math.sin(2 * theta) / GRAVITY,
            v0 ** 2 * math.sin(theta) ** 2 / (2 * GRAVITY),
            2 * v0 * math.sin(theta) / GRAVITY)


# (angle°, v0 m/s, range m, max height m, time of flight s)
REFERENCE_SCENARIOS = {
    'name': 'Hand-computed scenarios (g = 9.81)',
    'tolerance': 0.01,
    'table': [
        (45.0, 20.0, 40.77, 10.19, 2.883),
        (90.0, 20.0,  0.00, 20.39, 4.077),
    ],
}

REFERENCE_TEXTBOOK = {
    'name': 'Textbook ground-launch formulas',
    'tolerance': 1e-9,
    'table': [
        (angle, v0) + textbook_values(angle, v0)
        for angle in (15.0, 30.0, 45.0, 60.0, 75.0, 90.0)
        for v0 in (10.0, 50.0, 100.0)
    ],
}


@dataclass
class ValidationResult:
    """Result of one validation comparison (absolute errors)."""
    angle_deg: float
    velocity: float
    ref_range: float
    sim_range: float
    ref_max_height: float
    sim_max_height: float
    ref_tof: float
    sim_tof: float

    @property
    def range_error(self) -> float:
        return self.sim_range - self.ref_range

    @property
    def height_error(self) -> float:
        return self.sim_max_height - self.ref_max_height

    @property
    def tof_error(self) -> float:
        return self.sim_tof - self.ref_tof

    def within(self, tolerance: float) -> bool:
        return max(abs(self.range_error), abs(self.height_error),
                   abs(self.tof_error)) <= tolerance


def validate_against_reference(reference: dict,
                               verbose: bool = True) -> List[ValidationResult]:
    """Evaluate the closed form at each ground-launch reference row."""
    results = []
    for angle, v0, ref_range, ref_height, ref_tof in reference['table']:
        results.append(ValidationResult(
            angle_deg=angle,
            velocity=v0,
            ref_range=ref_range,
            sim_range=kinematics.range_(angle, v0, 0.0),
            ref_max_height=ref_height,
            sim_max_height=kinematics.max_height(angle, v0, 0.0),
            ref_tof=ref_tof,
            sim_tof=kinematics.flight_time(angle, v0, 0.0),
        ))

    if verbose:
        _print_table(reference['name'], results, reference['tolerance'])
    return results


def validate_against_integration(cases: Sequence[LaunchParameters],
                                 mount: MountGeometry = MountGeometry(),
                                 method: str = 'rk4', dt: float = 0.001,
                                 verbose: bool = True) -> List[ValidationResult]:
    """
    Compare integrated trajectories (reference) with the closed-form
    launch solution from the same muzzle position.
    """
    results = []
    for params in cases:
        traj = simulate(params, mount, method=method, dt=dt)
        sol = LaunchSolution.solve(params, mount)
        results.append(ValidationResult(
            angle_deg=params.angle_deg,
            velocity=params.velocity,
            ref_range=traj.range_total,
            sim_range=sol.range,
            ref_max_height=traj.max_altitude,
            sim_max_height=sol.max_height,
            ref_tof=traj.flight_time,
            sim_tof=sol.time_of_flight,
        ))

    if verbose:
        _print_table(f'{method.upper()} integration (dt={dt})', results,
                     tolerance=None)
    return results


def optimal_launch_angle(v0: float,
                         mount: MountGeometry = MountGeometry()) -> float:
    """
    Launch angle (degrees, within the slider range) giving the longest
    range measured from the muzzle.
    """
    def negative_range(angle):
        return -kinematics.range_(angle, v0, mount.muzzle_height(angle))

    lo, hi = ANGLE_RANGE
    res = minimize_scalar(negative_range, bounds=(lo, hi), method='bounded',
                          options={'xatol': 1e-6})
    return float(res.x)


def range_sweep(v0: float, angles: Optional[np.ndarray] = None,
                mount: MountGeometry = MountGeometry()) -> Dict[str, np.ndarray]:
    """Range and apex height over a grid of launch angles."""
    if angles is None:
        angles = np.arange(ANGLE_RANGE[0], ANGLE_RANGE[1] + 1.0, 1.0)
    ranges = np.array([kinematics.range_(a, v0, mount.muzzle_height(a))
                       for a in angles])
    heights = np.array([kinematics.max_height(a, v0, mount.muzzle_height(a))
                        for a in angles])
    return {'angle': np.asarray(angles, dtype=float), 'range': ranges,
            'max_height': heights}


def _print_table(name, results, tolerance):
    print(f"\n{'='*75}")
    print(f"  VALIDATION: {name}")
    print(f"{'='*75}")
    print(f"{'θ°':>5} {'v0':>6} {'Ref R':>9} {'Sim R':>9} {'ΔR':>9} "
          f"{'Ref H':>8} {'Sim H':>8} {'Ref T':>7} {'Sim T':>7} {'ΔT':>9}")
    print("-" * 75)
    for r in results:
        print(f"{r.angle_deg:>5.0f} {r.velocity:>6.1f} {r.ref_range:>9.2f} "
              f"{r.sim_range:>9.2f} {r.range_error:>+9.1e} "
              f"{r.ref_max_height:>8.2f} {r.sim_max_height:>8.2f} "
              f"{r.ref_tof:>7.3f} {r.sim_tof:>7.3f} {r.tof_error:>+9.1e}")
    print("-" * 75)
    worst = max(max(abs(r.range_error), abs(r.height_error), abs(r.tof_error))
                for r in results)
    print(f"  Worst absolute error: {worst:.2e}")
    if tolerance is not None:
        status = "✓ PASS" if worst <= tolerance else "✗ FAIL"
        print(f"  Status: {status} (tolerance {tolerance})")
    print(f"{'='*75}\n")
