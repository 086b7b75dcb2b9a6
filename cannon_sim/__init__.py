"""
Cannon Projectile Motion Simulator
==================================
Core of an interactive projectile-motion visualizer:
  - Closed-form drag-free kinematics from an angled cannon muzzle
  - Trajectory preview polyline for the idle cannon
  - Frame-driven flight state machine (idle → flying → landed)
  - Orbit camera with drag/zoom input, eased presets and follow mode

Rendering is left to the consumer: the core publishes a projectile
position, derived readouts and a camera pose every frame.
"""

from .config import GRAVITY, MOUNT_HEIGHT, BARREL_LENGTH, CAMERA_MODES
from .kinematics import (
    Point, position, positions, flight_time, range_, max_height, EQUATIONS,
)
from .launch import LaunchParameters, MountGeometry, LaunchSolution
from .preview import TrajectoryPreviewBuilder, build_preview
from .flight import (
    FlightPhase, FlightEvent, FlightSnapshot, FlightState,
    ProjectileFlightController,
)
from .camera import (
    CameraPose, CameraPreset, CameraTransition, CameraView,
    OrbitCameraController, PRESETS,
)
from .scheduler import FrameScheduler, ManualClock
from .simulator import CannonSimulator
from .integrator import simulate, simulate_euler, simulate_rk4, TrajectoryResult
from .validation import (
    validate_against_reference, validate_against_integration,
    optimal_launch_angle, range_sweep,
    REFERENCE_SCENARIOS, REFERENCE_TEXTBOOK,
)
from .logging_config import setup_logging

__version__ = "1.0.0"
__all__ = [
    'GRAVITY', 'MOUNT_HEIGHT', 'BARREL_LENGTH', 'CAMERA_MODES',
    'Point', 'position', 'positions', 'flight_time', 'range_', 'max_height',
    'EQUATIONS',
    'LaunchParameters', 'MountGeometry', 'LaunchSolution',
    'TrajectoryPreviewBuilder', 'build_preview',
    'FlightPhase', 'FlightEvent', 'FlightSnapshot', 'FlightState',
    'ProjectileFlightController',
    'CameraPose', 'CameraPreset', 'CameraTransition', 'CameraView',
    'OrbitCameraController', 'PRESETS',
    'FrameScheduler', 'ManualClock', 'CannonSimulator',
    'simulate', 'simulate_euler', 'simulate_rk4', 'TrajectoryResult',
    'validate_against_reference', 'validate_against_integration',
    'optimal_launch_angle', 'range_sweep',
    'REFERENCE_SCENARIOS', 'REFERENCE_TEXTBOOK',
    'setup_logging',
]
