"""
Simulator Constants
===================
Physical constants, cannon mount geometry, input ranges and camera tuning
used across the simulator core.

Units: metres, seconds (physics) and milliseconds (frame clock).
"""

import math


# ── Physics ───────────────────────────────────────────────────────────────
GRAVITY = 9.81                # m/s²

# ── Cannon mount ──────────────────────────────────────────────────────────
MOUNT_HEIGHT = 1.5            # m  barrel pivot above ground
BARREL_LENGTH = 3.0           # m  pivot to muzzle

# ── Launch parameter ranges (slider limits) ───────────────────────────────
ANGLE_RANGE = (15.0, 90.0)    # degrees
VELOCITY_RANGE = (10.0, 100.0)  # m/s
DEFAULT_ANGLE = 45.0
DEFAULT_VELOCITY = 20.0

# ── Flight animation ──────────────────────────────────────────────────────
LANDING_GRACE = 0.1           # s  absorbs frame-timing slop past time of flight
PREVIEW_STEPS = 100           # sample intervals in the preview polyline
GROUND_TOLERANCE = 1e-9       # m  rounding residue treated as ground level

# ── Orbit camera ──────────────────────────────────────────────────────────
ORBIT_SPEED = 0.005           # rad per pixel of drag
ZOOM_SPEED = 0.05             # m per wheel delta unit
ELEVATION_LIMITS = (0.1, math.pi / 2 - 0.1)
DISTANCE_LIMITS = (5.0, 100.0)
TRANSITION_MS = 500.0         # eased preset switch
FOLLOW_RESET_MS = 500.0       # delay before follow camera returns home
HOME_TARGET = (0.0, 5.0, 0.0)

CAMERA_MODES = ('overview', 'follow', 'side', 'closeup')
DEFAULT_CAMERA_MODE = 'overview'
