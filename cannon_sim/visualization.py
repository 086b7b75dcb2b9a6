"""
Visualization Engine
====================
Offline matplotlib views of the simulator output:
  1. Trajectory preview with derived readouts
  2. Range / apex height vs launch angle sweep
  3. Closed form vs Euler vs RK4 comparison
  4. Recorded flight (frames sampled from the live simulator)
  5. Animated flight through the orbit camera (saved as GIF)
"""

import math
import os
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from .flight import FlightSnapshot
from .integrator import TrajectoryResult
from .launch import LaunchParameters, LaunchSolution, MountGeometry
from .scheduler import ManualClock
from .simulator import CannonSimulator


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#1a1a2e',
    'ground_color': '#2d4a3e',
    'text_color': '#e0e0e0',
    'grid_color': '#444444',
    'preview_color': '#00ff00',
    'projectile_color': '#ff4444',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b'],
}


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


def _save(fig, save_path):
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])


# ══════════════════════════════════════════════════════════════════════════
#  1. Trajectory Preview
# ══════════════════════════════════════════════════════════════════════════

def plot_preview(points: np.ndarray, params: LaunchParameters,
                 mount: MountGeometry = MountGeometry(),
                 save_path: str = None) -> plt.Figure:
    """Side view of the preview polyline with cannon, apex and impact."""
    sol = LaunchSolution.solve(params, mount)
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    ax.plot(points[:, 0], points[:, 1], color=STYLE['preview_color'],
            linewidth=2, alpha=0.8, label='Preview')
    ax.plot([0, sol.origin_x], [mount.mount_height, sol.origin_y],
            color='#888888', linewidth=5, solid_capstyle='round', label='Barrel')
    apex = points[np.argmax(points[:, 1])]
    ax.plot(*apex, '^', color='#ffeb3b', markersize=10,
            label=f'Max height {sol.max_height:.2f} m')
    ax.plot(sol.impact_x, 0, 'x', color=STYLE['projectile_color'],
            markersize=12, markeredgewidth=3,
            label=f'Range {sol.range:.2f} m')
    ax.axhline(0, color=STYLE['ground_color'], linewidth=3)

    ax.set_xlabel('Downrange x (m)')
    ax.set_ylabel('Height y (m)')
    ax.set_title(f'Trajectory Preview — θ={params.angle_deg:.1f}°, '
                 f'v₀={params.velocity:.1f} m/s, T={sol.time_of_flight:.2f} s',
                 fontweight='bold')
    ax.set_aspect('equal', adjustable='datalim')
    ax.legend(facecolor='#1a1a1a', edgecolor='#444',
              labelcolor=STYLE['text_color'])

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Angle Sweep
# ══════════════════════════════════════════════════════════════════════════

def plot_range_sweep(sweep: dict, v0: float, best_angle: Optional[float] = None,
                     save_path: str = None) -> plt.Figure:
    """Range and apex height vs launch angle."""
    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    _apply_dark_style(fig, axes)

    ax = axes[0]
    ax.plot(sweep['angle'], sweep['range'], color=STYLE['accent_colors'][0],
            linewidth=2)
    if best_angle is not None:
        ax.axvline(best_angle, color='#ffeb3b', linestyle='--', alpha=0.7,
                   label=f'Best angle {best_angle:.1f}°')
        ax.legend(facecolor='#1a1a1a', edgecolor='#444',
                  labelcolor=STYLE['text_color'])
    ax.set_xlabel('Launch angle (°)')
    ax.set_ylabel('Range (m)')
    ax.set_title(f'Range vs Angle (v₀={v0:.0f} m/s)', fontweight='bold')

    ax = axes[1]
    ax.plot(sweep['angle'], sweep['max_height'], color=STYLE['accent_colors'][1],
            linewidth=2)
    ax.set_xlabel('Launch angle (°)')
    ax.set_ylabel('Max height (m)')
    ax.set_title('Apex Height vs Angle', fontweight='bold')

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  3. Closed Form vs Integrators
# ══════════════════════════════════════════════════════════════════════════

def plot_integration_check(preview: np.ndarray, euler: TrajectoryResult,
                           rk4: TrajectoryResult,
                           save_path: str = None) -> plt.Figure:
    """Overlay numerical trajectories on the closed-form polyline."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    ax.plot(preview[:, 0], preview[:, 1], color=STYLE['preview_color'],
            linewidth=3, alpha=0.6, label='Closed form')
    ax.plot(euler.x, euler.y, '--', color=STYLE['accent_colors'][1],
            linewidth=1.5, label=f'Euler (dt={euler.dt})')
    ax.plot(rk4.x, rk4.y, ':', color=STYLE['accent_colors'][0],
            linewidth=2, label=f'RK4 (dt={rk4.dt})')
    ax.set_xlabel('Downrange x (m)')
    ax.set_ylabel('Height y (m)')
    ax.set_title('Closed Form vs Numerical Integration', fontweight='bold')
    ax.set_ylim(bottom=0)
    ax.legend(facecolor='#1a1a1a', edgecolor='#444',
              labelcolor=STYLE['text_color'])

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  4. Recorded Flight
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class FlightFrame:
    """One rendered frame: flight readout plus camera."""
    time_ms: float
    flight: FlightSnapshot
    visible: bool
    eye: np.ndarray
    look_at: np.ndarray
    camera_mode: str


def record_flight(angle: float, velocity: float, camera_mode: str = 'overview',
                  fps: float = 30.0, tail_ms: float = 600.0,
                  max_frames: int = 5000) -> List[FlightFrame]:
    """
    Fire once and sample every frame until landing, plus `tail_ms` after
    it (long enough for the follow camera to return home).
    """
    clock = ManualClock()
    frame_ms = 1000.0 / fps
    frames = []
    landed_at = None

    with CannonSimulator(angle, velocity, camera_mode, clock=clock) as sim:
        sim.fire()
        while len(frames) < max_frames:
            sim.tick(clock())
            pose = sim.camera_pose
            frames.append(FlightFrame(
                time_ms=clock(),
                flight=sim.flight_state,
                visible=sim.projectile_visible,
                eye=pose.eye,
                look_at=pose.look_at,
                camera_mode=sim.camera_mode,
            ))
            if landed_at is None and not sim.flight.is_flying:
                landed_at = clock()
            if landed_at is not None and clock() - landed_at >= tail_ms:
                break
            clock.advance(frame_ms)
    return frames


def mpl_view_angles(eye: np.ndarray, look_at: np.ndarray):
    """
    (elev, azim) in degrees for matplotlib 3D axes. World y is up; the
    plot axes are (x, z, y).
    """
    d = np.asarray(eye) - np.asarray(look_at)
    elev = math.degrees(math.atan2(d[1], math.hypot(d[0], d[2])))
    azim = math.degrees(math.atan2(d[2], d[0]))
    return elev, azim


# ══════════════════════════════════════════════════════════════════════════
#  5. Animated Flight (GIF)
# ══════════════════════════════════════════════════════════════════════════

def create_flight_animation(frames: List[FlightFrame], preview: np.ndarray,
                            save_path: str = 'outputs/flight_anim.gif',
                            fps: int = 30) -> str:
    """Camera view (left) and side view with readouts (right)."""
    from matplotlib.animation import FuncAnimation, PillowWriter

    fig = plt.figure(figsize=(14, 6))
    fig.patch.set_facecolor(STYLE['bg_color'])
    ax3d = fig.add_subplot(1, 2, 1, projection='3d')
    ax2d = fig.add_subplot(1, 2, 2)
    _apply_dark_style(fig, ax2d)
    ax3d.set_facecolor(STYLE['bg_color'])

    xs = [f.flight.position.x for f in frames if f.visible]
    ys = [f.flight.position.y for f in frames if f.visible]
    x_max = max([preview[:, 0].max()] + xs) * 1.05
    y_max = max([preview[:, 1].max()] + ys) * 1.15

    ax2d.plot(preview[:, 0], preview[:, 1], color=STYLE['preview_color'],
              alpha=0.4, linewidth=1.5)
    ax2d.set_xlim(0, x_max)
    ax2d.set_ylim(0, y_max)
    ax2d.set_xlabel('Downrange x (m)')
    ax2d.set_ylabel('Height y (m)')
    ax2d.set_title('Side View', fontweight='bold')
    trail_line, = ax2d.plot([], [], color='#00d4ff', linewidth=1.5, alpha=0.6)
    point, = ax2d.plot([], [], 'o', color=STYLE['projectile_color'], markersize=8)
    readout = ax2d.text(0.02, 0.95, '', transform=ax2d.transAxes,
                        color=STYLE['text_color'], fontsize=10,
                        fontfamily='monospace', va='top')

    def animate(i):
        frame = frames[i]
        trail = [(f.flight.position.x, f.flight.position.y)
                 for f in frames[:i + 1] if f.visible]
        if trail:
            tx, ty = zip(*trail)
            trail_line.set_data(tx, ty)
        pos = frame.flight.position
        point.set_data([pos.x] if frame.visible else [],
                       [pos.y] if frame.visible else [])
        r = frame.flight.readout()
        readout.set_text(
            f"t={r['current_time']} s  x={r['x']} m  y={r['y']} m\n"
            f"R={r['range']} m  H={r['max_height']} m  T={r['time_of_flight']} s\n"
            f"camera={frame.camera_mode}  eye=({frame.eye[0]:.1f}, "
            f"{frame.eye[1]:.1f}, {frame.eye[2]:.1f})"
        )

        ax3d.cla()
        ax3d.set_facecolor(STYLE['bg_color'])
        ax3d.plot(preview[:, 0], np.zeros(len(preview)), preview[:, 1],
                  color=STYLE['preview_color'], alpha=0.5)
        if frame.visible:
            ax3d.scatter([pos.x], [0.0], [pos.y], color=STYLE['projectile_color'], s=40)
        half = np.linalg.norm(frame.eye - frame.look_at) * 0.6
        cx, cy, cz = frame.look_at
        ax3d.set_xlim(cx - half, cx + half)
        ax3d.set_ylim(cz - half, cz + half)
        ax3d.set_zlim(max(0.0, cy - half), cy + half)
        elev, azim = mpl_view_angles(frame.eye, frame.look_at)
        ax3d.view_init(elev=elev, azim=azim)
        ax3d.set_title(f'Camera — {frame.camera_mode}', color=STYLE['text_color'])
        return trail_line, point, readout

    anim = FuncAnimation(fig, animate, frames=len(frames),
                         interval=1000 / fps, blit=False)
    anim.save(save_path, writer=PillowWriter(fps=fps),
              savefig_kwargs={'facecolor': STYLE['bg_color']})
    plt.close(fig)
    return save_path
