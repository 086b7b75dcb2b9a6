#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  CANNON PROJECTILE SIMULATOR — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete pipeline:
    1. Scenario readouts (closed-form kinematics)
    2. Validation against textbook formulas and scenario values
    3. Closed form vs Euler / RK4 integration
    4. Trajectory preview plot
    5. Range vs angle sweep + optimal angle
    6. Recorded live flight through the frame scheduler
    7. Animated flight GIF through the orbit camera

  All outputs saved to outputs/ directory.

  Usage:
    python main.py                          # Run everything
    python main.py --quick                  # Skip animation (faster)
    python main.py --angle 60 --velocity 35 --camera follow
═══════════════════════════════════════════════════════════════════════════════
"""

import argparse
import logging
import os
import time

from cannon_sim import (
    CAMERA_MODES, EQUATIONS, LaunchParameters, LaunchSolution, MountGeometry,
    build_preview, simulate_euler, simulate_rk4, setup_logging,
    validate_against_reference, validate_against_integration,
    optimal_launch_angle, range_sweep,
    REFERENCE_SCENARIOS, REFERENCE_TEXTBOOK,
)
from cannon_sim.validation import GROUND_MOUNT
from cannon_sim.visualization import (
    plot_preview, plot_range_sweep, plot_integration_check,
    record_flight, create_flight_animation, ensure_output_dir,
)

import matplotlib.pyplot as plt


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     CANNON PROJECTILE MOTION SIMULATOR                                ║
║     ─────────────────────────────────────────────────────             ║
║     Closed-form kinematics · Live flight · Orbit camera               ║
║     x = v₀cosθ·t   y = y₀ + v₀sinθ·t − ½gt²                           ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Cannon projectile simulator")
    parser.add_argument('--angle', type=float, default=45.0,
                        help="launch angle in degrees [15, 90]")
    parser.add_argument('--velocity', type=float, default=20.0,
                        help="muzzle speed in m/s [10, 100]")
    parser.add_argument('--camera', choices=CAMERA_MODES, default='follow',
                        help="camera mode for the recorded flight")
    parser.add_argument('--fps', type=float, default=30.0)
    parser.add_argument('--out', default='outputs')
    parser.add_argument('--quick', action='store_true',
                        help="skip the GIF animation")
    parser.add_argument('--log-level', default='INFO')
    parser.add_argument('--log-file', default=None,
                        help="also write log records to this file")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(getattr(logging, args.log_level.upper(), logging.INFO),
                  log_file=args.log_file)
    start_time = time.time()

    params = LaunchParameters(args.angle, args.velocity)
    mount = MountGeometry()

    banner()
    out = ensure_output_dir(args.out)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Scenario readouts
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Launch Solution")
    sol = LaunchSolution.solve(params, mount)
    print(f"  Angle           : {params.angle_deg:>8.1f} °")
    print(f"  Muzzle speed    : {params.velocity:>8.1f} m/s")
    print(f"  Muzzle position : ({sol.origin_x:.2f}, {sol.origin_y:.2f}) m")
    print(f"  Range           : {sol.range:>8.2f} m")
    print(f"  Max height      : {sol.max_height:>8.2f} m")
    print(f"  Flight time     : {sol.time_of_flight:>8.2f} s")
    for label, lines in EQUATIONS.items():
        print(f"  {label.capitalize()}:")
        for line in lines:
            print(f"    - {line}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Validation
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Validation")
    validate_against_reference(REFERENCE_SCENARIOS)
    validate_against_reference(REFERENCE_TEXTBOOK)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Numerical cross-check
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Closed Form vs Euler / RK4")
    validate_against_integration([params], mount, method='rk4', dt=0.001)
    validate_against_integration([params], mount, method='euler', dt=0.001)

    preview = build_preview(params, mount)
    euler = simulate_euler(params, mount, dt=0.05)
    rk4 = simulate_rk4(params, mount, dt=0.05)
    fig = plot_integration_check(preview, euler, rk4,
                                 save_path=f'{out}/03_integration_check.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/03_integration_check.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Preview
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Trajectory Preview")
    print(f"  {len(preview)} preview points, last at "
          f"({preview[-1, 0]:.2f}, {preview[-1, 1]:.2f})")
    fig = plot_preview(preview, params, mount,
                       save_path=f'{out}/04_preview.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/04_preview.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Angle sweep
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Range vs Angle")
    best = optimal_launch_angle(params.velocity, mount)
    best_ground = optimal_launch_angle(params.velocity, GROUND_MOUNT)
    print(f"  Optimal angle from the cannon : {best:.2f} °")
    print(f"  Optimal angle from the ground : {best_ground:.2f} °")
    fig = plot_range_sweep(range_sweep(params.velocity, mount=mount),
                           params.velocity, best,
                           save_path=f'{out}/05_range_sweep.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/05_range_sweep.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Live flight
    # ══════════════════════════════════════════════════════════════════════
    section(f"PHASE 6: Recorded Flight (camera={args.camera}, {args.fps:.0f} fps)")
    frames = record_flight(params.angle_deg, params.velocity, args.camera,
                           fps=args.fps)
    flying = [f for f in frames if f.visible]
    print(f"  {len(frames)} frames, {len(flying)} with the projectile in flight")
    print(flying[-1].flight.summary() if flying else frames[-1].flight.summary())

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Animation
    # ══════════════════════════════════════════════════════════════════════
    if not args.quick:
        section("PHASE 7: Flight Animation (GIF)")
        path = create_flight_animation(frames, preview,
                                       save_path=f'{out}/07_flight_animation.gif',
                                       fps=int(args.fps))
        print(f"  ✓ Saved: {path}")
    else:
        section("PHASE 7: Animation SKIPPED (--quick mode)")

    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"\n  All outputs saved to: {os.path.abspath(out)}/")
    print(f"  Total runtime: {elapsed:.1f} seconds\n")


if __name__ == "__main__":
    main()
