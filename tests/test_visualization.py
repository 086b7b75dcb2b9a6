"""
Smoke Tests for the Visualization Engine (headless Agg backend)
Run: python -m pytest tests/ -v
"""

import sys
import os
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import matplotlib.pyplot as plt

from cannon_sim.config import HOME_TARGET
from cannon_sim.launch import LaunchParameters
from cannon_sim.preview import build_preview
from cannon_sim.integrator import simulate_euler, simulate_rk4
from cannon_sim.validation import range_sweep
from cannon_sim.visualization import (
    plot_preview, plot_range_sweep, plot_integration_check,
    record_flight, create_flight_animation, mpl_view_angles,
)


PARAMS = LaunchParameters(45.0, 20.0)


class TestPlots:

    def test_preview_plot_saved(self, tmp_path):
        path = tmp_path / 'preview.png'
        fig = plot_preview(build_preview(PARAMS), PARAMS, save_path=str(path))
        plt.close(fig)
        assert path.exists()

    def test_sweep_and_integration_plots(self, tmp_path):
        fig = plot_range_sweep(range_sweep(20.0), 20.0, 43.0,
                               save_path=str(tmp_path / 'sweep.png'))
        plt.close(fig)
        fig = plot_integration_check(build_preview(PARAMS),
                                     simulate_euler(PARAMS, dt=0.05),
                                     simulate_rk4(PARAMS, dt=0.05),
                                     save_path=str(tmp_path / 'check.png'))
        plt.close(fig)
        assert (tmp_path / 'sweep.png').exists()
        assert (tmp_path / 'check.png').exists()


class TestRecordedFlight:

    def test_frames_cover_flight_and_follow_reset(self):
        frames = record_flight(45.0, 20.0, camera_mode='follow', fps=30.0)
        assert frames[0].visible
        assert not frames[-1].visible
        assert all(f.flight.position.y >= 0 for f in frames if f.visible)
        mid = frames[len(frames) // 3]
        assert np.allclose(mid.look_at, [mid.flight.position.x,
                                         mid.flight.position.y, 0.0])
        assert np.allclose(frames[-1].look_at, HOME_TARGET)

    def test_view_angles(self):
        elev, azim = mpl_view_angles(np.array([10.0, 0.0, 0.0]), np.zeros(3))
        assert elev == pytest.approx(0.0)
        assert azim == pytest.approx(0.0)
        elev, _ = mpl_view_angles(np.array([0.0, 5.0, 5.0]), np.zeros(3))
        assert elev == pytest.approx(45.0)

    def test_animation_written(self, tmp_path):
        frames = record_flight(60.0, 15.0, camera_mode='overview', fps=10.0)
        path = create_flight_animation(frames[::4], build_preview(LaunchParameters(60.0, 15.0)),
                                       save_path=str(tmp_path / 'anim.gif'), fps=5)
        assert os.path.exists(path)
