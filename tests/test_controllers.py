"""
Unit Tests for the Frame-Driven Controllers
===========================================
Flight state machine, orbit camera, frame scheduler and the simulator
facade, driven by a synthetic millisecond clock.
Run: python -m pytest tests/ -v
"""

import sys
import os
import logging
import math
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cannon_sim.camera import (
    OrbitCameraController, CameraTransition, PRESETS, ease_out_cubic, orbit_eye,
)
from cannon_sim.config import HOME_TARGET, ELEVATION_LIMITS
from cannon_sim.flight import FlightEvent, FlightPhase, ProjectileFlightController
from cannon_sim.launch import LaunchParameters, LaunchSolution
from cannon_sim.logging_config import LOGGER_NAME, setup_logging
from cannon_sim.scheduler import FrameScheduler, ManualClock
from cannon_sim.simulator import CannonSimulator


PARAMS = LaunchParameters(45.0, 20.0)
TOF_MS = LaunchSolution.solve(PARAMS).time_of_flight * 1000.0


class FakeFlight:
    """Stand-in exposing only the follow-target accessor."""

    def __init__(self):
        self.target = None

    def get_follow_target(self):
        return self.target


class TestFlightController:

    def test_starts_idle(self):
        flight = ProjectileFlightController()
        assert flight.phase is FlightPhase.IDLE
        assert flight.get_follow_target() is None
        assert flight.snapshot().time_of_flight == 0.0

    def test_fire_enters_flying_at_muzzle(self):
        flight = ProjectileFlightController()
        assert flight.fire(PARAMS, 0.0)
        snap = flight.snapshot()
        sol = LaunchSolution.solve(PARAMS)
        assert snap.phase is FlightPhase.FLYING
        assert snap.position == (sol.origin_x, sol.origin_y)
        assert snap.range == sol.range
        assert snap.time_of_flight == sol.time_of_flight

    def test_second_fire_is_noop(self):
        flight = ProjectileFlightController()
        events = []
        flight.add_listener(lambda e, s: events.append(e))
        assert flight.fire(PARAMS, 0.0)
        assert not flight.fire(LaunchParameters(80.0, 90.0), 50.0)
        assert flight.start_ms == 0.0
        assert flight.solution.params == PARAMS
        assert events.count(FlightEvent.LAUNCHED) == 1

    def test_tick_follows_closed_form(self):
        flight = ProjectileFlightController()
        flight.fire(PARAMS, 1000.0)
        snap = flight.tick(2000.0)
        expected = flight.solution.world_position(1.0)
        assert snap.elapsed == pytest.approx(1.0)
        assert snap.position.x == pytest.approx(expected.x)
        assert snap.position.y == pytest.approx(expected.y)
        assert np.allclose(flight.get_follow_target(), [expected.x, expected.y, 0.0])

    def test_tick_is_idempotent(self):
        flight = ProjectileFlightController()
        flight.fire(PARAMS, 0.0)
        assert flight.tick(750.0) == flight.tick(750.0)

    def test_lands_and_returns_to_idle(self):
        flight = ProjectileFlightController()
        seen = []
        flight.add_listener(lambda e, s: seen.append((e, s.phase)))
        flight.fire(PARAMS, 0.0)
        flight.tick(TOF_MS - 100.0)
        assert flight.is_flying
        snap = flight.tick(TOF_MS + 50.0)
        assert snap.phase is FlightPhase.IDLE
        assert (FlightEvent.LANDED, FlightPhase.LANDED) in seen
        assert flight.get_follow_target() is None
        assert snap.range == pytest.approx(LaunchSolution.solve(PARAMS).range)

    def test_published_height_never_negative(self):
        flight = ProjectileFlightController()
        heights = []
        flight.add_listener(lambda e, s: heights.append(s.position.y)
                            if e is FlightEvent.MOVED else None)
        flight.fire(PARAMS, 0.0)
        now = 0.0
        while flight.is_flying:
            now += 16.7
            flight.tick(now)
        assert heights and min(heights) >= 0.0

    def test_can_fire_again_after_landing(self):
        flight = ProjectileFlightController()
        flight.fire(PARAMS, 0.0)
        flight.tick(TOF_MS + 200.0)
        assert flight.fire(LaunchParameters(60.0, 30.0), 10000.0)
        assert flight.start_ms == 10000.0

    def test_readout_formats_two_decimals(self):
        flight = ProjectileFlightController()
        flight.fire(PARAMS, 0.0)
        r = flight.tick(1000.0).readout()
        assert r['current_time'] == '1.00'
        assert len(r['range'].split('.')[1]) == 2
        assert 'FLYING' in flight.snapshot().summary()


class TestOrbitCamera:

    def test_initial_pose_is_overview(self):
        cam = OrbitCameraController()
        p = PRESETS['overview']
        expected = orbit_eye(np.array(p.target), p.azimuth, p.elevation, p.distance)
        assert np.allclose(cam.eye, expected)
        assert np.allclose(cam.view.look_at, HOME_TARGET)

    def test_eye_formula(self):
        eye = orbit_eye(np.array([1.0, 2.0, 3.0]), 0.0, 0.0, 10.0)
        assert np.allclose(eye, [1.0, 2.0, 13.0])

    def test_drag_is_incremental(self):
        cam = OrbitCameraController()
        az0, el0 = cam.pose.azimuth, cam.pose.elevation
        cam.on_pointer_down(100, 100)
        cam.on_pointer_move(110, 100)
        cam.on_pointer_move(120, 104)
        assert cam.pose.azimuth == pytest.approx(az0 + 20 * 0.005)
        assert cam.pose.elevation == pytest.approx(el0 + 4 * 0.005)
        assert np.allclose(cam.eye, cam.pose.eye())

    def test_move_without_drag_ignored(self):
        cam = OrbitCameraController()
        az0 = cam.pose.azimuth
        cam.on_pointer_move(500, 500)
        cam.on_pointer_down(0, 0)
        cam.on_pointer_up()
        cam.on_pointer_move(300, 0)
        assert cam.pose.azimuth == az0
        cam.on_pointer_down(0, 0)
        cam.on_pointer_leave()
        assert not cam.is_dragging

    def test_elevation_clamped(self):
        cam = OrbitCameraController()
        cam.on_pointer_down(0, 0)
        cam.on_pointer_move(0, 10000)
        assert cam.pose.elevation == ELEVATION_LIMITS[1]
        cam.on_pointer_move(0, -10000)
        assert cam.pose.elevation == ELEVATION_LIMITS[0]

    def test_zoom_clamped(self):
        cam = OrbitCameraController()
        cam.set_mode('side', 0.0)
        for _ in range(1000):
            cam.on_wheel(10000)
        assert cam.pose.distance == 100
        for _ in range(1000):
            cam.on_wheel(-10000)
        assert cam.pose.distance == 5

    def test_zoom_step(self):
        cam = OrbitCameraController()
        cam.on_wheel(100)
        assert cam.pose.distance == pytest.approx(35.0)

    def test_preset_transition_eases_eye(self):
        cam = OrbitCameraController()
        start = cam.eye
        cam.set_mode('side', 0.0)
        end = PRESETS['side']
        end_eye = orbit_eye(np.array(end.target), end.azimuth, end.elevation, end.distance)
        assert cam.pose.azimuth == end.azimuth
        assert np.allclose(cam.eye, start)
        cam.tick(250.0)
        assert np.allclose(cam.eye, start + (end_eye - start) * 0.875)
        assert cam.in_transition
        cam.tick(500.0)
        assert np.allclose(cam.eye, end_eye)
        assert not cam.in_transition

    def test_drag_during_transition_uses_final_pose(self):
        cam = OrbitCameraController()
        cam.set_mode('side', 0.0)
        cam.tick(100.0)
        cam.on_pointer_down(0, 0)
        cam.on_pointer_move(10, 0)
        assert cam.pose.azimuth == pytest.approx(math.pi / 2 + 0.05)
        cam.tick(600.0)
        assert np.allclose(cam.eye, cam.pose.eye())

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            OrbitCameraController().set_mode('orbit', 0.0)
        with pytest.raises(ValueError):
            OrbitCameraController(mode='top')

    def test_follow_tracks_target_then_returns_home(self):
        flight = FakeFlight()
        cam = OrbitCameraController(flight, mode='follow')
        flight.target = np.array([12.0, 7.0, 0.0])
        cam.tick(100.0)
        assert np.allclose(cam.view.look_at, [12.0, 7.0, 0.0])
        assert np.allclose(cam.eye, cam.pose.eye())
        flight.target = None
        cam.tick(200.0)
        cam.tick(699.0)
        assert np.allclose(cam.view.look_at, [12.0, 7.0, 0.0])
        cam.tick(700.0)
        assert np.allclose(cam.view.look_at, HOME_TARGET)

    def test_no_tracking_outside_follow_mode(self):
        flight = FakeFlight()
        cam = OrbitCameraController(flight, mode='closeup')
        flight.target = np.array([12.0, 7.0, 0.0])
        cam.tick(100.0)
        assert np.allclose(cam.view.look_at, PRESETS['closeup'].target)

    def test_ease_out_cubic(self):
        assert ease_out_cubic(0.0) == 0.0
        assert ease_out_cubic(1.0) == 1.0
        assert ease_out_cubic(0.5) == pytest.approx(0.875)
        t = CameraTransition(np.zeros(3), start_ms=0.0, duration_ms=500.0)
        assert t.progress(-10.0) == 0.0
        assert t.progress(1000.0) == 1.0


class Recorder:
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def tick(self, now_ms):
        self.log.append((self.name, now_ms))


class TestFrameScheduler:

    def test_ticks_in_registration_order(self):
        log = []
        sched = FrameScheduler(clock=ManualClock(40.0))
        sched.register(Recorder('flight', log))
        sched.register(Recorder('camera', log))
        assert sched.tick()
        sched.tick(80.0)
        assert log == [('flight', 40.0), ('camera', 40.0),
                       ('flight', 80.0), ('camera', 80.0)]
        assert sched.frame_count == 2

    def test_close_stops_mutation(self):
        log = []
        with FrameScheduler(clock=ManualClock()) as sched:
            sched.register(Recorder('a', log))
        assert sched.closed
        assert not sched.tick(10.0)
        assert log == []
        with pytest.raises(RuntimeError):
            sched.register(Recorder('b', log))

    def test_run_stops_when_done(self):
        clock = ManualClock()
        sched = FrameScheduler(clock=clock)
        log = []
        sched.register(Recorder('a', log))
        frames = sched.run(until=lambda: len(log) >= 3, fps=1000.0)
        assert frames == 3


class TestCannonSimulator:

    def make(self, **kwargs):
        clock = ManualClock()
        return clock, CannonSimulator(clock=clock, **kwargs)

    def test_preview_recomputed_on_parameter_change(self):
        _, sim = self.make()
        before = sim.current_preview
        assert sim.set_launch_parameters(60.0, 40.0)
        assert not np.array_equal(before, sim.current_preview)

    def test_parameters_locked_while_flying(self):
        clock, sim = self.make()
        sim.fire()
        preview = sim.current_preview
        assert not sim.controls_enabled
        assert not sim.set_launch_parameters(60.0, 40.0)
        assert sim.params == PARAMS
        assert np.array_equal(preview, sim.current_preview)

    def test_fire_twice_single_flight(self):
        clock, sim = self.make()
        assert sim.fire()
        clock.advance(16.0)
        assert not sim.fire()
        assert sim.flight.start_ms == 0.0

    def test_full_flight_cycle(self):
        clock, sim = self.make(camera_mode='follow')
        sim.fire()
        assert sim.projectile_visible and not sim.panel_open
        clock.advance(500.0)
        sim.tick()
        state = sim.flight_state
        assert state.phase is FlightPhase.FLYING
        assert np.allclose(sim.camera_pose.look_at,
                           [state.position.x, state.position.y, 0.0])

        clock.advance(TOF_MS)
        sim.tick()
        assert sim.flight_state.phase is FlightPhase.IDLE
        assert not sim.projectile_visible
        assert sim.panel_open and sim.controls_enabled

        clock.advance(500.0)
        sim.tick()
        assert np.allclose(sim.camera_pose.look_at, HOME_TARGET)

    def test_preview_safe_during_flight(self):
        clock, sim = self.make()
        sim.fire()
        clock.advance(300.0)
        sim.tick()
        snap = sim.flight_state
        sim.preview_builder.build(LaunchParameters(80.0, 99.0))
        assert sim.flight_state == snap

    def test_camera_input_routed(self):
        _, sim = self.make()
        sim.set_camera_mode('closeup')
        assert sim.camera_mode == 'closeup'
        sim.on_wheel(-1000)
        assert sim.camera.pose.distance == 5
        sim.on_pointer_down(0, 0)
        sim.on_pointer_move(20, 0)
        sim.on_pointer_up(20, 0)
        assert sim.camera.pose.azimuth == pytest.approx(0.5 + 0.1)

    def test_close_abandons_flight(self):
        clock, sim = self.make()
        sim.fire()
        clock.advance(100.0)
        sim.tick()
        snap = sim.flight_state
        sim.close()
        clock.advance(10000.0)
        assert not sim.tick()
        assert not sim.fire()
        assert sim.flight_state == snap
        sim.close()

    def test_pointer_input_ignored_after_close(self):
        _, sim = self.make()
        sim.on_pointer_down(0, 0)
        sim.close()
        sim.on_pointer_up(10, 0)
        assert sim.camera.is_dragging
        sim.on_pointer_leave()
        assert sim.camera.is_dragging
        azimuth = sim.camera.pose.azimuth
        sim.on_pointer_move(50, 0)
        assert sim.camera.pose.azimuth == azimuth

    def test_invalid_parameters_raise(self):
        _, sim = self.make()
        with pytest.raises(ValueError):
            sim.set_launch_parameters(float('nan'), 20.0)


class TestLoggingSetup:

    def test_flight_messages_reach_log_file(self, tmp_path):
        path = tmp_path / 'run.log'
        logger = setup_logging(logging.DEBUG, log_file=str(path))
        try:
            assert logger.name == LOGGER_NAME
            assert len(logger.handlers) == 2
            ProjectileFlightController().fire(PARAMS, now_ms=0.0)
            text = path.read_text(encoding='utf-8')
            assert 'cannon_sim.flight' in text
            assert 'Fired' in text
        finally:
            setup_logging()

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging(logging.WARNING)
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
        setup_logging()


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
