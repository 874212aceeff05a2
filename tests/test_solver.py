"""
Tests for the solver's visibility and communication queries.
"""
import logging
import math

import pytest

from scan_cover.core.frames import negate
from scan_cover.objects.instance import Instance
from scan_cover.simulation.orientation import OrientationLog
from scan_cover.simulation.solver import Solver, SolverConfig

from conftest import circular, deg

STEP_S = 10.0
UP = (0.0, 0.0, 1.0)


def committed_up(t_s=0.0):
    """Both satellites of a trailing pair pointing at +z since t_s."""
    return OrientationLog().with_orientation(0, t_s, UP).with_orientation(1, t_s, UP)


def trailing(**kwargs):
    instance = Instance()
    instance.add_orbit(circular(instance, true_anomaly_deg=0.0, **kwargs))
    instance.add_orbit(circular(instance, true_anomaly_deg=20.0, **kwargs))
    instance.add_link(0, 1)
    return instance


class TestSolverConfig:
    def test_defaults(self):
        config = SolverConfig()
        assert config.step_size_s == 1.0
        assert config.horizon_periods == 1.0

    @pytest.mark.parametrize("step", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_step(self, step):
        with pytest.raises(ValueError, match="step_size_s"):
            SolverConfig(step_size_s=step)

    @pytest.mark.parametrize("horizon", [-0.5, math.inf, math.nan])
    def test_invalid_horizon(self, horizon):
        with pytest.raises(ValueError, match="horizon_periods"):
            SolverConfig(horizon_periods=horizon)


class TestCache:
    def test_cache_reused_while_instance_unchanged(self, mixed_instance):
        solver = Solver(mixed_instance, SolverConfig(step_size_s=STEP_S))
        assert solver.visibility_windows(0) is solver.visibility_windows(0)

    def test_cache_rebuilt_after_add_link(self, mixed_instance):
        solver = Solver(mixed_instance, SolverConfig(step_size_s=STEP_S))
        before = solver.visibility_windows(0)
        mixed_instance.add_link(3, 2)
        windows = solver.visibility_windows(3)
        assert len(windows) == 1
        assert solver.visibility_windows(0) is not before

    def test_cache_rebuilt_after_remove(self, mixed_instance):
        solver = Solver(mixed_instance, SolverConfig(step_size_s=STEP_S))
        assert not solver.visibility_windows(2)
        mixed_instance.remove_invalid_links(step_s=STEP_S)
        with pytest.raises(KeyError):
            solver.visibility_windows(2)

    def test_invalidate(self, polar_pair):
        solver = Solver(polar_pair, SolverConfig(step_size_s=STEP_S))
        before = solver.visibility_windows(0)
        solver.invalidate()
        after = solver.visibility_windows(0)
        assert after is not before
        assert after.events == before.events

    def test_inexact_period_logged(self, caplog):
        instance = Instance()
        instance.add_orbit(instance.new_orbit(
            height_perigee_km=500.0, eccentricity=0.0, true_anomaly_rad=0.0,
            raan_rad=0.0, argp_rad=0.0, inc_rad=0.0,
        ))
        instance.add_orbit(instance.new_orbit(
            height_perigee_km=1000.0, eccentricity=0.0, true_anomaly_rad=deg(10.0),
            raan_rad=0.0, argp_rad=0.0, inc_rad=0.0,
        ))
        instance.add_link(0, 1)
        with caplog.at_level(logging.WARNING):
            Solver(instance, SolverConfig(step_size_s=60.0)).create_cache()
        assert "not commensurate" in caplog.text


class TestNextVisibility:
    @pytest.fixture
    def solver(self, polar_pair):
        return Solver(polar_pair, SolverConfig(step_size_s=STEP_S))

    def test_from_epoch_is_first_window(self, solver):
        first = solver.visibility_windows(0).events[0]
        assert solver.next_visibility(0, 0.0) == first.t_begin

    def test_inside_window_is_t0(self, solver):
        first = solver.visibility_windows(0).events[0]
        t0 = (first.t_begin + first.t_end) / 2
        assert solver.next_visibility(0, t0) == t0

    def test_never_before_t0(self, solver):
        period = solver.instance.isl(0).period_s
        for k in range(40):
            t0 = k * period / 13.0
            assert solver.next_visibility(0, t0) >= t0

    def test_wraps_into_next_period(self, solver):
        period = solver.instance.isl(0).period_s
        windows = solver.visibility_windows(0).events
        t0 = windows[-1].t_end + 1.0
        assert solver.next_visibility(0, t0) == pytest.approx(period + windows[0].t_begin)

    def test_unrolled_over_periods(self, solver):
        period = solver.instance.isl(0).period_s
        second = solver.visibility_windows(0).events[1]
        t0 = 3 * period + second.t_begin - 50.0
        assert solver.next_visibility(0, t0) == pytest.approx(3 * period + second.t_begin)

    def test_always_visible_returns_t0(self, trailing_pair):
        solver = Solver(trailing_pair, SolverConfig(step_size_s=STEP_S))
        for t0 in (0.0, 123.4, 1.0e5):
            assert solver.next_visibility(0, t0) == t0

    def test_never_visible_is_inf(self, mixed_instance):
        solver = Solver(mixed_instance, SolverConfig(step_size_s=STEP_S))
        assert solver.next_visibility(2, 0.0) == math.inf
        assert solver.next_visibility(2, 1000.0) == math.inf

    def test_infinite_t0(self, solver):
        assert solver.next_visibility(0, math.inf) == math.inf


class TestNextBlocked:
    def test_always_visible_is_never_blocked(self, trailing_pair):
        solver = Solver(trailing_pair, SolverConfig(step_size_s=STEP_S))
        isl = trailing_pair.isl(0)
        for t0 in (0.0, 5.0, isl.period_s - 1.0, 3.5 * isl.period_s):
            assert solver.next_blocked(0, t0) == math.inf

    def test_inside_window_is_window_end(self, polar_pair):
        solver = Solver(polar_pair, SolverConfig(step_size_s=STEP_S))
        period = polar_pair.isl(0).period_s
        first = solver.visibility_windows(0).events[0]
        assert solver.next_blocked(0, first.t_begin + 10.0) == first.t_end
        t_blocked = solver.next_blocked(0, 2 * period + first.t_begin + 10.0)
        assert t_blocked == pytest.approx(2 * period + first.t_end)
        assert polar_pair.isl(0).is_blocked(first.t_end)

    def test_blocked_t0_is_returned(self, polar_pair):
        solver = Solver(polar_pair, SolverConfig(step_size_s=STEP_S))
        assert solver.next_blocked(0, 0.0) == 0.0
        assert solver.next_blocked(0, 2000.0) == 2000.0

    def test_never_visible_is_blocked_immediately(self, mixed_instance):
        solver = Solver(mixed_instance, SolverConfig(step_size_s=STEP_S))
        assert solver.next_blocked(2, 123.0) == 123.0

    def test_run_continues_across_period_boundary(self):
        # polar pair 10 deg before the pole at epoch: visible across t = 0
        instance = Instance()
        instance.add_orbit(circular(instance, true_anomaly_deg=80.0, raan_deg=0.0, inc_deg=90.0))
        instance.add_orbit(circular(instance, true_anomaly_deg=80.0, raan_deg=180.0, inc_deg=90.0))
        instance.add_link(0, 1)
        solver = Solver(instance, SolverConfig(step_size_s=STEP_S))
        period = instance.isl(0).period_s
        events = solver.visibility_windows(0).events
        assert events[0].t_begin == 0.0
        assert events[-1].t_end == period

        t_blocked = solver.next_blocked(0, events[-1].t_begin + STEP_S)
        assert t_blocked == pytest.approx(period + events[0].t_end)
        assert instance.isl(0).is_blocked(t_blocked)


class TestNextCommunication:
    def test_free_antennas_communicate_when_visible(self, polar_pair):
        solver = Solver(polar_pair, SolverConfig(step_size_s=STEP_S))
        for t0 in (0.0, 1500.0, 2500.0, 7000.0):
            assert solver.next_communication(0, t0) == solver.next_visibility(0, t0)

    def test_never_before_visibility(self):
        instance = Instance()
        instance.add_orbit(circular(instance, raan_deg=0.0, inc_deg=90.0, rotation_speed_rad_s=0.01))
        instance.add_orbit(circular(instance, raan_deg=180.0, inc_deg=90.0, rotation_speed_rad_s=0.01))
        instance.add_link(0, 1)
        solver = Solver(instance, SolverConfig(step_size_s=STEP_S))
        log = committed_up()
        for t0 in (0.0, 500.0, 1500.0, 3000.0):
            t = solver.next_communication(0, t0, log)
            assert t >= solver.next_visibility(0, t0)
            assert not instance.isl(0).is_blocked(t)

    def test_fixed_antennas_pointing_away_never_align(self):
        solver = Solver(trailing(), SolverConfig(step_size_s=STEP_S))
        assert solver.next_communication(0, 0.0, committed_up()) == math.inf

    def test_fixed_antennas_already_facing(self):
        instance = trailing()
        solver = Solver(instance, SolverConfig(step_size_s=STEP_S))
        t0 = 250.0
        facing = instance.isl(0).get_orientation(t0)
        log = OrientationLog().with_orientation(0, t0, facing).with_orientation(1, t0, negate(facing))
        assert solver.next_communication(0, t0, log) == t0

    def test_turning_antennas_wait_for_quarter_turn(self):
        # +z is 90 deg off the in-plane link direction: 157.08 s at 0.01 rad/s
        solver = Solver(trailing(rotation_speed_rad_s=0.01), SolverConfig(step_size_s=2.0))
        assert solver.next_communication(0, 0.0, committed_up()) == pytest.approx(158.0)

    def test_turn_counts_from_commit_time(self):
        solver = Solver(trailing(rotation_speed_rad_s=0.01), SolverConfig(step_size_s=2.0))
        assert solver.next_communication(0, 100.0, committed_up(100.0)) == pytest.approx(258.0)

    def test_wide_cone_aligns_immediately(self):
        solver = Solver(trailing(cone_half_angle_rad=deg(90.0)), SolverConfig(step_size_s=STEP_S))
        assert solver.next_communication(0, 0.0, committed_up()) == 0.0

    def test_search_horizon(self):
        solver = Solver(trailing(rotation_speed_rad_s=0.01), SolverConfig(step_size_s=STEP_S, horizon_periods=2.0))
        isl = solver.instance.isl(0)
        assert solver.search_horizon_s(0) == pytest.approx(math.pi / 0.01 + 2 * isl.period_s)

    def test_never_visible_is_inf(self, mixed_instance):
        solver = Solver(mixed_instance, SolverConfig(step_size_s=STEP_S))
        assert solver.next_communication(2, 0.0) == math.inf


class TestBounds:
    def test_first_visibility_times(self, mixed_instance):
        solver = Solver(mixed_instance, SolverConfig(step_size_s=STEP_S))
        first = solver.visibility_windows(0).events[0].t_begin
        assert solver.first_visibility_times() == [first, 0.0, math.inf]

    def test_lower_bound_ignores_immediate_and_never_visible_links(self, mixed_instance):
        solver = Solver(mixed_instance, SolverConfig(step_size_s=STEP_S))
        first = solver.visibility_windows(0).events[0].t_begin
        assert solver.lower_bound() == first
        assert solver.makespan_lower_bound() == first

    def test_bounds_are_zero_when_all_visible_at_start(self, trailing_pair):
        solver = Solver(trailing_pair, SolverConfig(step_size_s=STEP_S))
        assert solver.lower_bound() == 0.0
        assert solver.makespan_lower_bound() == 0.0

    def test_bounds_of_empty_instance(self):
        solver = Solver(Instance())
        assert solver.lower_bound() == 0.0
        assert solver.makespan_lower_bound() == 0.0
