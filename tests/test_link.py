import math

import pytest

from scan_cover.core.errors import GeometryDegenerateError
from scan_cover.core.frames import dot, norm
from scan_cover.core.timeline import TimelineEvent
from scan_cover.objects.instance import Instance
from scan_cover.objects.link import Link

from conftest import circular


class TestLink:
    def test_endpoints(self):
        link = Link(2, 5)
        assert link.endpoints == (2, 5)
        assert link.touches(5)
        assert not link.touches(3)

    def test_self_loop_rejected(self):
        with pytest.raises(ValueError, match="itself"):
            Link(1, 1)

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            Link(-1, 0)


class TestIsBlocked:
    def test_matches_sphere_intersection_prediction(self, polar_pair):
        # the satellites mirror each other through the polar axis, so the
        # line between them is horizontal at height z: blocked iff |z| < R
        isl = polar_pair.isl(0)
        R = polar_pair.radius_central_km
        T = isl.period_s
        checked = 0
        for k in range(97):
            t = k * T / 97
            r1, r2 = isl.positions_at(t)
            if abs(abs(r1[2]) - R) < 1.0 or abs(r1[0]) < 1.0:
                continue
            assert isl.is_blocked(t) == (abs(r1[2]) < R)
            checked += 1
        assert checked > 80

    def test_blocked_at_epoch_visible_at_pole(self, polar_pair):
        isl = polar_pair.isl(0)
        assert isl.is_blocked(0.0) is True
        assert isl.is_blocked(isl.period_s / 4 - 60.0) is False

    def test_pure_function(self, polar_pair):
        isl = polar_pair.isl(0)
        results = {isl.is_blocked(1234.5) for _ in range(5)}
        assert len(results) == 1

    def test_trailing_pair_never_blocked(self, trailing_pair):
        isl = trailing_pair.isl(0)
        assert not any(isl.is_blocked(t) for t in range(0, int(isl.period_s), 60))


class TestOrientation:
    def test_points_from_first_to_second_satellite(self, polar_pair):
        v = polar_pair.isl(0).get_orientation(0.0)
        assert math.isclose(norm(v), 1.0)
        assert math.isclose(v[0], -1.0)

    def test_unit_vector_along_separation(self, trailing_pair):
        isl = trailing_pair.isl(0)
        r1, r2 = isl.positions_at(500.0)
        v = isl.get_orientation(500.0)
        sep = (r2[0] - r1[0], r2[1] - r1[1], r2[2] - r1[2])
        assert math.isclose(dot(v, sep), norm(sep))

    def test_coincident_satellites(self):
        instance = Instance()
        instance.add_orbit(circular(instance))
        instance.add_orbit(circular(instance))
        instance.add_link(0, 1)
        isl = instance.isl(0)
        with pytest.raises(GeometryDegenerateError):
            isl.get_orientation(0.0)
        assert isl.is_blocked(0.0) is False
        assert isl.can_align(TimelineEvent.invalid(), TimelineEvent.invalid(), 0.0) is False


class TestCanAlign:
    def test_free_antennas_align(self, trailing_pair):
        isl = trailing_pair.isl(0)
        assert isl.can_align(TimelineEvent.invalid(), TimelineEvent.invalid(), 10.0)

    def test_both_sides_must_face_each_other(self, trailing_pair):
        isl = trailing_pair.isl(0)
        v = isl.get_orientation(0.0)
        facing = TimelineEvent(0.0, 0.0, v)
        away = TimelineEvent(0.0, 0.0, (-v[0], -v[1], -v[2]))
        assert isl.can_align(facing, away, 0.0)
        assert not isl.can_align(facing, facing, 0.0)


class TestPeriod:
    def test_equal_orbits_share_period(self, polar_pair):
        isl = polar_pair.isl(0)
        assert isl.period_s == isl.orbit1.period_s
        assert isl.period_is_exact

    def test_blocking_pattern_repeats(self, polar_pair):
        isl = polar_pair.isl(0)
        for t in [100.0, 1100.0, 2500.0]:
            assert isl.is_blocked(t) == isl.is_blocked(t + isl.period_s)

    def test_reorientation_time_uses_slower_antenna(self):
        instance = Instance()
        instance.add_orbit(circular(instance, rotation_speed_rad_s=0.1))
        instance.add_orbit(circular(instance, true_anomaly_deg=10.0, rotation_speed_rad_s=0.05))
        instance.add_link(0, 1)
        assert math.isclose(instance.isl(0).reorientation_time_s, math.pi / 0.05)
