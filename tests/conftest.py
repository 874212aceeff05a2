"""
Shared fixtures: small instances whose geometry is known in closed form.

All orbits are circular at 500 km above the Earth (a = 6878.137 km).
"""
import math

import pytest

from scan_cover.objects.instance import Instance

HEIGHT_KM = 500.0


def deg(x):
    return x * math.pi / 180.0


def circular(instance, true_anomaly_deg=0.0, raan_deg=0.0, inc_deg=0.0, **kwargs):
    return instance.new_orbit(
        height_perigee_km=HEIGHT_KM,
        eccentricity=0.0,
        true_anomaly_rad=deg(true_anomaly_deg),
        raan_rad=deg(raan_deg),
        argp_rad=0.0,
        inc_rad=deg(inc_deg),
        **kwargs,
    )


@pytest.fixture
def polar_pair():
    """
    Two polar orbits with RAAN 0 and 180 deg: the satellites mirror each
    other through the polar axis and only see each other near the poles.
    """
    instance = Instance()
    instance.add_orbit(circular(instance, raan_deg=0.0, inc_deg=90.0))
    instance.add_orbit(circular(instance, raan_deg=180.0, inc_deg=90.0))
    instance.add_link(0, 1)
    return instance


@pytest.fixture
def trailing_pair():
    """Two satellites 20 deg apart on one equatorial orbit: never blocked."""
    instance = Instance()
    instance.add_orbit(circular(instance, true_anomaly_deg=0.0))
    instance.add_orbit(circular(instance, true_anomaly_deg=20.0))
    instance.add_link(0, 1)
    return instance


@pytest.fixture
def mixed_instance():
    """
    link 0: polar pair (first visible near the pole)
    link 1: trailing pair (always visible)
    link 2: opposite satellites on the equator (always blocked)
    """
    instance = Instance()
    instance.add_orbit(circular(instance, raan_deg=0.0, inc_deg=90.0))
    instance.add_orbit(circular(instance, raan_deg=180.0, inc_deg=90.0))
    instance.add_orbit(circular(instance, true_anomaly_deg=0.0))
    instance.add_orbit(circular(instance, true_anomaly_deg=20.0))
    instance.add_orbit(circular(instance, true_anomaly_deg=180.0))
    instance.add_link(0, 1)
    instance.add_link(2, 3)
    instance.add_link(2, 4)
    return instance
