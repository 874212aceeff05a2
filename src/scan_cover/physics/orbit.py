from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

from scan_cover.core.constants import MU_EARTH_KM3_S2, R_EARTH_KM
from scan_cover.core.frames import Vector3, perifocal_to_inertial
from scan_cover.physics.gravity import (
    eccentric_to_true_anomaly,
    solve_keplers_equation,
    true_to_mean_anomaly,
    wrap_to_2pi,
)


@dataclass(frozen=True)
class Orbit:
    """
    Keplerian orbit of one satellite plus its antenna agility.

    Units:
        height_perigee_km: perigee height above the central mass surface (km)
        eccentricity: 0 <= e < 1
        true_anomaly_rad: true anomaly at epoch (t=0)
        raan_rad: right ascension of the ascending node
        argp_rad: argument of periapsis
        inc_rad: inclination, [0, π]
        rotation_speed_rad_s: maximum antenna turn rate (rad/s), 0 = fixed
        cone_half_angle_rad: antenna cone half-angle, 0 = directional antenna
        mu_km3_s2 / radius_central_km: central mass the orbit is defined around

    RAAN, argument of periapsis and true anomaly are wrapped to [0, 2π).
    """
    height_perigee_km: float
    eccentricity: float
    true_anomaly_rad: float
    raan_rad: float
    argp_rad: float
    inc_rad: float
    rotation_speed_rad_s: float = 0.0
    cone_half_angle_rad: float = 0.0
    mu_km3_s2: float = MU_EARTH_KM3_S2
    radius_central_km: float = R_EARTH_KM

    def __post_init__(self):
        if not (0.0 <= self.eccentricity < 1.0):
            raise ValueError(f"Eccentricity must be in range [0, 1). Got: {self.eccentricity}")
        if not (0.0 <= self.inc_rad <= math.pi):
            raise ValueError(f"Inclination must be in range [0, π] radians. Got: {self.inc_rad}")
        for name in ("true_anomaly_rad", "raan_rad", "argp_rad"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite. Got: {value}")
            object.__setattr__(self, name, wrap_to_2pi(value))
        if not (self.mu_km3_s2 > 0.0) or math.isinf(self.mu_km3_s2):
            raise ValueError(f"Gravitational parameter must be finite and positive. Got: {self.mu_km3_s2}")
        if not (self.radius_central_km >= 0.0) or math.isinf(self.radius_central_km):
            raise ValueError(f"Central mass radius must be finite and non-negative. Got: {self.radius_central_km}")
        if not math.isfinite(self.height_perigee_km):
            raise ValueError(f"Perigee height must be finite. Got: {self.height_perigee_km}")
        if not (self.radius_central_km + self.height_perigee_km > 0.0):
            raise ValueError(f"Perigee radius must be positive. Got height: {self.height_perigee_km}")
        if not (self.rotation_speed_rad_s >= 0.0) or math.isinf(self.rotation_speed_rad_s):
            raise ValueError(f"Rotation speed must be finite and non-negative. Got: {self.rotation_speed_rad_s}")
        if not (0.0 <= self.cone_half_angle_rad < math.pi):
            raise ValueError(f"Cone half-angle must be in range [0, π). Got: {self.cone_half_angle_rad}")

        try:
            period = self.period_s
        except (OverflowError, ZeroDivisionError):
            period = math.inf
        if not (0.0 < period < math.inf):
            raise ValueError(f"Orbital period must be finite and positive. Got: {period} for a={self.semi_major_axis_km} km")

    @property
    def radius_perigee_km(self) -> float:
        return self.radius_central_km + self.height_perigee_km

    @property
    def semi_major_axis_km(self) -> float:
        return self.radius_perigee_km / (1.0 - self.eccentricity)

    @property
    def mean_motion_rad_s(self) -> float:
        """n = sqrt(mu / a^3)."""
        return math.sqrt(self.mu_km3_s2 / (self.semi_major_axis_km ** 3))

    @property
    def period_s(self) -> float:
        return 2.0 * math.pi / self.mean_motion_rad_s

    @property
    def mean_anomaly_at_epoch_rad(self) -> float:
        return true_to_mean_anomaly(self.true_anomaly_rad, self.eccentricity)

    def true_anomaly_at(self, t_s: float) -> float:
        """True anomaly (rad) at t_s seconds after epoch."""
        M = wrap_to_2pi(self.mean_anomaly_at_epoch_rad + self.mean_motion_rad_s * t_s)
        E = solve_keplers_equation(M, self.eccentricity)
        return eccentric_to_true_anomaly(E, self.eccentricity)

    def position_at(self, t_s: float) -> Vector3:
        """
        Inertial position (km) relative to the central mass at t_s seconds
        after epoch. Two-body Keplerian propagation, periodic in period_s.
        """
        e = self.eccentricity
        nu = self.true_anomaly_at(t_s)

        # Orbit equation r = p / (1 + e cos ν)
        p = self.semi_major_axis_km * (1.0 - e * e)
        r_km = p / (1.0 + e * math.cos(nu))

        r_pqw: Vector3 = (r_km * math.cos(nu), r_km * math.sin(nu), 0.0)
        return perifocal_to_inertial(r_pqw, self.raan_rad, self.inc_rad, self.argp_rad)

    def track(self, times_s: List[float]) -> List[Tuple[float, Vector3]]:
        """Positions across a list of time stamps as (t, r) pairs."""
        return [(t, self.position_at(t)) for t in times_s]
