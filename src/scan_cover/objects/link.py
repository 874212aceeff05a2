from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from scan_cover.core.errors import GeometryDegenerateError
from scan_cover.core.frames import Vector3, negate, norm, normalize, sub
from scan_cover.core.timeline import TimelineEvent
from scan_cover.physics.attitude import can_reach_orientation, reorientation_time_s
from scan_cover.physics.orbit import Orbit
from scan_cover.physics.visibility import line_of_sight_blocked, link_period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Link:
    """
    A potential inter-satellite link, stored as two indices into the owning
    instance's orbit list. Orbit `orbit_a` is satellite 1 (the side whose
    pointing vector InterSatelliteLink.get_orientation returns), `orbit_b` is
    satellite 2.
    """
    orbit_a: int
    orbit_b: int

    def __post_init__(self):
        if self.orbit_a < 0 or self.orbit_b < 0:
            raise ValueError(f"Orbit indices must be non-negative. Got: ({self.orbit_a}, {self.orbit_b})")
        if self.orbit_a == self.orbit_b:
            raise ValueError(f"A link cannot connect orbit {self.orbit_a} to itself.")

    @property
    def endpoints(self) -> Tuple[int, int]:
        return (self.orbit_a, self.orbit_b)

    def touches(self, orbit_index: int) -> bool:
        return orbit_index in (self.orbit_a, self.orbit_b)


@dataclass(frozen=True)
class InterSatelliteLink:
    """
    Geometry of a link between two concrete orbits.

    Built on demand by the instance from its own orbits; everything here is
    a pure function of the two orbits, the central radius and time.
    """
    orbit1: Orbit
    orbit2: Orbit
    radius_central_km: float

    def positions_at(self, t_s: float) -> Tuple[Vector3, Vector3]:
        return self.orbit1.position_at(t_s), self.orbit2.position_at(t_s)

    @property
    def period_s(self) -> float:
        """Time after which the blocking pattern repeats (see link_period)."""
        return link_period(self.orbit1.period_s, self.orbit2.period_s)[0]

    @property
    def period_is_exact(self) -> bool:
        return link_period(self.orbit1.period_s, self.orbit2.period_s)[1]

    @property
    def reorientation_time_s(self) -> float:
        """Worst-case half-turn time of the slower of the two antennas."""
        return max(
            reorientation_time_s(self.orbit1.rotation_speed_rad_s),
            reorientation_time_s(self.orbit2.rotation_speed_rad_s),
        )

    def is_blocked(self, t_s: float) -> bool:
        """True iff the central mass lies between both satellites at t_s."""
        r1, r2 = self.positions_at(t_s)
        return line_of_sight_blocked(r1, r2, self.radius_central_km)

    def distance_km(self, t_s: float) -> float:
        r1, r2 = self.positions_at(t_s)
        return norm(sub(r2, r1))

    def get_orientation(self, t_s: float) -> Vector3:
        """
        Unit vector satellite 1 has to point along at t_s; satellite 2 needs
        its negation.

        Raises:
            GeometryDegenerateError: if both satellites share one position
        """
        r1, r2 = self.positions_at(t_s)
        try:
            return normalize(sub(r2, r1))
        except GeometryDegenerateError:
            raise GeometryDegenerateError(f"Satellites coincide at t={t_s}s; link direction undefined.") from None

    def can_align(
        self,
        orientation1: TimelineEvent[Vector3],
        orientation2: TimelineEvent[Vector3],
        t_s: float,
    ) -> bool:
        """
        Whether both antennas can face each other at t_s, given each
        satellite's last committed orientation and its turn rate or cone.
        """
        try:
            required = self.get_orientation(t_s)
        except GeometryDegenerateError as exc:
            logger.debug("Cannot align: %s", exc)
            return False

        return can_reach_orientation(
            orientation1, required, t_s,
            self.orbit1.rotation_speed_rad_s, self.orbit1.cone_half_angle_rad,
        ) and can_reach_orientation(
            orientation2, negate(required), t_s,
            self.orbit2.rotation_speed_rad_s, self.orbit2.cone_half_angle_rad,
        )
