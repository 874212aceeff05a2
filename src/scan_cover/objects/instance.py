from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Set, Tuple

from scan_cover.core.constants import MU_EARTH_KM3_S2, R_EARTH_KM
from scan_cover.core.errors import OrbitReferenceError
from scan_cover.objects.link import InterSatelliteLink, Link
from scan_cover.physics.orbit import Orbit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineGraph:
    """
    Conflict graph over links: two links are adjacent iff they share an
    orbit, since one satellite can only face one direction at a time.

    adjacency[i] holds the sorted, duplicate-free neighbours of link i,
    never i itself.
    """
    adjacency: Tuple[Tuple[int, ...], ...]

    def __len__(self) -> int:
        return len(self.adjacency)

    def neighbors(self, link_index: int) -> Tuple[int, ...]:
        return self.adjacency[link_index]

    def is_adjacent(self, i: int, j: int) -> bool:
        return j in self.adjacency[i]

    def degree(self, link_index: int) -> int:
        return len(self.adjacency[link_index])


@dataclass
class Instance:
    """
    Container for the orbits and links of one scan cover problem.

    Orbits are index-addressable and their order defines external IDs. Links
    only store orbit indices, so every link always refers to this instance's
    own orbits, including after copy(). Orbits and links are kept as tuples:
    any change replaces the tuple, which is how the solver notices it has to
    rebuild its cache.
    """
    radius_central_km: float = R_EARTH_KM
    mu_km3_s2: float = MU_EARTH_KM3_S2
    orbits: Tuple[Orbit, ...] = field(default_factory=tuple)
    links: Tuple[Link, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not (self.radius_central_km >= 0.0) or math.isinf(self.radius_central_km):
            raise ValueError(f"Central mass radius must be finite and non-negative. Got: {self.radius_central_km}")
        if not (self.mu_km3_s2 > 0.0) or math.isinf(self.mu_km3_s2):
            raise ValueError(f"Gravitational parameter must be finite and positive. Got: {self.mu_km3_s2}")
        self.orbits = tuple(self.orbits)
        self.links = tuple(self.links)
        for orbit in self.orbits:
            self._check_orbit(orbit)
        for link in self.links:
            self._check_link(link)

    def _check_orbit(self, orbit: Orbit) -> None:
        if orbit.mu_km3_s2 != self.mu_km3_s2 or orbit.radius_central_km != self.radius_central_km:
            raise ValueError(
                f"Orbit is defined around mu={orbit.mu_km3_s2}, R={orbit.radius_central_km} "
                f"but the instance uses mu={self.mu_km3_s2}, R={self.radius_central_km}."
            )

    def _check_link(self, link: Link) -> None:
        for index in link.endpoints:
            if index >= len(self.orbits):
                raise OrbitReferenceError(
                    f"Link {link.endpoints} refers to orbit {index}, "
                    f"but the instance only has {len(self.orbits)} orbits."
                )

    # ------------------------------------------------------------------
    # Mutation

    def new_orbit(self, **elements) -> Orbit:
        """Orbit around this instance's central mass (elements as in Orbit)."""
        return Orbit(mu_km3_s2=self.mu_km3_s2, radius_central_km=self.radius_central_km, **elements)

    def add_orbit(self, orbit: Orbit) -> int:
        """Append an orbit and return its index."""
        self._check_orbit(orbit)
        self.orbits = self.orbits + (orbit,)
        return len(self.orbits) - 1

    def add_link(self, orbit_a: int, orbit_b: int) -> int:
        """
        Append a link between two existing orbits and return its index.

        Raises:
            OrbitReferenceError: if either index is out of range
            ValueError: for negative indices or a self-loop
        """
        link = Link(orbit_a, orbit_b)
        self._check_link(link)
        self.links = self.links + (link,)
        return len(self.links) - 1

    def remove_links(self, link_indices: Iterable[int]) -> List[Link]:
        drop = set(link_indices)
        removed = [link for i, link in enumerate(self.links) if i in drop]
        self.links = tuple(link for i, link in enumerate(self.links) if i not in drop)
        return removed

    def remove_invalid_links(self, step_s: float = 1.0) -> List[Link]:
        """
        Remove links that are blocked at every sample of one link period.

        Returns:
            The removed links, in their former order
        """
        if step_s <= 0:
            raise ValueError("step_s must be positive.")

        invalid = []
        for i in range(len(self.links)):
            isl = self.isl(i)
            period = isl.period_s
            n_steps = int(math.ceil(period / step_s))
            if all(isl.is_blocked(k * step_s) for k in range(n_steps)):
                invalid.append(i)

        removed = self.remove_links(invalid)
        if removed:
            logger.info("Removed %d never-visible links: %s", len(removed), [l.endpoints for l in removed])
        return removed

    # ------------------------------------------------------------------
    # Queries

    def copy(self) -> Instance:
        """Independent copy; its links resolve against its own orbit objects."""
        return Instance(
            radius_central_km=self.radius_central_km,
            mu_km3_s2=self.mu_km3_s2,
            orbits=tuple(replace(orbit) for orbit in self.orbits),
            links=self.links,
        )

    def isl(self, link_index: int) -> InterSatelliteLink:
        """Geometry view of link `link_index`, bound to this instance's orbits."""
        link = self.links[link_index]
        return InterSatelliteLink(
            orbit1=self.orbits[link.orbit_a],
            orbit2=self.orbits[link.orbit_b],
            radius_central_km=self.radius_central_km,
        )

    def isls(self) -> List[InterSatelliteLink]:
        return [self.isl(i) for i in range(len(self.links))]

    def links_of_orbit(self, orbit_index: int) -> List[int]:
        return [i for i, link in enumerate(self.links) if link.touches(orbit_index)]

    def line_graph(self) -> LineGraph:
        """Adjacency of links sharing an orbit endpoint."""
        adjacency: List[Set[int]] = [set() for _ in self.links]

        for orbit_index in range(len(self.orbits)):
            incident = self.links_of_orbit(orbit_index)
            for i in incident:
                adjacency[i].update(incident)

        # remove loops
        for i, neighbors in enumerate(adjacency):
            neighbors.discard(i)

        return LineGraph(adjacency=tuple(tuple(sorted(n)) for n in adjacency))
