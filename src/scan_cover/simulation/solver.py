"""
Feasible communication times for inter-satellite links.

The solver samples each link once over its period into a visibility cache
and answers per-link queries against it:

- next_visibility: earliest time the link is unblocked
- next_blocked: earliest time the link is blocked
- next_communication: earliest time the link is unblocked and both
  antennas can face each other
- lower_bound / makespan_lower_bound: bounds for a scheduler

Queries only read the instance, the cache and the OrientationLog passed in,
so different links can be queried independently.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from scan_cover.core.timeline import Timeline
from scan_cover.objects.instance import Instance
from scan_cover.simulation.orientation import OrientationLog
from scan_cover.simulation.visibility_cache import build_visibility_timeline

logger = logging.getLogger(__name__)


@dataclass
class SolverConfig:
    """
    Numerical trade-offs of the solver.

    step_size_s: sampling step for the visibility cache and the alignment
        search. Window boundaries are only accurate to one step; halving it
        doubles the number of blocking tests.
    horizon_periods: link periods searched for alignment on top of the
        worst-case reorientation time. Larger values find late opportunities
        at the price of longer searches for links that never align.
    """
    step_size_s: float = 1.0
    horizon_periods: float = 1.0

    def __post_init__(self) -> None:
        if not (self.step_size_s > 0) or math.isinf(self.step_size_s):
            raise ValueError(f"step_size_s must be positive and finite, got {self.step_size_s}")
        if not (self.horizon_periods >= 0) or math.isinf(self.horizon_periods):
            raise ValueError(f"horizon_periods must be non-negative and finite, got {self.horizon_periods}")


class Solver:
    """
    Visibility cache plus next-opportunity queries for one instance.

    The cache is keyed by link index and rebuilt lazily whenever the
    instance's orbits, links or central mass change.
    """

    def __init__(self, instance: Instance, config: Optional[SolverConfig] = None):
        self.instance = instance
        self.config = config or SolverConfig()
        self._cache: Dict[int, Timeline[None]] = {}
        self._cache_key: Optional[Tuple] = None

    # ------------------------------------------------------------------
    # Cache

    def _instance_key(self) -> Tuple:
        inst = self.instance
        return (inst.orbits, inst.links, inst.radius_central_km, inst.mu_km3_s2)

    def _cache_is_current(self) -> bool:
        if self._cache_key is None:
            return False
        # orbits and links are tuples: any change to them replaces the object
        return all(a is b for a, b in zip(self._cache_key, self._instance_key()))

    def _ensure_cache(self) -> None:
        if not self._cache_is_current():
            self.create_cache()

    def create_cache(self) -> None:
        """(Re)build the visibility windows of every link."""
        self._cache = {}
        step = self.config.step_size_s
        for i in range(len(self.instance.links)):
            isl = self.instance.isl(i)
            if not isl.period_is_exact:
                logger.warning(
                    "Link %d: orbit periods %.3fs and %.3fs are not commensurate; "
                    "visibility windows repeat only approximately every %.3fs",
                    i, isl.orbit1.period_s, isl.orbit2.period_s, isl.period_s,
                )
            windows = build_visibility_timeline(isl, step)
            self._cache[i] = windows
            logger.debug("Link %d: period %.1fs, %d visibility windows", i, isl.period_s, len(windows))

        self._cache_key = self._instance_key()
        never_visible = sum(1 for windows in self._cache.values() if not windows)
        logger.info(
            "Visibility cache built for %d links (step %.3fs, %d never visible)",
            len(self._cache), step, never_visible,
        )

    def invalidate(self) -> None:
        self._cache = {}
        self._cache_key = None

    def visibility_windows(self, link_index: int) -> Timeline[None]:
        """Cached visibility windows of a link within one link period."""
        self._ensure_cache()
        return self._cache[link_index]

    # ------------------------------------------------------------------
    # Queries

    def search_horizon_s(self, link_index: int) -> float:
        """
        Span after t0 searched by next_communication: the slower antenna's
        half-turn time plus horizon_periods link periods.
        """
        isl = self.instance.isl(link_index)
        return isl.reorientation_time_s + self.config.horizon_periods * isl.period_s

    def next_visibility(self, link_index: int, t0: float) -> float:
        """
        Earliest time >= t0 at which the link is unblocked according to the
        cache, unrolled across periods. math.inf if it is never visible.
        """
        windows = self.visibility_windows(link_index)
        if not windows or math.isinf(t0):
            return math.inf

        period = self.instance.isl(link_index).period_s
        n_periods = math.floor(t0 / period)
        offset = n_periods * period
        t_relative = t0 - offset

        t_next = windows.next_time_with_event(t_relative, True)
        if t_next < t_relative:
            # wrapped around into the next period
            offset += period

        return max(t0, offset + t_next)

    def next_blocked(self, link_index: int, t0: float) -> float:
        """
        Earliest time >= t0 at which the link is blocked according to the
        cache, unrolled across periods. math.inf if it is never blocked.
        """
        if math.isinf(t0):
            return math.inf
        windows = self.visibility_windows(link_index)
        period = self.instance.isl(link_index).period_s
        offset = math.floor(t0 / period) * period

        t_next = windows.next_time_with_event(t0 - offset, False, period)
        return max(t0, offset + t_next)

    def next_communication(
        self,
        link_index: int,
        t0: float,
        orientations: Optional[OrientationLog] = None,
    ) -> float:
        """
        Earliest time >= t0 at which the link is unblocked and both antennas
        can face each other, starting from their latest orientations in
        `orientations` (no entry means free to point anywhere).

        Searches forward in steps of step_size_s, jumping over blocked spans
        with the cache, up to t0 + search_horizon_s. Returns math.inf when
        nothing is found within the horizon; that is a search cutoff, not a
        proof that the link can never communicate.
        """
        t_visible = self.next_visibility(link_index, t0)
        if math.isinf(t_visible):
            return math.inf

        orientations = orientations or OrientationLog()
        link = self.instance.links[link_index]
        isl = self.instance.isl(link_index)
        sat1 = orientations.latest(link.orbit_a)
        sat2 = orientations.latest(link.orbit_b)

        if isl.can_align(sat1, sat2, t_visible):
            return t_visible

        step = self.config.step_size_s
        t_max = t0 + self.search_horizon_s(link_index)

        t = t_visible
        while t <= t_max:
            if isl.is_blocked(t):
                # jump to the next visibility window; never move backwards
                t = max(t, self.next_visibility(link_index, t))
                if t > t_max:
                    break

            if not isl.is_blocked(t) and isl.can_align(sat1, sat2, t):
                return t

            t += step

        logger.debug(
            "Link %d: no communication within [%.1f, %.1f]s", link_index, t0, t_max,
        )
        return math.inf

    def first_visibility_times(self) -> List[float]:
        return [self.next_visibility(i, 0.0) for i in range(len(self.instance.links))]

    def lower_bound(self) -> float:
        """
        Earliest strictly positive first-visibility time over all links: the
        first instant a link that starts out blocked can be used.

        0.0 if no link becomes visible only after t=0.
        """
        candidates = [t for t in self.first_visibility_times() if 0.0 < t < math.inf]
        return min(candidates) if candidates else 0.0

    def makespan_lower_bound(self) -> float:
        """
        Latest first-visibility time over all links that are ever visible:
        no scan cover can finish before every link has become visible once.
        """
        times = [t for t in self.first_visibility_times() if t < math.inf]
        return max(times) if times else 0.0
