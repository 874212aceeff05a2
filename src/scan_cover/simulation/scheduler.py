from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from scan_cover.core.frames import negate
from scan_cover.simulation.orientation import OrientationLog
from scan_cover.simulation.solver import Solver

logger = logging.getLogger(__name__)


@dataclass
class ScanCover:
    """
    Result of a scheduling run.

    assignments: link index -> scan time (s)
    orientations: antenna orientations committed by the scans
    unscheduled: links for which no communication time was found
    """
    assignments: Dict[int, float] = field(default_factory=dict)
    orientations: OrientationLog = field(default_factory=OrientationLog)
    unscheduled: List[int] = field(default_factory=list)

    @property
    def makespan_s(self) -> float:
        """Time of the last scan (0 for an empty cover)."""
        return max(self.assignments.values(), default=0.0)

    @property
    def is_complete(self) -> bool:
        return not self.unscheduled

    def scan_order(self) -> List[int]:
        return sorted(self.assignments, key=lambda i: (self.assignments[i], i))


def greedy_scan_cover(
    solver: Solver,
    t_start_s: float = 0.0,
    link_indices: Optional[List[int]] = None,
) -> ScanCover:
    """
    Assign every link a scan time, always taking the link that can
    communicate earliest.

    After each assignment both satellites of the link are committed to face
    each other at the scan time, which constrains the remaining links at
    those satellites. Links whose next_communication is inf at the point
    they would be picked end up in `unscheduled`.
    """
    instance = solver.instance
    remaining = set(range(len(instance.links)) if link_indices is None else link_indices)
    cover = ScanCover()
    t_now = t_start_s

    while remaining:
        best_t, best_i = math.inf, -1
        for i in sorted(remaining):
            t = solver.next_communication(i, t_now, cover.orientations)
            if t < best_t:
                best_t, best_i = t, i

        if math.isinf(best_t):
            cover.unscheduled = sorted(remaining)
            logger.warning("No communication found for %d links: %s", len(remaining), cover.unscheduled)
            break

        link = instance.links[best_i]
        orientation = instance.isl(best_i).get_orientation(best_t)
        cover.orientations = (
            cover.orientations
            .with_orientation(link.orbit_a, best_t, orientation)
            .with_orientation(link.orbit_b, best_t, negate(orientation))
        )
        cover.assignments[best_i] = best_t
        remaining.discard(best_i)
        t_now = best_t
        logger.debug("Scheduled link %d at t=%.1fs", best_i, best_t)

    logger.info(
        "Scan cover: %d links scheduled, %d unscheduled, makespan %.1fs",
        len(cover.assignments), len(cover.unscheduled), cover.makespan_s,
    )
    return cover
