"""
Visibility windows of one link over one link period.

Sampling at a fixed step makes window boundaries accurate to one step: a
window [t_begin, t_end) starts at the first unblocked sample and ends at the
first blocked sample after it.
"""

from __future__ import annotations

import logging
import math

from scan_cover.core.timeline import Timeline, TimelineEvent
from scan_cover.objects.link import InterSatelliteLink

logger = logging.getLogger(__name__)


def build_visibility_timeline(isl: InterSatelliteLink, step_s: float) -> Timeline[None]:
    """
    Sample `isl.is_blocked` on [0, period) and merge unblocked runs into
    windows. A run still open at the end of the period is clamped to the
    period. A link that is never unblocked gets an empty timeline.
    """
    if step_s <= 0:
        raise ValueError("step_s must be positive.")

    period = isl.period_s
    n_steps = int(math.ceil(period / step_s))

    timeline: Timeline[None] = Timeline()
    t_begin = None
    for k in range(n_steps):
        # multiply instead of accumulating to keep sample times exact
        t = k * step_s
        blocked = isl.is_blocked(t)
        if not blocked and t_begin is None:
            t_begin = t
        elif blocked and t_begin is not None:
            timeline.insert(TimelineEvent(t_begin, t))
            t_begin = None

    if t_begin is not None:
        timeline.insert(TimelineEvent(t_begin, period))

    return timeline


def visible_fraction(timeline: Timeline[None], period_s: float) -> float:
    """Share of the period covered by visibility windows."""
    if period_s <= 0:
        return 0.0
    return sum(event.duration for event in timeline) / period_s
