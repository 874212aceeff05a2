"""
Antenna reorientation limits.

A satellite's antenna turns at most `rotation_speed_rad_s` about any axis.
Its last committed orientation is a TimelineEvent whose t_begin is the time
the orientation was reached and whose data is the unit pointing vector.
"""

from __future__ import annotations

import math

from scan_cover.core.constants import ALIGNMENT_TOL_RAD
from scan_cover.core.frames import Vector3, angle_between
from scan_cover.core.timeline import TimelineEvent


def reorientation_time_s(rotation_speed_rad_s: float) -> float:
    """
    Worst-case time for a half turn (π rad).

    A fixed antenna (speed 0) can never turn, so there is nothing to wait
    for and the result is 0.
    """
    if rotation_speed_rad_s <= 0.0:
        return 0.0
    return math.pi / rotation_speed_rad_s


def can_reach_orientation(
    current: TimelineEvent[Vector3],
    required: Vector3,
    t_s: float,
    rotation_speed_rad_s: float,
    cone_half_angle_rad: float = 0.0,
) -> bool:
    """
    Whether an antenna can point along `required` at time t_s.

    Args:
        current: last committed orientation; an invalid event means the
            antenna has no commitment yet and may point anywhere
        required: unit vector the antenna has to cover
        t_s: time at which the pointing is needed
        rotation_speed_rad_s: maximum turn rate
        cone_half_angle_rad: a conical antenna only needs the target inside
            its cone, a directional one (0) must point exactly

    Returns:
        True if the remaining angle can be turned in the elapsed time
    """
    if not current.is_valid() or current.data is None:
        return True

    dt = t_s - current.t_begin
    if dt < 0.0:
        # the committed orientation is reached only later
        return False

    angle = angle_between(current.data, required)
    reachable = rotation_speed_rad_s * dt + cone_half_angle_rad + ALIGNMENT_TOL_RAD
    return angle <= reachable
