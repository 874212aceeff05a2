from __future__ import annotations

import math
from fractions import Fraction
from typing import Tuple

from scan_cover.core.constants import PERIOD_MAX_MULTIPLE, PERIOD_REL_TOL
from scan_cover.core.frames import Vector3, dot, norm, scale, sub

CENTER: Vector3 = (0.0, 0.0, 0.0)


def line_of_sight_blocked(
    r1: Vector3,
    r2: Vector3,
    radius_km: float,
    center: Vector3 = CENTER,
) -> bool:
    """
    True iff the segment between two satellites passes through the sphere.

    Ray-sphere intersection with the ray starting at r1 and pointing at r2:
        a = d . (r1 - c),  discr = a^2 - (|r1 - c|^2 - R^2)
    The roots -a ± sqrt(discr) are the distances along the ray where the
    sphere surface is crossed. The line is only blocked when a crossing lies
    between the two satellites; crossings behind r1 or beyond r2 do not
    count, and a tangent ray (discr <= 0) does not block.
    """
    between = sub(r2, r1)
    dist_between_sat = norm(between)
    if dist_between_sat == 0.0:
        # coincident satellites: nothing lies between them
        return False
    direction = scale(1.0 / dist_between_sat, between)

    distance_to_center = sub(r1, center)
    a = dot(direction, distance_to_center)
    discr = a * a - (dot(distance_to_center, distance_to_center) - radius_km * radius_km)

    # no intersection at all
    if discr <= 0.0:
        return False

    root = math.sqrt(discr)
    d1 = -a + root
    d2 = -a - root

    # sphere lies behind the first satellite
    if d1 < 0.0 and d2 < 0.0:
        return False

    # sphere lies beyond the second satellite
    if d1 >= dist_between_sat and d2 >= dist_between_sat:
        return False

    return True


def link_period(
    period1_s: float,
    period2_s: float,
    max_multiple: int = PERIOD_MAX_MULTIPLE,
    rel_tol: float = PERIOD_REL_TOL,
) -> Tuple[float, bool]:
    """
    Time after which the relative geometry of two orbits repeats.

    Returns (period, exact). Equal periods give that period. Otherwise the
    smallest common multiple q*T1 == p*T2 with p, q <= max_multiple is used.
    When the periods are not commensurate within that bound the longer
    period is returned with exact=False: sampling over it is then only an
    approximation of the true visibility pattern.
    """
    if period1_s <= 0 or period2_s <= 0:
        raise ValueError(f"Periods must be positive. Got: {period1_s}, {period2_s}")

    if math.isclose(period1_s, period2_s, rel_tol=rel_tol):
        return max(period1_s, period2_s), True

    # T1 / T2 ~ p / q  =>  q * T1 ~ p * T2
    ratio = Fraction(period1_s / period2_s).limit_denominator(max_multiple)
    p, q = ratio.numerator, ratio.denominator
    if 0 < p <= max_multiple and math.isclose(q * period1_s, p * period2_s, rel_tol=rel_tol):
        return max(q * period1_s, p * period2_s), True

    return max(period1_s, period2_s), False
