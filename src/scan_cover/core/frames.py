from __future__ import annotations

import math
from typing import Tuple

from scan_cover.core.errors import GeometryDegenerateError

Vector3 = Tuple[float, float, float]


def rot3(angle_rad: float, v: Vector3) -> Vector3:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    x, y, z = v
    return (c * x - s * y, s * x + c * y, z)


def rot1(angle_rad: float, v: Vector3) -> Vector3:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    x, y, z = v
    return (x, c * y - s * z, s * y + c * z)


def dot(a: Vector3, b: Vector3) -> float:
    return a[0]*b[0] + a[1]*b[1] + a[2]*b[2]


def sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0]-b[0], a[1]-b[1], a[2]-b[2])


def add(a: Vector3, b: Vector3) -> Vector3:
    return (a[0]+b[0], a[1]+b[1], a[2]+b[2])


def scale(k: float, a: Vector3) -> Vector3:
    return (k*a[0], k*a[1], k*a[2])


def negate(a: Vector3) -> Vector3:
    return (-a[0], -a[1], -a[2])


def norm(a: Vector3) -> float:
    return math.sqrt(dot(a, a))


def normalize(a: Vector3, eps: float = 1e-12) -> Vector3:
    """
    Unit vector along `a`.

    Raises GeometryDegenerateError for (near) zero vectors instead of
    producing NaN components.
    """
    n = norm(a)
    if n < eps:
        raise GeometryDegenerateError(f"Cannot normalize zero-length vector {a}.")
    return (a[0]/n, a[1]/n, a[2]/n)


def angle_between(a: Vector3, b: Vector3) -> float:
    """Angle between two non-zero vectors in [0, π] radians."""
    c = dot(normalize(a), normalize(b))
    # clamp for numeric stability
    c = max(-1.0, min(1.0, c))
    return math.acos(c)


def perifocal_to_inertial(r_pqw: Vector3, raan_rad: float, inc_rad: float, argp_rad: float) -> Vector3:
    """
    Rotate a position from the perifocal (PQW) frame into the inertial frame
    of the central body.

    Rotation sequence: R3(raan) * R1(inc) * R3(argp), so the argument of
    periapsis is applied first, then the inclination, then the RAAN.
    """
    r = rot3(argp_rad, r_pqw)
    r = rot1(inc_rad, r)
    return rot3(raan_rad, r)
