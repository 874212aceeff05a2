# Two-body anomaly relations

from __future__ import annotations

import math


def wrap_to_2pi(angle_rad: float) -> float:
    """Wrap angle to [0, 2π)."""
    two_pi = 2.0 * math.pi
    wrapped = angle_rad % two_pi
    # -1e-20 % 2π rounds to exactly 2π
    return 0.0 if wrapped >= two_pi else wrapped


def solve_keplers_equation(M_rad: float, e: float, tol: float = 1e-12, max_iter: int = 50) -> float:
    """
    Solve Kepler's equation for elliptic orbits:
        M = E - e sin(E)
    using Newton-Raphson.

    Args:
        M_rad: Mean anomaly (rad)
        e: eccentricity (0 <= e < 1)
        tol: convergence tolerance
        max_iter: iteration cap

    Returns:
        E_rad: Eccentric anomaly (rad)
    """
    if not (0.0 <= e < 1.0):
        raise ValueError("Elliptic Kepler solver requires 0 <= e < 1.")

    M = wrap_to_2pi(M_rad)

    # Good initial guess
    if e < 0.8:
        E = M
    else:
        # For higher e, start closer to pi to avoid slow convergence near M~0
        E = math.pi

    for _ in range(max_iter):
        f = E - e * math.sin(E) - M
        # fp >= 1 - e > 0 for the elliptic eccentricities accepted above
        fp = 1.0 - e * math.cos(E)
        dE = -f / fp
        E += dE
        if abs(dE) < tol:
            return wrap_to_2pi(E)

    raise RuntimeError("Kepler solver did not converge within max_iter.")


def true_to_mean_anomaly(nu_rad: float, e: float) -> float:
    """Mean anomaly (rad, [0, 2π)) for a true anomaly on an elliptic orbit."""
    E = math.atan2(math.sqrt(1.0 - e * e) * math.sin(nu_rad), e + math.cos(nu_rad))
    return wrap_to_2pi(E - e * math.sin(E))


def eccentric_to_true_anomaly(E_rad: float, e: float) -> float:
    """True anomaly (rad, [0, 2π)) from eccentric anomaly."""
    sin_v = (math.sqrt(1.0 - e * e) * math.sin(E_rad)) / (1.0 - e * math.cos(E_rad))
    cos_v = (math.cos(E_rad) - e) / (1.0 - e * math.cos(E_rad))
    return wrap_to_2pi(math.atan2(sin_v, cos_v))
