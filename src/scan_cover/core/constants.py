from __future__ import annotations

# Earth gravitational parameter (mu) in km^3/s^2 (WGS-84 standard value)
MU_EARTH_KM3_S2: float = 398600.4418

# Equatorial Earth radius in km, default central-mass radius for occlusion
R_EARTH_KM: float = 6378.137

# Link period resolution: periods are treated as equal within this relative
# tolerance, and combined periods use at most this many revolutions per orbit.
PERIOD_REL_TOL: float = 1e-6
PERIOD_MAX_MULTIPLE: int = 8

# Slack when comparing a required slew angle against the reachable one (rad)
ALIGNMENT_TOL_RAD: float = 1e-6
