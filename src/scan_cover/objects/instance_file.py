"""
Plain-text instance format.

    radius_central_mass,gravitational_parameter
    ===END===
    index,height_perigee,eccentricity,true_anomaly,raan,argument_periapsis,inclination,rotation_speed[,cone_half_angle]
    [...]
    ===END===
    orbit_index_a,orbit_index_b
    [...]

Units are km, km^3/s^2, radians and rad/s. The orbit index column is
informational: the orbit index is implied by line order.

Loading is best-effort: a malformed record is logged and skipped, and
loading continues. Links that refer to a skipped or missing orbit are
skipped as well, so a partial instance is always self-consistent.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from scan_cover.core.errors import InstanceParseError, OrbitReferenceError
from scan_cover.objects.instance import Instance
from scan_cover.physics.orbit import Orbit

logger = logging.getLogger(__name__)

SECTION_END = "===END==="

READ_INIT = 0
READ_ORBIT = 1
READ_LINK = 2

PathLike = Union[str, Path]


def _fields(line: str, expected: Tuple[int, ...], line_no: int) -> List[str]:
    values = [v.strip() for v in line.split(",")]
    if len(values) not in expected:
        raise InstanceParseError(f"expected {' or '.join(map(str, expected))} fields, got {len(values)}", line_no)
    return values


def _float(value: str, name: str, line_no: int) -> float:
    try:
        return float(value)
    except ValueError:
        raise InstanceParseError(f"{name} is not a number: {value!r}", line_no) from None


def _int(value: str, name: str, line_no: int) -> int:
    try:
        return int(value)
    except ValueError:
        raise InstanceParseError(f"{name} is not an integer: {value!r}", line_no) from None


def parse_header(line: str, line_no: int = 0) -> Tuple[float, float]:
    """Returns (radius_central_km, mu_km3_s2)."""
    radius, mu = _fields(line, (2,), line_no)
    return _float(radius, "radius_central_mass", line_no), _float(mu, "gravitational_parameter", line_no)


def parse_orbit(line: str, instance: Instance, line_no: int = 0) -> Orbit:
    values = _fields(line, (8, 9), line_no)
    names = (
        "height_perigee_km", "eccentricity", "true_anomaly_rad", "raan_rad",
        "argp_rad", "inc_rad", "rotation_speed_rad_s", "cone_half_angle_rad",
    )
    # values[0] is the informational index column
    elements = {name: _float(value, name, line_no) for name, value in zip(names, values[1:])}
    try:
        return instance.new_orbit(**elements)
    except ValueError as exc:
        raise InstanceParseError(str(exc), line_no) from None


def parse_link(line: str, line_no: int = 0) -> Tuple[int, int]:
    a, b = _fields(line, (2,), line_no)
    return _int(a, "orbit_index_a", line_no), _int(b, "orbit_index_b", line_no)


def parse_instance(lines: Iterable[str]) -> Instance:
    """Build an instance from the lines of the text format (best-effort)."""
    radius: Optional[float] = None
    mu: Optional[float] = None
    header_line_no = 0
    orbit_lines: List[Tuple[int, str]] = []
    link_lines: List[Tuple[int, str]] = []

    mode = READ_INIT
    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        if line == SECTION_END:
            mode += 1
            continue

        if mode == READ_INIT:
            if radius is not None:
                logger.warning("line %d: extra header record ignored", line_no)
                continue
            try:
                radius, mu = parse_header(line, line_no)
                header_line_no = line_no
            except InstanceParseError as exc:
                logger.warning("Skipping header record, using default central mass: %s", exc)
        elif mode == READ_ORBIT:
            orbit_lines.append((line_no, line))
        elif mode == READ_LINK:
            link_lines.append((line_no, line))
        else:
            logger.warning("line %d: record after last section ignored", line_no)

    # orbits depend on the header, so they are built once it is known
    instance = Instance() if radius is None else _instance_or_default(radius, mu, header_line_no)

    # record position in the file -> index in the loaded instance
    loaded: Dict[int, int] = {}
    for position, (line_no, line) in enumerate(orbit_lines):
        try:
            orbit = parse_orbit(line, instance, line_no)
        except InstanceParseError as exc:
            logger.warning("Skipping orbit record: %s", exc)
            continue
        loaded[position] = instance.add_orbit(orbit)

    for line_no, line in link_lines:
        try:
            a, b = parse_link(line, line_no)
            if a not in loaded or b not in loaded:
                raise OrbitReferenceError(f"line {line_no}: link ({a}, {b}) refers to a missing orbit")
            instance.add_link(loaded[a], loaded[b])
        except (InstanceParseError, OrbitReferenceError) as exc:
            logger.warning("Skipping link record: %s", exc)
        except ValueError as exc:
            logger.warning("Skipping link record: line %d: %s", line_no, exc)

    logger.debug("Parsed instance with %d orbits and %d links", len(instance.orbits), len(instance.links))
    return instance


def _instance_or_default(radius: float, mu: float, line_no: int) -> Instance:
    try:
        return Instance(radius_central_km=radius, mu_km3_s2=mu)
    except ValueError as exc:
        logger.warning("line %d: invalid central mass, using default: %s", line_no, exc)
        return Instance()


def load_instance(path: PathLike) -> Optional[Instance]:
    """
    Load an instance file.

    Returns:
        The (possibly partial) instance, or None if the file cannot be read
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except OSError as exc:
        logger.error("Instance file could not be opened: %s", exc)
        return None

    instance = parse_instance(lines)
    logger.info("Loaded %s: %d orbits, %d links", path, len(instance.orbits), len(instance.links))
    return instance


def format_instance(instance: Instance) -> str:
    """Serialize to the text format; floats use repr so they read back exactly."""
    out: List[str] = [
        f"{instance.radius_central_km!r},{instance.mu_km3_s2!r}",
        SECTION_END,
    ]
    for i, orbit in enumerate(instance.orbits):
        values = [
            orbit.height_perigee_km, orbit.eccentricity, orbit.true_anomaly_rad, orbit.raan_rad,
            orbit.argp_rad, orbit.inc_rad, orbit.rotation_speed_rad_s,
        ]
        if orbit.cone_half_angle_rad:
            values.append(orbit.cone_half_angle_rad)
        out.append(",".join([str(i)] + [repr(float(v)) for v in values]))
    out.append(SECTION_END)
    for link in instance.links:
        out.append(f"{link.orbit_a},{link.orbit_b}")
    return "\n".join(out) + "\n"


def save_instance(instance: Instance, path: PathLike) -> bool:
    """
    Write an instance file.

    Returns:
        True on success, False if the file could not be written
    """
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(format_instance(instance))
    except OSError as exc:
        logger.error("Instance file could not be written: %s", exc)
        return False
    return True
