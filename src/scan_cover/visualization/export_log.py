from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, List

from scan_cover.objects.instance import Instance
from scan_cover.simulation.scheduler import ScanCover


def build_playback_bundle(
    instance: Instance,
    scan_cover: ScanCover,
    dt_s: float = 10.0,
) -> Dict[str, Any]:
    """
    Playback data for a scan cover viewer.

    JSON shape:
    {
      "radius_central_km": 6378.137,
      "times_s": [0, 10, 20, ...],
      "sat_positions_km": [[[x,y,z], ...], ...],     # per orbit, aligned to times_s
      "links": [[a, b], ...],
      "scans": [{"link": 3, "t": 120.0, "orientation": [x,y,z]}, ...],
      "unscheduled": [5, ...]
    }
    """
    if dt_s <= 0:
        raise ValueError("dt_s must be positive.")

    n_steps = int(math.floor(scan_cover.makespan_s / dt_s)) + 1
    times_s: List[float] = [k * dt_s for k in range(n_steps)]

    scans = []
    for i in scan_cover.scan_order():
        t = scan_cover.assignments[i]
        scans.append({
            "link": i,
            "t": t,
            "orientation": list(instance.isl(i).get_orientation(t)),
        })

    return {
        "radius_central_km": instance.radius_central_km,
        "times_s": times_s,
        "sat_positions_km": [
            [list(r) for (_t, r) in orbit.track(times_s)] for orbit in instance.orbits
        ],
        "links": [[link.orbit_a, link.orbit_b] for link in instance.links],
        "scans": scans,
        "unscheduled": list(scan_cover.unscheduled),
    }


def export_playback_bundle(
    instance: Instance,
    scan_cover: ScanCover,
    out_path: str = "out/scan_cover.json",
    dt_s: float = 10.0,
) -> str:
    data = build_playback_bundle(instance, scan_cover, dt_s)

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f)

    return out_path
