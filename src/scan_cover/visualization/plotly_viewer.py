from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

import plotly.graph_objects as go

from scan_cover.objects.instance import Instance
from scan_cover.simulation.scheduler import ScanCover
from scan_cover.simulation.solver import Solver

VISIBLE_COLOR = "green"
BLOCKED_COLOR = "red"


def _central_mass_mesh(radius_km: float, n_lat: int = 30, n_lon: int = 60):
    # Create a sphere mesh (parametric)
    lats = [(-math.pi / 2) + i * (math.pi / (n_lat - 1)) for i in range(n_lat)]
    lons = [(-math.pi) + j * (2 * math.pi / (n_lon - 1)) for j in range(n_lon)]

    x = [[radius_km * math.cos(lat) * math.cos(lon) for lon in lons] for lat in lats]
    y = [[radius_km * math.cos(lat) * math.sin(lon) for lon in lons] for lat in lats]
    z = [[radius_km * math.sin(lat) for _lon in lons] for lat in lats]
    return x, y, z


def build_instance_figure(
    instance: Instance,
    t_s: float = 0.0,
    track_samples: int = 120,
    show_central_mass: bool = True,
) -> go.Figure:
    """
    Static 3D scene of an instance at time t_s:
      - central mass sphere
      - one full orbit track per satellite
      - satellite markers at t_s
      - links, green when visible and red when blocked
    """
    fig = go.Figure()

    if show_central_mass and instance.radius_central_km > 0:
        cx, cy, cz = _central_mass_mesh(instance.radius_central_km)
        fig.add_trace(go.Surface(x=cx, y=cy, z=cz, showscale=False, opacity=0.35, name="Central mass"))

    positions = []
    for i, orbit in enumerate(instance.orbits):
        times = [orbit.period_s * k / track_samples for k in range(track_samples + 1)]
        track = orbit.track(times)
        fig.add_trace(go.Scatter3d(
            x=[r[0] for (_t, r) in track],
            y=[r[1] for (_t, r) in track],
            z=[r[2] for (_t, r) in track],
            mode="lines",
            name=f"orbit {i}",
        ))
        positions.append(orbit.position_at(t_s))

    if positions:
        fig.add_trace(go.Scatter3d(
            x=[r[0] for r in positions],
            y=[r[1] for r in positions],
            z=[r[2] for r in positions],
            mode="markers+text",
            text=[str(i) for i in range(len(positions))],
            name="satellites",
            marker=dict(size=5),
        ))

    for i, link in enumerate(instance.links):
        r1, r2 = positions[link.orbit_a], positions[link.orbit_b]
        blocked = instance.isl(i).is_blocked(t_s)
        fig.add_trace(go.Scatter3d(
            x=[r1[0], r2[0]], y=[r1[1], r2[1]], z=[r1[2], r2[2]],
            mode="lines",
            name=f"link {i} ({'blocked' if blocked else 'visible'})",
            line=dict(color=BLOCKED_COLOR if blocked else VISIBLE_COLOR, width=3),
        ))

    fig.update_layout(
        title=f"Scan cover instance at t = {t_s:.1f} s",
        scene=dict(
            xaxis_title="X (km)",
            yaxis_title="Y (km)",
            zaxis_title="Z (km)",
            aspectmode="data",
        ),
        margin=dict(l=0, r=0, t=40, b=0),
        legend=dict(orientation="h"),
    )
    return fig


def build_timeline_figure(solver: Solver, scan_cover: Optional[ScanCover] = None) -> go.Figure:
    """
    Visibility windows of every link within its period as horizontal bars,
    with the scan times of a scan cover (folded into the period) as markers.
    """
    fig = go.Figure()
    instance = solver.instance

    for i in range(len(instance.links)):
        windows = solver.visibility_windows(i)
        fig.add_trace(go.Bar(
            y=[f"link {i}"] * len(windows),
            x=[event.duration for event in windows],
            base=[event.t_begin for event in windows],
            orientation="h",
            marker_color=VISIBLE_COLOR,
            showlegend=False,
            name=f"link {i}",
        ))

    if scan_cover is not None and scan_cover.assignments:
        order = scan_cover.scan_order()
        fig.add_trace(go.Scatter(
            x=[scan_cover.assignments[i] % instance.isl(i).period_s for i in order],
            y=[f"link {i}" for i in order],
            mode="markers",
            marker=dict(symbol="x", size=10, color="black"),
            name="scan",
        ))

    fig.update_layout(
        title="Link visibility windows (one period)",
        xaxis_title="t (s)",
        barmode="overlay",
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return fig


def write_figure(fig: go.Figure, out_html: str) -> str:
    Path(out_html).parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, auto_open=False)
    return out_html
