"""
Command-line interface for the scan cover solver.

Loads an instance file and reports its structure, the links' visibility
windows, a greedy scan cover, or renders the geometry with plotly.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import click

from scan_cover.core.logging_utils import setup_logging
from scan_cover.objects.instance import Instance
from scan_cover.objects.instance_file import load_instance
from scan_cover.simulation.scheduler import greedy_scan_cover
from scan_cover.simulation.solver import Solver, SolverConfig
from scan_cover.simulation.visibility_cache import visible_fraction
from scan_cover.visualization.export_log import export_playback_bundle
from scan_cover.visualization.plotly_viewer import (
    build_instance_figure,
    build_timeline_figure,
    write_figure,
)

logger = logging.getLogger(__name__)

step_option = click.option(
    "--step", "step_s", default=1.0, show_default=True, type=float,
    help="Sampling step in seconds for visibility windows and alignment search",
)


def _load(path: str) -> Instance:
    instance = load_instance(path)
    if instance is None:
        raise click.ClickException(f"Could not read instance file {path}")
    return instance


def _config(step_s: float, horizon_periods: float = 1.0) -> SolverConfig:
    try:
        return SolverConfig(step_size_s=step_s, horizon_periods=horizon_periods)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _fmt_time(t: float) -> str:
    return "never" if math.isinf(t) else f"{t:.1f}s"


@click.group()
@click.option('--log-level', default='WARNING',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level')
@click.option('--log-file', type=click.Path(), help='Log file path')
def main(log_level: str, log_file: Optional[str]) -> None:
    """Dynamic minimum scan cover - satellite link visibility and scheduling."""
    setup_logging(log_level, log_file)
    logger.debug("Starting scan cover CLI")


@main.command()
@click.argument("instance_file", type=click.Path(exists=True, dir_okay=False))
def info(instance_file: str) -> None:
    """Summarize orbits, links and the link conflict graph."""
    instance = _load(instance_file)
    click.echo(f"Central mass: R={instance.radius_central_km:g} km, mu={instance.mu_km3_s2:g} km^3/s^2")
    click.echo(f"Orbits: {len(instance.orbits)}")
    for i, orbit in enumerate(instance.orbits):
        click.echo(
            f"  [{i}] a={orbit.semi_major_axis_km:.1f} km e={orbit.eccentricity:.4f} "
            f"T={orbit.period_s:.1f}s turn rate={orbit.rotation_speed_rad_s:g} rad/s"
        )

    graph = instance.line_graph()
    click.echo(f"Links: {len(instance.links)}")
    for i, link in enumerate(instance.links):
        click.echo(f"  [{i}] {link.orbit_a} <-> {link.orbit_b}  conflicts: {list(graph.neighbors(i))}")


@main.command()
@click.argument("instance_file", type=click.Path(exists=True, dir_okay=False))
@step_option
def windows(instance_file: str, step_s: float) -> None:
    """Print the visibility windows of every link within its period."""
    instance = _load(instance_file)
    solver = Solver(instance, _config(step_s))

    for i in range(len(instance.links)):
        isl = instance.isl(i)
        timeline = solver.visibility_windows(i)
        exact = "" if isl.period_is_exact else " (approximate)"
        click.echo(
            f"Link {i}: period {isl.period_s:.1f}s{exact}, "
            f"visible {100.0 * visible_fraction(timeline, isl.period_s):.1f}%, "
            f"first visible {_fmt_time(solver.next_visibility(i, 0.0))}, "
            f"first blocked {_fmt_time(solver.next_blocked(i, 0.0))}"
        )
        for event in timeline:
            click.echo(f"    [{event.t_begin:.1f}, {event.t_end:.1f})")

    click.echo(f"Lower bound: {solver.lower_bound():.1f}s")
    click.echo(f"Makespan lower bound: {solver.makespan_lower_bound():.1f}s")


@main.command()
@click.argument("instance_file", type=click.Path(exists=True, dir_okay=False))
@step_option
@click.option("--horizon-periods", default=1.0, show_default=True, type=float,
              help="Link periods searched for alignment beyond the worst-case turn time")
@click.option("--output", type=click.Path(dir_okay=False),
              help="Write a JSON playback bundle of the scan cover")
@click.option("--timeline", "timeline_html", type=click.Path(dir_okay=False),
              help="Write an HTML chart of visibility windows and scan times")
def schedule(
    instance_file: str,
    step_s: float,
    horizon_periods: float,
    output: Optional[str],
    timeline_html: Optional[str],
) -> None:
    """Compute a greedy scan cover."""
    instance = _load(instance_file)
    solver = Solver(instance, _config(step_s, horizon_periods))
    cover = greedy_scan_cover(solver)

    for i in cover.scan_order():
        link = instance.links[i]
        click.echo(f"t={cover.assignments[i]:10.1f}s  link {i} ({link.orbit_a} <-> {link.orbit_b})")
    for i in cover.unscheduled:
        click.echo(f"unscheduled  link {i}")
    click.echo(f"Makespan: {cover.makespan_s:.1f}s")

    if output:
        export_playback_bundle(instance, cover, output)
        click.echo(f"Wrote {output}")
    if timeline_html:
        write_figure(build_timeline_figure(solver, cover), timeline_html)
        click.echo(f"Wrote {timeline_html}")


@main.command()
@click.argument("instance_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--time", "t_s", default=0.0, show_default=True, type=float,
              help="Simulated time in seconds")
@click.option("--out", "out_html", default="out/instance.html", show_default=True,
              type=click.Path(dir_okay=False), help="Output HTML file")
def render(instance_file: str, t_s: float, out_html: str) -> None:
    """Render the instance geometry at a given time."""
    instance = _load(instance_file)
    write_figure(build_instance_figure(instance, t_s), out_html)
    click.echo(f"Wrote {out_html}")


if __name__ == "__main__":
    main()
