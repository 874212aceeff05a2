from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple

from scan_cover.core.frames import Vector3, normalize
from scan_cover.core.timeline import Timeline, TimelineEvent


class OrientationLog:
    """
    Append-only history of antenna orientations per satellite (orbit index).

    The log is immutable: with_orientation returns a new log and leaves this
    one untouched, so a snapshot can be handed to concurrent queries.
    Each entry is a zero-length TimelineEvent at the time the orientation
    is reached, carrying the unit pointing vector.
    """

    def __init__(self, timelines: Optional[Mapping[int, Timeline[Vector3]]] = None):
        self._timelines: Dict[int, Timeline[Vector3]] = dict(timelines or {})

    def __contains__(self, orbit_index: int) -> bool:
        return orbit_index in self._timelines

    def __iter__(self) -> Iterator[Tuple[int, Timeline[Vector3]]]:
        return iter(sorted(self._timelines.items()))

    def __len__(self) -> int:
        return len(self._timelines)

    def timeline(self, orbit_index: int) -> Timeline[Vector3]:
        """Copy of the satellite's orientation history."""
        timeline = self._timelines.get(orbit_index)
        return timeline.copy() if timeline is not None else Timeline()

    def latest(self, orbit_index: int) -> TimelineEvent[Vector3]:
        """Most recent committed orientation (invalid sentinel if none)."""
        timeline = self._timelines.get(orbit_index)
        if timeline is None:
            return TimelineEvent.invalid()
        return timeline.latest()

    def orientation_at(self, orbit_index: int, t_s: float) -> TimelineEvent[Vector3]:
        """Orientation committed at or before t_s (invalid sentinel if none)."""
        timeline = self._timelines.get(orbit_index)
        if timeline is None:
            return TimelineEvent.invalid()
        return timeline.prevailing_event(t_s)

    def with_orientation(self, orbit_index: int, t_s: float, orientation: Vector3) -> OrientationLog:
        """
        New log with one more orientation for a satellite.

        Raises:
            ValueError: if t_s precedes the satellite's latest entry
            GeometryDegenerateError: for a zero orientation vector
        """
        latest = self.latest(orbit_index)
        if latest.is_valid() and t_s < latest.t_begin:
            raise ValueError(
                f"Orientation log of orbit {orbit_index} is append-only: "
                f"t={t_s} precedes latest entry t={latest.t_begin}."
            )

        timeline = self.timeline(orbit_index)
        timeline.insert(TimelineEvent(t_s, t_s, normalize(orientation)))

        timelines = dict(self._timelines)
        timelines[orbit_index] = timeline
        return OrientationLog(timelines)
