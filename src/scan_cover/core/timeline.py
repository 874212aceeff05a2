"""
Time-indexed events.

A TimelineEvent is a half-open interval [t_begin, t_end) with an optional
payload. A Timeline keeps events sorted by start time and never lets two of
them overlap. It backs both the per-link visibility windows and the
per-satellite orientation history.
"""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class TimelineEvent(Generic[T]):
    """
    Half-open interval [t_begin, t_end) carrying optional data.

    Zero-length events (t_begin == t_end) are valid and mark an instant,
    e.g. the time an orientation was reached.
    """
    t_begin: float
    t_end: float
    data: Optional[T] = None

    @staticmethod
    def invalid() -> TimelineEvent:
        """Sentinel for 'no event'."""
        return TimelineEvent(math.inf, -math.inf)

    def is_valid(self) -> bool:
        return self.t_begin <= self.t_end

    @property
    def duration(self) -> float:
        return self.t_end - self.t_begin

    def contains(self, t: float) -> bool:
        return self.t_begin <= t < self.t_end


class Timeline(Generic[T]):
    """Sorted, non-overlapping collection of TimelineEvents."""

    def __init__(self, events: Iterable[TimelineEvent[T]] = ()):
        self._events: List[TimelineEvent[T]] = []
        self._starts: List[float] = []
        for event in events:
            self.insert(event)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[TimelineEvent[T]]:
        return iter(self._events)

    def __bool__(self) -> bool:
        return bool(self._events)

    def __repr__(self) -> str:
        spans = ", ".join(f"[{e.t_begin:g}, {e.t_end:g})" for e in self._events)
        return f"Timeline({spans})"

    @property
    def events(self) -> List[TimelineEvent[T]]:
        return list(self._events)

    def copy(self) -> Timeline[T]:
        clone: Timeline[T] = Timeline()
        clone._events = list(self._events)
        clone._starts = list(self._starts)
        return clone

    def insert(self, event: TimelineEvent[T]) -> None:
        """
        Insert an event keeping start-time order.

        Raises:
            ValueError: if the event is invalid or overlaps an existing one
        """
        if not event.is_valid():
            raise ValueError(f"Cannot insert invalid event {event}.")

        idx = bisect.bisect_right(self._starts, event.t_begin)
        if idx > 0 and self._events[idx - 1].t_end > event.t_begin:
            raise ValueError(f"Event {event} overlaps {self._events[idx - 1]}.")
        if idx < len(self._events) and event.t_end > self._events[idx].t_begin:
            raise ValueError(f"Event {event} overlaps {self._events[idx]}.")

        self._events.insert(idx, event)
        self._starts.insert(idx, event.t_begin)

    def event_at(self, t: float) -> Optional[TimelineEvent[T]]:
        """Event whose interval contains t, if any."""
        idx = bisect.bisect_right(self._starts, t) - 1
        if idx >= 0 and self._events[idx].contains(t):
            return self._events[idx]
        return None

    def next_time_with_event(self, t: float, want_event: bool = True, period: Optional[float] = None) -> float:
        """
        Earliest time >= t at which the requested state holds.

        With want_event=True this is t itself when t lies inside an event,
        otherwise the start of the next event. If no event starts at or after
        t, the search wraps around and returns the start of the first event,
        a value smaller than t; callers working on a periodic timeline use
        that to detect the wrap. An empty timeline returns math.inf.

        With want_event=False this is t itself when no event covers t,
        otherwise the end of the run of back-to-back events covering t.
        Given the period of a periodic timeline, a run reaching the period
        end continues with the events at the start of the next period, and
        the result may exceed the period. If the events cover the whole
        period the state never holds and math.inf is returned.
        """
        if not want_event:
            offset = 0.0
            event = self.event_at(t)
            while event is not None:
                t = event.t_end
                event = self.event_at(t)
                if event is None and period is not None and t >= period:
                    if offset > 0.0:
                        return math.inf
                    offset, t = period, 0.0
                    event = self.event_at(t)
            return offset + t

        if not self._events:
            return math.inf
        if self.event_at(t) is not None:
            return t

        idx = bisect.bisect_left(self._starts, t)
        if idx < len(self._events):
            return self._events[idx].t_begin
        return self._events[0].t_begin

    def prevailing_event(self, t: float) -> TimelineEvent[T]:
        """Last event that began at or before t (invalid sentinel if none)."""
        idx = bisect.bisect_right(self._starts, t) - 1
        if idx < 0:
            return TimelineEvent.invalid()
        return self._events[idx]

    def previous_event(self, t: float) -> TimelineEvent[T]:
        """Last event already finished at t (invalid sentinel if none)."""
        idx = bisect.bisect_right(self._starts, t) - 1
        while idx >= 0:
            if self._events[idx].t_end <= t:
                return self._events[idx]
            idx -= 1
        return TimelineEvent.invalid()

    def latest(self) -> TimelineEvent[T]:
        if not self._events:
            return TimelineEvent.invalid()
        return self._events[-1]
