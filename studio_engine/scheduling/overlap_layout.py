"""
Side-by-side column layout for concurrent events in a time-grid day.

Greedy interval partitioning: events are taken in start order and each
goes into the leftmost column that is free by the time it starts. The
number of columns equals the peak number of simultaneously running
events, and two events sharing a column never overlap.

Usage:
    placed = layout_day(events)
    for ev in placed:
        width = 1 / ev.total_columns
        left = ev.column_index * width
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Sequence

from studio_engine.schemas.calendar_schema import CalendarEvent, PlacedEvent


def layout_day(events: Sequence[CalendarEvent]) -> list[PlacedEvent]:
    """Assign a column to each event of a single day.

    Ties on start time keep input order (``sorted`` is stable), so the
    result is deterministic. Every event in the group gets the same
    ``total_columns`` so column widths stay uniform.
    """
    if not events:
        return []

    ordered = sorted(events, key=lambda ev: ev.start_minute)
    column_ends: list[int] = []
    columns: list[int] = []

    for ev in ordered:
        start, end = ev.start_minute, ev.end_minute
        for index, column_end in enumerate(column_ends):
            if column_end <= start:
                column_ends[index] = end
                columns.append(index)
                break
        else:
            columns.append(len(column_ends))
            column_ends.append(end)

    total = max(len(column_ends), 1)
    return [
        PlacedEvent(
            **ev.model_dump(exclude={"column_index", "total_columns"}),
            column_index=col,
            total_columns=total,
        )
        for ev, col in zip(ordered, columns)
    ]


def layout_by_date(events: Iterable[CalendarEvent]) -> dict[date, list[PlacedEvent]]:
    """Lay out each date's events independently, keyed by date."""
    by_date: dict[date, list[CalendarEvent]] = defaultdict(list)
    for ev in events:
        by_date[ev.date].append(ev)
    return {day: layout_day(day_events) for day, day_events in sorted(by_date.items())}


def max_concurrency(events: Iterable[CalendarEvent]) -> int:
    """Peak number of events running at the same minute.

    Intervals are half-open, so an event ending at 10:00 does not overlap
    one starting at 10:00.
    """
    points: list[tuple[int, int]] = []
    for ev in events:
        points.append((ev.start_minute, 1))
        points.append((ev.end_minute, -1))
    # Ends sort before starts at the same minute.
    points.sort(key=lambda p: (p[0], p[1]))

    running = peak = 0
    for _, delta in points:
        running += delta
        peak = max(peak, running)
    return peak
