"""
Day availability resolution for the calendar views.

Turns the weekly business-hour rules, one-off closures and the lunch
window into a DayAvailability per date. Every function here is pure:
results are recomputed on each call and never cached, so a view always
reflects the latest hours and closures.

Usage:
    avail = resolve_day_availability(date(2026, 3, 9), rules, closures, lunch)
    if avail.is_open:
        blocks = closed_blocks(avail)
"""

import calendar
import logging
from collections import Counter
from datetime import date, time, timedelta
from typing import Iterable, Optional, Sequence

from studio_engine.config import settings
from studio_engine.errors import ClosureOverlapError, ScheduleValidationError
from studio_engine.schemas.schedule_schema import (
    BusinessHourRule,
    ClosureRange,
    DayAvailability,
    GridBlock,
    GridBlockKind,
    LunchBreak,
)
from studio_engine.utils import date_range, iso_weekday, time_to_minutes

logger = logging.getLogger(__name__)

CLOSED_LABEL = "Closed"
LUNCH_LABEL = "Lunch"

# Seeded the first time a studio has no weekly schedule.
DEFAULT_BUSINESS_HOURS: list[BusinessHourRule] = [
    BusinessHourRule(day_of_week=d, is_open=True, opens_at=time(9), closes_at=time(18))
    for d in range(1, 6)
] + [
    BusinessHourRule(day_of_week=6, is_open=True, opens_at=time(9), closes_at=time(16)),
    BusinessHourRule(day_of_week=7, is_open=False),
]


def resolve_day_availability(
    day: date,
    business_hours: Sequence[BusinessHourRule],
    closures: Sequence[ClosureRange],
    lunch: Optional[LunchBreak] = None,
) -> DayAvailability:
    """Resolve the open/closed state of a single date.

    A closure covering the date always wins over the weekly rule. When
    several closures cover the date, the first one in input order supplies
    the label. Missing rules degrade to a closed day; this never raises.
    """
    weekday = iso_weekday(day)
    rule = next((r for r in business_hours if r.day_of_week == weekday), None)
    closure = next((c for c in closures if c.covers(day)), None)

    is_blocked = closure is not None
    is_open = bool(rule and rule.is_open) and not is_blocked

    if closure is not None:
        block_label: Optional[str] = closure.display_label
    elif not is_open:
        block_label = CLOSED_LABEL
    else:
        block_label = None

    lunch_enabled = lunch is not None and lunch.enabled

    return DayAvailability(
        date=day,
        is_open=is_open,
        opens_at=rule.opens_at if is_open and rule else None,
        closes_at=rule.closes_at if is_open and rule else None,
        is_blocked=is_blocked,
        block_label=block_label,
        lunch_start=lunch.start if lunch_enabled else None,
        lunch_end=lunch.end if lunch_enabled else None,
    )


def resolve_range(
    start: date,
    end: date,
    business_hours: Sequence[BusinessHourRule],
    closures: Sequence[ClosureRange],
    lunch: Optional[LunchBreak] = None,
) -> list[DayAvailability]:
    """Resolve every date from ``start`` to ``end`` inclusive."""
    return [
        resolve_day_availability(day, business_hours, closures, lunch)
        for day in date_range(start, end)
    ]


def rules_for_staff(
    rules: Iterable[BusinessHourRule], staff_id: Optional[str]
) -> list[BusinessHourRule]:
    """Effective weekly rules for a staff member.

    A staff-specific rule replaces the studio-wide rule for the same
    weekday. ``staff_id=None`` returns the studio-wide rules only.
    """
    studio: dict[int, BusinessHourRule] = {}
    personal: dict[int, BusinessHourRule] = {}
    for rule in rules:
        if rule.staff_id is None:
            studio.setdefault(rule.day_of_week, rule)
        elif staff_id is not None and rule.staff_id == staff_id:
            personal.setdefault(rule.day_of_week, rule)
    merged = {**studio, **personal}
    return [merged[d] for d in sorted(merged)]


def closures_for_staff(
    closures: Iterable[ClosureRange], staff_id: Optional[str]
) -> list[ClosureRange]:
    """Studio-wide closures plus the staff member's own."""
    return [
        c for c in closures
        if c.staff_id is None or (staff_id is not None and c.staff_id == staff_id)
    ]


def validate_weekly_rules(rules: Iterable[BusinessHourRule]) -> None:
    """Reject more than one rule per weekday within a staff scope."""
    counts = Counter((r.staff_id, r.day_of_week) for r in rules)
    duplicates = sorted(
        (day, staff or "studio") for (staff, day), n in counts.items() if n > 1
    )
    if duplicates:
        detail = ", ".join(f"day {day} ({scope})" for day, scope in duplicates)
        raise ScheduleValidationError(f"Duplicate business-hour rules: {detail}")


def find_overlapping_closure(
    closures: Iterable[ClosureRange], candidate: ClosureRange
) -> Optional[ClosureRange]:
    """First existing closure in the candidate's staff scope that overlaps it."""
    for existing in closures:
        if existing.staff_id == candidate.staff_id and existing.overlaps(candidate):
            return existing
    return None


def add_closure(
    closures: Sequence[ClosureRange], candidate: ClosureRange
) -> list[ClosureRange]:
    """Return ``closures`` with ``candidate`` appended.

    Raises:
        ClosureOverlapError: If the candidate overlaps an existing closure
            for the same staff scope.
    """
    clash = find_overlapping_closure(closures, candidate)
    if clash is not None:
        raise ClosureOverlapError(
            f"{candidate.start_date}..{candidate.end_date} overlaps "
            f"'{clash.display_label}' ({clash.start_date}..{clash.end_date})"
        )
    logger.info(
        "Closure added: %s %s..%s", candidate.type.value, candidate.start_date, candidate.end_date
    )
    return [*closures, candidate]


def closed_blocks(
    availability: DayAvailability,
    day_start_hour: Optional[int] = None,
    day_end_hour: Optional[int] = None,
) -> list[GridBlock]:
    """Unavailable stretches to shade in a day column of the time grid.

    A closed day is one block across the whole grid. An open day gets a
    block before opening and after closing where those fall inside the
    grid, plus the lunch window when it lies entirely inside the grid.
    """
    if day_start_hour is None:
        day_start_hour = settings.calendar.day_start_hour
    if day_end_hour is None:
        day_end_hour = settings.calendar.day_end_hour
    grid_start, grid_end = day_start_hour * 60, day_end_hour * 60

    if not availability.is_open:
        return [GridBlock(
            start_minute=grid_start,
            end_minute=grid_end,
            kind=GridBlockKind.CLOSED,
            label=availability.block_label or CLOSED_LABEL,
        )]

    blocks: list[GridBlock] = []
    if availability.opens_at is not None:
        open_min = time_to_minutes(availability.opens_at)
        if open_min > grid_start:
            blocks.append(GridBlock(
                start_minute=grid_start,
                end_minute=min(open_min, grid_end),
                kind=GridBlockKind.CLOSED,
            ))

    if availability.closes_at is not None:
        close_min = time_to_minutes(availability.closes_at)
        if close_min < grid_end:
            blocks.append(GridBlock(
                start_minute=max(close_min, grid_start),
                end_minute=grid_end,
                kind=GridBlockKind.CLOSED,
            ))

    if availability.lunch_start is not None and availability.lunch_end is not None:
        lunch_start = time_to_minutes(availability.lunch_start)
        lunch_end = time_to_minutes(availability.lunch_end)
        if grid_start <= lunch_start < lunch_end <= grid_end:
            blocks.append(GridBlock(
                start_minute=lunch_start,
                end_minute=lunch_end,
                kind=GridBlockKind.LUNCH,
                label=LUNCH_LABEL,
            ))

    return blocks


def week_days(anchor: date) -> list[date]:
    """The Sunday-first week containing ``anchor``."""
    offset = anchor.isoweekday() % 7  # Sunday -> 0
    start = anchor - timedelta(days=offset)
    return [start + timedelta(days=i) for i in range(7)]


def month_grid(year: int, month: int) -> list[date]:
    """Whole Sunday-first weeks covering the given month."""
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    start = week_days(first)[0]
    end = week_days(last)[-1]
    return list(date_range(start, end))
