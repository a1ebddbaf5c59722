"""Projection of bookings onto calendar events in the studio's local time."""

import logging
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Iterable, Optional

from studio_engine.config import settings
from studio_engine.schemas.booking_schema import Booking, BookingStatus
from studio_engine.schemas.calendar_schema import CalendarEvent

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "lash"

# Cancelled and no-show bookings stay in the record but leave the grid.
HIDDEN_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.NO_SHOW})


@dataclass(frozen=True)
class ServiceInfo:
    name: str
    category: str = DEFAULT_CATEGORY


def booking_to_event(
    booking: Booking,
    service: Optional[ServiceInfo] = None,
    client_name: Optional[str] = None,
    staff_name: Optional[str] = None,
    tz: Optional[tzinfo] = None,
) -> CalendarEvent:
    """Build the calendar event for a booking.

    The booking's absolute start is converted to ``tz`` (the studio zone by
    default) to get the grid date and start time.
    """
    local = booking.starts_at.astimezone(tz or settings.tz)
    service = service or ServiceInfo(name="Appointment")
    return CalendarEvent(
        id=booking.id,
        title=service.name,
        category=service.category,
        date=local.date(),
        start_time=local.time().replace(second=0, microsecond=0),
        duration_minutes=booking.duration_minutes,
        staff=staff_name,
        client=client_name,
        location=booking.location,
        notes=booking.staff_notes or booking.client_notes,
        booking_id=booking.id,
        status=booking.status.value,
    )


def project_bookings(
    bookings: Iterable[Booking],
    services: dict[int, ServiceInfo],
    start: Optional[date] = None,
    end: Optional[date] = None,
    staff_id: Optional[str] = None,
    include_hidden: bool = False,
    tz: Optional[tzinfo] = None,
) -> list[CalendarEvent]:
    """Calendar events for the bookings visible in a view.

    Filters by local date range (inclusive) and staff member when given.
    """
    events = []
    for booking in bookings:
        if not include_hidden and booking.status in HIDDEN_STATUSES:
            continue
        if staff_id is not None and booking.staff_id != staff_id:
            continue
        event = booking_to_event(booking, services.get(booking.service_id), tz=tz)
        if start is not None and event.date < start:
            continue
        if end is not None and event.date > end:
            continue
        events.append(event)
    logger.debug("Projected %d calendar events", len(events))
    return events
