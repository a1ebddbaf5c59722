"""Typed events emitted after a booking change has been committed."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from studio_engine.lifecycle.reschedule import should_notify_reschedule
from studio_engine.logging_context import get_request_id
from studio_engine.schemas.booking_schema import Booking, BookingStatus


class BookingEventKind(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"


# Statuses whose entry is announced to side-effect handlers.
STATUS_EVENTS: dict[BookingStatus, BookingEventKind] = {
    BookingStatus.CONFIRMED: BookingEventKind.CONFIRMED,
    BookingStatus.CANCELLED: BookingEventKind.CANCELLED,
    BookingStatus.COMPLETED: BookingEventKind.COMPLETED,
    BookingStatus.NO_SHOW: BookingEventKind.NO_SHOW,
}


@dataclass(frozen=True)
class BookingEvent:
    """A committed booking change that side-effect handlers react to."""
    kind: BookingEventKind
    booking: Booking
    previous_status: Optional[BookingStatus] = None
    previous_starts_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    request_id: str = field(default_factory=get_request_id)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def status_event(
    booking: Booking,
    previous_status: Optional[BookingStatus],
    cancellation_reason: Optional[str] = None,
) -> Optional[BookingEvent]:
    """Event for entering ``booking.status``, or None if nothing to announce."""
    if previous_status == booking.status:
        return None
    kind = STATUS_EVENTS.get(booking.status)
    if kind is None:
        return None
    return BookingEvent(
        kind=kind,
        booking=booking,
        previous_status=previous_status,
        cancellation_reason=cancellation_reason or booking.cancellation_reason,
    )


def events_for_update(previous: Booking, updated: Booking) -> list[BookingEvent]:
    """Events for a full-record edit: status entry first, then reschedule."""
    events: list[BookingEvent] = []
    entered = status_event(updated, previous.status)
    if entered is not None:
        events.append(entered)
    if should_notify_reschedule(previous.starts_at, updated.starts_at):
        events.append(BookingEvent(
            kind=BookingEventKind.RESCHEDULED,
            booking=updated,
            previous_status=previous.status,
            previous_starts_at=previous.starts_at,
        ))
    return events
