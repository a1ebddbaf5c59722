"""Tests for projecting bookings onto the calendar grid."""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from studio_engine.scheduling.calendar_projection import (
    ServiceInfo,
    booking_to_event,
    project_bookings,
)
from studio_engine.scheduling.overlap_layout import layout_by_date
from studio_engine.schemas.booking_schema import BookingStatus
from tests.conftest import UTC, make_booking

LA = ZoneInfo("America/Los_Angeles")
SERVICES = {1: ServiceInfo("Classic Lash Set", "lash")}


class TestBookingToEvent:
    def test_converts_to_studio_local_time(self):
        booking = make_booking(
            BookingStatus.CONFIRMED, starts_at=datetime(2026, 4, 2, 3, 30, tzinfo=UTC)
        )
        event = booking_to_event(booking, SERVICES[1], client_name="Maya Lopez", tz=LA)
        assert event.date == date(2026, 4, 1)
        assert event.start_time == time(20, 30)
        assert event.title == "Classic Lash Set"
        assert event.category == "lash"
        assert event.client == "Maya Lopez"
        assert event.booking_id == booking.id
        assert event.status == "confirmed"

    def test_unknown_service_gets_generic_title(self):
        event = booking_to_event(make_booking(), tz=UTC)
        assert event.title == "Appointment"

    def test_staff_notes_preferred_over_client_notes(self):
        booking = make_booking(client_notes="Sensitive eyes", staff_notes="Use C curl")
        assert booking_to_event(booking, tz=UTC).notes == "Use C curl"


class TestProjectBookings:
    def _bookings(self):
        return [
            make_booking(BookingStatus.CONFIRMED, 1, starts_at=datetime(2026, 4, 1, 17, tzinfo=UTC)),
            make_booking(BookingStatus.CANCELLED, 2, starts_at=datetime(2026, 4, 1, 17, tzinfo=UTC)),
            make_booking(
                BookingStatus.PENDING, 3,
                starts_at=datetime(2026, 4, 1, 17, 30, tzinfo=UTC), staff_id="s-1",
            ),
            make_booking(BookingStatus.NO_SHOW, 4, starts_at=datetime(2026, 4, 3, 17, tzinfo=UTC)),
            make_booking(BookingStatus.COMPLETED, 5, starts_at=datetime(2026, 4, 6, 17, tzinfo=UTC)),
        ]

    def test_hides_cancelled_and_no_show(self):
        events = project_bookings(self._bookings(), SERVICES, tz=LA)
        assert [e.id for e in events] == [1, 3, 5]

    def test_include_hidden(self):
        events = project_bookings(self._bookings(), SERVICES, include_hidden=True, tz=LA)
        assert len(events) == 5

    def test_date_window_is_inclusive(self):
        events = project_bookings(
            self._bookings(), SERVICES, date(2026, 4, 1), date(2026, 4, 5), tz=LA
        )
        assert [e.id for e in events] == [1, 3]

    def test_staff_filter(self):
        events = project_bookings(self._bookings(), SERVICES, staff_id="s-1", tz=LA)
        assert [e.id for e in events] == [3]

    def test_projection_feeds_layout(self):
        placed = layout_by_date(project_bookings(self._bookings(), SERVICES, tz=LA))
        april_first = placed[date(2026, 4, 1)]
        assert [(e.id, e.column_index, e.total_columns) for e in april_first] == [
            (1, 0, 2), (3, 1, 2),
        ]
