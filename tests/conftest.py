"""Shared test fixtures and helpers."""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

import pytest

from studio_engine.config import PaymentConfig
from studio_engine.integrations import (
    InMemoryBookingStore,
    InMemoryClientDirectory,
    InMemorySyncLog,
    MockPaymentOrderClient,
    RecordingNotifier,
)
from studio_engine.lifecycle import (
    BookingService,
    BookingSideEffectOrchestrator,
    BookingStateMachine,
)
from studio_engine.schemas.booking_schema import Booking, BookingStatus
from studio_engine.schemas.calendar_schema import CalendarEvent
from studio_engine.schemas.client_schema import ClientProfile
from studio_engine.schemas.schedule_schema import BusinessHourRule

UTC = timezone.utc
FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

CONFIGURED_PAYMENTS = PaymentConfig(access_token="tok", location_id="loc")
UNCONFIGURED_PAYMENTS = PaymentConfig(access_token="", location_id="")

SERVICE_NAMES = {1: "Classic Lash Set", 2: "Permanent Jewelry"}


@pytest.fixture
def state_machine():
    return BookingStateMachine(strict=True, clock=lambda: FIXED_NOW)


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def payments():
    return MockPaymentOrderClient(config=CONFIGURED_PAYMENTS)


@pytest.fixture
def directory():
    return InMemoryClientDirectory(
        [
            ClientProfile(id="c-1", first_name="Maya", last_name="Lopez", email="maya@example.com"),
            ClientProfile(
                id="c-optout", first_name="Jo", email="jo@example.com", notify_email=False
            ),
            ClientProfile(id="c-noemail", first_name="Ana"),
        ],
        SERVICE_NAMES,
    )


@pytest.fixture
def sync_log():
    return InMemorySyncLog()


@pytest.fixture
def orchestrator(store, notifier, payments, directory, sync_log):
    return BookingSideEffectOrchestrator(
        store, notifier, payments, directory, sync_log, max_attempts=3
    )


@pytest.fixture
def service(store, orchestrator, state_machine):
    return BookingService(store, orchestrator, state_machine)


def weekly_rule(
    day_of_week: int,
    opens: Optional[time] = time(9),
    closes: Optional[time] = time(18),
    staff_id: Optional[str] = None,
) -> BusinessHourRule:
    """Open rule for a weekday, or a closed one when ``opens`` is None."""
    if opens is None:
        return BusinessHourRule(day_of_week=day_of_week, is_open=False, staff_id=staff_id)
    return BusinessHourRule(
        day_of_week=day_of_week, is_open=True, opens_at=opens, closes_at=closes, staff_id=staff_id
    )


def booking_input(
    client_id: str = "c-1",
    starts_at: Optional[datetime] = None,
    service_id: int = 1,
    duration_minutes: int = 60,
    total_in_cents: int = 12000,
    **extra,
) -> dict:
    """Create/edit payload with sensible defaults."""
    return {
        "client_id": client_id,
        "service_id": service_id,
        "starts_at": starts_at or datetime(2026, 4, 1, 10, 0, tzinfo=UTC),
        "duration_minutes": duration_minutes,
        "total_in_cents": total_in_cents,
        **extra,
    }


def make_booking(
    status: BookingStatus = BookingStatus.PENDING,
    booking_id: int = 1,
    client_id: str = "c-1",
    starts_at: Optional[datetime] = None,
    **extra,
) -> Booking:
    """Helper to create an in-memory Booking without a store."""
    return Booking(
        id=booking_id,
        client_id=client_id,
        service_id=1,
        status=status,
        starts_at=starts_at or datetime(2026, 4, 1, 10, 0, tzinfo=UTC),
        duration_minutes=60,
        total_in_cents=12000,
        **extra,
    )


def make_event(
    event_id: int,
    start: time,
    duration_minutes: int,
    day: date = date(2026, 3, 9),
) -> CalendarEvent:
    """Helper to create a CalendarEvent on a single day."""
    return CalendarEvent(
        id=event_id,
        title=f"Event {event_id}",
        date=day,
        start_time=start,
        duration_minutes=duration_minutes,
    )


def update_payload(booking: Booking, **overrides) -> dict:
    """Full-record edit payload mirroring ``booking`` with overrides applied."""
    data = booking.model_dump(include={
        "client_id", "service_id", "staff_id", "starts_at", "duration_minutes",
        "total_in_cents", "location", "client_notes", "staff_notes", "status",
    })
    data.update(overrides)
    return data


def one_day_later(value: datetime) -> datetime:
    return value + timedelta(days=1)
