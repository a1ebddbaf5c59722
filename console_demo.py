"""
Offline console demo: runs the booking engine without any credentials.

Uses the real availability resolver, overlap layout, state machine and
side-effect orchestrator against in-memory collaborators. No database,
no email provider, no payment provider. Designed for demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario week --date 2026-03-12
    python console_demo.py --scenario lifecycle --fail-email
"""

import argparse
import asyncio
from datetime import date, datetime, time, timedelta

from studio_engine.config import PaymentConfig, settings
from studio_engine.integrations import (
    InMemoryBookingStore,
    InMemoryClientDirectory,
    InMemorySyncLog,
    MockPaymentOrderClient,
    RecordingNotifier,
)
from studio_engine.lifecycle import BookingService, BookingSideEffectOrchestrator
from studio_engine.logging_context import request_scope
from studio_engine.scheduling.availability import (
    DEFAULT_BUSINESS_HOURS,
    closed_blocks,
    resolve_day_availability,
    week_days,
)
from studio_engine.scheduling.calendar_projection import ServiceInfo, project_bookings
from studio_engine.scheduling.overlap_layout import layout_by_date
from studio_engine.schemas.booking_schema import BookingStatus
from studio_engine.schemas.client_schema import ClientProfile
from studio_engine.schemas.schedule_schema import ClosureRange, ClosureType, LunchBreak
from studio_engine.utils import format_hhmm

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

SERVICES = {
    1: ServiceInfo("Classic Lash Set", "lash"),
    2: ServiceInfo("Permanent Jewelry", "jewelry"),
    3: ServiceInfo("Crochet Braids", "crochet"),
}

CLIENTS = [
    ClientProfile(id="c-maya", first_name="Maya", last_name="Lopez", email="maya@example.com"),
    ClientProfile(id="c-jo", first_name="Jo", last_name="Kim", email="jo@example.com"),
    ClientProfile(id="c-ana", first_name="Ana", email=None),
]


def _fmt_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class DemoStudio:
    """Wires the engine to in-memory collaborators."""

    def __init__(self, fail_email: bool = False, payments_configured: bool = True) -> None:
        self.store = InMemoryBookingStore()
        self.notifier = RecordingNotifier(fail_with="SMTP outage" if fail_email else None)
        payment_config = (
            PaymentConfig(access_token="demo-token", location_id="demo-location")
            if payments_configured else PaymentConfig(access_token="", location_id="")
        )
        self.payments = MockPaymentOrderClient(config=payment_config)
        self.directory = InMemoryClientDirectory(
            CLIENTS, {sid: info.name for sid, info in SERVICES.items()}
        )
        self.sync_log = InMemorySyncLog()
        self.orchestrator = BookingSideEffectOrchestrator(
            self.store, self.notifier, self.payments, self.directory, self.sync_log,
        )
        self.service = BookingService(self.store, self.orchestrator)

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def at(self, day: date, hh: int, mm: int = 0) -> datetime:
        return datetime.combine(day, time(hh, mm), tzinfo=settings.tz)

    async def seed_week(self, anchor: date) -> None:
        days = week_days(anchor)
        plan = [
            (1, "c-maya", 1, 9, 0, 60),
            (1, "c-jo", 2, 9, 30, 60),
            (1, "c-ana", 1, 10, 30, 30),
            (3, "c-jo", 3, 13, 0, 120),
            (4, "c-maya", 1, 11, 0, 90),
        ]
        for offset, client, service_id, hh, mm, duration in plan:
            await self.service.create_booking({
                "client_id": client,
                "service_id": service_id,
                "starts_at": self.at(days[offset], hh, mm),
                "duration_minutes": duration,
                "total_in_cents": 8500,
            })


async def run_week(anchor: date) -> None:
    studio = DemoStudio()
    await studio.seed_week(anchor)
    days = week_days(anchor)
    closures = [
        ClosureRange(
            type=ClosureType.VACATION, start_date=days[5], end_date=days[6], label="Trade Show"
        ),
    ]
    lunch = LunchBreak(enabled=True, start=time(12, 30), end=time(13, 0))

    bookings = await studio.store.list_bookings()
    placed = layout_by_date(project_bookings(bookings, SERVICES, days[0], days[-1]))

    print(f"\n{BOLD}{settings.studio.name}: week of {days[0]:%b %d}{RESET}\n")
    for day in days:
        avail = resolve_day_availability(day, DEFAULT_BUSINESS_HOURS, closures, lunch)
        if avail.is_open:
            header = f"{GREEN}open {format_hhmm(avail.opens_at)}-{format_hhmm(avail.closes_at)}{RESET}"
        else:
            header = f"{YELLOW}{avail.block_label}{RESET}"
        print(f"{BOLD}{day:%a %b %d}{RESET}  {header}")
        for block in closed_blocks(avail):
            label = f" ({block.label})" if block.label else ""
            studio.system_log(
                f"{block.kind.value} {_fmt_minutes(block.start_minute)}-"
                f"{_fmt_minutes(block.end_minute)}{label}"
            )
        for ev in placed.get(day, []):
            print(
                f"    {BLUE}[col {ev.column_index + 1}/{ev.total_columns}]{RESET} "
                f"{format_hhmm(ev.start_time)} {ev.title} ({ev.duration_minutes} min)"
            )
    print()


async def run_lifecycle(fail_email: bool) -> None:
    with request_scope() as request_id:
        print(f"{DIM}request {request_id}{RESET}")
        await _walk_lifecycle(fail_email)


async def _walk_lifecycle(fail_email: bool) -> None:
    studio = DemoStudio(fail_email=fail_email)
    start = studio.at(date.today() + timedelta(days=3), 10)

    print(f"\n{BOLD}Booking lifecycle{RESET}\n")
    booking = await studio.service.create_booking(
        {
            "client_id": "c-maya",
            "service_id": 1,
            "starts_at": start,
            "duration_minutes": 120,
            "total_in_cents": 15000,
        },
        admin_created=False,
    )
    print(f"{GREEN}Created booking #{booking.id}: {booking.status.value}{RESET}")

    booking = await studio.service.update_booking_status(booking.id, BookingStatus.CONFIRMED)
    print(f"{GREEN}Confirmed; order ref {booking.payment_order_ref}{RESET}")

    update = booking.model_dump(include={
        "client_id", "service_id", "staff_id", "duration_minutes", "total_in_cents",
        "location", "client_notes", "staff_notes", "status",
    })
    update["starts_at"] = start + timedelta(days=1)
    booking = await studio.service.update_booking(booking.id, update)
    print(f"{GREEN}Rescheduled to {booking.starts_at:%a %b %d %H:%M}{RESET}")

    booking = await studio.service.update_booking_status(
        booking.id, BookingStatus.CANCELLED, cancellation_reason="Client travelling"
    )
    print(f"{YELLOW}Cancelled: {booking.cancellation_reason}{RESET}")

    print(f"\n{BOLD}Notifications sent{RESET}")
    for sent in studio.notifier.sent:
        studio.system_log(f"{sent.kind.value} -> {sent.recipient_email}")
    print(f"\n{BOLD}Sync log{RESET}")
    for entry in studio.sync_log.entries:
        colour = GREEN if entry.status.value == "success" else RED
        detail = entry.error_message or entry.message or ""
        print(f"  {colour}{entry.status.value:<8}{RESET} {entry.entity_type:<22} {detail}")
    if studio.orchestrator.pending:
        print(f"\n{RED}{len(studio.orchestrator.pending)} side effects queued for retry{RESET}")
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Studio booking engine console demo")
    parser.add_argument("--scenario", choices=["week", "lifecycle"], default="week")
    parser.add_argument("--date", type=date.fromisoformat, default=date.today())
    parser.add_argument("--fail-email", action="store_true", help="simulate an email outage")
    args = parser.parse_args()

    if args.scenario == "week":
        asyncio.run(run_week(args.date))
    else:
        asyncio.run(run_lifecycle(args.fail_email))


if __name__ == "__main__":
    main()
