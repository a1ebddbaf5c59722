"""
Best-effort side effects for committed booking changes.

Each committed change becomes one or more BookingEvents. Every event kind
has an ordered list of independent handlers (payment-order creation,
notification dispatch). A handler failure is logged, written to the sync
log, queued for retry and swallowed: it never blocks the other handlers
and never undoes the persisted change.

    confirmed   -> create_payment_order, send_confirmation
    cancelled   -> send_cancellation
    completed   -> send_completion
    no_show     -> send_no_show
    rescheduled -> send_reschedule
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, tzinfo
from typing import Any, Awaitable, Callable, Optional

from studio_engine.config import settings
from studio_engine.integrations.client_directory import ClientDirectory
from studio_engine.integrations.notifier import NotificationKind, Notifier
from studio_engine.integrations.payment_orders import OrderRequest, PaymentOrderClient
from studio_engine.integrations.record_store import BookingStore
from studio_engine.integrations.sync_log import SyncLog
from studio_engine.lifecycle.events import (
    STATUS_EVENTS,
    BookingEvent,
    BookingEventKind,
    events_for_update,
    status_event,
)
from studio_engine.logging_context import get_request_logger
from studio_engine.schemas.booking_schema import Booking, BookingStatus
from studio_engine.schemas.client_schema import EmailRecipient
from studio_engine.schemas.sync_log_schema import SyncLogEntry, SyncStatus

logger = get_request_logger(__name__)

DEFAULT_SERVICE_NAME = "your appointment"


@dataclass
class HandlerResult:
    """What a handler did. ``performed=False`` means it skipped on purpose."""
    performed: bool
    remote_id: Optional[str] = None
    message: Optional[str] = None
    payload: Optional[dict[str, Any]] = None
    booking: Optional[Booking] = None


SKIPPED = HandlerResult(performed=False)

HandlerFunc = Callable[[BookingEvent], Awaitable[HandlerResult]]


@dataclass(frozen=True)
class SideEffectHandler:
    name: str
    provider: str
    entity_type: str
    run: HandlerFunc


@dataclass
class PendingSideEffect:
    """A failed handler run waiting in the outbox for another attempt."""
    handler: SideEffectHandler
    event: BookingEvent
    attempts: int = 1
    last_error: str = ""


@dataclass
class TransitionContext:
    """Details of the committed status change passed to on_transition()."""
    previous_status: Optional[BookingStatus] = None
    cancellation_reason: Optional[str] = None


@dataclass
class DispatchReport:
    """Per-handler outcomes of one dispatch. Never raised, only returned."""
    booking: Booking
    succeeded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def format_starts_at(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """e.g. "Wednesday, April 1 at 10:00 AM" in the studio's timezone."""
    local = value.astimezone(tz or settings.tz)
    hour = local.hour % 12 or 12
    return f"{local:%A, %B} {local.day} at {hour}:{local:%M %p}"


def format_booking_date(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """e.g. "Wednesday, April 1"."""
    local = value.astimezone(tz or settings.tz)
    return f"{local:%A, %B} {local.day}"


def _still_relevant(event: BookingEvent, current: Booking) -> bool:
    """Whether a queued event still describes the booking as it is now."""
    if event.kind == BookingEventKind.RESCHEDULED:
        return current.starts_at != event.previous_starts_at
    return STATUS_EVENTS.get(current.status) == event.kind


class BookingSideEffectOrchestrator:
    """
    Runs the side effects of committed booking changes.

    Invoked after persistence succeeded. Nothing here raises to the
    caller; outcomes are written to the sync log and failed handler runs
    stay in ``pending`` until retry_pending() succeeds or attempts run out.
    """

    def __init__(
        self,
        store: BookingStore,
        notifier: Notifier,
        payment_orders: PaymentOrderClient,
        directory: ClientDirectory,
        sync_log: SyncLog,
        max_attempts: Optional[int] = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._payment_orders = payment_orders
        self._directory = directory
        self._sync_log = sync_log
        if max_attempts is None:
            max_attempts = settings.lifecycle.max_side_effect_attempts
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self._outbox: list[PendingSideEffect] = []
        self._handlers = self._build_handlers()

    def _build_handlers(self) -> dict[BookingEventKind, list[SideEffectHandler]]:
        email = self._notifier.provider
        return {
            BookingEventKind.CONFIRMED: [
                SideEffectHandler(
                    "create_payment_order", self._payment_orders.provider,
                    "booking_order", self._create_payment_order,
                ),
                SideEffectHandler(
                    "send_confirmation", email, "booking_confirmation",
                    self._send_confirmation,
                ),
            ],
            BookingEventKind.CANCELLED: [
                SideEffectHandler(
                    "send_cancellation", email, "booking_cancellation",
                    self._send_cancellation,
                ),
            ],
            BookingEventKind.COMPLETED: [
                SideEffectHandler(
                    "send_completion", email, "booking_completed", self._send_completion,
                ),
            ],
            BookingEventKind.NO_SHOW: [
                SideEffectHandler("send_no_show", email, "booking_no_show", self._send_no_show),
            ],
            BookingEventKind.RESCHEDULED: [
                SideEffectHandler(
                    "send_reschedule", email, "booking_reschedule", self._send_reschedule,
                ),
            ],
        }

    @property
    def pending(self) -> list[PendingSideEffect]:
        return list(self._outbox)

    def handler_names(self, kind: BookingEventKind) -> list[str]:
        """Handler names for an event kind, in execution order."""
        return [h.name for h in self._handlers.get(kind, [])]

    # ------------------------------------------------------------------ #
    #  Entry points                                                       #
    # ------------------------------------------------------------------ #

    async def on_create(self, booking: Booking) -> DispatchReport:
        """Side effects for a newly created booking (confirmed ones only)."""
        event = status_event(booking, previous_status=None)
        return await self._dispatch_all(booking, [event] if event else [])

    async def on_transition(
        self,
        booking: Booking,
        new_status: BookingStatus,
        context: Optional[TransitionContext] = None,
    ) -> DispatchReport:
        """Side effects for a committed status change into ``new_status``."""
        context = context or TransitionContext()
        if booking.status != new_status:
            logger.warning(
                "Booking %s is %s but side effects were requested for %s",
                booking.id, booking.status.value, new_status.value,
            )
            booking = booking.model_copy(update={"status": new_status})
        event = status_event(booking, context.previous_status, context.cancellation_reason)
        return await self._dispatch_all(booking, [event] if event else [])

    async def on_update(self, previous: Booking, updated: Booking) -> DispatchReport:
        """Side effects for a committed full-record edit, reschedule included."""
        return await self._dispatch_all(updated, events_for_update(previous, updated))

    async def retry_pending(self) -> int:
        """Re-run every queued handler once against the current booking row.

        Items whose booking was deleted, left the status that triggered
        them, or moved back to its old start time are dropped unrun.
        Returns how many re-runs succeeded.
        """
        queued, self._outbox = self._outbox, []
        recovered = 0
        for item in queued:
            current = await self._store.get_booking(item.event.booking.id)
            if current is None or not _still_relevant(item.event, current):
                logger.info(
                    "Dropping queued %s for booking %s: no longer applies",
                    item.handler.name, item.event.booking.id,
                )
                continue
            event = replace(item.event, booking=current)
            outcome = await self._run(item.handler, event, attempt=item.attempts + 1)
            if outcome is not None:
                recovered += 1
        logger.info("Side-effect retry: %d of %d recovered", recovered, len(queued))
        return recovered

    # ------------------------------------------------------------------ #
    #  Dispatch                                                           #
    # ------------------------------------------------------------------ #

    async def _dispatch_all(self, booking: Booking, events: list[BookingEvent]) -> DispatchReport:
        report = DispatchReport(booking=booking)
        for event in events:
            # Later events see writes made by earlier handlers (order reference).
            await self.dispatch(replace(event, booking=report.booking), report)
        return report

    async def dispatch(
        self, event: BookingEvent, report: Optional[DispatchReport] = None
    ) -> DispatchReport:
        """Run every handler for ``event`` in order, isolating failures."""
        report = report or DispatchReport(booking=event.booking)
        for handler in self._handlers.get(event.kind, []):
            outcome = await self._run(handler, event)
            if outcome is None:
                report.failed.append(handler.name)
                continue
            if outcome.booking is not None:
                report.booking = outcome.booking
                event = replace(event, booking=outcome.booking)
            if outcome.performed:
                report.succeeded.append(handler.name)
            else:
                report.skipped.append(handler.name)
        return report

    async def _run(
        self, handler: SideEffectHandler, event: BookingEvent, attempt: int = 1
    ) -> Optional[HandlerResult]:
        """Run one handler. Returns None on failure, after recording it."""
        local_id = str(event.booking.id)
        try:
            outcome = await handler.run(event)
        except Exception as exc:
            error_message = str(exc) or exc.__class__.__name__
            logger.warning(
                "Side effect %s failed for booking %s (attempt %d): %s",
                handler.name, local_id, attempt, error_message,
            )
            await self._record(SyncLogEntry(
                provider=handler.provider,
                status=SyncStatus.FAILED,
                entity_type=handler.entity_type,
                local_id=local_id,
                message=f"Failed {handler.entity_type} for booking #{local_id}",
                error_message=error_message,
                payload={"event": event.kind.value, "attempt": attempt,
                         "request_id": event.request_id},
            ))
            self._enqueue(handler, event, attempt, error_message)
            return None

        if outcome.performed:
            await self._record(SyncLogEntry(
                provider=handler.provider,
                status=SyncStatus.SUCCESS,
                entity_type=handler.entity_type,
                local_id=local_id,
                remote_id=outcome.remote_id,
                message=outcome.message,
                payload=outcome.payload,
            ))
        return outcome

    def _enqueue(
        self, handler: SideEffectHandler, event: BookingEvent, attempt: int, error: str
    ) -> None:
        if attempt >= self.max_attempts:
            logger.error(
                "Giving up on %s for booking %s after %d attempts",
                handler.name, event.booking.id, attempt,
            )
            return
        self._outbox.append(PendingSideEffect(handler, event, attempt, error))

    async def _record(self, entry: SyncLogEntry) -> None:
        try:
            await self._sync_log.append(entry)
        except Exception:
            logger.exception("Could not write sync log entry for %s", entry.entity_type)

    # ------------------------------------------------------------------ #
    #  Handlers                                                           #
    # ------------------------------------------------------------------ #

    async def _service_name(self, booking: Booking) -> str:
        return await self._directory.get_service_name(booking.service_id) or DEFAULT_SERVICE_NAME

    async def _create_payment_order(self, event: BookingEvent) -> HandlerResult:
        booking = event.booking
        if booking.payment_order_ref:
            logger.debug("Booking %s already has order %s", booking.id, booking.payment_order_ref)
            return SKIPPED
        if not self._payment_orders.is_configured():
            logger.debug("Payment orders not configured; skipping booking %s", booking.id)
            return SKIPPED

        service_name = await self._service_name(booking)
        order_ref = await self._payment_orders.create_order(OrderRequest(
            booking_id=booking.id,
            service_name=service_name,
            amount_in_cents=booking.total_in_cents,
        ))
        updated = await self._store.update_booking(booking.id, {"payment_order_ref": order_ref})
        return HandlerResult(
            performed=True,
            remote_id=order_ref,
            message=f"Created order for booking #{booking.id}",
            payload={"amount_in_cents": booking.total_in_cents},
            booking=updated,
        )

    async def _notify(
        self,
        kind: NotificationKind,
        event: BookingEvent,
        build: Callable[[Booking, EmailRecipient, str], dict[str, Any]],
    ) -> HandlerResult:
        booking = event.booking
        recipient = await self._directory.get_email_recipient(booking.client_id)
        if recipient is None:
            logger.debug(
                "No email recipient for client %s; skipping %s", booking.client_id, kind.value
            )
            return SKIPPED
        service_name = await self._service_name(booking)
        await self._notifier.send(kind, recipient.email, build(booking, recipient, service_name))
        return HandlerResult(
            performed=True,
            message=f"Sent {kind.value} to {recipient.email}",
            payload={"to": recipient.email, "kind": kind.value},
        )

    async def _send_confirmation(self, event: BookingEvent) -> HandlerResult:
        return await self._notify(
            NotificationKind.CONFIRMATION,
            event,
            lambda b, r, service: {
                "clientName": r.first_name,
                "serviceName": service,
                "startsAt": format_starts_at(b.starts_at),
                "durationMinutes": b.duration_minutes,
                "totalInCents": b.total_in_cents,
                "location": b.location or settings.studio.default_location,
            },
        )

    async def _send_cancellation(self, event: BookingEvent) -> HandlerResult:
        def build(b: Booking, r: EmailRecipient, service: str) -> dict[str, Any]:
            data: dict[str, Any] = {
                "clientName": r.first_name,
                "serviceName": service,
                "bookingDate": format_starts_at(b.starts_at),
            }
            if event.cancellation_reason:
                data["cancellationReason"] = event.cancellation_reason
            return data

        return await self._notify(NotificationKind.CANCELLATION, event, build)

    async def _send_completion(self, event: BookingEvent) -> HandlerResult:
        return await self._notify(
            NotificationKind.COMPLETION,
            event,
            lambda b, r, service: {"clientName": r.first_name, "serviceName": service},
        )

    async def _send_no_show(self, event: BookingEvent) -> HandlerResult:
        return await self._notify(
            NotificationKind.NO_SHOW,
            event,
            lambda b, r, service: {
                "clientName": r.first_name,
                "serviceName": service,
                "bookingDate": format_booking_date(b.starts_at),
            },
        )

    async def _send_reschedule(self, event: BookingEvent) -> HandlerResult:
        old_starts_at = event.previous_starts_at
        return await self._notify(
            NotificationKind.RESCHEDULE,
            event,
            lambda b, r, service: {
                "clientName": r.first_name,
                "serviceName": service,
                "oldDateTime": format_starts_at(old_starts_at) if old_starts_at else "",
                "newDateTime": format_starts_at(b.starts_at),
                "oldStartsAt": old_starts_at.isoformat() if old_starts_at else None,
                "newStartsAt": b.starts_at.isoformat(),
            },
        )
