"""
Finite state machine for booking status changes.

Bookings move forward through pending -> confirmed -> in_progress ->
completed, and can be cancelled or marked no-show from any non-terminal
status. Every permitted move is listed in TRANSITIONS and checked before
anything is persisted. The machine computes the new record and the
fields to write; it performs no I/O and fires no side effects.

Usage:
    sm = BookingStateMachine()
    result = sm.transition(booking, BookingStatus.CONFIRMED)
    await store.update_booking(booking.id, result.changes, booking.version)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from studio_engine.config import settings
from studio_engine.errors import InvalidTransitionError
from studio_engine.schemas.booking_schema import (
    Booking,
    BookingInput,
    BookingStatus,
    BookingUpdate,
    StatusChangeMetadata,
)

logger = logging.getLogger(__name__)

# Lifecycle timestamp written when a booking enters the status.
STAMP_FIELDS: dict[BookingStatus, str] = {
    BookingStatus.CONFIRMED: "confirmed_at",
    BookingStatus.COMPLETED: "completed_at",
    BookingStatus.CANCELLED: "cancelled_at",
}

EDITABLE_FIELDS = (
    "client_id", "service_id", "staff_id", "starts_at", "duration_minutes",
    "total_in_cents", "location", "client_notes", "staff_notes",
)

# Optional fields an edit leaves untouched when it sends None.
KEEP_WHEN_NONE = frozenset({"staff_id", "location", "client_notes", "staff_notes"})


@dataclass(frozen=True)
class Transition:
    """A single permitted status change."""
    from_status: BookingStatus
    to_status: BookingStatus


@dataclass
class TransitionResult:
    """Outcome of applying a status change or edit to a booking in memory."""
    booking: Booking
    previous_status: BookingStatus
    changes: dict[str, Any] = field(default_factory=dict)

    @property
    def status_changed(self) -> bool:
        return self.booking.status != self.previous_status


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStateMachine:
    """
    Validates booking status changes and stamps lifecycle timestamps.

    Re-requesting the current status is always accepted as "no status
    change", so field edits on a finished booking still go through. With
    ``strict=False`` every move is accepted.
    """

    TRANSITIONS: list[Transition] = [
        # --- Forward progress ---
        Transition(BookingStatus.PENDING, BookingStatus.CONFIRMED),
        Transition(BookingStatus.PENDING, BookingStatus.IN_PROGRESS),
        Transition(BookingStatus.PENDING, BookingStatus.COMPLETED),
        Transition(BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS),
        Transition(BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED),

        # --- Cancellation ---
        Transition(BookingStatus.PENDING, BookingStatus.CANCELLED),
        Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED),

        # --- No-show ---
        Transition(BookingStatus.PENDING, BookingStatus.NO_SHOW),
        Transition(BookingStatus.CONFIRMED, BookingStatus.NO_SHOW),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.NO_SHOW),
    ]

    def __init__(
        self,
        strict: Optional[bool] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.strict = settings.lifecycle.strict_transitions if strict is None else strict
        self._clock = clock

    @staticmethod
    def initial_status(admin_created: bool = True) -> BookingStatus:
        """Admin-created bookings start confirmed; self-service requests start pending."""
        return BookingStatus.CONFIRMED if admin_created else BookingStatus.PENDING

    def allowed_targets(self, current: BookingStatus) -> list[BookingStatus]:
        """Statuses reachable from ``current`` (excluding staying put)."""
        if not self.strict:
            return [s for s in BookingStatus if s != current]
        return [t.to_status for t in self.TRANSITIONS if t.from_status == current]

    def can_transition(self, current: BookingStatus, target: BookingStatus) -> bool:
        return current == target or target in self.allowed_targets(current)

    def new_booking_fields(self, data: BookingInput, admin_created: bool = True) -> dict[str, Any]:
        """Insert payload for a new booking, never in a terminal status."""
        status = self.initial_status(admin_created)
        fields = data.model_dump()
        fields["status"] = status
        stamp = STAMP_FIELDS.get(status)
        if stamp:
            fields[stamp] = self._clock()
        return fields

    def transition(
        self,
        booking: Booking,
        target: BookingStatus,
        metadata: Optional[StatusChangeMetadata] = None,
    ) -> TransitionResult:
        """
        Apply a status change to a booking in memory.

        Args:
            booking: The currently persisted booking.
            target: The requested status.
            metadata: Optional cancellation reason.

        Returns:
            TransitionResult with the updated copy and the fields to persist.

        Raises:
            InvalidTransitionError: If the move is not permitted.
        """
        self._check(booking.status, target)
        changes = self._status_changes(booking, target, metadata)
        return self._result(booking, changes)

    def apply_update(
        self,
        booking: Booking,
        update: BookingUpdate,
        metadata: Optional[StatusChangeMetadata] = None,
    ) -> TransitionResult:
        """Full-record edit with the same legality and stamp rules as transition().

        Optional fields sent as None keep their stored value. A cancellation
        reason comes from ``metadata`` or, failing that, from the update.
        """
        self._check(booking.status, update.status)
        changes = {
            name: value
            for name, value in update.model_dump(include=set(EDITABLE_FIELDS)).items()
            if getattr(booking, name) != value
            and not (value is None and name in KEEP_WHEN_NONE)
        }
        if metadata is None and update.cancellation_reason:
            metadata = StatusChangeMetadata(cancellation_reason=update.cancellation_reason)
        changes.update(self._status_changes(booking, update.status, metadata))
        return self._result(booking, changes)

    def _check(self, current: BookingStatus, target: BookingStatus) -> None:
        if not self.can_transition(current, target):
            raise InvalidTransitionError(
                current.value, target.value, [s.value for s in self.allowed_targets(current)]
            )

    def _status_changes(
        self,
        booking: Booking,
        target: BookingStatus,
        metadata: Optional[StatusChangeMetadata],
    ) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        entering = booking.status != target
        if entering:
            changes["status"] = target

        stamp = STAMP_FIELDS.get(target)
        if stamp and (entering or getattr(booking, stamp) is None):
            changes[stamp] = self._clock()

        if target == BookingStatus.CANCELLED and metadata and metadata.cancellation_reason:
            changes["cancellation_reason"] = metadata.cancellation_reason

        if entering:
            logger.debug(
                "Booking %s status: %s -> %s", booking.id, booking.status.value, target.value
            )
        return changes

    @staticmethod
    def _result(booking: Booking, changes: dict[str, Any]) -> TransitionResult:
        return TransitionResult(
            booking=booking.model_copy(update=changes),
            previous_status=booking.status,
            changes=changes,
        )
