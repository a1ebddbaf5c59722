"""
Booking use cases invoked by the dashboard's request handlers.

Each call is one unit of work: validate, persist, then hand the committed
change to the side-effect orchestrator. Validation and persistence errors
propagate; side-effect errors never do.
"""

from typing import Any, Optional, Union

from pydantic import ValidationError

from studio_engine.errors import BookingNotFoundError, BookingValidationError, StaleBookingError
from studio_engine.integrations.record_store import BookingStore
from studio_engine.lifecycle.orchestrator import BookingSideEffectOrchestrator, TransitionContext
from studio_engine.lifecycle.state_machine import BookingStateMachine
from studio_engine.logging_context import get_request_logger
from studio_engine.schemas.booking_schema import (
    Booking,
    BookingInput,
    BookingStatus,
    BookingUpdate,
    StatusChangeMetadata,
)

logger = get_request_logger(__name__)


def _validation_error(exc: ValidationError) -> BookingValidationError:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
        for err in exc.errors()
    )
    return BookingValidationError(f"Invalid booking data - {problems}")


def _require_id(booking_id: Any) -> int:
    if isinstance(booking_id, bool) or not isinstance(booking_id, int) or booking_id < 1:
        raise BookingValidationError(f"Invalid booking id: {booking_id!r}")
    return booking_id


def _coerce_status(status: Union[BookingStatus, str]) -> BookingStatus:
    try:
        return BookingStatus(status)
    except ValueError:
        valid = [s.value for s in BookingStatus]
        raise BookingValidationError(
            f"Unknown booking status {status!r}. Valid: {valid}"
        ) from None


class BookingService:
    """Create, edit, change status of and delete bookings."""

    def __init__(
        self,
        store: BookingStore,
        orchestrator: BookingSideEffectOrchestrator,
        state_machine: Optional[BookingStateMachine] = None,
    ) -> None:
        self._store = store
        self._orchestrator = orchestrator
        self._state_machine = state_machine or BookingStateMachine()

    async def get_booking(self, booking_id: int) -> Booking:
        booking = await self._store.get_booking(_require_id(booking_id))
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    async def create_booking(
        self,
        data: Union[BookingInput, dict[str, Any]],
        admin_created: bool = True,
    ) -> Booking:
        """Insert a new booking. Admin-created bookings start confirmed."""
        booking_input = self._coerce(BookingInput, data)
        fields = self._state_machine.new_booking_fields(booking_input, admin_created)
        booking = await self._store.insert_booking(fields)
        logger.info(
            "Booking %s created (%s) for client %s at %s",
            booking.id, booking.status.value, booking.client_id, booking.starts_at.isoformat(),
        )
        report = await self._orchestrator.on_create(booking)
        return report.booking

    async def update_booking_status(
        self,
        booking_id: int,
        status: Union[BookingStatus, str],
        cancellation_reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Booking:
        """
        Move a booking to a new status.

        Raises:
            BookingValidationError: Bad id or status, unknown booking, or a
                transition the state machine does not permit.
            StaleBookingError: The booking changed since ``expected_version``.
        """
        target = _coerce_status(status)
        booking = await self.get_booking(booking_id)
        self._check_version(booking, expected_version)

        result = self._state_machine.transition(
            booking, target, StatusChangeMetadata(cancellation_reason=cancellation_reason)
        )
        if not result.changes:
            logger.debug("Booking %s already %s; nothing to write", booking.id, target.value)
            return booking

        persisted = await self._store.update_booking(
            booking.id, result.changes, expected_version=booking.version
        )
        logger.info(
            "Booking %s status %s -> %s",
            booking.id, result.previous_status.value, persisted.status.value,
        )
        report = await self._orchestrator.on_transition(
            persisted,
            persisted.status,
            TransitionContext(
                previous_status=result.previous_status,
                cancellation_reason=cancellation_reason,
            ),
        )
        return report.booking

    async def update_booking(
        self,
        booking_id: int,
        data: Union[BookingUpdate, dict[str, Any]],
        expected_version: Optional[int] = None,
    ) -> Booking:
        """Full-record edit. A moved start time triggers a reschedule notice."""
        update = self._coerce(BookingUpdate, data)
        booking = await self.get_booking(booking_id)
        self._check_version(booking, expected_version)

        result = self._state_machine.apply_update(
            booking, update, StatusChangeMetadata(cancellation_reason=update.cancellation_reason)
        )
        if not result.changes:
            return booking

        persisted = await self._store.update_booking(
            booking.id, result.changes, expected_version=booking.version
        )
        logger.info("Booking %s updated: %s", booking.id, sorted(result.changes))
        report = await self._orchestrator.on_update(booking, persisted)
        return report.booking

    async def delete_booking(self, booking_id: int) -> bool:
        """Remove a booking outright. Not a lifecycle transition; no side effects."""
        deleted = await self._store.delete_booking(_require_id(booking_id))
        if deleted:
            logger.info("Booking %s deleted", booking_id)
        return deleted

    @staticmethod
    def _check_version(booking: Booking, expected_version: Optional[int]) -> None:
        if expected_version is not None and expected_version != booking.version:
            raise StaleBookingError(booking.id, expected_version, booking.version)

    @staticmethod
    def _coerce(model: type, data: Any) -> Any:
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise _validation_error(exc) from exc
