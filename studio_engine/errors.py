"""Exception taxonomy for the booking engine.

Validation and conflict errors reach the caller. Side-effect failures
never do: the orchestrator catches them and records them in the sync log.
"""

from typing import Iterable, Optional


class BookingEngineError(Exception):
    """Base class for every error raised by the engine."""


class BookingValidationError(BookingEngineError):
    """Malformed or disallowed input, rejected before any persistence."""


class BookingNotFoundError(BookingValidationError):
    """The referenced booking does not exist."""

    def __init__(self, booking_id: int) -> None:
        super().__init__(f"Booking {booking_id} not found.")
        self.booking_id = booking_id


class InvalidTransitionError(BookingValidationError):
    """Raised when a status change is not permitted from the current status."""

    def __init__(self, current: str, target: str, allowed: Iterable[str]) -> None:
        allowed_list = sorted(allowed)
        super().__init__(
            f"No valid transition from '{current}' to '{target}'. "
            f"Allowed targets: {allowed_list}"
        )
        self.current = current
        self.target = target
        self.allowed = allowed_list


class StaleBookingError(BookingEngineError):
    """A write was based on an outdated version of the booking."""

    def __init__(self, booking_id: int, expected: int, actual: Optional[int]) -> None:
        super().__init__(
            f"Booking {booking_id} was modified concurrently "
            f"(expected version {expected}, found {actual})."
        )
        self.booking_id = booking_id
        self.expected = expected
        self.actual = actual


class ScheduleValidationError(BookingEngineError):
    """Inconsistent business-hour or closure data."""


class ClosureOverlapError(ScheduleValidationError):
    """A new closure overlaps an existing one in the same staff scope."""
