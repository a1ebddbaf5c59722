"""
Booking record store contract and an in-memory implementation.

In production this is the bookings table behind the ORM. The engine only
needs single-row keyed CRUD; there are no cross-row transactions.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from studio_engine.errors import StaleBookingError
from studio_engine.schemas.booking_schema import Booking

logger = logging.getLogger(__name__)


class BookingStore(Protocol):
    """Keyed CRUD over bookings."""

    async def get_booking(self, booking_id: int) -> Optional[Booking]: ...

    async def insert_booking(self, fields: dict[str, Any]) -> Booking: ...

    async def update_booking(
        self,
        booking_id: int,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Booking: ...

    async def delete_booking(self, booking_id: int) -> bool: ...

    async def list_bookings(self) -> list[Booking]: ...


class InMemoryBookingStore:
    """Dict-backed store. Ids come from this instance's own sequence."""

    def __init__(self) -> None:
        self._rows: dict[int, Booking] = {}
        self._last_id = 0

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        return self._rows.get(booking_id)

    async def insert_booking(self, fields: dict[str, Any]) -> Booking:
        self._last_id += 1
        now = datetime.now(timezone.utc)
        booking = Booking(
            **{**fields, "id": self._last_id, "version": 1, "created_at": now, "updated_at": now}
        )
        self._rows[booking.id] = booking
        logger.debug("Booking %s inserted with status %s", booking.id, booking.status.value)
        return booking

    async def update_booking(
        self,
        booking_id: int,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Booking:
        """Apply ``fields`` to a row and bump its version.

        Raises:
            KeyError: If the booking does not exist.
            StaleBookingError: If ``expected_version`` no longer matches.
        """
        current = self._rows.get(booking_id)
        if current is None:
            raise KeyError(f"Booking {booking_id} not found")
        if expected_version is not None and current.version != expected_version:
            raise StaleBookingError(booking_id, expected_version, current.version)

        updated = Booking.model_validate({
            **current.model_dump(),
            **fields,
            "id": booking_id,
            "version": current.version + 1,
            "updated_at": datetime.now(timezone.utc),
        })
        self._rows[booking_id] = updated
        return updated

    async def delete_booking(self, booking_id: int) -> bool:
        return self._rows.pop(booking_id, None) is not None

    async def list_bookings(self) -> list[Booking]:
        return sorted(self._rows.values(), key=lambda b: b.starts_at)

    def reset(self) -> None:
        """Clear all rows. Used by test fixtures for isolation."""
        self._rows.clear()
        self._last_id = 0
