"""Booking data models and lifecycle status."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class BookingStatus(str, Enum):
    """Every status a booking can be in."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
)


def _require_aware(value: datetime) -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise ValueError("starts_at must be timezone-aware")
    return value


class Booking(BaseModel):
    """A persisted appointment as returned by the record store."""

    id: int
    client_id: str
    staff_id: Optional[str] = None
    service_id: int
    status: BookingStatus
    starts_at: datetime
    duration_minutes: int = Field(gt=0)
    total_in_cents: int = Field(ge=0)
    location: Optional[str] = None
    client_notes: Optional[str] = None
    staff_notes: Optional[str] = None
    payment_order_ref: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.duration_minutes)


class BookingInput(BaseModel):
    """Validated payload for creating or editing a booking.

    ``duration_minutes`` and ``total_in_cents`` are snapshots taken by the
    caller from the service catalog at booking time; the engine stores them
    as given and never recomputes them.
    """

    client_id: str
    service_id: int = Field(gt=0)
    staff_id: Optional[str] = None
    starts_at: datetime
    duration_minutes: int = Field(gt=0)
    total_in_cents: int = Field(ge=0)
    location: Optional[str] = None
    client_notes: Optional[str] = None
    staff_notes: Optional[str] = None

    @field_validator("client_id")
    @classmethod
    def _client_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("client_id is required")
        return value.strip()

    @field_validator("staff_id")
    @classmethod
    def _blank_staff_is_unassigned(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("starts_at")
    @classmethod
    def _starts_at_aware(cls, value: datetime) -> datetime:
        return _require_aware(value)


class BookingUpdate(BookingInput):
    """Full-record edit: every editable field plus the target status.

    ``cancellation_reason`` is only recorded when the edit cancels the booking.
    """

    status: BookingStatus
    cancellation_reason: Optional[str] = None


class StatusChangeMetadata(BaseModel):
    """Optional details accompanying a status change."""

    cancellation_reason: Optional[str] = None
