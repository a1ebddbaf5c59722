"""Calendar display models projected from bookings."""

from datetime import date, time
from typing import Optional

from pydantic import BaseModel, Field

from studio_engine.utils import time_to_minutes


class CalendarEvent(BaseModel):
    """A timed block on the calendar grid."""
    id: int
    title: str
    category: str = "lash"
    date: date
    start_time: time
    duration_minutes: int = Field(gt=0)
    staff: Optional[str] = None
    client: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    booking_id: Optional[int] = None
    status: Optional[str] = None

    @property
    def start_minute(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.duration_minutes


class PlacedEvent(CalendarEvent):
    """A calendar event with its side-by-side column assignment."""
    column_index: int
    total_columns: int
