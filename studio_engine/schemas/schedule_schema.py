"""Business hours, closures, lunch break and resolved day availability."""

from datetime import date, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ClosureType(str, Enum):
    DAY_OFF = "day_off"
    VACATION = "vacation"


class GridBlockKind(str, Enum):
    CLOSED = "closed"
    LUNCH = "lunch"


class BusinessHourRule(BaseModel):
    """One weekly recurring rule. ``staff_id`` of None means studio-wide."""

    day_of_week: int = Field(ge=1, le=7)
    is_open: bool = True
    opens_at: Optional[time] = None
    closes_at: Optional[time] = None
    staff_id: Optional[str] = None

    @model_validator(mode="after")
    def _hours_match_open_flag(self) -> "BusinessHourRule":
        if self.is_open:
            if self.opens_at is None or self.closes_at is None:
                raise ValueError("an open day needs both opens_at and closes_at")
            if self.opens_at >= self.closes_at:
                raise ValueError("opens_at must be before closes_at")
        return self


class ClosureRange(BaseModel):
    """A blocked date or vacation range, inclusive on both ends."""

    type: ClosureType
    start_date: date
    end_date: date
    label: Optional[str] = None
    staff_id: Optional[str] = None
    id: Optional[int] = None

    @model_validator(mode="after")
    def _ordered_dates(self) -> "ClosureRange":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, other: "ClosureRange") -> bool:
        return self.start_date <= other.end_date and other.start_date <= self.end_date

    @property
    def display_label(self) -> str:
        if self.label and self.label.strip():
            return self.label
        return "Vacation" if self.type == ClosureType.VACATION else "Day Off"


class LunchBreak(BaseModel):
    """Daily lunch window. Contributes nothing while disabled."""

    enabled: bool = False
    start: time = time(12, 0)
    end: time = time(13, 0)


class DayAvailability(BaseModel):
    """Resolved open/closed state for one calendar date. Never persisted."""

    model_config = ConfigDict(frozen=True)

    date: date
    is_open: bool
    opens_at: Optional[time] = None
    closes_at: Optional[time] = None
    is_blocked: bool = False
    block_label: Optional[str] = None
    lunch_start: Optional[time] = None
    lunch_end: Optional[time] = None


class GridBlock(BaseModel):
    """An unavailable stretch of a day column, in minutes since midnight."""

    model_config = ConfigDict(frozen=True)

    start_minute: int
    end_minute: int
    kind: GridBlockKind
    label: Optional[str] = None
