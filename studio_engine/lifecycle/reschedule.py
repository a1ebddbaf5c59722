"""Reschedule detection for booking edits."""

from datetime import datetime
from typing import Optional


def should_notify_reschedule(
    old_starts_at: Optional[datetime], new_starts_at: Optional[datetime]
) -> bool:
    """True when an edit moved the booking's start time.

    Compared at full precision: a one-microsecond difference counts.
    Only meaningful for edits; a booking with no prior start was created,
    not rescheduled.
    """
    if old_starts_at is None or new_starts_at is None:
        return False
    return old_starts_at != new_starts_at
