from studio_engine.scheduling.availability import (
    closed_blocks,
    resolve_day_availability,
    resolve_range,
)
from studio_engine.scheduling.overlap_layout import layout_by_date, layout_day

__all__ = [
    "resolve_day_availability",
    "resolve_range",
    "closed_blocks",
    "layout_day",
    "layout_by_date",
]
