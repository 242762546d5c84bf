"""
Common Value Objects

Value objects used across domains:
- TimeRange: A same-day time-of-day interval (start inclusive, end exclusive)
"""

from dataclasses import dataclass
from datetime import time

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time range value object

    Represents a slot from ``start`` (inclusive) to ``end`` (exclusive)
    on a single calendar day. Overlap and duration rules live in
    ``apps.bookings.domain.policy``.
    """
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time ({self.start}) must be before end time ({self.end})")

    def __str__(self):
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"

    def __repr__(self):
        return f"TimeRange({self.start.strftime('%H:%M')}, {self.end.strftime('%H:%M')})"
