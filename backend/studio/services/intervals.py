# Overview: Blocked time range value type and its overlap rule.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..errors import InvalidInput
from studio.time_utils import minutes


@dataclass(frozen=True)
class Interval:
    """
    Closed range [start, end] of business-local time.

    Two intervals overlap only when each starts strictly before the other
    ends, so back-to-back bookings that touch at an endpoint are allowed.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end < self.start:
            raise InvalidInput("Interval end must not precede its start")

    @classmethod
    def for_booking(cls, start: datetime, duration_minutes: int, travel_minutes: int = 0) -> "Interval":
        """Blocked interval for a booking: the buffer extends it backward only."""
        return cls(start - minutes(travel_minutes), visible_end(start, duration_minutes))

    def overlaps(self, other: "Interval") -> bool:
        return other.start < self.end and self.start < other.end

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def visible_end(start: datetime, duration_minutes: int) -> datetime:
    return start + minutes(duration_minutes)
