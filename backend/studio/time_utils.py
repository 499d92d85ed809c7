from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

# Two clocks are in play:
# - business-local wall clock (naive): appointment start/end, as the studio
#   schedules them
# - UTC (naive, canonical): audit timestamps such as created_at and paid_at


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string.

    - None / "" -> None
    - naive input ("2024-01-01 10:00:00", "2024-01-01T10:00") is returned
      as given: it is already business-local
    - "...Z" or "...+/-HH:MM" is returned aware; callers decide what an
      offset means for them

    Raises ValueError for anything else.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    return datetime.fromisoformat(text)


def parse_local_date(value: Optional[str]) -> Optional[date]:
    """"YYYY-MM-DD" -> date; None / "" -> None. Raises ValueError otherwise."""
    if value is None or not str(value).strip():
        return None
    return date.fromisoformat(str(value).strip())


def day_window(day: date) -> tuple[datetime, datetime]:
    """[00:00 of day, 00:00 of the next day) on the business-local clock."""
    start = datetime.combine(day, datetime.min.time())
    return start, start + timedelta(days=1)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes an audit timestamp to ISO-8601 with trailing 'Z'.
    Naive values are UTC by convention.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def to_local_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serializes a business-local (naive) datetime without a zone suffix."""
    if dt is None:
        return None
    return dt.replace(microsecond=0).isoformat()


def minutes(value: int) -> timedelta:
    return timedelta(minutes=int(value))
