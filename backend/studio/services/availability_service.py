# Overview: Decides whether a staff member is free for a blocked interval.

"""
Availability rules

- A staff member is blocked from (start - travel_minutes) until end for every
  appointment that is not cancelled.
- A requested blocked interval conflicts with an existing one when they
  overlap under Interval.overlaps (touching endpoints do not conflict).
- Checks run inside the caller's unit of work, after the staff row has been
  locked, so the check and the subsequent write cannot interleave with a
  competing booking for the same staff member.
"""

from __future__ import annotations

from ..errors import Conflict
from ..models import Appointment
from ..validation import MAX_TRAVEL_MINUTES
from studio.time_utils import minutes
from .concurrency import lock_for_update
from .intervals import Interval

STATUS_CANCELLED = "cancelled"


def blocked_interval_of(appointment: Appointment) -> Interval:
    return Interval(appointment.blocked_starts_at, appointment.ends_at)


def find_conflict(
    session,
    staff_id: int,
    interval: Interval,
    exclude_appointment_id: int | None = None,
) -> Appointment | None:
    """
    Return the first non-cancelled appointment of staff_id whose blocked
    interval overlaps the requested one, or None.

    The SQL filter narrows candidates by the visible window widened by the
    largest allowed travel buffer; the exact buffer-aware test is the
    Interval overlap rule.
    """
    query = session.query(Appointment).filter(
        Appointment.staff_id == staff_id,
        Appointment.status != STATUS_CANCELLED,
        Appointment.ends_at > interval.start,
        Appointment.starts_at < interval.end + minutes(MAX_TRAVEL_MINUTES),
    )
    if exclude_appointment_id is not None:
        query = query.filter(Appointment.id != exclude_appointment_id)

    candidates = lock_for_update(query.order_by(Appointment.starts_at, Appointment.id)).all()
    for candidate in candidates:
        if blocked_interval_of(candidate).overlaps(interval):
            return candidate
    return None


def ensure_available(
    session,
    staff_id: int,
    interval: Interval,
    exclude_appointment_id: int | None = None,
) -> None:
    """
    Raise Conflict if the staff member is already blocked during interval.

    The conflicting appointment is returned in details["conflict"].
    """
    conflict = find_conflict(session, staff_id, interval, exclude_appointment_id)
    if conflict is not None:
        raise Conflict(
            "Time slot not available (possible double booking)",
            details={"conflict": conflict.to_dict()},
        )
