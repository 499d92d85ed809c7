# Overview: Booking transaction manager; creates, replaces and re-states appointments atomically.

"""
Appointment Service

WHY: A booking is only valid if the staff member can perform services, the
services exist and are active, and the staff member's blocked time does not
overlap another live appointment. All of that is checked and written inside
one unit of work so two concurrent requests cannot both win the same slot.

LIFECYCLE (status):
- pending -> completed | cancelled (direct writes, not re-validated against time)

payment_status is a separate axis derived from the payment ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from ..errors import Conflict, InvalidInput, NotFound
from ..models import Appointment, AppointmentLine, Client
from ..validation import (
    coerce_datetime,
    coerce_id,
    coerce_optional_id,
    coerce_travel_minutes,
    require_fields,
    require_payload,
)
from studio.time_utils import to_local_iso
from .availability_service import STATUS_CANCELLED, ensure_available
from .concurrency import lock_for_update, unit_of_work
from .intervals import Interval, visible_end
from .payment_service import (
    APPOINTMENT_LEDGER,
    list_payments,
    paid_total,
    payment_summary,
    refresh_payment_status,
)
from .service_resolver import parse_service_lines, resolve_services
from .staff_service import require_active_staff_with_role


# =============================================================================
# STATUS (CONSTANTS)
# =============================================================================

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"

VALID_STATUSES = [STATUS_PENDING, STATUS_COMPLETED, STATUS_CANCELLED]
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)


@dataclass(frozen=True)
class BookingRequest:
    client_id: int
    staff_id: int
    start: datetime
    travel_minutes: int
    services: list
    status: str | None = None


@dataclass(frozen=True)
class BookingResult:
    id: int
    start: datetime
    end: datetime
    blocked: Interval
    travel_minutes: int
    total_duration_minutes: int
    total_cents: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": to_local_iso(self.start),
            "end": to_local_iso(self.end),
            "blocked_start": to_local_iso(self.blocked.start),
            "blocked_end": to_local_iso(self.blocked.end),
            "travel_minutes": self.travel_minutes,
            "total_duration_minutes": self.total_duration_minutes,
            "total_cents": self.total_cents,
        }


def validate_status(status) -> str:
    if str(status) not in VALID_STATUSES:
        raise InvalidInput(f"Invalid status. Use: {', '.join(VALID_STATUSES)}")
    return str(status)


def _ensure_transition(appointment: Appointment, status: str) -> None:
    """Completed and cancelled are final; rewriting the same status is a no-op."""
    if appointment.status in TERMINAL_STATUSES and status != appointment.status:
        raise Conflict(
            f"Appointment is {appointment.status}; status can no longer change",
            details={"appointment_id": appointment.id, "status": appointment.status},
        )


def parse_booking_request(payload, actor_staff_id: int | None) -> BookingRequest:
    """
    Validate the request body before any transaction is opened.

    staff_id defaults to the authenticated staff member.
    """
    payload = require_payload(payload)
    require_fields(payload, "client_id", "start")
    services = payload.get("services")
    parse_service_lines(services)

    staff_id = coerce_optional_id(payload.get("staff_id"), "staff_id") or actor_staff_id
    if not staff_id:
        raise InvalidInput("Missing required fields: staff_id")

    status = payload.get("status")
    return BookingRequest(
        client_id=coerce_id(payload["client_id"], "client_id"),
        staff_id=staff_id,
        start=coerce_datetime(payload["start"], "start"),
        travel_minutes=coerce_travel_minutes(payload.get("travel_minutes")),
        services=services,
        status=validate_status(status) if status not in (None, "") else None,
    )


def _require_client(session, client_id: int) -> Client:
    client = session.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise NotFound("Client not found", details={"client_id": client_id})
    return client


def _plan_booking(session, request: BookingRequest, exclude_appointment_id: int | None = None):
    """Staff lock, service resolution and conflict check shared by create and update."""
    _require_client(session, request.client_id)
    require_active_staff_with_role(session, request.staff_id, current_app.config["THERAPIST_ROLE"])

    resolved = resolve_services(session, request.services)
    end = visible_end(request.start, resolved.total_duration_minutes)
    blocked = Interval.for_booking(request.start, resolved.total_duration_minutes, request.travel_minutes)

    ensure_available(session, request.staff_id, blocked, exclude_appointment_id=exclude_appointment_id)
    return resolved, end, blocked


def _insert_lines(session, appointment_id: int, resolved) -> None:
    for line in resolved.lines:
        session.add(AppointmentLine(
            appointment_id=appointment_id,
            service_id=line.service_id,
            applied_price_cents=line.applied_price_cents,
        ))


# =============================================================================
# WRITES
# =============================================================================

def create_appointment(session, payload, actor_staff_id: int | None = None) -> BookingResult:
    """
    Book an appointment.

    New appointments always start pending; a status in the body is ignored.

    Raises:
        InvalidInput: missing/malformed fields, staff not an active therapist,
            non-positive total
        NotFound: client or a service does not exist
        Conflict: inactive service or the staff member is already blocked
    """
    request = parse_booking_request(payload, actor_staff_id)

    with unit_of_work(session):
        resolved, end, blocked = _plan_booking(session, request)

        appointment = Appointment(
            client_id=request.client_id,
            staff_id=request.staff_id,
            starts_at=request.start,
            ends_at=end,
            travel_minutes=request.travel_minutes,
            total_cents=resolved.total_cents,
            status=STATUS_PENDING,
        )
        session.add(appointment)
        session.flush()

        _insert_lines(session, appointment.id, resolved)

        result = BookingResult(
            id=appointment.id,
            start=request.start,
            end=end,
            blocked=blocked,
            travel_minutes=request.travel_minutes,
            total_duration_minutes=resolved.total_duration_minutes,
            total_cents=resolved.total_cents,
        )

    current_app.logger.info(
        "Appointment %s booked for staff %s: %s -> %s (blocked from %s)",
        result.id, request.staff_id, result.start, result.end, result.blocked.start,
    )
    return result


def update_appointment(session, appointment_id: int, payload, actor_staff_id: int | None = None) -> BookingResult:
    """
    Replace an appointment: header fields and the full set of service lines.

    The conflict check ignores the appointment itself. Old lines are deleted
    and the new set inserted; payment_status is recomputed for the new total.
    """
    request = parse_booking_request(payload, actor_staff_id)

    with unit_of_work(session):
        appointment = lock_for_update(
            session.query(Appointment).filter(Appointment.id == appointment_id)
        ).first()
        if not appointment:
            raise NotFound("Appointment not found", details={"appointment_id": appointment_id})

        resolved, end, blocked = _plan_booking(session, request, exclude_appointment_id=appointment.id)

        appointment.client_id = request.client_id
        appointment.staff_id = request.staff_id
        appointment.starts_at = request.start
        appointment.ends_at = end
        appointment.travel_minutes = request.travel_minutes
        appointment.total_cents = resolved.total_cents
        if request.status:
            _ensure_transition(appointment, request.status)
            appointment.status = request.status

        session.query(AppointmentLine).filter(
            AppointmentLine.appointment_id == appointment.id
        ).delete(synchronize_session="fetch")
        _insert_lines(session, appointment.id, resolved)

        refresh_payment_status(session, APPOINTMENT_LEDGER, appointment)

        result = BookingResult(
            id=appointment.id,
            start=request.start,
            end=end,
            blocked=blocked,
            travel_minutes=request.travel_minutes,
            total_duration_minutes=resolved.total_duration_minutes,
            total_cents=resolved.total_cents,
        )

    current_app.logger.info("Appointment %s updated", result.id)
    return result


def set_appointment_status(session, appointment_id: int, status) -> Appointment:
    """
    Single-field status write; no time-based re-validation.

    Raises Conflict when the appointment is already completed or cancelled
    and the new status differs.
    """
    status = validate_status(status)

    with unit_of_work(session):
        appointment = lock_for_update(
            session.query(Appointment).filter(Appointment.id == appointment_id)
        ).first()
        if not appointment:
            raise NotFound("Appointment not found", details={"appointment_id": appointment_id})
        _ensure_transition(appointment, status)
        appointment.status = status

    current_app.logger.info("Appointment %s status set to %s", appointment_id, status)
    return appointment


# =============================================================================
# QUERIES
# =============================================================================

def list_appointments(
    session,
    *,
    staff_id: int | None = None,
    status: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[Appointment]:
    query = session.query(Appointment)
    if staff_id is not None:
        query = query.filter(Appointment.staff_id == staff_id)
    if status:
        query = query.filter(Appointment.status == validate_status(status))
    if date_from is not None:
        query = query.filter(Appointment.starts_at >= date_from)
    if date_to is not None:
        query = query.filter(Appointment.starts_at < date_to)
    return query.order_by(Appointment.starts_at.asc(), Appointment.id.asc()).all()


def get_appointment_detail(session, appointment_id: int) -> dict:
    appointment = session.query(Appointment).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise NotFound("Appointment not found", details={"appointment_id": appointment_id})

    lines = (
        session.query(AppointmentLine)
        .filter(AppointmentLine.appointment_id == appointment_id)
        .order_by(AppointmentLine.id)
        .all()
    )
    payments = list_payments(session, APPOINTMENT_LEDGER, appointment_id)
    paid = paid_total(session, APPOINTMENT_LEDGER, appointment_id)

    return {
        "appointment": appointment.to_dict(),
        "services": [line.to_dict() for line in lines],
        "payments": [p.to_dict() for p in payments],
        "payment_summary": payment_summary(appointment.total_cents, paid),
    }
