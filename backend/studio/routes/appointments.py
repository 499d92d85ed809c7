# Overview: Flask API routes for appointments; parses input and returns JSON responses.

"""
Appointment API routes

Access: therapist, admin
Errors are raised as StudioError subclasses and rendered by the app-level
handlers as {"message": ..., ...} with 400/404/409/500.
"""

from flask import Blueprint, request, jsonify, g

from ..extensions import db
from ..services import appointment_service
from ..validation import coerce_date, coerce_datetime, coerce_optional_id, require_payload
from studio.time_utils import day_window
from ..decorators import require_auth, require_role


appointments_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


@appointments_bp.get("")
@require_auth
@require_role("THERAPIST_ROLE", "ADMIN_ROLE")
def list_appointments_route():
    """
    List appointments ordered by start.

    Query params: staff_id, status, from, to (ISO-8601, start >= from, start < to)
    or date (YYYY-MM-DD, the whole business day; takes precedence over from/to)
    """
    args = request.args
    if args.get("date"):
        date_from, date_to = day_window(coerce_date(args["date"], "date"))
    else:
        date_from = coerce_datetime(args["from"], "from") if args.get("from") else None
        date_to = coerce_datetime(args["to"], "to") if args.get("to") else None

    appointments = appointment_service.list_appointments(
        db.session,
        staff_id=coerce_optional_id(args.get("staff_id"), "staff_id"),
        status=args.get("status") or None,
        date_from=date_from,
        date_to=date_to,
    )
    return jsonify({"appointments": [a.to_dict() for a in appointments]}), 200


@appointments_bp.get("/<int:appointment_id>")
@require_auth
@require_role("THERAPIST_ROLE", "ADMIN_ROLE")
def get_appointment_route(appointment_id: int):
    """Appointment with its services, payments and payment summary."""
    detail = appointment_service.get_appointment_detail(db.session, appointment_id)
    return jsonify(detail), 200


@appointments_bp.post("")
@require_auth
@require_role("THERAPIST_ROLE", "ADMIN_ROLE")
def create_appointment_route():
    """
    Book an appointment.

    Request body:
    {
        "client_id": 3,
        "staff_id": 2,  (optional, defaults to the caller)
        "start": "2024-01-01 10:00:00",
        "travel_minutes": 15,  (optional)
        "services": [{"service_id": 1, "applied_price_cents": 2500000}]
    }

    Returns:
        201: {id, start, end, blocked_start, blocked_end, travel_minutes,
              total_duration_minutes, total_cents}
    """
    result = appointment_service.create_appointment(db.session, request.get_json(silent=True), g.staff_id)
    return jsonify({"message": "Appointment booked", **result.to_dict()}), 201


@appointments_bp.put("/<int:appointment_id>")
@require_auth
@require_role("THERAPIST_ROLE", "ADMIN_ROLE")
def update_appointment_route(appointment_id: int):
    """Full replace: same body as create, plus optional status."""
    result = appointment_service.update_appointment(
        db.session, appointment_id, request.get_json(silent=True), g.staff_id
    )
    return jsonify({"message": "Appointment updated", **result.to_dict()}), 200


@appointments_bp.patch("/<int:appointment_id>/status")
@require_auth
@require_role("THERAPIST_ROLE", "ADMIN_ROLE")
def set_status_route(appointment_id: int):
    """Body: {"status": "pending" | "completed" | "cancelled"}"""
    data = require_payload(request.get_json(silent=True))
    appointment = appointment_service.set_appointment_status(db.session, appointment_id, data.get("status"))
    return jsonify({
        "message": "Status updated",
        "id": appointment_id,
        "status": appointment.status,
    }), 200
