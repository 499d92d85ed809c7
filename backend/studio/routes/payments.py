# Overview: Flask API routes for sale and appointment payments.

"""
Payment API Routes

Both order kinds go through payment_service.record_payment; only the ledger
descriptor and the required role differ.

Request body (POST):
{
    "order_id": 12,
    "amount_cents": 10000,
    "method": "cash" | "debit" | "credit" | "transfer"
}

Returns:
    201: {order_id, payment_id, total_cents, paid_cents, payment_status}
"""

from flask import Blueprint, request, jsonify

from ..extensions import db
from ..services import payment_service
from ..services.payment_service import APPOINTMENT_LEDGER, SALE_LEDGER
from ..decorators import require_auth, require_role
from ..validation import require_payload


sale_payments_bp = Blueprint("sale_payments", __name__, url_prefix="/api/sale-payments")
appointment_payments_bp = Blueprint("appointment_payments", __name__, url_prefix="/api/appointment-payments")


def _record(ledger):
    data = require_payload(request.get_json(silent=True))
    result = payment_service.record_payment(
        db.session,
        ledger,
        data.get("order_id"),
        data.get("amount_cents"),
        data.get("method"),
    )
    return jsonify({"message": "Payment recorded", **result.to_dict()}), 201


def _list(ledger, order_id: int):
    payments = payment_service.list_payments(db.session, ledger, order_id)
    return jsonify({"payments": [p.to_dict() for p in payments]}), 200


@sale_payments_bp.post("")
@require_auth
@require_role("SELLER_ROLE", "ADMIN_ROLE")
def add_sale_payment_route():
    return _record(SALE_LEDGER)


@sale_payments_bp.get("/<int:sale_id>")
@require_auth
@require_role("SELLER_ROLE", "ADMIN_ROLE")
def list_sale_payments_route(sale_id: int):
    return _list(SALE_LEDGER, sale_id)


@appointment_payments_bp.post("")
@require_auth
@require_role("THERAPIST_ROLE", "ADMIN_ROLE")
def add_appointment_payment_route():
    return _record(APPOINTMENT_LEDGER)


@appointment_payments_bp.get("/<int:appointment_id>")
@require_auth
@require_role("THERAPIST_ROLE", "ADMIN_ROLE")
def list_appointment_payments_route(appointment_id: int):
    return _list(APPOINTMENT_LEDGER, appointment_id)
