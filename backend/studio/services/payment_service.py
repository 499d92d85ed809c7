# Overview: Service-layer operations for payments; append-only ledger per order.

"""
Payment Ledger

WHY: Sales and appointments are paid in one or more installments. Every
installment is an append-only record; the order's payment_status is a cached
projection recomputed from the ledger, never independent truth.

DESIGN PRINCIPLES:
- One implementation for both order kinds (OrderLedger describes the tables)
- Lock the order row, insert, aggregate, write back: one unit of work
- paid >= total -> paid, 0 < paid < total -> partial, otherwise pending
- No deduplication key: resubmitting a payment records a second entry
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy import func

from ..errors import InvalidInput, NotFound
from ..models import Appointment, AppointmentPayment, Sale, SalePayment
from ..validation import coerce_amount_cents, coerce_id
from studio.time_utils import utcnow
from .concurrency import lock_for_update, unit_of_work


# =============================================================================
# PAYMENT METHODS / STATUS (CONSTANTS)
# =============================================================================

METHOD_CASH = "cash"
METHOD_DEBIT = "debit"
METHOD_CREDIT = "credit"
METHOD_TRANSFER = "transfer"

VALID_PAYMENT_METHODS = [
    METHOD_CASH,
    METHOD_DEBIT,
    METHOD_CREDIT,
    METHOD_TRANSFER,
]

PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_PARTIAL = "partial"
PAYMENT_STATUS_PAID = "paid"


@dataclass(frozen=True)
class OrderLedger:
    """Tables behind one kind of payable order."""
    label: str
    order_model: type
    payment_model: type
    payment_fk: str

    def payment_order_column(self):
        return getattr(self.payment_model, self.payment_fk)


SALE_LEDGER = OrderLedger("Sale", Sale, SalePayment, "sale_id")
APPOINTMENT_LEDGER = OrderLedger("Appointment", Appointment, AppointmentPayment, "appointment_id")


@dataclass(frozen=True)
class PaymentResult:
    order_id: int
    payment_id: int
    total_cents: int
    paid_cents: int
    payment_status: str

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "payment_id": self.payment_id,
            "total_cents": self.total_cents,
            "paid_cents": self.paid_cents,
            "payment_status": self.payment_status,
        }


# =============================================================================
# DERIVATION
# =============================================================================

def derive_payment_status(total_cents: int, paid_cents: int) -> str:
    if paid_cents >= total_cents:
        return PAYMENT_STATUS_PAID
    if paid_cents > 0:
        return PAYMENT_STATUS_PARTIAL
    return PAYMENT_STATUS_PENDING


def payment_summary(total_cents: int, paid_cents: int) -> dict:
    return {
        "total_cents": total_cents,
        "paid_cents": paid_cents,
        "balance_cents": max(0, total_cents - paid_cents),
    }


def paid_total(session, ledger: OrderLedger, order_id: int) -> int:
    paid = session.query(
        func.coalesce(func.sum(ledger.payment_model.amount_cents), 0)
    ).filter(ledger.payment_order_column() == order_id).scalar()
    return int(paid or 0)


def refresh_payment_status(session, ledger: OrderLedger, order) -> tuple[int, str]:
    """
    Recompute and cache payment_status on an already-locked order row.

    Called after a payment is appended and whenever an order's total is
    rewritten, inside the caller's unit of work.
    """
    paid = paid_total(session, ledger, order.id)
    order.payment_status = derive_payment_status(order.total_cents, paid)
    return paid, order.payment_status


# =============================================================================
# PAYMENT CREATION
# =============================================================================

def parse_payment_request(payload: dict) -> tuple[int, int, str]:
    """Validate {order_id, amount_cents, method}; runs before any transaction."""
    missing = [f for f in ("order_id", "amount_cents", "method") if payload.get(f) in (None, "")]
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

    order_id = coerce_id(payload["order_id"], "order_id")
    amount_cents = coerce_amount_cents(payload["amount_cents"], "amount_cents", allow_zero=False)

    method = str(payload["method"]).strip().lower()
    if method not in VALID_PAYMENT_METHODS:
        raise InvalidInput(
            f"Invalid payment method: {payload['method']}. Must be one of {VALID_PAYMENT_METHODS}"
        )
    return order_id, amount_cents, method


def record_payment(session, ledger: OrderLedger, order_id, amount_cents, method) -> PaymentResult:
    """
    Append a payment to an order and recompute its payment status.

    Args:
        session: scoped SQLAlchemy session (unit of work opened here)
        ledger: SALE_LEDGER or APPOINTMENT_LEDGER
        order_id: sale or appointment id
        amount_cents: amount paid (> 0)
        method: one of VALID_PAYMENT_METHODS

    Raises:
        InvalidInput: amount or method invalid
        NotFound: order does not exist
    """
    order_id, amount_cents, method = parse_payment_request({
        "order_id": order_id,
        "amount_cents": amount_cents,
        "method": method,
    })

    with unit_of_work(session):
        order = lock_for_update(
            session.query(ledger.order_model).filter(ledger.order_model.id == order_id)
        ).first()
        if not order:
            raise NotFound(f"{ledger.label} not found", details={"order_id": order_id})

        payment = ledger.payment_model(
            amount_cents=amount_cents,
            method=method,
            paid_at=utcnow(),
        )
        setattr(payment, ledger.payment_fk, order_id)
        session.add(payment)
        session.flush()  # Aggregate must see the new row

        paid, status = refresh_payment_status(session, ledger, order)
        result = PaymentResult(
            order_id=order_id,
            payment_id=payment.id,
            total_cents=order.total_cents,
            paid_cents=paid,
            payment_status=status,
        )

    current_app.logger.info(
        "%s %s payment recorded: amount_cents=%s method=%s status=%s",
        ledger.label, order_id, amount_cents, method, result.payment_status,
    )
    return result


# =============================================================================
# QUERIES
# =============================================================================

def list_payments(session, ledger: OrderLedger, order_id: int) -> list:
    return (
        session.query(ledger.payment_model)
        .filter(ledger.payment_order_column() == order_id)
        .order_by(ledger.payment_model.paid_at, ledger.payment_model.id)
        .all()
    )
