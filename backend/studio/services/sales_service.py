"""
Sales Service - stock reservation and sale documents

WHY: A sale and the stock it consumes must never diverge. Each product row is
locked while its line is processed, checked against the requested quantity
and decremented in the same unit of work that writes the sale, so a failure
on any line rolls back every line before it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app

from ..errors import Conflict, InvalidInput, NotFound
from ..models import Client, Product, Sale, SaleLine
from ..validation import (
    coerce_amount_cents,
    coerce_id,
    coerce_int,
    coerce_optional_id,
    require_fields,
    require_list,
    require_payload,
)
from .concurrency import lock_for_update, unit_of_work
from .payment_service import (
    SALE_LEDGER,
    list_payments,
    paid_total,
    payment_summary,
    refresh_payment_status,
)
from .staff_service import require_active_staff_with_role


@dataclass(frozen=True)
class SaleItem:
    product_id: int
    quantity: int
    unit_price_cents: int


@dataclass(frozen=True)
class SaleRequest:
    client_id: int
    staff_id: int
    items: list[SaleItem]


@dataclass(frozen=True)
class StockWarning:
    product_id: int
    name: str
    current_stock: int
    stock_minimum: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "current_stock": self.current_stock,
            "stock_minimum": self.stock_minimum,
        }


@dataclass(frozen=True)
class SaleResult:
    id: int
    total_cents: int
    warnings: list[StockWarning] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "total_cents": self.total_cents,
            "warnings": [w.to_dict() for w in self.warnings],
        }


def parse_sale_request(payload, actor_staff_id: int | None) -> SaleRequest:
    """Validate the request body before any transaction is opened."""
    payload = require_payload(payload)
    require_fields(payload, "client_id")
    raw_items = require_list(payload, "items")

    staff_id = coerce_optional_id(payload.get("staff_id"), "staff_id") or actor_staff_id
    if not staff_id:
        raise InvalidInput("Missing required fields: staff_id")

    items = []
    for raw in raw_items:
        if raw.get("product_id") in (None, "") or raw.get("quantity") in (None, "") or raw.get("unit_price_cents") is None:
            raise InvalidInput("Each item requires: product_id, quantity, unit_price_cents")
        quantity = coerce_int(raw["quantity"], "quantity")
        if quantity <= 0:
            raise InvalidInput("quantity must be > 0")
        items.append(SaleItem(
            product_id=coerce_id(raw["product_id"], "product_id"),
            quantity=quantity,
            unit_price_cents=coerce_amount_cents(raw["unit_price_cents"], "unit_price_cents"),
        ))

    return SaleRequest(
        client_id=coerce_id(payload["client_id"], "client_id"),
        staff_id=staff_id,
        items=items,
    )


def _require_client(session, client_id: int) -> Client:
    client = session.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise NotFound("Client not found", details={"client_id": client_id})
    return client


def _lock_product(session, product_id: int) -> Product | None:
    return lock_for_update(session.query(Product).filter(Product.id == product_id)).first()


def _reserve_items(session, sale_id: int, items: list[SaleItem]) -> tuple[int, list[StockWarning]]:
    """
    Lock, check and decrement each product in submission order.

    Returns (total_cents, low-stock warnings). Raises before mutating a
    product whose stock cannot cover the line.
    """
    total = 0
    warnings: list[StockWarning] = []

    for item in items:
        product = _lock_product(session, item.product_id)
        if not product:
            raise NotFound(f"Product {item.product_id} does not exist", details={"product_id": item.product_id})

        if not product.is_active:
            raise Conflict(f"Product {item.product_id} is inactive", details={"product_id": item.product_id})

        if product.stock < item.quantity:
            raise Conflict(
                f"Insufficient stock for product {item.product_id}",
                details={
                    "product_id": item.product_id,
                    "requested": item.quantity,
                    "available": product.stock,
                },
            )

        product.stock -= item.quantity

        if product.stock <= product.stock_minimum:
            warnings.append(StockWarning(
                product_id=product.id,
                name=product.name,
                current_stock=product.stock,
                stock_minimum=product.stock_minimum,
            ))

        line_total = item.quantity * item.unit_price_cents
        session.add(SaleLine(
            sale_id=sale_id,
            product_id=product.id,
            quantity=item.quantity,
            unit_price_cents=item.unit_price_cents,
            line_total_cents=line_total,
        ))
        total += line_total

    return total, warnings


def _restore_stock(session, sale_id: int) -> None:
    """Give back the stock held by every current line of a sale."""
    lines = session.query(SaleLine).filter(SaleLine.sale_id == sale_id).order_by(SaleLine.id).all()
    for line in lines:
        product = _lock_product(session, line.product_id)
        if product:
            product.stock += line.quantity


def _log_warnings(sale_id: int, warnings: list[StockWarning]) -> None:
    for w in warnings:
        current_app.logger.warning(
            "Low stock after sale %s: product %s (%s) at %s, minimum %s",
            sale_id, w.product_id, w.name, w.current_stock, w.stock_minimum,
        )


# =============================================================================
# WRITES
# =============================================================================

def create_sale(session, payload, actor_staff_id: int | None = None) -> SaleResult:
    """
    Record a sale and reserve its stock.

    Raises:
        InvalidInput: malformed body or seller not an active seller
        NotFound: client or product does not exist
        Conflict: product inactive or insufficient stock
    """
    request = parse_sale_request(payload, actor_staff_id)

    with unit_of_work(session):
        _require_client(session, request.client_id)
        require_active_staff_with_role(session, request.staff_id, current_app.config["SELLER_ROLE"], lock=False)

        sale = Sale(client_id=request.client_id, staff_id=request.staff_id, total_cents=0)
        session.add(sale)
        session.flush()

        total, warnings = _reserve_items(session, sale.id, request.items)

        # Header total only once every line succeeded
        sale.total_cents = total
        refresh_payment_status(session, SALE_LEDGER, sale)
        result = SaleResult(id=sale.id, total_cents=total, warnings=warnings)

    current_app.logger.info("Sale %s recorded: total_cents=%s", result.id, result.total_cents)
    _log_warnings(result.id, result.warnings)
    return result


def update_sale(session, sale_id: int, payload, actor_staff_id: int | None = None) -> SaleResult:
    """
    Replace the item list of a sale, correcting stock by the difference.

    Existing lines first give their stock back, then the new list is reserved
    exactly as on create. Both happen in one unit of work, so a failing line
    also undoes the restoration.
    """
    request = parse_sale_request(payload, actor_staff_id)

    with unit_of_work(session):
        sale = lock_for_update(session.query(Sale).filter(Sale.id == sale_id)).first()
        if not sale:
            raise NotFound("Sale not found", details={"sale_id": sale_id})

        _require_client(session, request.client_id)
        require_active_staff_with_role(session, request.staff_id, current_app.config["SELLER_ROLE"], lock=False)

        _restore_stock(session, sale.id)
        session.query(SaleLine).filter(SaleLine.sale_id == sale.id).delete(synchronize_session="fetch")

        total, warnings = _reserve_items(session, sale.id, request.items)

        sale.client_id = request.client_id
        sale.staff_id = request.staff_id
        sale.total_cents = total
        refresh_payment_status(session, SALE_LEDGER, sale)
        result = SaleResult(id=sale.id, total_cents=total, warnings=warnings)

    current_app.logger.info("Sale %s updated: total_cents=%s", result.id, result.total_cents)
    _log_warnings(result.id, result.warnings)
    return result


# =============================================================================
# QUERIES
# =============================================================================

def list_sales(session, *, staff_id: int | None = None) -> list[Sale]:
    query = session.query(Sale)
    if staff_id is not None:
        query = query.filter(Sale.staff_id == staff_id)
    return query.order_by(Sale.id.desc()).all()


def get_sale_detail(session, sale_id: int) -> dict:
    sale = session.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        raise NotFound("Sale not found", details={"sale_id": sale_id})

    lines = session.query(SaleLine).filter(SaleLine.sale_id == sale_id).order_by(SaleLine.id).all()
    payments = list_payments(session, SALE_LEDGER, sale_id)
    paid = paid_total(session, SALE_LEDGER, sale_id)

    return {
        "sale": sale.to_dict(),
        "items": [line.to_dict() for line in lines],
        "payments": [p.to_dict() for p in payments],
        "payment_summary": payment_summary(sale.total_cents, paid),
    }
