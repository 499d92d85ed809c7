# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

"""Sales API routes. Access: seller, admin"""

from flask import Blueprint, request, jsonify, g

from ..extensions import db
from ..services import sales_service
from ..validation import coerce_optional_id
from ..decorators import require_auth, require_role


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
@require_auth
@require_role("SELLER_ROLE", "ADMIN_ROLE")
def list_sales_route():
    """List sales, newest first. Query params: staff_id"""
    sales = sales_service.list_sales(
        db.session,
        staff_id=coerce_optional_id(request.args.get("staff_id"), "staff_id"),
    )
    return jsonify({"sales": [s.to_dict() for s in sales]}), 200


@sales_bp.get("/<int:sale_id>")
@require_auth
@require_role("SELLER_ROLE", "ADMIN_ROLE")
def get_sale_route(sale_id: int):
    """Sale with items, payments and payment summary."""
    return jsonify(sales_service.get_sale_detail(db.session, sale_id)), 200


@sales_bp.post("")
@require_auth
@require_role("SELLER_ROLE", "ADMIN_ROLE")
def create_sale_route():
    """
    Record a sale and reserve stock.

    Request body:
    {
        "client_id": 3,
        "staff_id": 4,  (optional, defaults to the caller)
        "items": [{"product_id": 1, "quantity": 2, "unit_price_cents": 1500}]
    }

    Returns:
        201: {id, total_cents, warnings: [{product_id, name, current_stock, stock_minimum}]}
        409: insufficient stock or inactive product
    """
    result = sales_service.create_sale(db.session, request.get_json(silent=True), g.staff_id)
    return jsonify({"message": "Sale recorded", **result.to_dict()}), 201


@sales_bp.put("/<int:sale_id>")
@require_auth
@require_role("SELLER_ROLE", "ADMIN_ROLE")
def update_sale_route(sale_id: int):
    """Replace the item list; stock is corrected by the difference."""
    result = sales_service.update_sale(db.session, sale_id, request.get_json(silent=True), g.staff_id)
    return jsonify({"message": "Sale updated", **result.to_dict()}), 200
