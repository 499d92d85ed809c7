from __future__ import annotations

from ..extensions import db
from studio.time_utils import to_utc_z


class Sale(db.Model):
    """
    Retail sale of products to a client, made by a seller.

    total_cents is always recomputed from the lines at write time.
    payment_status is a cached projection of the payment ledger.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_staff_created", "staff_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)

    total_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_status = db.Column(db.String(16), nullable=False, default="pending", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    client = db.relationship("Client", backref=db.backref("sales", lazy=True))
    staff = db.relationship("Staff", backref=db.backref("sales", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "client_name": self.client.full_name if self.client else None,
            "staff_id": self.staff_id,
            "staff_name": self.staff.full_name if self.staff else None,
            "total_cents": self.total_cents,
            "payment_status": self.payment_status,
            "created_at": to_utc_z(self.created_at),
            "version_id": self.version_id,
        }


class SaleLine(db.Model):
    """Individual line items on a sale."""
    __tablename__ = "sale_lines"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sale_lines_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    sale = db.relationship("Sale", backref=db.backref("lines", lazy=True))
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "product_brand": self.product.brand if self.product else None,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }


class SalePayment(db.Model):
    """
    Append-only payment record against a sale.

    IMMUTABLE: Records are never updated or deleted.
    """
    __tablename__ = "sale_payments"
    __table_args__ = (
        db.Index("ix_sale_payments_sale_paid", "sale_id", "paid_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    amount_cents = db.Column(db.Integer, nullable=False)
    method = db.Column(db.String(32), nullable=False)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=False)

    sale = db.relationship("Sale", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "amount_cents": self.amount_cents,
            "method": self.method,
            "paid_at": to_utc_z(self.paid_at),
        }
