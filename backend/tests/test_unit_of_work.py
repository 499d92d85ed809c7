"""
Unit of work tests.

Verifies:
- Writes through Flask-SQLAlchemy's scoped db.session commit
- A storage error after earlier writes rolls everything back
- Storage errors surface as Internal, exposing only the exception class name
"""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from conftest import auth_headers, sale_payload
from studio.errors import Internal
from studio.models import Product, Sale, SaleLine, SalePayment
from studio.services import payment_service, sales_service
from studio.services.concurrency import unit_of_work
from studio.services.payment_service import SALE_LEDGER


def stock_of(db_session, product_id):
    db_session.expire_all()
    return db_session.get(Product, product_id).stock


def integrity_failure(*args, **kwargs):
    raise IntegrityError("UPDATE sales", {}, Exception("constraint failed"))


class TestCommit:

    def test_scoped_session_commits(self, db_session, body_oil):
        assert hasattr(db_session, "registry")
        db_session.commit()

        with unit_of_work(db_session):
            product = db_session.get(Product, body_oil.id)
            product.stock -= 1

        assert stock_of(db_session, body_oil.id) == 11

    def test_domain_error_rolls_back_and_propagates(self, db_session, body_oil):
        with pytest.raises(ValueError):
            with unit_of_work(db_session):
                db_session.get(Product, body_oil.id).stock -= 5
                raise ValueError("boom")

        assert stock_of(db_session, body_oil.id) == 12


class TestStorageFailure:

    def test_integrity_error_becomes_internal(self, db_session, body_oil):
        with pytest.raises(Internal) as excinfo:
            with unit_of_work(db_session):
                db_session.get(Product, body_oil.id).stock -= 5
                db_session.flush()
                integrity_failure()

        assert stock_of(db_session, body_oil.id) == 12
        assert excinfo.value.status_code == 500
        assert excinfo.value.to_dict() == {
            "message": "Storage failure, transaction rolled back",
            "error": "IntegrityError",
        }

    def test_sale_rolls_back_stock_decrement(self, db_session, monkeypatch, customer, seller, body_oil, candle):
        monkeypatch.setattr(sales_service, "refresh_payment_status", integrity_failure)

        with pytest.raises(Internal):
            sales_service.create_sale(
                db_session, sale_payload(customer, seller, [(body_oil, 2, 1500), (candle, 1, 900)])
            )

        assert stock_of(db_session, body_oil.id) == 12
        assert stock_of(db_session, candle.id) == 3
        assert db_session.query(Sale).count() == 0
        assert db_session.query(SaleLine).count() == 0

    def test_stale_version_drops_payment(self, db_session, monkeypatch, customer, seller, body_oil):
        sale = sales_service.create_sale(db_session, sale_payload(customer, seller, [(body_oil, 1, 1500)]))

        def stale(*args, **kwargs):
            raise StaleDataError("sales row version changed")

        monkeypatch.setattr(payment_service, "refresh_payment_status", stale)

        with pytest.raises(Internal) as excinfo:
            payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 1500, "cash")

        assert excinfo.value.to_dict()["error"] == "StaleDataError"
        db_session.expire_all()
        assert db_session.query(SalePayment).count() == 0
        assert db_session.get(Sale, sale.id).payment_status == "pending"

    def test_route_renders_class_name_only(self, client, db_session, monkeypatch, customer, seller, body_oil):
        headers = auth_headers(db_session, seller)
        monkeypatch.setattr(sales_service, "refresh_payment_status", integrity_failure)

        resp = client.post("/api/sales", json=sale_payload(customer, seller, [(body_oil, 3, 1500)]), headers=headers)

        assert resp.status_code == 500
        assert resp.json == {"message": "Storage failure, transaction rolled back", "error": "IntegrityError"}
        assert stock_of(db_session, body_oil.id) == 12
