"""
Pytest fixtures for studio backend tests.

Provides an in-memory database, staff with roles, catalog rows, a test client
and bearer-token headers.
"""

from datetime import datetime

import pytest

from studio import create_app
from studio.cli import ensure_roles
from studio.config import Config
from studio.extensions import db
from studio.models import Client, Product, Service, Staff, StaffRole
from studio.services import session_service


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = "DEBUG"


# 2024-01-01 10:00, business-local
DAY_START = datetime(2024, 1, 1, 10, 0, 0)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def setup_roles(db_session):
    """Default roles: therapist, seller, admin."""
    roles = ensure_roles(["therapist", "seller", "admin"])
    db_session.commit()
    return roles


@pytest.fixture(scope='function')
def make_staff(db_session, setup_roles):
    """Factory: make_staff("Ana", "therapist", is_active=True) -> Staff."""
    def _make(first_name, *role_names, is_active=True):
        staff = Staff(first_name=first_name, last_name="Test", is_active=is_active)
        db_session.add(staff)
        db_session.flush()
        for name in role_names:
            db_session.add(StaffRole(staff_id=staff.id, role_id=setup_roles[name].id))
        db_session.commit()
        return staff

    return _make


@pytest.fixture(scope='function')
def therapist(make_staff):
    return make_staff("Ana", "therapist")


@pytest.fixture(scope='function')
def second_therapist(make_staff):
    return make_staff("Bea", "therapist")


@pytest.fixture(scope='function')
def seller(make_staff):
    return make_staff("Sol", "seller")


@pytest.fixture(scope='function')
def admin(make_staff):
    return make_staff("Max", "admin")


@pytest.fixture(scope='function')
def customer(db_session):
    """A studio client (named customer to avoid clashing with the test client)."""
    record = Client(first_name="Carla", last_name="Rojas", phone="+56 9 1234 5678")
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture(scope='function')
def massage(db_session):
    service = Service(name="Relaxing massage", duration_minutes=30, price_cents=10000, is_active=True)
    db_session.add(service)
    db_session.commit()
    return service


@pytest.fixture(scope='function')
def facial(db_session):
    service = Service(name="Facial", duration_minutes=20, price_cents=8000, is_active=True)
    db_session.add(service)
    db_session.commit()
    return service


@pytest.fixture(scope='function')
def retired_service(db_session):
    service = Service(name="Hot stones", duration_minutes=45, price_cents=12000, is_active=False)
    db_session.add(service)
    db_session.commit()
    return service


@pytest.fixture(scope='function')
def body_oil(db_session):
    """Stock 12, minimum 10."""
    product = Product(name="Body oil", brand="Studio", price_cents=1500, stock=12, stock_minimum=10, is_active=True)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def candle(db_session):
    product = Product(name="Candle", brand="Studio", price_cents=900, stock=3, stock_minimum=0, is_active=True)
    db_session.add(product)
    db_session.commit()
    return product


def booking_payload(customer, staff, services, start=DAY_START, travel_minutes=0, **extra) -> dict:
    """Helper to build an appointment body from (service, price) pairs."""
    body = {
        "client_id": customer.id,
        "staff_id": staff.id,
        "start": start.isoformat(sep=" "),
        "travel_minutes": travel_minutes,
        "services": [
            {"service_id": service.id, "applied_price_cents": price}
            for service, price in services
        ],
    }
    body.update(extra)
    return body


def sale_payload(customer, staff, items) -> dict:
    """Helper to build a sale body from (product, quantity, unit_price) triples."""
    return {
        "client_id": customer.id,
        "staff_id": staff.id,
        "items": [
            {"product_id": product.id, "quantity": quantity, "unit_price_cents": unit_price}
            for product, quantity, unit_price in items
        ],
    }


def auth_headers(db_session, staff) -> dict:
    """Helper to create Authorization headers for a staff member."""
    _, token = session_service.create_session(db_session, staff.id)
    return {'Authorization': f'Bearer {token}'}
