import pytest

from conftest import booking_payload, sale_payload
from studio.errors import InvalidInput, NotFound
from studio.models import Appointment, AppointmentPayment, Sale, SalePayment
from studio.services import appointment_service, payment_service, sales_service
from studio.services.payment_service import (
    APPOINTMENT_LEDGER,
    SALE_LEDGER,
    derive_payment_status,
    payment_summary,
)


@pytest.fixture
def sale(db_session, customer, seller, body_oil):
    """Sale of 2 x 1500 = 3000."""
    return sales_service.create_sale(db_session, sale_payload(customer, seller, [(body_oil, 2, 1500)]))


@pytest.fixture
def appointment(db_session, customer, therapist, massage):
    """Appointment totalling 10000."""
    return appointment_service.create_appointment(
        db_session, booking_payload(customer, therapist, [(massage, 10000)])
    )


class TestDerivation:

    @pytest.mark.parametrize(
        "total,paid,expected",
        [
            (3000, 0, "pending"),
            (3000, 1, "partial"),
            (3000, 2999, "partial"),
            (3000, 3000, "paid"),
            (3000, 5000, "paid"),
            (0, 0, "paid"),
        ],
    )
    def test_derive_payment_status(self, total, paid, expected):
        assert derive_payment_status(total, paid) == expected

    def test_summary_balance_never_negative(self):
        assert payment_summary(3000, 5000) == {"total_cents": 3000, "paid_cents": 5000, "balance_cents": 0}


class TestSalePayments:

    def test_pending_partial_paid(self, db_session, sale):
        first = payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 1000, "cash")
        assert first.payment_status == "partial"
        assert first.paid_cents == 1000
        assert first.total_cents == 3000

        # Exactly the remaining balance
        second = payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 2000, "credit")
        assert second.payment_status == "paid"
        assert second.paid_cents == 3000
        assert db_session.get(Sale, sale.id).payment_status == "paid"

    def test_overpayment_is_paid(self, db_session, sale):
        result = payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 5000, "transfer")
        assert result.payment_status == "paid"

    def test_resubmission_appends_second_entry(self, db_session, sale):
        payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 500, "cash")
        payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 500, "cash")
        assert db_session.query(SalePayment).filter_by(sale_id=sale.id).count() == 2
        assert payment_service.paid_total(db_session, SALE_LEDGER, sale.id) == 1000

    def test_list_payments_in_order(self, db_session, sale):
        first = payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 500, "cash")
        second = payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 700, "debit")
        payments = payment_service.list_payments(db_session, SALE_LEDGER, sale.id)
        assert [p.id for p in payments] == [first.payment_id, second.payment_id]
        assert payments[1].method == "debit"

    def test_method_is_normalized(self, db_session, sale):
        result = payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 500, " Cash ")
        assert db_session.get(SalePayment, result.payment_id).method == "cash"

    def test_unknown_sale_not_found(self, db_session, setup_roles):
        with pytest.raises(NotFound, match="Sale not found"):
            payment_service.record_payment(db_session, SALE_LEDGER, 9999, 500, "cash")
        assert db_session.query(SalePayment).count() == 0

    @pytest.mark.parametrize("amount", [0, -100, "12.5", 10.5, None, "abc"])
    def test_invalid_amount_rejected(self, db_session, sale, amount):
        with pytest.raises(InvalidInput):
            payment_service.record_payment(db_session, SALE_LEDGER, sale.id, amount, "cash")
        assert db_session.query(SalePayment).count() == 0

    def test_invalid_method_rejected(self, db_session, sale):
        with pytest.raises(InvalidInput, match="Invalid payment method"):
            payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 500, "bitcoin")


class TestAppointmentPayments:

    def test_pending_partial_paid(self, db_session, appointment):
        assert db_session.get(Appointment, appointment.id).payment_status == "pending"

        partial = payment_service.record_payment(db_session, APPOINTMENT_LEDGER, appointment.id, 4000, "debit")
        assert partial.payment_status == "partial"

        paid = payment_service.record_payment(db_session, APPOINTMENT_LEDGER, appointment.id, 6000, "cash")
        assert paid.payment_status == "paid"
        assert db_session.get(Appointment, appointment.id).payment_status == "paid"
        assert db_session.query(AppointmentPayment).filter_by(appointment_id=appointment.id).count() == 2

    def test_unknown_appointment_not_found(self, db_session, setup_roles):
        with pytest.raises(NotFound, match="Appointment not found"):
            payment_service.record_payment(db_session, APPOINTMENT_LEDGER, 9999, 500, "cash")

    def test_ledgers_are_separate(self, db_session, sale, appointment):
        payment_service.record_payment(db_session, SALE_LEDGER, sale.id, 3000, "cash")
        assert payment_service.paid_total(db_session, APPOINTMENT_LEDGER, appointment.id) == 0
        assert db_session.get(Appointment, appointment.id).payment_status == "pending"
