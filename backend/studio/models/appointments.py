from __future__ import annotations

from ..extensions import db
from studio.time_utils import to_utc_z, to_local_iso, minutes


class Appointment(db.Model):
    """
    A booked visit: one staff member, one client, one or more services.

    starts_at/ends_at are the visible appointment (ends_at = start + total
    service duration). The staff member is blocked from
    starts_at - travel_minutes until ends_at.

    status is the attention lifecycle (pending -> completed | cancelled).
    payment_status is a cached projection of the payment ledger.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        db.Index("ix_appointments_staff_window", "staff_id", "starts_at", "ends_at"),
        db.Index("ix_appointments_status", "status"),
        db.CheckConstraint("travel_minutes >= 0", name="ck_appointments_travel_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)

    # Business-local wall clock
    starts_at = db.Column(db.DateTime, nullable=False)
    ends_at = db.Column(db.DateTime, nullable=False)
    travel_minutes = db.Column(db.Integer, nullable=False, default=0)

    total_cents = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="pending")
    payment_status = db.Column(db.String(16), nullable=False, default="pending", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    client = db.relationship("Client", backref=db.backref("appointments", lazy=True))
    staff = db.relationship("Staff", backref=db.backref("appointments", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def blocked_starts_at(self):
        return self.starts_at - minutes(self.travel_minutes or 0)

    def __repr__(self) -> str:
        return f"<Appointment id={self.id} staff_id={self.staff_id} starts_at={self.starts_at}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "client_name": self.client.full_name if self.client else None,
            "staff_id": self.staff_id,
            "staff_name": self.staff.full_name if self.staff else None,
            "start": to_local_iso(self.starts_at),
            "end": to_local_iso(self.ends_at),
            "blocked_start": to_local_iso(self.blocked_starts_at),
            "travel_minutes": self.travel_minutes,
            "total_cents": self.total_cents,
            "status": self.status,
            "payment_status": self.payment_status,
            "created_at": to_utc_z(self.created_at),
            "version_id": self.version_id,
        }


class AppointmentLine(db.Model):
    """Service performed during an appointment, at its applied price."""
    __tablename__ = "appointment_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    appointment_id = db.Column(db.Integer, db.ForeignKey("appointments.id"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=False)
    applied_price_cents = db.Column(db.Integer, nullable=False)

    appointment = db.relationship("Appointment", backref=db.backref("lines", lazy=True))
    service = db.relationship("Service")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "appointment_id": self.appointment_id,
            "service_id": self.service_id,
            "service_name": self.service.name if self.service else None,
            "duration_minutes": self.service.duration_minutes if self.service else None,
            "applied_price_cents": self.applied_price_cents,
        }


class AppointmentPayment(db.Model):
    """
    Append-only payment record against an appointment.

    IMMUTABLE: Records are never updated or deleted.
    """
    __tablename__ = "appointment_payments"
    __table_args__ = (
        db.Index("ix_appointment_payments_appt_paid", "appointment_id", "paid_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    appointment_id = db.Column(db.Integer, db.ForeignKey("appointments.id"), nullable=False, index=True)
    amount_cents = db.Column(db.Integer, nullable=False)
    method = db.Column(db.String(32), nullable=False)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=False)

    appointment = db.relationship("Appointment", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "appointment_id": self.appointment_id,
            "amount_cents": self.amount_cents,
            "method": self.method,
            "paid_at": to_utc_z(self.paid_at),
        }
