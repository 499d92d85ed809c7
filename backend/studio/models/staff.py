from __future__ import annotations

from ..extensions import db
from studio.time_utils import to_utc_z


class Staff(db.Model):
    """
    Staff members: the bookable resources of the studio.

    Owned by the personnel collaborator. The scheduling and sales cores only
    read these rows (and lock them to serialize bookings per staff member).
    """
    __tablename__ = "staff"
    __table_args__ = (
        db.Index("ix_staff_active", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=True)
    email = db.Column(db.String(255), nullable=True, unique=True)
    phone = db.Column(db.String(32), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def __repr__(self) -> str:
        return f"<Staff id={self.id} name={self.full_name!r} active={self.is_active}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "is_active": self.is_active,
            "roles": sorted(sr.role.name for sr in self.staff_roles),
            "created_at": to_utc_z(self.created_at),
        }


class Role(db.Model):
    """Capability granted to staff (therapist, seller, admin)."""
    __tablename__ = "roles"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
        }


class StaffRole(db.Model):
    """Staff-Role association."""
    __tablename__ = "staff_roles"
    __table_args__ = (
        db.UniqueConstraint("staff_id", "role_id", name="uq_staff_roles"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id"), nullable=False, index=True)

    assigned_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    staff = db.relationship("Staff", backref=db.backref("staff_roles", lazy=True))
    role = db.relationship("Role", backref=db.backref("staff_roles", lazy=True))


class SessionToken(db.Model):
    """
    Bearer tokens issued by the identity collaborator.

    Tokens are stored hashed (SHA-256); the plaintext only ever exists on the
    client. Expired or revoked tokens never authenticate.
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_staff_active", "staff_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    staff = db.relationship("Staff", backref=db.backref("session_tokens", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "created_at": to_utc_z(self.created_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
