# Overview: Bearer token validation at the identity collaborator boundary.

"""
Session Token Service

WHY: Routes need to know which staff member is calling and which roles they
hold. Credentials and login belong to the identity collaborator; this module
only mints tokens for development (CLI) and validates them on each request.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout (SESSION_TTL_HOURS)
- Revocable
"""

import secrets
import hashlib
from dataclasses import dataclass
from datetime import timedelta

from ..models import SessionToken, Staff
from studio.time_utils import utcnow
from .staff_service import get_staff_roles


@dataclass
class SessionContext:
    """Authenticated caller: staff row, role names and the session record."""
    staff_id: int
    staff: Staff
    roles: set[str]
    session: SessionToken


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)  # 32 bytes = 64 hex characters


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy (unlike passwords), so a fast hash is
    sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(session, staff_id: int, ttl_hours: int = 24) -> tuple[SessionToken, str]:
    """
    Create a session token for a staff member.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.

    Raises ValueError if the staff member does not exist or is inactive.
    """
    staff = session.query(Staff).filter_by(id=staff_id).first()
    if not staff:
        raise ValueError("Staff member not found")
    if not staff.is_active:
        raise ValueError("Staff member is inactive")

    plaintext_token = generate_token()
    now = utcnow()

    record = SessionToken(
        staff_id=staff_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        expires_at=now + timedelta(hours=ttl_hours),
        is_revoked=False,
    )
    session.add(record)
    session.commit()

    return record, plaintext_token


def validate_session(session, token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if:
    - Token is unknown, expired, or revoked
    - Staff member is deactivated
    """
    if not token:
        return None

    record = session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
    if not record or record.is_revoked:
        return None

    if utcnow() > record.expires_at:
        return None

    staff = record.staff
    if not staff or not staff.is_active:
        return None

    staff_id = staff.id
    roles = get_staff_roles(session, staff_id)
    # End the read transaction so the request's first unit of work starts clean
    session.commit()
    return SessionContext(staff_id=staff_id, staff=staff, roles=roles, session=record)


def revoke_session(session, token: str) -> bool:
    record = session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
    if not record or record.is_revoked:
        return False
    record.is_revoked = True
    record.revoked_at = utcnow()
    session.commit()
    return True
