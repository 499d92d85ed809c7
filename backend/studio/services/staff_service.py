# Overview: Read-side boundary to the personnel collaborator (staff, roles, capabilities).

from __future__ import annotations

from ..errors import InvalidInput
from ..models import Staff, StaffRole, Role
from .concurrency import lock_for_update


def get_staff_roles(session, staff_id: int) -> set[str]:
    rows = (
        session.query(Role.name)
        .join(StaffRole, StaffRole.role_id == Role.id)
        .filter(StaffRole.staff_id == staff_id)
        .all()
    )
    return {name for (name,) in rows}


def has_role(session, staff_id: int, role_name: str) -> bool:
    return (
        session.query(StaffRole.id)
        .join(Role, Role.id == StaffRole.role_id)
        .filter(StaffRole.staff_id == staff_id, Role.name == role_name)
        .first()
        is not None
    )


def require_active_staff_with_role(session, staff_id: int, role_name: str, *, lock: bool = True) -> Staff:
    """
    Return the staff row if it exists, holds role_name and is active.

    With lock=True the row is selected FOR UPDATE, which serializes concurrent
    bookings for the same staff member until the caller's unit of work ends.

    Raises InvalidInput with the reason otherwise.
    """
    query = session.query(Staff).filter(Staff.id == staff_id)
    if lock:
        query = lock_for_update(query)
    staff = query.first()

    if not staff or not has_role(session, staff_id, role_name):
        raise InvalidInput(
            "Staff member not found or missing required role",
            details={"staff_id": staff_id, "required_role": role_name},
        )
    if not staff.is_active:
        raise InvalidInput("Staff member is inactive", details={"staff_id": staff_id})
    return staff
