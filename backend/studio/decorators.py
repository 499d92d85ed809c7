# Overview: Request authentication and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .extensions import db
from .services import session_service


def _is_authenticated() -> bool:
    return hasattr(g, 'current_staff') and hasattr(g, 'staff_roles')


def require_auth(f):
    """
    Require a valid bearer token and establish the caller context.

    Sets the following Flask g attributes:
    - g.staff_id: id of the authenticated staff member
    - g.current_staff: the Staff row
    - g.staff_roles: set of role names held by the caller

    Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - Staff member deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"message": "Bearer token required"}), 401

        token = auth_header.split(" ", 1)[1]

        context = session_service.validate_session(db.session, token)

        if not context:
            return jsonify({"message": "Invalid or expired token"}), 401

        g.staff_id = context.staff_id
        g.current_staff = context.staff
        g.staff_roles = context.roles

        return f(*args, **kwargs)

    return decorated_function


def require_role(*config_keys: str):
    """
    Require the caller to hold any of the roles named by the given config keys.

    Keys are resolved against app.config (e.g. "THERAPIST_ROLE") once per
    request, so role names stay configurable.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"message": "Authentication required"}), 401

            allowed = {current_app.config[key] for key in config_keys}
            if not allowed & g.staff_roles:
                current_app.logger.info(
                    "Role check failed for staff %s on %s %s (needs any of %s)",
                    g.staff_id, request.method, request.path, sorted(allowed),
                )
                return jsonify({
                    "message": "Not authorized for this operation",
                    "required_roles": sorted(allowed),
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
