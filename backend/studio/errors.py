# Overview: Error taxonomy shared by services and routes.

"""
Studio error taxonomy.

Services raise these; the app factory registers handlers that turn them into
JSON responses of the form {"message": ..., "error": ..., **details}.

- InvalidInput: malformed, missing or out-of-range fields (400)
- NotFound: referenced entity absent (404)
- Conflict: double booking, inactive dependency, insufficient stock,
  status change on a completed or cancelled appointment (409)
- Internal: unexpected or storage failure, rolled back before surfacing (500)
"""

from __future__ import annotations


class StudioError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"message": self.message}
        body.update(self.details)
        return body


class InvalidInput(StudioError):
    status_code = 400


class NotFound(StudioError):
    status_code = 404


class Conflict(StudioError):
    status_code = 409


class Internal(StudioError):
    """Wraps storage failures; exposes only the cause's class name."""

    status_code = 500

    def __init__(self, message: str, cause: BaseException | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.cause = cause

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.cause is not None:
            body["error"] = type(self.cause).__name__
        return body
