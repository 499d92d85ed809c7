from __future__ import annotations
from datetime import date, datetime
from studio.time_utils import parse_iso_datetime, parse_local_date

from typing import Any

from .errors import InvalidInput


# Maximum money amount: 999,999,999 cents
# This prevents database overflow issues and nonsensical prices
MAX_AMOUNT_CENTS = 999_999_999

# Upper bound for a travel/setup buffer (one working day)
MAX_TRAVEL_MINUTES = 24 * 60


def require_payload(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidInput("Invalid JSON payload")
    return payload


def require_fields(payload: dict, *fields: str) -> None:
    missing = [f for f in fields if payload.get(f) in (None, "")]
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer coercion - rejects floats, booleans and scientific notation.
    """
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise InvalidInput(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise InvalidInput(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise InvalidInput(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise InvalidInput(f"{field} must be an integer")
    if isinstance(value, float):
        raise InvalidInput(f"{field} must be an integer, not a decimal")
    raise InvalidInput(f"{field} must be an integer")


def coerce_id(value: Any, field: str) -> int:
    ident = coerce_int(value, field)
    if ident <= 0:
        raise InvalidInput(f"{field} must be a positive integer")
    return ident


def coerce_optional_id(value: Any, field: str) -> int | None:
    if value is None or value == "":
        return None
    return coerce_id(value, field)


def coerce_amount_cents(value: Any, field: str, *, allow_zero: bool = True) -> int:
    if value is None:
        raise InvalidInput(f"{field} is required")
    amount = coerce_int(value, field)
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidInput(f"{field} must be {'>= 0' if allow_zero else '> 0'}")
    if amount > MAX_AMOUNT_CENTS:
        raise InvalidInput(f"{field} cannot exceed {MAX_AMOUNT_CENTS}")
    return amount


def coerce_travel_minutes(value: Any) -> int:
    if value is None or value == "":
        return 0
    travel = coerce_int(value, "travel_minutes")
    if travel < 0:
        raise InvalidInput("travel_minutes cannot be negative")
    if travel > MAX_TRAVEL_MINUTES:
        raise InvalidInput(f"travel_minutes cannot exceed {MAX_TRAVEL_MINUTES}")
    return travel


def coerce_datetime(value: Any, field: str) -> datetime:
    """Business-local wall-clock time; offset-qualified input is rejected."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = parse_iso_datetime(value)
        except ValueError:
            raise InvalidInput(f'{field} is invalid. Use "YYYY-MM-DD HH:MM:SS"')
        if dt is None:
            raise InvalidInput(f"{field} is required")
    else:
        raise InvalidInput(f"{field} must be an ISO-8601 datetime")
    if dt.tzinfo is not None:
        raise InvalidInput(
            f'{field} must be local studio time without a UTC offset. Use "YYYY-MM-DD HH:MM:SS"'
        )
    return dt


def require_list(payload: dict, field: str) -> list:
    items = payload.get(field)
    if not isinstance(items, list) or not items:
        raise InvalidInput(f"{field} must be a non-empty list")
    for item in items:
        if not isinstance(item, dict):
            raise InvalidInput(f"Each entry in {field} must be an object")
    return items


def coerce_date(value: Any, field: str) -> date:
    try:
        day = parse_local_date(value)
    except ValueError:
        raise InvalidInput(f'{field} is invalid. Use "YYYY-MM-DD"')
    if day is None:
        raise InvalidInput(f"{field} is required")
    return day
