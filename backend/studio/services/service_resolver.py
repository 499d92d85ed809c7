# Overview: Resolves requested services into total duration and applied-price total.

from __future__ import annotations

from dataclasses import dataclass

from ..errors import Conflict, InvalidInput, NotFound
from ..models import Service
from ..validation import coerce_amount_cents, coerce_id


@dataclass(frozen=True)
class ServiceLine:
    service_id: int
    applied_price_cents: int
    duration_minutes: int


@dataclass(frozen=True)
class ResolvedServices:
    lines: list[ServiceLine]
    total_duration_minutes: int
    total_cents: int


def parse_service_lines(raw_lines) -> list[tuple[int, int]]:
    """Validate the caller's [{service_id, applied_price_cents}] list shape."""
    if not isinstance(raw_lines, list) or not raw_lines:
        raise InvalidInput("services must be a non-empty list")

    parsed = []
    for raw in raw_lines:
        if not isinstance(raw, dict):
            raise InvalidInput("Each service entry must be an object")
        if raw.get("service_id") in (None, ""):
            raise InvalidInput("Each service entry requires service_id")
        service_id = coerce_id(raw["service_id"], "service_id")
        price = coerce_amount_cents(raw.get("applied_price_cents", 0), "applied_price_cents")
        parsed.append((service_id, price))
    return parsed


def resolve_services(session, raw_lines) -> ResolvedServices:
    """
    Look up every requested service in one query and total the request.

    Duration comes from the catalog; price comes from the caller's applied
    price per line (price overrides are allowed), and the total must be > 0.

    Raises:
        InvalidInput: empty list, malformed line, or non-positive total
        NotFound: one or more service ids do not exist
        Conflict: one or more services are inactive
    """
    parsed = parse_service_lines(raw_lines)

    ids = sorted({service_id for service_id, _ in parsed})
    services = {s.id: s for s in session.query(Service).filter(Service.id.in_(ids)).all()}

    missing = [service_id for service_id in ids if service_id not in services]
    if missing:
        raise NotFound("One or more services do not exist", details={"service_ids": missing})

    inactive = [service_id for service_id in ids if not services[service_id].is_active]
    if inactive:
        raise Conflict("One or more services are inactive", details={"service_ids": inactive})

    lines = [
        ServiceLine(
            service_id=service_id,
            applied_price_cents=price,
            duration_minutes=services[service_id].duration_minutes,
        )
        for service_id, price in parsed
    ]

    total_cents = sum(line.applied_price_cents for line in lines)
    if total_cents <= 0:
        raise InvalidInput("Total must be greater than 0")

    return ResolvedServices(
        lines=lines,
        total_duration_minutes=sum(line.duration_minutes for line in lines),
        total_cents=total_cents,
    )
