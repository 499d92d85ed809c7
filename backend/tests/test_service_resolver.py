import pytest

from studio.errors import Conflict, InvalidInput, NotFound
from studio.services.service_resolver import parse_service_lines, resolve_services


class TestParseServiceLines:

    def test_empty_list_rejected(self):
        with pytest.raises(InvalidInput):
            parse_service_lines([])

    def test_not_a_list_rejected(self):
        with pytest.raises(InvalidInput):
            parse_service_lines({"service_id": 1})

    def test_missing_service_id_rejected(self):
        with pytest.raises(InvalidInput):
            parse_service_lines([{"applied_price_cents": 100}])

    def test_negative_price_rejected(self):
        with pytest.raises(InvalidInput):
            parse_service_lines([{"service_id": 1, "applied_price_cents": -1}])

    def test_decimal_price_rejected(self):
        with pytest.raises(InvalidInput):
            parse_service_lines([{"service_id": 1, "applied_price_cents": 10.5}])

    def test_missing_price_defaults_to_zero(self):
        assert parse_service_lines([{"service_id": "3"}]) == [(3, 0)]


class TestResolveServices:

    def test_totals_duration_and_applied_price(self, db_session, massage, facial):
        resolved = resolve_services(db_session, [
            {"service_id": massage.id, "applied_price_cents": 9000},
            {"service_id": facial.id, "applied_price_cents": 8000},
        ])
        assert resolved.total_duration_minutes == 50
        assert resolved.total_cents == 17000
        assert [line.service_id for line in resolved.lines] == [massage.id, facial.id]

    def test_applied_price_overrides_list_price(self, db_session, massage):
        resolved = resolve_services(db_session, [{"service_id": massage.id, "applied_price_cents": 1}])
        assert resolved.total_cents == 1

    def test_duplicate_service_counts_twice(self, db_session, massage):
        resolved = resolve_services(db_session, [
            {"service_id": massage.id, "applied_price_cents": 5000},
            {"service_id": massage.id, "applied_price_cents": 5000},
        ])
        assert resolved.total_duration_minutes == 60
        assert len(resolved.lines) == 2

    def test_unknown_service_not_found(self, db_session, massage):
        with pytest.raises(NotFound) as exc:
            resolve_services(db_session, [
                {"service_id": massage.id, "applied_price_cents": 5000},
                {"service_id": 9999, "applied_price_cents": 5000},
            ])
        assert exc.value.details["service_ids"] == [9999]

    def test_inactive_service_conflict(self, db_session, massage, retired_service):
        with pytest.raises(Conflict) as exc:
            resolve_services(db_session, [
                {"service_id": massage.id, "applied_price_cents": 5000},
                {"service_id": retired_service.id, "applied_price_cents": 5000},
            ])
        assert exc.value.details["service_ids"] == [retired_service.id]

    def test_zero_total_rejected(self, db_session, massage):
        with pytest.raises(InvalidInput, match="Total must be greater than 0"):
            resolve_services(db_session, [{"service_id": massage.id, "applied_price_cents": 0}])
