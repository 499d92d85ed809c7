from datetime import date, datetime, timedelta, timezone

import pytest

from studio.errors import InvalidInput
from studio.time_utils import day_window, parse_iso_datetime, to_local_iso, to_utc_z
from studio.validation import coerce_datetime


class TestParsing:

    def test_naive_is_kept_as_local(self):
        assert parse_iso_datetime("2024-01-01 10:00:00") == datetime(2024, 1, 1, 10, 0, 0)
        assert parse_iso_datetime("2024-01-01T10:00") == datetime(2024, 1, 1, 10, 0)

    def test_offset_is_kept_aware(self):
        parsed = parse_iso_datetime("2024-01-01T10:00:00-03:00")
        assert parsed.utcoffset() == timedelta(hours=-3)
        assert parse_iso_datetime("2024-01-01T10:00:00Z").utcoffset() == timedelta(0)

    @pytest.mark.parametrize(
        "value",
        [
            "2024-01-01T10:00:00-03:00",
            "2024-01-01T10:00:00Z",
            datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
        ],
    )
    def test_offset_input_rejected_for_studio_times(self, value):
        with pytest.raises(InvalidInput, match="without a UTC offset"):
            coerce_datetime(value, "start")

    def test_blank_is_none(self):
        assert parse_iso_datetime("") is None
        assert parse_iso_datetime(None) is None

    def test_garbage_raises_invalid_input(self):
        with pytest.raises(InvalidInput):
            coerce_datetime("next tuesday", "start")
        with pytest.raises(InvalidInput):
            coerce_datetime(1704103200, "start")


class TestFormatting:

    def test_local_iso_has_no_zone(self):
        assert to_local_iso(datetime(2024, 1, 1, 10, 50, 0, 123)) == "2024-01-01T10:50:00"

    def test_utc_z(self):
        assert to_utc_z(datetime(2024, 1, 1, 13, 0, 0)) == "2024-01-01T13:00:00Z"

    def test_day_window(self):
        assert day_window(date(2024, 1, 31)) == (datetime(2024, 1, 31), datetime(2024, 2, 1))
