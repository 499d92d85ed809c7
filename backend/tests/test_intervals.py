"""
Interval arithmetic and the overlap rule.

Pure value tests; no database.
"""

from datetime import datetime, timedelta

import pytest

from studio.errors import InvalidInput
from studio.services.intervals import Interval, visible_end


START = datetime(2024, 1, 1, 10, 0, 0)


def at(hour, minute, second=0):
    return datetime(2024, 1, 1, hour, minute, second)


class TestBookingInterval:

    def test_travel_extends_backward_only(self):
        blocked = Interval.for_booking(START, 50, travel_minutes=15)
        assert blocked.start == at(9, 45)
        assert blocked.end == at(10, 50)

    def test_visible_end_is_start_plus_duration(self):
        assert visible_end(START, 50) == at(10, 50)

    def test_zero_travel_blocks_visible_window(self):
        blocked = Interval.for_booking(START, 30)
        assert blocked == Interval(START, at(10, 30))
        assert blocked.duration_minutes == 30

    def test_end_before_start_rejected(self):
        with pytest.raises(InvalidInput):
            Interval(at(11, 0), at(10, 0))


class TestOverlap:

    def test_touching_endpoints_do_not_overlap(self):
        first = Interval(at(9, 45), at(10, 50))
        second = Interval(at(10, 50), at(11, 20))
        assert not first.overlaps(second)
        assert not second.overlaps(first)

    def test_one_second_inside_overlaps(self):
        first = Interval(at(9, 45), at(10, 50))
        second = Interval(at(10, 49, 59), at(11, 19, 59))
        assert first.overlaps(second)
        assert second.overlaps(first)

    def test_containment_overlaps(self):
        outer = Interval(at(9, 0), at(12, 0))
        inner = Interval(at(10, 0), at(10, 30))
        assert outer.overlaps(inner)
        assert inner.overlaps(outer)

    def test_disjoint_do_not_overlap(self):
        morning = Interval(at(9, 0), at(9, 30))
        later = Interval(at(11, 0), at(11, 30))
        assert not morning.overlaps(later)

    @pytest.mark.parametrize("offset_minutes", [-60, -15, 0, 15, 45])
    def test_overlap_is_symmetric(self, offset_minutes):
        base = Interval(START, at(11, 0))
        moved = Interval(START + timedelta(minutes=offset_minutes), at(11, 0) + timedelta(minutes=offset_minutes))
        assert base.overlaps(moved) == moved.overlaps(base)

    def test_travel_buffer_causes_conflict_with_previous_booking(self):
        existing = Interval.for_booking(START, 50)
        # Visible start at 11:00 is free, but 15 min of travel reaches back to 10:45
        requested = Interval.for_booking(at(11, 0), 30, travel_minutes=15)
        assert existing.overlaps(requested)
