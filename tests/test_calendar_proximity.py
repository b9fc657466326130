"""
Tests for the circular calendar-proximity ranker.
"""

import pytest

from wellstats.calendar_proximity import (
    circular_day_diff,
    day_of_year,
    parse_month_day,
    rank_by_calendar_proximity,
    resolve_limit,
)
from wellstats.config import EngineConfig
from wellstats.qa import ValidationError


def well(licence, status_date, **extra):
    return {"licence": licence, "status_date": status_date, **extra}


class TestDayOfYear:

    def test_bounds(self):
        assert day_of_year(1, 1) == 1
        assert day_of_year(12, 31) == 365

    def test_non_leap_reference(self):
        assert day_of_year(3, 1) == 60

    def test_feb_29_invalid(self):
        with pytest.raises(ValueError):
            day_of_year(2, 29)


class TestCircularDiff:

    def test_wraps_year_end(self):
        assert circular_day_diff(day_of_year(1, 1), day_of_year(12, 31)) == 1

    def test_symmetric_and_bounded(self):
        for a in range(1, 366, 17):
            for b in range(1, 366, 23):
                d = circular_day_diff(a, b)
                assert d == circular_day_diff(b, a)
                assert 0 <= d <= 182

    def test_same_day(self):
        assert circular_day_diff(100, 100) == 0


class TestParseMonthDay:

    @pytest.mark.parametrize("value,expected", [
        ("1984-12-14 00:00:00", (12, 14)),
        ("2003-01-05", (1, 5)),
        ("1999-07-04T12:00:00Z", (7, 4)),
    ])
    def test_valid(self, value, expected):
        assert parse_month_day(value) == expected

    @pytest.mark.parametrize("value", [
        None, 19841214, "", "14/12/1984", "1984-13-01", "1984-02-30", "2000-02-29", "1984-1-5",
    ])
    def test_invalid(self, value):
        assert parse_month_day(value) is None


class TestRanking:

    @pytest.fixture
    def wells(self):
        return [
            well(1, "1990-06-15 00:00:00"),
            well(2, "2001-01-02 00:00:00"),
            well(3, None),
            well(4, "1975-12-30 00:00:00"),
            well(5, "garbage"),
            well(6, "2010-01-01 00:00:00"),
            well(7, "1988-12-30 00:00:00"),
        ]

    def test_orders_by_circular_distance(self, wells):
        ranked = rank_by_calendar_proximity(wells, 12, 31)
        assert [r.record["licence"] for r in ranked] == [4, 6, 7, 2, 1]
        assert [r.distance_days for r in ranked] == [1, 1, 1, 2, 166]

    def test_ties_keep_input_order(self, wells):
        ranked = rank_by_calendar_proximity(wells, 12, 30)
        assert [r.record["licence"] for r in ranked[:2]] == [4, 7]

    def test_unparseable_dates_skipped(self, wells):
        licences = {r.record["licence"] for r in rank_by_calendar_proximity(wells, 1, 1)}
        assert 3 not in licences and 5 not in licences

    def test_limit(self, wells):
        assert len(rank_by_calendar_proximity(wells, 1, 1, limit=2)) == 2
        assert rank_by_calendar_proximity(wells, 1, 1, limit=0) == []

    def test_annotations(self, wells):
        top = rank_by_calendar_proximity(wells, 6, 14, limit=1)[0]
        assert (top.status_month, top.status_day, top.distance_days) == (6, 15, 1)

    def test_to_dict(self):
        ranked = rank_by_calendar_proximity([well(9, "1990-03-03", _id=12345, company="Acme")], 3, 1)
        d = ranked[0].to_dict()
        assert d["distance_days"] == 2
        assert d["status_month"] == 3
        assert d["status_day"] == 3
        assert d["company"] == "Acme"
        assert d["_id"] == "12345"

    @pytest.mark.parametrize("month,day", [(2, 29), (13, 1), (0, 5), (4, 31)])
    def test_invalid_target(self, wells, month, day):
        with pytest.raises(ValidationError):
            rank_by_calendar_proximity(wells, month, day)

    def test_non_integer_target(self, wells):
        with pytest.raises(ValidationError):
            rank_by_calendar_proximity(wells, "12", 1)


class TestResolveLimit:

    def test_default(self):
        assert resolve_limit(None) == 10

    def test_clamped_to_max(self):
        assert resolve_limit(500) == 50
        assert resolve_limit(500, EngineConfig(proximity_max_limit=5)) == 5

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            resolve_limit(-1)
