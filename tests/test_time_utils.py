"""
Tests for status-date parsing, median and range.
"""

import pandas as pd
import pytest

from wellstats.time_utils import (
    median_status_date,
    median_timestamp,
    parse_status_dates,
    status_date_range,
    to_iso_utc,
)


EPOCH = pd.Timestamp("1970-01-01", tz="UTC")


class TestParse:

    def test_parses_iso_like_strings(self):
        parsed = parse_status_dates(["1984-12-14 00:00:00", "2001-05-06", "2010-01-01T06:30:00"])
        assert len(parsed) == 3
        assert parsed.iloc[0] == pd.Timestamp("1984-12-14", tz="UTC")

    def test_drops_unparseable_and_missing(self):
        parsed = parse_status_dates(["1984-12-14 00:00:00", None, "not a date", "", 12345])
        assert len(parsed) == 1

    def test_empty(self):
        assert len(parse_status_dates([])) == 0


class TestMedian:

    def test_empty_is_none(self):
        assert median_timestamp([]) is None
        assert median_status_date([None, "bad"]) is None

    def test_single(self):
        ts = pd.Timestamp("1999-09-09", tz="UTC")
        assert median_timestamp([ts]) == ts

    def test_two_dates_mean(self):
        """Day 0 and day 10 after the epoch -> day 5."""
        dates = [EPOCH, EPOCH + pd.Timedelta(days=10)]
        assert median_timestamp(dates) == EPOCH + pd.Timedelta(days=5)

    def test_odd_count_is_central(self):
        values = ["2005-01-01", "1990-01-01", "2020-01-01"]
        assert median_status_date(values) == pd.Timestamp("2005-01-01", tz="UTC")

    def test_even_count_unsorted_input(self):
        values = ["2000-01-11", "2000-01-01", "2000-01-31", "2000-01-21"]
        assert median_status_date(values) == pd.Timestamp("2000-01-16", tz="UTC")


class TestRange:

    def test_lexicographic_min_max(self):
        values = ["1999-12-31 00:00:00", "1984-01-01 00:00:00", None, "2010-06-01 00:00:00"]
        assert status_date_range(values) == {
            "min_status_date": "1984-01-01 00:00:00",
            "max_status_date": "2010-06-01 00:00:00",
        }

    def test_no_dates(self):
        assert status_date_range([None, 5]) == {"min_status_date": None, "max_status_date": None}


class TestIsoFormatting:

    def test_utc_millis(self):
        ts = pd.Timestamp("1984-12-14 00:00:00.123456", tz="UTC")
        assert to_iso_utc(ts) == "1984-12-14T00:00:00.123Z"

    def test_naive_treated_as_utc(self):
        assert to_iso_utc(pd.Timestamp("2000-01-01")) == "2000-01-01T00:00:00.000Z"

    def test_none(self):
        assert to_iso_utc(None) is None

    def test_rounds_to_nearest_millisecond(self):
        assert to_iso_utc(pd.Timestamp("2000-01-01 00:00:00.123600", tz="UTC")) == "2000-01-01T00:00:00.124Z"

    def test_half_millisecond_rounds_up(self):
        assert to_iso_utc(pd.Timestamp("2000-01-01 00:00:00.002500", tz="UTC")) == "2000-01-01T00:00:00.003Z"

    def test_rounding_carries_into_seconds(self):
        assert to_iso_utc(pd.Timestamp("1999-12-31 23:59:59.999700", tz="UTC")) == "2000-01-01T00:00:00.000Z"

    def test_median_of_adjacent_milliseconds(self):
        median = median_status_date(["2000-01-01T00:00:00.001", "2000-01-01T00:00:00.002"])
        assert to_iso_utc(median) == "2000-01-01T00:00:00.002Z"
