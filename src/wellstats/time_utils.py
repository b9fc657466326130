"""
Status-date helpers: parsing, median and lexicographic range.

Status dates are ISO-like strings ("1984-12-14 00:00:00"). Naive values are
read as UTC. Anything that does not parse is dropped from date statistics
rather than raised.
"""

from typing import Any, Dict, Iterable, Optional

import pandas as pd


def parse_status_dates(values: Iterable[Any]) -> pd.Series:
    """
    Parse ISO-like date strings into UTC timestamps.
    
    Non-string values and strings pandas cannot read as ISO 8601 are
    dropped. The returned Series keeps the original positions as index.
    
    Args:
        values: Raw status_date values
    
    Returns:
        Series of tz-aware (UTC) timestamps, NaT removed
    """
    series = pd.Series(list(values), dtype="object")
    is_text = series.map(lambda v: isinstance(v, str) and v.strip() != "").astype(bool)
    series = series.where(is_text)
    
    parsed = pd.to_datetime(series, errors="coerce", utc=True, format="ISO8601")
    return parsed.dropna()


def median_timestamp(timestamps: Iterable[pd.Timestamp]) -> Optional[pd.Timestamp]:
    """
    Median of a set of timestamps.
    
    Odd counts return the central timestamp, even counts the arithmetic
    mean of the two central ones. Empty input returns None.
    """
    ordered = sorted(pd.Timestamp(t) for t in timestamps if not pd.isna(t))
    if not ordered:
        return None
    
    mid = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[mid]
    
    lower, upper = ordered[mid - 1], ordered[mid]
    return lower + (upper - lower) / 2


def median_status_date(values: Iterable[Any]) -> Optional[pd.Timestamp]:
    """Median over the parseable status dates in `values`."""
    return median_timestamp(parse_status_dates(values))


def status_date_range(values: Iterable[Any]) -> Dict[str, Optional[str]]:
    """
    Lexicographic min/max over string status dates.
    
    Well-formed ISO-like strings sort chronologically, so no parsing is
    needed. Missing and non-string values are ignored.
    """
    dates = [v for v in values if isinstance(v, str)]
    return {
        "min_status_date": min(dates) if dates else None,
        "max_status_date": max(dates) if dates else None,
    }


def to_iso_utc(ts: Optional[pd.Timestamp]) -> Optional[str]:
    """ISO 8601 string rounded to the nearest millisecond (halves up), trailing Z."""
    if ts is None:
        return None
    ts = pd.Timestamp(ts)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    else:
        ts = ts.tz_convert("UTC")
    ts = (ts + pd.Timedelta(microseconds=500)).floor("ms")
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"
