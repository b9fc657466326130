"""
Rank records by how close their status date falls to a target month/day.

Only the month/day of a record's date matters (the year is ignored), and
distance wraps around the year end: Dec 31 and Jan 1 are one day apart.
Days are counted in a fixed non-leap reference year, so Feb 29 is not a
valid target and Feb 29 record dates are skipped.
"""

import re
from dataclasses import dataclass
from datetime import date
from numbers import Integral
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from wellstats.config import EngineConfig
from wellstats.qa import ValidationError


REFERENCE_YEAR = 2001
DAYS_IN_YEAR = 365

_MONTH_DAY_RE = re.compile(r"^\s*\d{4}-(\d{2})-(\d{2})")


def day_of_year(month: int, day: int) -> int:
    """
    1-indexed day of the reference year (Jan 1 -> 1, Dec 31 -> 365).
    
    Raises:
        ValueError: If (month, day) is not a date in the reference year
    """
    return date(REFERENCE_YEAR, month, day).timetuple().tm_yday


def circular_day_diff(a: int, b: int) -> int:
    """Shortest distance between two days of year around a 365-day cycle."""
    diff = abs(a - b)
    return min(diff, DAYS_IN_YEAR - diff)


def parse_month_day(value: Any) -> Optional[Tuple[int, int]]:
    """
    (month, day) of an ISO-like "YYYY-MM-DD..." string.
    
    Returns None for non-strings, other shapes and dates that do not exist
    in the reference year.
    """
    if not isinstance(value, str):
        return None
    
    match = _MONTH_DAY_RE.match(value)
    if match is None:
        return None
    
    month, day = int(match.group(1)), int(match.group(2))
    try:
        day_of_year(month, day)
    except ValueError:
        return None
    return month, day


@dataclass(frozen=True)
class RankedProximityRecord:
    """A record annotated with its circular day distance to the target."""
    record: Mapping[str, Any]
    distance_days: int
    status_month: int
    status_day: int
    
    def to_dict(self) -> Dict[str, Any]:
        out = {
            "distance_days": self.distance_days,
            "status_month": self.status_month,
            "status_day": self.status_day,
            **self.record,
        }
        if "_id" in out:
            out["_id"] = str(out["_id"])
        return out


def resolve_limit(limit: Optional[int], config: Optional[EngineConfig] = None) -> int:
    """Requested limit, defaulted and clamped to the configured maximum."""
    config = config or EngineConfig()
    if limit is None:
        limit = config.proximity_default_limit
    
    if isinstance(limit, bool) or not isinstance(limit, Integral):
        raise ValidationError(f"limit must be an integer, got {limit!r}")
    if limit < 0:
        raise ValidationError(f"limit must be >= 0, got {limit}")
    
    return min(int(limit), config.proximity_max_limit)


def rank_by_calendar_proximity(
    records: Iterable[Mapping[str, Any]],
    month: int,
    day: int,
    limit: Optional[int] = None,
    config: Optional[EngineConfig] = None,
    date_field: str = "status_date",
) -> List[RankedProximityRecord]:
    """
    Records ordered by circular distance between their date and (month, day).
    
    Args:
        records: Candidate documents
        month: Target month (1-12)
        day: Target day of month
        limit: Maximum results (default and ceiling from config)
        config: Engine configuration
        date_field: Record field holding the date string
    
    Returns:
        Ranked records, nearest first; ties keep input order
    
    Raises:
        ValidationError: If the target is not a valid reference-year date
            or the limit is invalid
    """
    for name, value in (("month", month), ("day", day)):
        if isinstance(value, bool) or not isinstance(value, Integral):
            raise ValidationError(f"{name} must be an integer, got {value!r}")
    try:
        target = day_of_year(int(month), int(day))
    except ValueError as e:
        raise ValidationError(f"invalid target month/day {month}/{day}: {e}") from e
    
    limit = resolve_limit(limit, config)
    
    ranked = []
    for record in records:
        month_day = parse_month_day(record.get(date_field))
        if month_day is None:
            continue
        rec_month, rec_day = month_day
        ranked.append(RankedProximityRecord(
            record=record,
            distance_days=circular_day_diff(day_of_year(rec_month, rec_day), target),
            status_month=rec_month,
            status_day=rec_day,
        ))
    
    # sorted() is stable, so equal distances keep input order
    ranked = sorted(ranked, key=lambda r: r.distance_days)
    return ranked[:limit]
