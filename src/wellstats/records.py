"""
Drilling records as handed over by the query layer.

Documents arrive as plain dicts (already geo-filtered). They are normalised
into Record objects and a pandas frame with one row per record, missing
categorical values mapped to "Unknown".
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from wellstats.qa import is_lon_lat_pair
from wellstats.schemas import RECORD_FRAME_SCHEMA, validate_schema


UNKNOWN = "Unknown"

CATEGORY_FIELDS = ("company", "status", "map_status", "deviation", "mineral_ri")

GeoPoint = Tuple[float, float]


def extract_point(location: Any) -> Optional[GeoPoint]:
    """
    (lon, lat) from a GeoJSON-style location, or None.
    
    Only a 2-element coordinate sequence of finite numbers counts.
    """
    if not isinstance(location, Mapping):
        return None
    coords = location.get("coordinates")
    if not is_lon_lat_pair(coords):
        return None
    return float(coords[0]), float(coords[1])


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    return str(value)


def _label(value: Optional[str]) -> str:
    return UNKNOWN if value is None else value


@dataclass(frozen=True)
class Record:
    """One drilling record reduced to the fields the statistics use."""
    company: Optional[str] = None
    status: Optional[str] = None
    map_status: Optional[str] = None
    deviation: Optional[str] = None
    mineral_ri: Optional[str] = None
    status_date: Optional[str] = None
    location: Optional[GeoPoint] = None
    
    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Record":
        # Dates stay as given; non-string dates are dropped by the date parsers
        status_date = doc.get("status_date")
        if isinstance(status_date, float) and np.isnan(status_date):
            status_date = None
        
        return cls(
            **{name: _optional_str(doc.get(name)) for name in CATEGORY_FIELDS},
            status_date=status_date,
            location=extract_point(doc.get("location")),
        )


def records_to_frame(records: Iterable[Any]) -> pd.DataFrame:
    """
    Build the per-record frame used by the aggregations.
    
    Args:
        records: Documents (dicts) or Record instances
    
    Returns:
        DataFrame with normalised category columns, raw status_date and
        float lon/lat (NaN when the record has no usable location)
    """
    rows: List[dict] = []
    for item in records:
        record = item if isinstance(item, Record) else Record.from_document(item)
        lon, lat = record.location if record.location is not None else (np.nan, np.nan)
        row = {name: _label(getattr(record, name)) for name in CATEGORY_FIELDS}
        row["status_date"] = record.status_date
        row["lon"] = lon
        row["lat"] = lat
        rows.append(row)
    
    columns = [*CATEGORY_FIELDS, "status_date", "lon", "lat"]
    frame = pd.DataFrame(rows, columns=columns)
    frame["lon"] = frame["lon"].astype("float64")
    frame["lat"] = frame["lat"].astype("float64")
    
    validate_schema(frame, RECORD_FRAME_SCHEMA, context="records_to_frame")
    return frame


def frame_points(frame: pd.DataFrame) -> np.ndarray:
    """(n, 2) array of lon/lat for rows that have a location."""
    has_point = frame["lon"].notna() & frame["lat"].notna()
    return frame.loc[has_point, ["lon", "lat"]].to_numpy(dtype=float)
