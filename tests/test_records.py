"""
Tests for record normalisation and the per-record frame.
"""

import numpy as np
import pandas as pd
import pytest

from wellstats.records import (
    UNKNOWN,
    Record,
    extract_point,
    frame_points,
    records_to_frame,
)
from wellstats.schemas import (
    MAP_STATUS_SCHEMA,
    MINERAL_RIGHTS_SCHEMA,
    SchemaError,
    TOP_COMPANIES_SCHEMA,
    validate_schema,
)


class TestExtractPoint:

    def test_geojson_point(self):
        assert extract_point({"type": "Point", "coordinates": [-114.1, 51.05]}) == (-114.1, 51.05)

    @pytest.mark.parametrize("location", [
        None,
        "POINT (1 2)",
        {"type": "Point"},
        {"coordinates": [1.0]},
        {"coordinates": [1.0, 2.0, 3.0]},
        {"coordinates": [float("nan"), 2.0]},
        {"coordinates": ["1", "2"]},
    ])
    def test_unusable_locations(self, location):
        assert extract_point(location) is None


class TestRecord:

    def test_from_document(self):
        record = Record.from_document({
            "_id": "abc",
            "company": "Acme",
            "status": None,
            "status_date": "1984-12-14 00:00:00",
            "location": {"type": "Point", "coordinates": [1, 2]},
        })
        assert record.company == "Acme"
        assert record.status is None
        assert record.status_date == "1984-12-14 00:00:00"
        assert record.location == (1.0, 2.0)

    def test_nan_fields_are_missing(self):
        record = Record.from_document({"company": float("nan"), "status_date": float("nan")})
        assert record.company is None
        assert record.status_date is None


class TestRecordFrame:

    def test_columns_and_unknowns(self):
        frame = records_to_frame([
            {"company": "Acme", "location": {"coordinates": [1, 2]}},
            {"company": "", "deviation": "Vertical"},
        ])
        assert list(frame.columns) == [
            "company", "status", "map_status", "deviation", "mineral_ri",
            "status_date", "lon", "lat",
        ]
        assert frame["company"].tolist() == ["Acme", ""]
        assert frame["status"].tolist() == [UNKNOWN, UNKNOWN]
        assert frame["lon"].dtype == np.float64
        assert np.isnan(frame.loc[1, "lon"])

    def test_accepts_record_instances(self):
        frame = records_to_frame([Record(company="A", location=(0.5, 0.5))])
        assert frame_points(frame).tolist() == [[0.5, 0.5]]

    def test_empty(self):
        frame = records_to_frame([])
        assert len(frame) == 0
        assert frame_points(frame).shape == (0, 2)

    def test_frame_points_skips_missing(self):
        frame = records_to_frame([
            {"location": {"coordinates": [1, 2]}},
            {"location": None},
            {"location": {"coordinates": [3, 4]}},
        ])
        assert frame_points(frame).tolist() == [[1.0, 2.0], [3.0, 4.0]]


class TestSchemas:

    def test_pct_out_of_range(self):
        table = pd.DataFrame({
            "mineral_ri": ["Crown"],
            "count": pd.array([1], dtype="Int64"),
            "pct": [1.5],
        })
        with pytest.raises(SchemaError):
            validate_schema(table, MINERAL_RIGHTS_SCHEMA)

    def test_collect_errors_without_raising(self):
        table = pd.DataFrame({"company": ["A", "A"], "count": [1.0, 2.0]})
        errors = validate_schema(table, TOP_COMPANIES_SCHEMA, raise_on_error=False)
        assert any("duplicate" in e for e in errors)
        assert any("expected Int64" in e for e in errors)

    def test_missing_columns(self):
        errors = validate_schema(pd.DataFrame({"x": [1]}), MAP_STATUS_SCHEMA, raise_on_error=False)
        assert any("Missing required columns" in e for e in errors)
