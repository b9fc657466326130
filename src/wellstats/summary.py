"""
Polygon statistics report.

Combines, for one geo-filtered batch of records and the polygon that
selected them:
- categorical tallies (companies, deviation x status, mineral rights, map status)
- status-date range and median
- geodesic area and point density
- mean nearest-neighbour distance and Clark–Evans NNI
- per-company shares and HHI over company counts

Spatial filtering happens upstream; every record passed in is treated as
inside the polygon.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from wellstats.concentration import ConcentrationReport, concentration_report, tally
from wellstats.config import EngineConfig
from wellstats.geodesy import polygon_area_m2
from wellstats.nearest_neighbor import (
    clark_evans,
    mean_nearest_neighbor_distance,
    point_density,
    select_cap,
)
from wellstats.records import frame_points, records_to_frame
from wellstats.rings import GeoPoint, normalize_ring
from wellstats.schemas import (
    DEVIATION_OUTCOME_SCHEMA,
    MAP_STATUS_SCHEMA,
    MINERAL_RIGHTS_SCHEMA,
    TOP_COMPANIES_SCHEMA,
    validate_schema,
)
from wellstats.time_utils import median_status_date, status_date_range, to_iso_utc


@dataclass
class PolygonStatsReport:
    """Aggregate statistics for the records inside one polygon."""
    ring: List[GeoPoint]
    count: int
    top_companies: List[Dict[str, Any]] = field(default_factory=list)
    deviation_vs_outcome: List[Dict[str, Any]] = field(default_factory=list)
    mineral_rights_split: List[Dict[str, Any]] = field(default_factory=list)
    map_status_split: List[Dict[str, Any]] = field(default_factory=list)
    status_date_summary: Optional[Dict[str, Optional[str]]] = None
    median_status_date: Optional[pd.Timestamp] = None
    area_m2: float = 0.0
    density_per_m2: Optional[float] = None
    wells_with_coords: int = 0
    mean_nnd_m: Optional[float] = None
    expected_mean_nnd_m: Optional[float] = None
    nni: Optional[float] = None
    nnd_used_n: int = 0
    nnd_capped: bool = False
    hhi: Optional[float] = None
    company_concentration: Optional[ConcentrationReport] = None
    
    @property
    def median_status_year(self) -> Optional[int]:
        if self.median_status_date is None:
            return None
        return int(self.median_status_date.year)
    
    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready report."""
        return {
            "polygon": {"type": "Polygon", "coordinates": [[list(p) for p in self.ring]]},
            "count": self.count,
            "top_companies": self.top_companies,
            "deviation_vs_outcome": self.deviation_vs_outcome,
            "mineral_rights_split": self.mineral_rights_split,
            "map_status_split": self.map_status_split,
            "status_date_summary": self.status_date_summary,
            "median_status_date": to_iso_utc(self.median_status_date),
            "median_status_year": self.median_status_year,
            "area_m2": self.area_m2,
            "density_per_km2": None if self.density_per_m2 is None else self.density_per_m2 * 1e6,
            "wells_with_coords": self.wells_with_coords,
            "mean_nnd_m": self.mean_nnd_m,
            "expected_mean_nnd_m": self.expected_mean_nnd_m,
            "nni": self.nni,
            "nnd_used_n": self.nnd_used_n,
            "nnd_capped": self.nnd_capped,
            "hhi": self.hhi,
            "company_shares": (
                [] if self.company_concentration is None
                else self.company_concentration.to_dict()["categories"]
            ),
        }


# =============================================================================
# Tallies
# =============================================================================

def tally_table(
    values: pd.Series,
    label_column: str,
    limit: Optional[int] = None,
) -> pd.DataFrame:
    """Label/count table, descending by count, optionally truncated."""
    counts = tally(values)
    if limit is not None:
        counts = counts.head(limit)
    
    table = pd.DataFrame({
        label_column: counts.index.astype(object),
        "count": counts.to_numpy(),
    })
    table["count"] = table["count"].astype("Int64")
    return table


def deviation_outcome_table(frame: pd.DataFrame) -> pd.DataFrame:
    """Counts per (deviation, status) pair, descending by count."""
    table = (
        frame.groupby(["deviation", "status"], sort=False)
        .size()
        .reset_index(name="count")
        .sort_values("count", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
    table["count"] = table["count"].astype("Int64")
    return table


def mineral_rights_table(frame: pd.DataFrame) -> pd.DataFrame:
    """Mineral-rights split with each category's share of the batch."""
    table = tally_table(frame["mineral_ri"], "mineral_ri")
    total = len(frame)
    table["pct"] = (table["count"].astype("float64") / total) if total else 0.0
    table["pct"] = table["pct"].astype("float64")
    return table


def _table_records(table: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame rows as plain-Python dicts (no numpy scalars)."""
    out = []
    for row in table.to_dict(orient="records"):
        out.append({
            key: int(value) if key == "count" else float(value) if key == "pct" else value
            for key, value in row.items()
        })
    return out


# =============================================================================
# Report
# =============================================================================

def summarize_polygon(
    records: Iterable[Any],
    coordinates: Iterable[Any],
    config: Optional[EngineConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> PolygonStatsReport:
    """
    Build the statistics report for the records inside a polygon.
    
    Args:
        records: Geo-filtered documents (dicts) or Record instances
        coordinates: Raw polygon ring as [lon, lat] pairs
        config: Engine configuration (defaults when None)
        rng: Random generator for the nearest-neighbour subsample. Defaults
            to one seeded from config.random_seed.
    
    Returns:
        PolygonStatsReport
    
    Raises:
        ValidationError: If the ring is rejected; nothing else is computed
    """
    config = config or EngineConfig()
    ring = normalize_ring(coordinates)
    
    frame = records_to_frame(records)
    count = len(frame)
    
    # Point, date and HHI metrics run over a bounded slice of the batch
    if config.metrics_row_limit is None:
        metrics = frame
    else:
        metrics = frame.head(config.metrics_row_limit)
    
    top_companies = tally_table(frame["company"], "company", limit=config.top_companies_limit)
    deviation_vs_outcome = deviation_outcome_table(frame)
    mineral_rights = mineral_rights_table(frame)
    map_status = tally_table(frame["map_status"], "map_status")
    
    validate_schema(top_companies, TOP_COMPANIES_SCHEMA, context="summarize_polygon")
    validate_schema(deviation_vs_outcome, DEVIATION_OUTCOME_SCHEMA, context="summarize_polygon")
    validate_schema(mineral_rights, MINERAL_RIGHTS_SCHEMA, context="summarize_polygon")
    validate_schema(map_status, MAP_STATUS_SCHEMA, context="summarize_polygon")
    
    points = frame_points(metrics)
    area_m2 = polygon_area_m2(ring)
    density = point_density(len(points), area_m2)
    
    if rng is None:
        rng = np.random.default_rng(config.random_seed)
    nnd = mean_nearest_neighbor_distance(points, cap=select_cap(len(points), config), rng=rng)
    expected_mean_nnd_m, nni = clark_evans(nnd.mean_m, density)
    
    company_counts = tally(metrics["company"])
    company_concentration = concentration_report(company_counts.to_dict(), total=count)
    
    return PolygonStatsReport(
        ring=ring,
        count=count,
        top_companies=_table_records(top_companies),
        deviation_vs_outcome=_table_records(deviation_vs_outcome),
        mineral_rights_split=_table_records(mineral_rights),
        map_status_split=_table_records(map_status),
        status_date_summary=status_date_range(frame["status_date"]) if count else None,
        median_status_date=median_status_date(metrics["status_date"]),
        area_m2=area_m2,
        density_per_m2=density,
        wells_with_coords=len(points),
        mean_nnd_m=nnd.mean_m,
        expected_mean_nnd_m=expected_mean_nnd_m,
        nni=nni,
        nnd_used_n=nnd.used_n,
        nnd_capped=nnd.capped,
        hhi=company_concentration.hhi,
        company_concentration=company_concentration,
    )


async def summarize_polygon_async(
    records: Iterable[Any],
    coordinates: Iterable[Any],
    config: Optional[EngineConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> PolygonStatsReport:
    """summarize_polygon on a worker thread, keeping the event loop free."""
    records = list(records)
    return await asyncio.to_thread(summarize_polygon, records, coordinates, config, rng)
