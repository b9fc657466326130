"""
Upstream polygon selection for file-based runs.

In the service the document store performs the polygon filter. Scripts
working from a wells layer on disk do it here with shapely, then hand the
engine the same document-shaped records the store would return.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import geopandas as gpd
import pandas as pd

from wellstats.qa import WGS84_EPSG, assert_expected_crs
from wellstats.rings import GeoPoint, ring_to_polygon


STATUS_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def records_within_ring(
    gdf: gpd.GeoDataFrame,
    ring: Sequence[GeoPoint],
    limit: Optional[int] = None,
) -> gpd.GeoDataFrame:
    """
    Rows of `gdf` whose geometry lies inside or on the ring boundary.
    
    Args:
        gdf: Wells layer in EPSG:4326
        ring: Normalised (closed) ring
        limit: Keep at most this many rows, in layer order
    
    Returns:
        Filtered copy of gdf
    
    Raises:
        CRSError: If the layer is not EPSG:4326
    """
    assert_expected_crs(gdf, WGS84_EPSG, "wells layer")
    
    polygon = ring_to_polygon(ring)
    inside = gdf.geometry.covered_by(polygon)
    
    selected = gdf[inside]
    if limit is not None:
        selected = selected.head(limit)
    return selected.copy()


def _plain_value(value: Any) -> Any:
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.strftime(STATUS_DATE_FORMAT)
    if hasattr(value, "item"):
        # numpy scalar -> Python scalar
        return value.item()
    return value


def gdf_to_records(gdf: gpd.GeoDataFrame) -> List[Dict[str, Any]]:
    """
    Convert a wells layer into document-shaped records.
    
    Point geometries become `location: {"type": "Point", "coordinates": [lon, lat]}`;
    other or empty geometries give `location: None`.
    """
    geometry_name = gdf.geometry.name
    attributes = pd.DataFrame(gdf.drop(columns=geometry_name))
    
    records = []
    for (_, row), geom in zip(attributes.iterrows(), gdf.geometry):
        doc = {key: _plain_value(value) for key, value in row.items()}
        if geom is not None and not geom.is_empty and geom.geom_type == "Point":
            doc["location"] = {"type": "Point", "coordinates": [geom.x, geom.y]}
        else:
            doc["location"] = None
        records.append(doc)
    
    return records
