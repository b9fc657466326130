"""
Quality assurance utilities for engine inputs.

- CRS mismatches are hard errors. No silent overrides.
- Malformed request input (rings, proximity targets) raises ValidationError
  before any computation is attempted.
"""

import math
from numbers import Real
from typing import Any

import geopandas as gpd
from pyproj import CRS


# WGS84 geographic coordinates are the only supported input projection
WGS84_EPSG = 4326


class ValidationError(Exception):
    """Caller-supplied input (ring, proximity target, limit) was rejected."""


class CRSError(Exception):
    """A layer is not in the expected coordinate reference system."""


# =============================================================================
# Scalar checks
# =============================================================================

def is_finite_number(value: Any) -> bool:
    """True for finite ints/floats. Booleans are not coordinates."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def is_lon_lat_pair(value: Any) -> bool:
    """True if value is a 2-sequence of finite numbers."""
    if isinstance(value, (str, bytes, dict)):
        return False
    try:
        if len(value) != 2:
            return False
    except TypeError:
        return False
    return is_finite_number(value[0]) and is_finite_number(value[1])


# =============================================================================
# CRS Validation
# =============================================================================

def _in_context(message: str, context: str) -> str:
    return f"{message} ({context})" if context else message


def assert_expected_crs(
    gdf: gpd.GeoDataFrame,
    expected_epsg: int = WGS84_EPSG,
    context: str = "",
) -> None:
    """
    Fail unless `gdf` is tagged with EPSG:`expected_epsg`.

    Layers without a CRS are rejected too; nothing is reprojected or
    assumed.

    Raises:
        CRSError: On a missing or different CRS
    """
    if gdf.crs is None:
        raise CRSError(_in_context("Layer has no CRS set", context))

    if not gdf.crs.equals(CRS.from_epsg(expected_epsg)):
        raise CRSError(_in_context(
            f"CRS mismatch: expected EPSG:{expected_epsg}, got {gdf.crs.to_string()}",
            context,
        ))
