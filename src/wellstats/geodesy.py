"""
Great-circle distance and geodesic polygon area on a spherical Earth.

Inputs are WGS84 longitude/latitude in degrees. Both functions are
spherical approximations; the area formula is kept exactly as used by the
published statistics so reported values stay comparable.
"""

from typing import Sequence, Tuple, Union

import numpy as np


# Mean Earth radius used for point-to-point distances
EARTH_MEAN_RADIUS_M = 6_371_000.0

# WGS84 equatorial radius used for ring areas
WGS84_EQUATORIAL_RADIUS_M = 6_378_137.0

GeoPoint = Tuple[float, float]
ArrayLike = Union[float, np.ndarray]


def haversine_m(
    lon1: ArrayLike,
    lat1: ArrayLike,
    lon2: ArrayLike,
    lat2: ArrayLike,
    radius: float = EARTH_MEAN_RADIUS_M,
) -> np.ndarray:
    """
    Vectorised haversine distance in meters.
    
    Arguments broadcast against each other, so passing column and row
    vectors yields a full pairwise distance matrix.
    """
    lon1, lat1, lon2, lat2 = (np.radians(np.asarray(v, dtype=float)) for v in (lon1, lat1, lon2, lat2))
    
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    
    h = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    
    # Rounding can push h a hair above 1 for near-antipodal pairs
    return 2 * radius * np.arcsin(np.sqrt(np.minimum(h, 1.0)))


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two (lon, lat) points in meters."""
    return float(haversine_m(a[0], a[1], b[0], b[1]))


def polygon_area_m2(ring: Sequence[GeoPoint]) -> float:
    """
    Geodesic area of a closed (lon, lat) ring in square meters.
    
    Accumulates (lon2 - lon1) * (2 + sin(lat1) + sin(lat2)) over every
    consecutive edge in radians and scales |sum| by R^2 / 2 with the WGS84
    equatorial radius. The ring must already repeat its first point at the
    end; the result is always >= 0.
    
    Args:
        ring: Closed sequence of (lon, lat) pairs in degrees
    
    Returns:
        Area in m^2 (0.0 for rings with fewer than two points)
    """
    coords = np.radians(np.asarray(ring, dtype=float).reshape(-1, 2))
    
    if len(coords) < 2:
        return 0.0
    
    lon = coords[:, 0]
    lat = coords[:, 1]
    
    total = np.sum((lon[1:] - lon[:-1]) * (2 + np.sin(lat[:-1]) + np.sin(lat[1:])))
    
    return float(abs(total) * WGS84_EQUATORIAL_RADIUS_M ** 2 / 2)
