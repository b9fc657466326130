"""
Polygon ring normalisation for user-drawn query polygons.

Rings arrive as raw [lon, lat] arrays. Out-of-range coordinates are clamped
rather than rejected. A ring needs at least 4 points once closed, so
open triangles and anything smaller are rejected.
Self-intersection and winding order are not checked.
"""

from typing import Any, List, Sequence, Tuple

from shapely.geometry import Polygon

from wellstats.qa import ValidationError, is_lon_lat_pair


GeoPoint = Tuple[float, float]

# Minimum input size, and minimum size after closing
MIN_RING_POINTS = 3
MIN_CLOSED_RING_POINTS = 4


def clamp_lon_lat(point: Sequence[float]) -> GeoPoint:
    """Clip longitude to [-180, 180] and latitude to [-90, 90]."""
    lon, lat = point
    return (
        max(-180.0, min(180.0, float(lon))),
        max(-90.0, min(90.0, float(lat))),
    )


def close_ring_if_needed(
    ring: Sequence[GeoPoint],
    min_points: int = MIN_CLOSED_RING_POINTS,
) -> List[GeoPoint]:
    """
    Append the first point to the end of the ring unless already closed.

    Rings shorter than `min_points` are returned unchanged; callers
    reject them. Closure is exact coordinate equality.
    """
    ring = list(ring)
    if len(ring) < min_points:
        return ring
    
    first = ring[0]
    last = ring[-1]
    if first[0] == last[0] and first[1] == last[1]:
        return ring
    return ring + [first]


def normalize_ring(coordinates: Sequence[Any]) -> List[GeoPoint]:
    """
    Validate, clamp and close a raw ring.
    
    Args:
        coordinates: Sequence of [lon, lat] pairs; at least 4 once closed
    
    Returns:
        Closed ring of clamped (lon, lat) tuples
    
    Raises:
        ValidationError: If the ring is too small or contains malformed points
    """
    if coordinates is None or isinstance(coordinates, (str, bytes)):
        raise ValidationError("ring must be a sequence of [lon, lat] pairs")
    
    points = list(coordinates)
    if len(points) < MIN_RING_POINTS:
        raise ValidationError("ring too small")
    
    for i, point in enumerate(points):
        if not is_lon_lat_pair(point):
            raise ValidationError(f"ring point {i} is not a finite [lon, lat] pair: {point!r}")
    
    # Open triangles stay at 3 points here and are rejected below
    ring = close_ring_if_needed([clamp_lon_lat(p) for p in points])

    if len(ring) < MIN_CLOSED_RING_POINTS:
        raise ValidationError("ring too small")
    
    return ring


def ring_from_polygon_coordinates(coordinates: Sequence[Any]) -> List[GeoPoint]:
    """
    Normalise the outer ring of GeoJSON Polygon coordinates.
    
    Holes (rings after the first) are ignored.
    """
    if not coordinates:
        raise ValidationError("polygon has no rings")
    return normalize_ring(coordinates[0])


def ring_to_polygon(ring: Sequence[GeoPoint]) -> Polygon:
    """Shapely polygon for a normalised ring."""
    return Polygon(ring)
