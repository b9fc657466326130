"""
Mean nearest-neighbour distance and the Clark–Evans dispersion index.

The nearest-neighbour scan is brute force (O(m^2) haversine evaluations),
so large point sets are reduced to a uniform random subsample of at most
`cap` points first. Clark–Evans compares the observed mean distance with
the 1 / (2 * sqrt(density)) expected under complete spatial randomness:
NNI < 1 means clustering, ~1 randomness, > 1 regular spacing.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from wellstats.config import EngineConfig
from wellstats.geodesy import haversine_m


PointsLike = Union[np.ndarray, Sequence[Sequence[float]]]


@dataclass(frozen=True)
class NearestNeighborResult:
    """Mean NND in meters (None below two points), points used, subsampled flag."""
    mean_m: Optional[float]
    used_n: int
    capped: bool


def select_cap(raw_n: int, config: Optional[EngineConfig] = None) -> int:
    """
    Subsample cap for a point set of `raw_n` points.
    
    Very large inputs get the lower cap to keep latency bounded.
    """
    config = config or EngineConfig()
    if raw_n > config.nnd_large_input_threshold:
        return config.nnd_cap_large_input
    return config.nnd_cap


def shuffled_sample(
    coords: np.ndarray,
    size: int,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    First `size` rows of a uniformly shuffled copy of `coords`.
    
    `rng` is injectable so tests can pin the permutation with a seed.
    """
    if rng is None:
        rng = np.random.default_rng()
    order = rng.permutation(len(coords))
    return coords[order[:size]]


def nearest_neighbor_distances(coords: np.ndarray) -> np.ndarray:
    """Distance in meters from each (lon, lat) row to its nearest other row."""
    lon = coords[:, 0]
    lat = coords[:, 1]
    
    dist = haversine_m(lon[:, None], lat[:, None], lon[None, :], lat[None, :])
    np.fill_diagonal(dist, np.inf)
    
    return dist.min(axis=1)


def mean_nearest_neighbor_distance(
    points: PointsLike,
    cap: int = 1500,
    rng: Optional[np.random.Generator] = None,
) -> NearestNeighborResult:
    """
    Mean nearest-neighbour distance over a set of (lon, lat) points.
    
    Args:
        points: (lon, lat) pairs with finite coordinates
        cap: Maximum working-set size; larger inputs are subsampled
        rng: Random generator for the subsample
    
    Returns:
        NearestNeighborResult
    """
    if cap < 2:
        raise ValueError(f"cap must be at least 2, got {cap}")
    
    coords = np.asarray(points, dtype=float).reshape(-1, 2)
    n = len(coords)
    
    if n < 2:
        return NearestNeighborResult(mean_m=None, used_n=n, capped=False)
    
    capped = n > cap
    if capped:
        coords = shuffled_sample(coords, cap, rng)
    
    minima = nearest_neighbor_distances(coords)
    
    return NearestNeighborResult(
        mean_m=float(minima.mean()),
        used_n=len(coords),
        capped=capped,
    )


def point_density(point_count: int, area_m2: float) -> Optional[float]:
    """Points per square meter, or None when area or count is zero."""
    if area_m2 is None or area_m2 <= 0 or point_count <= 0:
        return None
    return point_count / area_m2


def clark_evans(
    mean_nnd_m: Optional[float],
    density_per_m2: Optional[float],
) -> Tuple[Optional[float], Optional[float]]:
    """
    Expected mean NND under complete spatial randomness and the NNI.
    
    Returns:
        (expected_mean_nnd_m, nni), both None if either input is unavailable
    """
    if mean_nnd_m is None or density_per_m2 is None or density_per_m2 <= 0:
        return None, None
    
    expected = 1 / (2 * math.sqrt(density_per_m2))
    return expected, mean_nnd_m / expected
