"""
Tests for mean nearest-neighbour distance and the Clark–Evans index.
"""

import math

import numpy as np
import pytest

from wellstats.config import EngineConfig
from wellstats.geodesy import distance_meters
from wellstats.nearest_neighbor import (
    NearestNeighborResult,
    clark_evans,
    mean_nearest_neighbor_distance,
    nearest_neighbor_distances,
    point_density,
    select_cap,
    shuffled_sample,
)


@pytest.fixture
def cluster():
    """300 random points in a ~1 km box near Calgary."""
    rng = np.random.default_rng(42)
    lon = -114.07 + rng.uniform(0, 0.014, 300)
    lat = 51.05 + rng.uniform(0, 0.009, 300)
    return np.column_stack([lon, lat])


class TestSmallInputs:

    def test_empty(self):
        assert mean_nearest_neighbor_distance([]) == NearestNeighborResult(None, 0, False)

    def test_single_point(self):
        result = mean_nearest_neighbor_distance([(0.0, 0.0)])
        assert result.mean_m is None
        assert result.used_n == 1
        assert result.capped is False

    def test_two_points(self):
        a, b = (0.0, 0.0), (0.001, 0.0)
        result = mean_nearest_neighbor_distance([a, b])
        assert result.mean_m == pytest.approx(distance_meters(a, b))
        assert result.used_n == 2
        assert not result.capped

    def test_known_minima(self):
        """Collinear points at 0, 1 and 3 units: minima are d01, d01, d12."""
        pts = [(0.0, 0.0), (0.001, 0.0), (0.003, 0.0)]
        d01 = distance_meters(pts[0], pts[1])
        d12 = distance_meters(pts[1], pts[2])
        expected = (d01 + d01 + d12) / 3
        assert mean_nearest_neighbor_distance(pts).mean_m == pytest.approx(expected)

    def test_duplicate_points_give_zero(self):
        result = mean_nearest_neighbor_distance([(1.0, 1.0), (1.0, 1.0)])
        assert result.mean_m == 0.0

    def test_cap_below_two_rejected(self):
        with pytest.raises(ValueError):
            mean_nearest_neighbor_distance([(0, 0), (1, 1)], cap=1)


class TestSubsampling:

    def test_capped_uses_cap(self, cluster):
        result = mean_nearest_neighbor_distance(cluster, cap=100, rng=np.random.default_rng(0))
        assert result.used_n == 100
        assert result.capped is True

    def test_not_capped_at_exact_cap(self, cluster):
        result = mean_nearest_neighbor_distance(cluster, cap=300)
        assert result.used_n == 300
        assert result.capped is False

    def test_reproducible_with_seed(self, cluster):
        a = mean_nearest_neighbor_distance(cluster, cap=50, rng=np.random.default_rng(123))
        b = mean_nearest_neighbor_distance(cluster, cap=50, rng=np.random.default_rng(123))
        assert a == b

    def test_subsample_mean_larger_than_full(self, cluster):
        """Thinning a pattern spreads the remaining points further apart."""
        full = mean_nearest_neighbor_distance(cluster, cap=1500)
        thin = mean_nearest_neighbor_distance(cluster, cap=30, rng=np.random.default_rng(1))
        assert thin.mean_m > full.mean_m

    def test_shuffled_sample_rows_come_from_input(self, cluster):
        sample = shuffled_sample(cluster, 20, np.random.default_rng(5))
        assert sample.shape == (20, 2)
        as_set = {tuple(row) for row in cluster}
        assert all(tuple(row) in as_set for row in sample)
        assert len({tuple(row) for row in sample}) == 20

    def test_shuffle_is_uniform_over_positions(self):
        """Each element lands first about equally often."""
        coords = np.arange(8, dtype=float).reshape(4, 2)
        rng = np.random.default_rng(2024)
        firsts = [shuffled_sample(coords, 1, rng)[0, 0] for _ in range(4000)]
        _, counts = np.unique(firsts, return_counts=True)
        assert len(counts) == 4
        assert counts.min() > 850 and counts.max() < 1150

    def test_distances_exclude_self(self):
        coords = np.array([[0.0, 0.0], [0.0, 0.001]])
        minima = nearest_neighbor_distances(coords)
        assert np.all(minima > 0)


class TestSelectCap:

    def test_default_cap(self):
        assert select_cap(100) == 1500
        assert select_cap(4000) == 1500

    def test_large_input_cap(self):
        assert select_cap(4001) == 1200

    def test_configured_caps(self):
        config = EngineConfig(nnd_cap=50, nnd_cap_large_input=20, nnd_large_input_threshold=100)
        assert select_cap(100, config) == 50
        assert select_cap(101, config) == 20


class TestClarkEvans:

    def test_density_guards(self):
        assert point_density(0, 1000.0) is None
        assert point_density(10, 0.0) is None
        assert point_density(10, 1000.0) == pytest.approx(0.01)

    def test_expected_distance(self):
        expected, nni = clark_evans(5.0, 0.01)
        assert expected == pytest.approx(1 / (2 * math.sqrt(0.01)))
        assert nni == pytest.approx(5.0 / expected)

    def test_unavailable_inputs(self):
        assert clark_evans(None, 0.01) == (None, None)
        assert clark_evans(5.0, None) == (None, None)
        assert clark_evans(5.0, 0.0) == (None, None)

    def test_random_pattern_near_one(self, cluster):
        """Uniform random points over a box should give NNI close to 1."""
        ring_area = (
            distance_meters((-114.07, 51.05), (-114.056, 51.05))
            * distance_meters((-114.07, 51.05), (-114.07, 51.059))
        )
        result = mean_nearest_neighbor_distance(cluster)
        _, nni = clark_evans(result.mean_m, point_density(len(cluster), ring_area))
        # Edge effects bias NNI upward for small samples
        assert 0.8 < nni < 1.3

    def test_clustered_pattern_below_one(self):
        rng = np.random.default_rng(3)
        centers = np.array([[-114.07, 51.05], [-114.06, 51.055]])
        pts = np.vstack([c + rng.normal(0, 0.0002, (100, 2)) for c in centers])
        area = 1_000_000.0
        result = mean_nearest_neighbor_distance(pts)
        _, nni = clark_evans(result.mean_m, point_density(len(pts), area))
        assert nni < 0.5
