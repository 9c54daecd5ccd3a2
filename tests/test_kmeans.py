"""
Unit tests for the k-means quantizer.

Covers k-means++ seeding, nearest-centroid assignment, centroid updates
with empty-cluster reseeding, and the termination guarantees of the full
run.
"""
import re

import numpy as np
import pytest

from palettesnap.services.colors.kmeans import (
    assign_pixels, distinct_colors, kmeans_palette, run_kmeans, seed_centroids, update_centroids
)

HEX_RE = re.compile(r"^#[0-9A-F]{6}$")


@pytest.fixture
def three_clusters():
    """300 pixels in three tight, well separated groups"""
    rng = np.random.default_rng(11)
    centers = np.array([[20, 30, 200], [220, 40, 40], [60, 200, 80]])
    groups = [np.clip(center + rng.integers(-4, 5, size=(100, 3)), 0, 255) for center in centers]
    return np.vstack(groups).astype(np.uint8)


class TestDistinctColors:
    def test_first_occurrence_order(self):
        pixels = np.array([[5, 5, 5], [1, 1, 1], [5, 5, 5], [3, 3, 3]], dtype=np.uint8)
        np.testing.assert_array_equal(distinct_colors(pixels), [[5, 5, 5], [1, 1, 1], [3, 3, 3]])


class TestSeedCentroids:
    """Test k-means++ seeding"""

    def test_seeds_are_distinct_input_colors(self):
        distinct = np.array([[0, 0, 0], [255, 255, 255], [255, 0, 0], [0, 0, 255]], dtype=np.uint8)
        seeds = seed_centroids(distinct, 4, rng=5)
        assert {tuple(row) for row in seeds.astype(int)} == {tuple(row) for row in distinct.astype(int)}

    def test_seeding_reproducible_with_seed(self):
        rng = np.random.default_rng(0)
        distinct = distinct_colors(rng.integers(0, 256, size=(200, 3), dtype=np.uint8))
        np.testing.assert_array_equal(seed_centroids(distinct, 5, rng=42), seed_centroids(distinct, 5, rng=42))

    def test_accepts_generator(self):
        distinct = np.array([[0, 0, 0], [255, 255, 255]], dtype=np.uint8)
        seeds = seed_centroids(distinct, 2, rng=np.random.default_rng(1))
        assert seeds.shape == (2, 3)

    def test_far_points_preferred(self):
        """A lone far color is almost always picked as the second seed"""
        distinct = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1], [255, 255, 255]], dtype=np.uint8)
        hits = 0
        for seed in range(50):
            seeds = seed_centroids(distinct, 2, rng=seed)
            if any(tuple(row) == (255, 255, 255) for row in seeds.astype(int)):
                hits += 1
        assert hits >= 48


class TestAssignPixels:
    def test_nearest_centroid(self):
        pixels = np.array([[0, 0, 0], [250, 250, 250], [20, 0, 0]], dtype=np.uint8)
        centroids = np.array([[255.0, 255.0, 255.0], [0.0, 0.0, 0.0]])
        np.testing.assert_array_equal(assign_pixels(pixels, centroids), [1, 0, 1])

    def test_ties_go_to_lowest_index(self):
        pixels = np.array([[5, 5, 5]], dtype=np.uint8)
        centroids = np.array([[10.0, 10.0, 10.0], [0.0, 0.0, 0.0]])
        assert assign_pixels(pixels, centroids)[0] == 0


class TestUpdateCentroids:
    def test_mean_rounded_half_up(self):
        pixels = np.array([[0, 0, 0], [1, 1, 3]], dtype=np.uint8)
        updated = update_centroids(pixels, np.array([0, 0]), np.array([[9.0, 9.0, 9.0]]), distinct_colors(pixels))
        np.testing.assert_array_equal(updated, [[1.0, 1.0, 2.0]])

    def test_empty_cluster_reseeded_to_farthest_color(self):
        pixels = np.array([[0, 0, 0], [10, 10, 10], [250, 250, 250]], dtype=np.uint8)
        labels = np.array([0, 0, 0])
        centroids = np.array([[5.0, 5.0, 5.0], [100.0, 100.0, 100.0]])

        updated = update_centroids(pixels, labels, centroids, distinct_colors(pixels))

        np.testing.assert_array_equal(updated[0], [87.0, 87.0, 87.0])
        np.testing.assert_array_equal(updated[1], [250.0, 250.0, 250.0])

    def test_does_not_mutate_input(self):
        pixels = np.array([[0, 0, 0], [100, 100, 100]], dtype=np.uint8)
        centroids = np.array([[10.0, 10.0, 10.0], [90.0, 90.0, 90.0]])
        before = centroids.copy()
        update_centroids(pixels, np.array([0, 1]), centroids, distinct_colors(pixels))
        np.testing.assert_array_equal(centroids, before)


class TestKMeansPalette:
    """Test the full k-means strategy"""

    def test_single_color_reduces_k(self):
        pixels = np.full((100, 3), [255, 0, 0], dtype=np.uint8)
        result = kmeans_palette(pixels, 6, rng=0)
        assert result.colors == ["#FF0000"]
        assert result.entries[0].count == 100
        assert result.is_degenerate

    def test_checkerboard_two_colors(self, checkerboard_rgba):
        pixels = checkerboard_rgba[:, :, :3].reshape(-1, 3)
        result = kmeans_palette(pixels, 2, rng=123)

        assert sorted(result.colors) == ["#000000", "#FFFFFF"]
        assert [entry.count for entry in result.entries] == [50, 50]
        assert result.converged

    def test_recovers_separated_clusters(self, three_clusters):
        result = kmeans_palette(three_clusters, 3, rng=1)

        assert result.converged
        assert len(result.entries) == 3
        assert sorted(entry.count for entry in result.entries) == [100, 100, 100]
        for entry in result.entries:
            assert entry.count > 0

    def test_output_length_is_min_of_k_and_distinct(self):
        pixels = np.array([[1, 2, 3], [4, 5, 6], [7, 8, 9]] * 10, dtype=np.uint8)
        assert len(kmeans_palette(pixels, 6, rng=0).entries) == 3
        assert len(kmeans_palette(pixels, 2, rng=0).entries) == 2

    def test_many_colors_fill_k(self):
        rng = np.random.default_rng(0)
        pixels = rng.integers(0, 256, size=(500, 3), dtype=np.uint8)

        result = kmeans_palette(pixels, 6, rng=9)

        assert len(result.entries) == 6
        assert all(HEX_RE.match(color) for color in result.colors)
        assert sum(entry.count for entry in result.entries) == 500
        assert result.iterations <= 20

    def test_iteration_cap(self):
        rng = np.random.default_rng(4)
        pixels = rng.integers(0, 256, size=(400, 3), dtype=np.uint8)

        state = run_kmeans(pixels, 8, max_iterations=1, rng=2)

        assert state.iterations == 1
        assert not state.converged
        assert state.counts.sum() == 400

    def test_same_seed_same_palette(self):
        rng = np.random.default_rng(5)
        pixels = rng.integers(0, 256, size=(300, 3), dtype=np.uint8)
        assert kmeans_palette(pixels, 5, rng=77).colors == kmeans_palette(pixels, 5, rng=77).colors

    def test_empty_pixel_set(self):
        result = kmeans_palette(np.zeros((0, 3), dtype=np.uint8), 6)
        assert result.entries == []
        assert result.is_empty
        assert not result.is_degenerate
