"""
K-means quantization in RGB space with k-means++ seeding.

Produces a fixed number of representative colors regardless of how many
distinct colors occur. The run moves through seeding, then alternating
assignment and update rounds, until an assignment round changes nothing
or the iteration cap is reached.

All centroid math is float64; centroid means are rounded half-up to
whole channel values after every update.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np
from loguru import logger

from palettesnap.config import config
from .encoding import rgb_to_hex
from .histogram import pack_rgb
from .models import ColorCount, PaletteResult

RandomSource = Union[None, int, np.random.Generator]


@dataclass
class KMeansState:
    """Final state of a k-means run."""
    centroids: np.ndarray  # (k, 3) uint8
    labels: np.ndarray     # (N,) int64
    counts: np.ndarray     # (k,) int64
    iterations: int
    converged: bool


def _as_generator(rng: RandomSource) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def distinct_colors(pixels: np.ndarray) -> np.ndarray:
    """Distinct colors of a PixelSet in first-occurrence order, (M, 3) uint8."""
    if len(pixels) == 0:
        return np.zeros((0, 3), dtype=np.uint8)
    _, first_index = np.unique(pack_rgb(pixels), return_index=True)
    return pixels[np.sort(first_index)]


def squared_distances(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Squared Euclidean RGB distances, (N, k) float64."""
    diff = points.astype(np.float64)[:, np.newaxis, :] - centroids.astype(np.float64)[np.newaxis, :, :]
    return np.sum(diff * diff, axis=2)


def seed_centroids(distinct: np.ndarray, k: int, rng: RandomSource = None) -> np.ndarray:
    """
    Choose ``k`` initial centroids from the distinct colors using k-means++.

    The first seed is uniform over the distinct colors. Each later seed is
    drawn with probability proportional to its squared distance from the
    nearest seed chosen so far.

    Args:
        distinct: Distinct pixel colors (M, 3), M >= k
        k: Number of seeds
        rng: Seed or numpy Generator; None draws fresh OS entropy

    Returns:
        Seed colors (k, 3) float64
    """
    rng = _as_generator(rng)
    n_distinct = len(distinct)
    points = distinct.astype(np.float64)
    centroids = np.empty((k, 3), dtype=np.float64)

    first = int(rng.integers(n_distinct))
    centroids[0] = points[first]
    chosen = {first}

    nearest = squared_distances(points, centroids[:1])[:, 0]
    for i in range(1, k):
        total = nearest.sum()
        if total > 0:
            idx = int(rng.choice(n_distinct, p=nearest / total))
        else:
            # Every remaining color coincides with a seed
            idx = next(j for j in range(n_distinct) if j not in chosen)
        centroids[i] = points[idx]
        chosen.add(idx)
        nearest = np.minimum(nearest, squared_distances(points, centroids[i:i + 1])[:, 0])

    return centroids


def assign_pixels(pixels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid for every pixel; ties go to the lowest index."""
    return np.argmin(squared_distances(pixels, centroids), axis=1)


def update_centroids(pixels: np.ndarray, labels: np.ndarray, centroids: np.ndarray,
                     distinct: np.ndarray) -> np.ndarray:
    """
    Move each centroid to the rounded mean of its assigned pixels.

    A centroid with no assigned pixels is reseeded to the distinct color
    whose nearest other centroid is farthest away.
    """
    k = len(centroids)
    updated = centroids.astype(np.float64).copy()
    points = pixels.astype(np.float64)

    sums = np.zeros((k, 3), dtype=np.float64)
    np.add.at(sums, labels, points)
    counts = np.bincount(labels, minlength=k)

    assigned = counts > 0
    means = sums[assigned] / counts[assigned][:, np.newaxis]
    updated[assigned] = np.clip(np.floor(means + 0.5), 0, 255)

    for j in np.flatnonzero(~assigned):
        others = np.delete(updated, j, axis=0)
        if len(others) == 0:
            continue
        farthest = int(np.argmax(squared_distances(distinct, others).min(axis=1)))
        updated[j] = distinct[farthest]
        logger.debug(f"Reseeded empty centroid {j} to {rgb_to_hex(*distinct[farthest])}")

    return updated


def run_kmeans(pixels: np.ndarray, k: int, max_iterations: int = None,
               rng: RandomSource = None) -> Optional[KMeansState]:
    """
    Cluster a PixelSet into at most ``k`` colors.

    ``k`` is reduced to the number of distinct colors when fewer exist.

    Returns:
        The final state, or None for an empty PixelSet
    """
    if max_iterations is None:
        max_iterations = config.KMEANS_MAX_ITERATIONS

    pixels = np.asarray(pixels, dtype=np.uint8).reshape(-1, 3)
    if len(pixels) == 0 or k < 1:
        return None

    distinct = distinct_colors(pixels)
    k = min(int(k), len(distinct))
    centroids = seed_centroids(distinct, k, rng)

    labels = np.full(len(pixels), -1, dtype=np.int64)
    iterations = 0
    converged = False
    for _ in range(max(1, int(max_iterations))):
        new_labels = assign_pixels(pixels, centroids)
        iterations += 1
        if np.array_equal(new_labels, labels):
            converged = True
            break
        labels = new_labels
        centroids = update_centroids(pixels, labels, centroids, distinct)

    if not converged:
        # Membership for the centroids left by the final update
        labels = assign_pixels(pixels, centroids)
        logger.debug(f"K-means stopped at iteration cap {iterations}")

    counts = np.bincount(labels, minlength=k)
    final = np.clip(np.floor(centroids + 0.5), 0, 255).astype(np.uint8)
    return KMeansState(final, labels, counts, iterations, converged)


def kmeans_palette(pixels: np.ndarray, k: int, max_iterations: int = None,
                   rng: RandomSource = None) -> PaletteResult:
    """
    K-means strategy entry point.

    Args:
        pixels: Opaque RGB pixels (N, 3) uint8
        k: Requested palette size
        max_iterations: Assignment round cap (default from config)
        rng: Seed or numpy Generator for k-means++ seeding

    Returns:
        PaletteResult whose entries are in centroid index order, each
        carrying its cluster membership count
    """
    pixel_count = int(len(pixels))
    state = run_kmeans(pixels, k, max_iterations=max_iterations, rng=rng)
    if state is None:
        return PaletteResult(strategy="kmeans", pixel_count=pixel_count, requested_colors=k)

    entries: List[ColorCount] = [
        ColorCount(rgb_to_hex(*center), int(count))
        for center, count in zip(state.centroids, state.counts)
    ]
    logger.debug(
        f"K-means produced {len(entries)} colors in {state.iterations} iterations "
        f"(converged={state.converged})"
    )
    return PaletteResult(
        strategy="kmeans",
        entries=entries,
        pixel_count=pixel_count,
        requested_colors=k,
        iterations=state.iterations,
        converged=state.converged,
    )
