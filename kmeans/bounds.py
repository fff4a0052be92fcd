"""
Per-point Hamerly bounds and the per-centroid quantities they are tested
and relaxed against.

All values here are true (non-squared) distances. For every point ``p``:

- ``upper[p] >= d(p, centroids[assignment[p]])``
- ``lower[p] <= d(p, centroids[c])`` for every ``c != assignment[p]``
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .distance import Distance


class PointState(object):
    """Assignment, upper bound and lower bound for every point.

    Args:
        n (int): Number of points.
    """

    def __init__(self, n: int) -> None:
        self.assignment = np.full(n, -1, dtype=np.int64)
        self.upper = np.full(n, np.inf, dtype=np.float64)
        self.lower = np.zeros(n, dtype=np.float64)

    def __len__(self) -> int:
        return len(self.assignment)


def compute_separation(means: np.ndarray, distance: Distance) -> Tuple[np.ndarray, int]:
    """Half the distance from each centroid to its nearest other centroid.

    Must be recomputed whenever the centroids move; a stale table would
    make the skip test unsound. With a single centroid every entry is
    infinite.

    Args:
        means: Current centroids, shape ``(k, dim)``.
        distance: Distance capability.

    Returns:
        The separation table of shape ``(k,)`` and the number of distance
        evaluations spent.
    """
    k = len(means)
    nearest = np.full(k, np.inf, dtype=np.float64)
    for i in range(k - 1):
        d = distance.true_distances(means[i], means[i + 1:])
        nearest[i] = min(nearest[i], d.min())
        nearest[i + 1:] = np.minimum(nearest[i + 1:], d)
    return 0.5 * nearest, k * (k - 1) // 2


def centroid_movement(
    old_means: np.ndarray, new_means: np.ndarray, distance: Distance
) -> Tuple[np.ndarray, float]:
    """Distance each centroid moved, and the largest movement."""
    delta = np.fromiter(
        (distance.true_distance(old, new) for old, new in zip(old_means, new_means)),
        dtype=np.float64,
        count=len(old_means),
    )
    return delta, float(delta.max()) if len(delta) else 0.0


def relax_bounds(state: PointState, delta: np.ndarray, max_move: float) -> None:
    """Loosen all bounds after the centroids moved.

    The assigned centroid moved by ``delta[assignment[p]]``, so the upper
    bound grows by that much. Any other centroid moved at most
    ``max_move`` closer, so the lower bound shrinks by that much.
    """
    state.upper += delta[state.assignment]
    state.lower -= max_move
