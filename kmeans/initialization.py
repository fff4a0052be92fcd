"""
Initial centroid selection.

Any object with a ``choose_initial_means(data, k, distance)`` method that
returns a ``(k, dim)`` array can be passed to the drivers.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np
from sklearn.cluster import kmeans_plusplus
from sklearn.utils import check_random_state

from .distance import Distance, EuclideanDistance, SquaredEuclideanDistance
from .exceptions import ConfigurationError


class Initializer(object):
    """Base class for centroid initializers."""

    name: str = "initializer"

    def __init__(self, random_state: Optional[Union[int, np.random.RandomState]] = None) -> None:
        self.random_state = random_state

    def __repr__(self) -> str:
        return f"{type(self).__name__}(random_state={self.random_state!r})"

    def choose_initial_means(self, data: np.ndarray, k: int, distance: Distance) -> np.ndarray:
        raise NotImplementedError


class RandomInitializer(Initializer):
    """Pick k distinct points uniformly at random."""

    name = "random"

    def choose_initial_means(self, data, k, distance):
        rng = check_random_state(self.random_state)
        indices = rng.choice(len(data), k, replace=False)
        return data[indices].copy()


class FirstKInitializer(Initializer):
    """Use the first k points, in dataset order."""

    name = "first"

    def choose_initial_means(self, data, k, distance):
        return data[:k].copy()


class KMeansPlusPlusInitializer(Initializer):
    """k-means++ seeding.

    Euclidean distances are delegated to scikit-learn's ``kmeans_plusplus``.
    Other distances use the plain D² sampling loop with the given distance.
    """

    name = "k-means++"

    def choose_initial_means(self, data, k, distance):
        rng = check_random_state(self.random_state)
        if isinstance(distance, (EuclideanDistance, SquaredEuclideanDistance)):
            centers, _ = kmeans_plusplus(data, n_clusters=k, random_state=rng)
            return np.asarray(centers, dtype=np.float64)
        return self._sample(data, k, distance, rng)

    @staticmethod
    def _sample(data, k, distance, rng):
        n = len(data)
        centroids = np.empty((k, data.shape[1]), dtype=np.float64)
        centroids[0] = data[rng.randint(n)]
        # Squared distance of every point to its nearest centroid so far
        dist2 = distance.true_distances(centroids[0], data) ** 2
        for c in range(1, k):
            total = dist2.sum()
            if total > 0:
                next_idx = rng.choice(n, p=dist2 / total)
            else:
                next_idx = rng.randint(n)
            centroids[c] = data[next_idx]
            dist2 = np.minimum(dist2, distance.true_distances(centroids[c], data) ** 2)
        return centroids


class PredefinedInitializer(Initializer):
    """Use caller supplied means."""

    name = "predefined"

    def __init__(self, means: np.ndarray) -> None:
        super().__init__()
        self.means = np.array(means, dtype=np.float64)

    def __repr__(self) -> str:
        return f"PredefinedInitializer(shape={self.means.shape})"

    def choose_initial_means(self, data, k, distance):
        if len(self.means) != k:
            raise ConfigurationError(
                f"Predefined means hold {len(self.means)} centroids, expected k={k}"
            )
        return self.means.copy()


_NAMED = {
    'k-means++': KMeansPlusPlusInitializer,
    'kmeans++': KMeansPlusPlusInitializer,
    'random': RandomInitializer,
    'first': FirstKInitializer,
}


def get_initializer(init, random_state=None) -> Initializer:
    """Resolve an initializer name, array of means or object."""
    if isinstance(init, str):
        try:
            return _NAMED[init.lower()](random_state=random_state)
        except KeyError:
            raise ConfigurationError(
                f"Unknown initialization method: {init}, expected one of {sorted(_NAMED)}"
            ) from None
    if hasattr(init, 'choose_initial_means'):
        return init
    if isinstance(init, (np.ndarray, list, tuple)):
        return PredefinedInitializer(init)
    raise ConfigurationError(f"Cannot use {init!r} as an initializer")


def check_initial_means(means, k: int, dim: int) -> np.ndarray:
    """Validate the initializer output before any clustering state is built."""
    try:
        means = np.array(means, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Initial means are not numeric: {e}") from e
    if means.shape != (k, dim):
        raise ConfigurationError(
            f"Initializer returned means of shape {means.shape}, expected {(k, dim)}"
        )
    if not np.isfinite(means).all():
        raise ConfigurationError("Initial means must be finite")
    return means
