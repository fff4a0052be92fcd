"""
Distance capabilities consumed by the k-means drivers.

A distance reports whether its values are squared (``is_squared``) and
whether it honors the triangle inequality (``is_metric``). Bound arithmetic
always works in true, non-squared units; ``true_distance`` and
``true_distances`` are the only places where squared values are converted.
"""

from __future__ import annotations

import warnings
from typing import Callable, Dict, Optional, Union

import numpy as np

from .exceptions import ConfigurationError, NonMetricDistanceWarning


class Distance(object):
    """Base class for distance capabilities.

    Subclasses implement :meth:`distance`; :meth:`distances` may be
    overridden with a vectorized version.
    """

    name: str = "distance"
    is_squared: bool = False
    is_metric: bool = True

    def __call__(self, a: np.ndarray, b: np.ndarray) -> float:
        return self.distance(a, b)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        raise NotImplementedError

    def distances(self, a: np.ndarray, others: np.ndarray) -> np.ndarray:
        """Distances from ``a`` to every row of ``others``."""
        return np.fromiter(
            (self.distance(a, b) for b in others), dtype=np.float64, count=len(others)
        )

    def true_distance(self, a: np.ndarray, b: np.ndarray) -> float:
        # Same routine as true_distances, so a tie measures equal either way
        return float(self.true_distances(a, b[np.newaxis])[0])

    def true_distances(self, a: np.ndarray, others: np.ndarray) -> np.ndarray:
        d = self.distances(a, others)
        return np.sqrt(d) if self.is_squared else d


class EuclideanDistance(Distance):
    name = "euclidean"

    def distance(self, a, b):
        return float(np.linalg.norm(a - b))

    def distances(self, a, others):
        return np.linalg.norm(others - a, axis=1)


class SquaredEuclideanDistance(Distance):
    """Squared Euclidean distance, the natural choice for k-means.

    Not a metric by itself, but its square root is, and the drivers only
    ever reason about the square root.
    """

    name = "sqeuclidean"
    is_squared = True
    is_metric = False

    def distance(self, a, b):
        diff = a - b
        return float(np.dot(diff, diff))

    def distances(self, a, others):
        diff = others - a
        return np.einsum('ij,ij->i', diff, diff)


class ManhattanDistance(Distance):
    name = "manhattan"

    def distance(self, a, b):
        return float(np.abs(a - b).sum())

    def distances(self, a, others):
        return np.abs(others - a).sum(axis=1)


class CosineDistance(Distance):
    """``1 - cos(a, b)``. Violates the triangle inequality."""

    name = "cosine"
    is_metric = False

    def distance(self, a, b):
        denom = np.linalg.norm(a) * np.linalg.norm(b)
        if denom == 0.0:
            return 0.0 if not a.any() and not b.any() else 1.0
        return float(max(0.0, 1.0 - np.dot(a, b) / denom))


class CallableDistance(Distance):
    """Adapts a plain ``func(a, b) -> float`` to the distance capability."""

    def __init__(
        self,
        func: Callable[[np.ndarray, np.ndarray], float],
        squared: bool = False,
        metric: bool = True,
        name: Optional[str] = None,
    ) -> None:
        self._func = func
        self.is_squared = squared
        self.is_metric = metric
        self.name = name or getattr(func, '__name__', 'callable')

    def __repr__(self) -> str:
        return f"CallableDistance({self.name!r}, squared={self.is_squared}, metric={self.is_metric})"

    def distance(self, a, b):
        return float(self._func(a, b))


_NAMED: Dict[str, Callable[[], Distance]] = {
    'euclidean': EuclideanDistance,
    'l2': EuclideanDistance,
    'sqeuclidean': SquaredEuclideanDistance,
    'squared_euclidean': SquaredEuclideanDistance,
    'manhattan': ManhattanDistance,
    'l1': ManhattanDistance,
    'cosine': CosineDistance,
}


def as_distance(
    distance: Union[Distance, str, Callable, None] = None,
    squared: bool = False,
    metric: bool = True,
) -> Distance:
    """Resolve a distance name, callable or instance to a :class:`Distance`.

    ``None`` selects squared Euclidean distance. ``squared`` and ``metric``
    only apply to plain callables.
    """
    if distance is None:
        return SquaredEuclideanDistance()
    if isinstance(distance, Distance):
        return distance
    if isinstance(distance, str):
        try:
            return _NAMED[distance.lower()]()
        except KeyError:
            raise ConfigurationError(
                f"Unknown distance '{distance}', expected one of {sorted(_NAMED)}"
            ) from None
    if callable(distance):
        return CallableDistance(distance, squared=squared, metric=metric)
    raise ConfigurationError(f"Cannot use {distance!r} as a distance")


def warn_if_not_metric(distance: Distance) -> bool:
    """Warn when pruning cannot be trusted with ``distance``.

    Returns True when a warning was issued.
    """
    if isinstance(distance, SquaredEuclideanDistance) or distance.is_metric:
        return False
    warnings.warn(
        f"Hamerly k-means requires a metric distance, and k-means should only be "
        f"used with squared Euclidean distance; got {distance!r}",
        NonMetricDistanceWarning,
        stacklevel=3,
    )
    return True
