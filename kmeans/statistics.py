"""
Injectable observers for run statistics.

The drivers never keep global counters; they report to an observer. The
default :class:`KMeansObserver` ignores everything, :class:`StatisticsRecorder`
keeps a ``stats`` dictionary similar to the ones kept by index builders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import numpy as np


@dataclass
class IterationStats:
    """What happened in one completed iteration."""
    iteration: int
    # Points whose assignment changed in this pass
    reassignments: int
    # Distance evaluations of this pass, separation table included
    distance_computations: int
    # Assignment after the pass, shape (n,)
    labels: np.ndarray
    # Centroids published at the end of the iteration, shape (k, dim)
    centroids: np.ndarray
    # Largest centroid movement, 0.0 on the converging pass
    max_move: float = 0.0


class KMeansObserver(object):
    """No-op observer. Subclass and override the hooks you need."""

    def on_initialization(self, initializer: str, means: np.ndarray) -> None:
        pass

    def on_iteration(self, stats: IterationStats) -> None:
        pass

    def on_empty_clusters(self, iteration: int, clusters: List[int]) -> None:
        pass

    def on_finish(self, n_iter: int, converged: bool, distance_computations: int) -> None:
        pass


class StatisticsRecorder(KMeansObserver):
    """Collects run statistics into ``self.stats``.

    Args:
        keep_history: Also keep every :class:`IterationStats` in ``history``.
    """

    def __init__(self, keep_history: bool = False) -> None:
        self.keep_history = keep_history
        self.history: List[IterationStats] = []
        self.stats: Dict[str, Any] = {
            'initialization': None,
            'iterations': 0,
            'converged': False,
            'reassignments': [],
            'distance_computations': 0,
            'distance_computations_per_iteration': [],
            'empty_clusters': {},
        }

    def on_initialization(self, initializer, means):
        self.stats['initialization'] = initializer

    def on_iteration(self, stats):
        self.stats['reassignments'].append(stats.reassignments)
        self.stats['distance_computations_per_iteration'].append(stats.distance_computations)
        if self.keep_history:
            self.history.append(stats)

    def on_empty_clusters(self, iteration, clusters):
        self.stats['empty_clusters'][iteration] = list(clusters)

    def on_finish(self, n_iter, converged, distance_computations):
        self.stats['iterations'] = n_iter
        self.stats['converged'] = converged
        self.stats['distance_computations'] = distance_computations

    def get_stats(self) -> Dict[str, Any]:
        return dict(self.stats)
