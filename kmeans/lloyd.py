"""
Unpruned (Lloyd) k-means.

Recomputes all n·k distances every iteration. Follows the same iteration,
convergence and empty-cluster rules as :class:`~kmeans.hamerly.HamerlyKMeans`,
and the same tie rule: a point keeps its current cluster unless another
centroid is strictly closer. Both produce the same clustering from the same
initial means. Used as the reference in tests and benchmarks.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

import numpy as np

from .config import KMeansConfig
from .dataset import Dataset
from .distance import Distance, as_distance
from .initialization import Initializer, check_initial_means, get_initializer
from .result import ClusteringResult, build_result

logger = logging.getLogger(__name__)


def brute_force_assign(
    data: np.ndarray,
    means: np.ndarray,
    distance: Distance,
    previous: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, int]:
    """Nearest centroid of every point by full scan.

    Ties go to the lowest index, except that a point keeps its label from
    ``previous`` unless another centroid is strictly closer.

    Returns:
        Labels of shape ``(n,)`` and the number of distance evaluations.
    """
    labels = np.empty(len(data), dtype=np.int64)
    for p, x in enumerate(data):
        dists = distance.true_distances(x, means)
        best = int(np.argmin(dists))
        if previous is not None and previous[p] >= 0 and dists[previous[p]] <= dists[best]:
            best = int(previous[p])
        labels[p] = best
    return labels, len(data) * len(means)


def update_means(data: np.ndarray, labels: np.ndarray, previous: np.ndarray) -> Tuple[np.ndarray, list]:
    """Mean of every cluster; empty clusters keep their previous centroid."""
    k, dim = previous.shape
    sums = np.zeros((k, dim), dtype=np.float64)
    np.add.at(sums, labels, data)
    counts = np.bincount(labels, minlength=k)
    new_means = previous.copy()
    nonempty = counts > 0
    new_means[nonempty] = sums[nonempty] / counts[nonempty, np.newaxis]
    return new_means, np.flatnonzero(~nonempty).tolist()


class LloydKMeans(object):
    """Lloyd's k-means with the same interface as :class:`~kmeans.hamerly.HamerlyKMeans`."""

    def __init__(
        self,
        k: int,
        max_iter: int = 0,
        init: Union[str, Initializer, np.ndarray] = "k-means++",
        distance: Union[Distance, str, callable, None] = None,
        random_state: Optional[int] = None,
        varstat: bool = False,
    ) -> None:
        self.config = KMeansConfig(
            k=k, max_iter=max_iter, init=init, random_state=random_state, varstat=varstat
        )
        self.distance = as_distance(distance)
        self.initializer = get_initializer(init, random_state)

    def run(self, points) -> ClusteringResult:
        dataset = Dataset.from_input(points)
        if len(dataset) == 0:
            return ClusteringResult(centroids=np.empty((0, dataset.dim)))
        self.config.check_k(len(dataset))
        data, k = dataset.data, self.config.k
        means = check_initial_means(
            self.initializer.choose_initial_means(data, k, self.distance), k, dataset.dim
        )

        labels = np.full(len(data), -1, dtype=np.int64)
        empty_clusters = set()
        reassignments = distance_computations = 0
        converged = False
        iteration = 0
        while self.config.unbounded or iteration < self.config.max_iter:
            new_labels, dists = brute_force_assign(data, means, self.distance, labels)
            distance_computations += dists
            changed = int(np.count_nonzero(new_labels != labels))
            if iteration > 0:
                reassignments += changed
            labels = new_labels
            logger.debug("Iteration %d: %d reassignments", iteration, changed)
            if changed == 0:
                converged = True
                break
            means, empty = update_means(data, labels, means)
            empty_clusters.update(empty)
            iteration += 1

        members = [np.flatnonzero(labels == c) for c in range(k)]
        return build_result(
            dataset.ids,
            data,
            labels,
            members,
            means,
            varstat=self.config.varstat,
            n_iter=iteration,
            converged=converged,
            reassignments=reassignments,
            distance_computations=distance_computations,
            empty_clusters=sorted(empty_clusters),
        )
