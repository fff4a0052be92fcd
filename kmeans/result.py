"""
Clustering results produced by the k-means drivers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, List, Optional

import numpy as np


@dataclass
class KMeansModel:
    """One cluster: its mean and member ids."""
    mean: np.ndarray
    ids: List[Hashable]
    # Sum of squared distances of the members to the mean, when requested
    variance_sum: Optional[float] = None

    def __len__(self) -> int:
        return len(self.ids)


@dataclass
class ClusteringResult:
    """Partition of a dataset into k clusters.

    ``labels[i]`` is the cluster of the i-th point, ``ids[i]`` its id.
    Every id appears in exactly one ``clusters[c].ids``.
    """
    clusters: List[KMeansModel] = field(default_factory=list)
    centroids: np.ndarray = field(default_factory=lambda: np.empty((0, 0)))
    labels: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.int64))
    ids: List[Hashable] = field(default_factory=list)
    n_iter: int = 0
    converged: bool = True
    # Totals over the whole run
    reassignments: int = 0
    distance_computations: int = 0
    # Clusters that had no members at some centroid recompute
    empty_clusters: List[int] = field(default_factory=list)
    inertia: float = 0.0

    def __len__(self) -> int:
        return len(self.clusters)

    @property
    def is_empty(self) -> bool:
        return len(self.labels) == 0

    def cluster_sizes(self) -> np.ndarray:
        return np.array([len(c) for c in self.clusters], dtype=np.int64)


def build_result(
    ids,
    data: np.ndarray,
    labels: np.ndarray,
    members,
    centroids: np.ndarray,
    varstat: bool = False,
    **diagnostics,
) -> ClusteringResult:
    """Materialize one :class:`KMeansModel` per cluster.

    Args:
        ids: Point ids in dataset order.
        data: Point matrix, shape ``(n, dim)``.
        labels: Cluster index of every point.
        members: Iterable of member position arrays, one per cluster.
        centroids: Final centroids, shape ``(k, dim)``.
        varstat: Compute ``variance_sum`` for every cluster.
        **diagnostics: Extra :class:`ClusteringResult` fields.

    ``inertia`` is always the squared Euclidean objective, whatever distance
    drove the assignment.
    """
    ids = ids.tolist() if isinstance(ids, np.ndarray) else list(ids)
    clusters = []
    for c, positions in enumerate(members):
        positions = np.sort(positions)
        variance_sum = None
        if varstat:
            diff = data[positions] - centroids[c]
            variance_sum = float(np.einsum('ij,ij->', diff, diff))
        clusters.append(KMeansModel(
            mean=centroids[c].copy(),
            ids=[ids[p] for p in positions],
            variance_sum=variance_sum,
        ))
    diff = data - centroids[labels]
    inertia = float(np.einsum('ij,ij->', diff, diff))
    return ClusteringResult(
        clusters=clusters,
        centroids=centroids,
        labels=labels,
        ids=ids,
        inertia=inertia,
        **diagnostics,
    )
