"""
Cluster bookkeeping: membership sets and running-sum accumulators.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

import numpy as np


class ClusterMembership(object):
    """Per-cluster sets of point positions.

    Each cluster is an array-backed list; removal swaps the last member
    into the freed slot, so insert and remove are O(1). ``_slot[p]`` is the
    index of point ``p`` inside its cluster's list.

    Args:
        n (int): Number of points.
        k (int): Number of clusters.
    """

    def __init__(self, n: int, k: int) -> None:
        self._members: List[List[int]] = [[] for _ in range(k)]
        self._slot = np.full(n, -1, dtype=np.int64)

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[np.ndarray]:
        for c in range(len(self._members)):
            yield self.members(c)

    def add(self, cluster: int, point: int) -> None:
        members = self._members[cluster]
        self._slot[point] = len(members)
        members.append(point)

    def remove(self, cluster: int, point: int) -> None:
        members = self._members[cluster]
        slot = self._slot[point]
        if slot < 0 or slot >= len(members) or members[slot] != point:
            raise KeyError(f"point {point} is not a member of cluster {cluster}")
        last = members.pop()
        if last != point:
            members[slot] = last
            self._slot[last] = slot
        self._slot[point] = -1

    def move(self, point: int, source: int, target: int) -> None:
        self.remove(source, point)
        self.add(target, point)

    def members(self, cluster: int) -> np.ndarray:
        return np.array(self._members[cluster], dtype=np.int64)

    def sizes(self) -> np.ndarray:
        return np.array([len(m) for m in self._members], dtype=np.int64)


class ClusterAccumulators(object):
    """Running vector sums and member counts, one pair per cluster.

    Invariant: ``sums[c]`` is the sum of the vectors assigned to ``c`` and
    ``counts[c]`` their number. Points moving between clusters are
    subtracted from the source and added to the target.
    """

    def __init__(self, k: int, dim: int) -> None:
        self.sums = np.zeros((k, dim), dtype=np.float64)
        self.counts = np.zeros(k, dtype=np.int64)

    def __len__(self) -> int:
        return len(self.counts)

    def merge(self, delta: "AccumulatorDelta") -> None:
        """Apply the partial changes collected by one reassignment worker."""
        self.sums += delta.sums
        self.counts += delta.counts

    def means(self, previous: np.ndarray) -> Tuple[np.ndarray, List[int]]:
        """Compute the next centroids into a fresh buffer.

        Clusters without members keep their previous centroid.

        Args:
            previous: The current centroids, shape ``(k, dim)``. Not modified.

        Returns:
            The new centroids and the indices of the empty clusters.
        """
        new_means = previous.copy()
        nonempty = self.counts > 0
        new_means[nonempty] = self.sums[nonempty] / self.counts[nonempty, np.newaxis]
        empty = np.flatnonzero(~nonempty).tolist()
        return new_means, empty


class AccumulatorDelta(object):
    """Partial accumulator changes collected by a single worker."""

    def __init__(self, k: int, dim: int) -> None:
        self.sums = np.zeros((k, dim), dtype=np.float64)
        self.counts = np.zeros(k, dtype=np.int64)
        self.moves: List[Tuple[int, int, int]] = []

    def move(self, point: int, vector: np.ndarray, source: int, target: int) -> None:
        self.sums[source] -= vector
        self.counts[source] -= 1
        self.sums[target] += vector
        self.counts[target] += 1
        self.moves.append((point, source, target))

    def add(self, point: int, vector: np.ndarray, target: int) -> None:
        """Record a first assignment; the move's source is ``-1``."""
        self.sums[target] += vector
        self.counts[target] += 1
        self.moves.append((point, -1, target))
