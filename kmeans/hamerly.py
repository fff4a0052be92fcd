"""
Hamerly's accelerated k-means.

G. Hamerly. Making k-means even faster. In Proc. 2010 SIAM International
Conference on Data Mining, pp. 130-140.

Every point keeps an upper bound on the distance to its own centroid and a
lower bound on the distance to the second closest one. When the upper bound
is below both the lower bound and half the distance from its centroid to
the nearest other centroid, the point cannot change cluster and no distance
is computed for it. After the centroids move, the bounds are loosened by the
movement instead of being recomputed.

Pruning is exact only for distances satisfying the triangle inequality
(or squared Euclidean distance, whose square root does). Other distances
run, with a warning, but may silently produce different clusters than an
unpruned k-means.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Hashable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .bounds import PointState, centroid_movement, compute_separation, relax_bounds
from .clusters import AccumulatorDelta, ClusterAccumulators, ClusterMembership
from .config import KMeansConfig
from .dataset import Dataset
from .distance import Distance, as_distance, warn_if_not_metric
from .initialization import Initializer, check_initial_means, get_initializer
from .result import ClusteringResult, build_result
from .statistics import IterationStats, KMeansObserver

logger = logging.getLogger(__name__)


def initial_assign(
    data: np.ndarray,
    means: np.ndarray,
    state: PointState,
    distance: Distance,
    start: int = 0,
    stop: Optional[int] = None,
) -> Tuple[AccumulatorDelta, int, int]:
    """Assign points ``[start, stop)`` to their nearest centroid, unpruned.

    Sets ``upper`` to the closest and ``lower`` to the second closest
    distance. Ties go to the lowest cluster index.

    Returns:
        The accumulator additions, the number of assigned points and the
        number of distance evaluations (``k`` per point).
    """
    stop = len(data) if stop is None else stop
    k, dim = means.shape
    delta = AccumulatorDelta(k, dim)
    assignment, upper, lower = state.assignment, state.upper, state.lower
    for p in range(start, stop):
        x = data[p]
        dists = distance.true_distances(x, means)
        best = int(np.argmin(dists))
        assignment[p] = best
        upper[p] = dists[best]
        lower[p] = np.partition(dists, 1)[1] if k > 1 else np.inf
        delta.add(p, x, best)
    return delta, stop - start, (stop - start) * k


def assign_to_nearest_cluster(
    data: np.ndarray,
    means: np.ndarray,
    separation: np.ndarray,
    state: PointState,
    distance: Distance,
    start: int = 0,
    stop: Optional[int] = None,
    skipped: Optional[List[int]] = None,
) -> Tuple[AccumulatorDelta, int, int]:
    """Reassign points ``[start, stop)``, skipping those the bounds protect.

    ``means`` and ``separation`` are read only. Per point this costs zero
    distance evaluations when the bounds already prove the assignment, one
    when the tightened upper bound does, and ``k`` otherwise. On ties the
    point keeps its current cluster.

    Args:
        data: Point matrix.
        means: Current centroids, shape ``(k, dim)``.
        separation: Table from :func:`~kmeans.bounds.compute_separation`.
        state: Per-point state, only rows ``[start, stop)`` are written.
        distance: Distance capability.
        start: First point of the range.
        stop: End of the range, defaults to all points.
        skipped: If given, collects the points skipped without any
            distance evaluation.

    Returns:
        The accumulator changes, the number of reassigned points and the
        number of distance evaluations.
    """
    stop = len(data) if stop is None else stop
    k, dim = means.shape
    delta = AccumulatorDelta(k, dim)
    assignment, upper, lower = state.assignment, state.upper, state.lower
    others = [np.delete(np.arange(k), c) for c in range(k)]
    changed = dists = 0
    for p in range(start, stop):
        cur = int(assignment[p])
        z = lower[p]
        sa = separation[cur]
        u = upper[p]
        if u <= z and u <= sa:
            if skipped is not None:
                skipped.append(p)
            continue
        x = data[p]
        u = distance.true_distance(x, means[cur])
        dists += 1
        upper[p] = u
        if u <= z and u <= sa:
            continue
        candidates = others[cur]
        d = distance.true_distances(x, means[candidates])
        dists += k - 1
        j = int(np.argmin(d))
        if d[j] < u:
            second = np.partition(d, 1)[1] if k > 2 else np.inf
            best, min1, min2 = int(candidates[j]), d[j], min(u, second)
        else:
            best, min1, min2 = cur, u, d[j]
        if best != cur:
            delta.move(p, x, cur, best)
            assignment[p] = best
            upper[p] = min1
            changed += 1
        lower[p] = min2
    return delta, changed, dists


class HamerlyKMeans(object):
    """Hamerly's k-means driver.

    Args:
        k: Number of clusters.
        max_iter: Iteration budget, ``<= 0`` runs until convergence. The
            initial assignment counts as the first iteration.
        init: Initializer object, name (``'k-means++'``, ``'random'``,
            ``'first'``) or an explicit ``(k, dim)`` array of means.
        distance: :class:`~kmeans.distance.Distance`, distance name or plain
            callable. Defaults to squared Euclidean distance.
        random_state: Seed for the named initializers.
        varstat: Compute the within-cluster variance sum of every cluster.
        n_jobs: Threads used for each assignment pass.
        observer: Receives run statistics.
        verbose: Print progress information.
    """

    def __init__(
        self,
        k: int,
        max_iter: int = 0,
        init: Union[str, Initializer, np.ndarray] = "k-means++",
        distance: Union[Distance, str, callable, None] = None,
        random_state: Optional[int] = None,
        varstat: bool = False,
        n_jobs: int = 1,
        observer: Optional[KMeansObserver] = None,
        verbose: bool = False,
    ) -> None:
        self.config = KMeansConfig(
            k=k,
            max_iter=max_iter,
            init=init,
            random_state=random_state,
            varstat=varstat,
            n_jobs=n_jobs,
            verbose=verbose,
        )
        self.distance = as_distance(distance)
        warn_if_not_metric(self.distance)
        self.initializer = get_initializer(init, random_state)
        self.observer = observer

    @classmethod
    def from_config(
        cls,
        config: KMeansConfig,
        distance: Union[Distance, str, callable, None] = None,
        observer: Optional[KMeansObserver] = None,
    ) -> "HamerlyKMeans":
        return cls(distance=distance, observer=observer, **config.to_dict())

    @property
    def k(self) -> int:
        return self.config.k

    @property
    def max_iter(self) -> int:
        return self.config.max_iter

    def run(self, points: Union[Dataset, np.ndarray, Mapping[Hashable, np.ndarray], Sequence]) -> ClusteringResult:
        """Cluster ``points``.

        Args:
            points: ``(n, dim)`` array-like, ``{id: vector}`` mapping or
                :class:`~kmeans.dataset.Dataset`.

        Returns:
            The clustering. An empty dataset gives an empty result.

        Raises:
            ConfigurationError: If ``k`` exceeds the number of points or the
                initializer returns unusable means.
            DataError: If the points are not a finite ``(n, dim)`` matrix.
        """
        dataset = Dataset.from_input(points)
        if len(dataset) == 0:
            return ClusteringResult(centroids=np.empty((0, dataset.dim)))
        self.config.check_k(len(dataset))

        data, k, n = dataset.data, self.k, len(dataset)
        means = check_initial_means(
            self.initializer.choose_initial_means(data, k, self.distance), k, dataset.dim
        )
        initializer_name = getattr(self.initializer, 'name', repr(self.initializer))
        if self.observer is not None:
            self.observer.on_initialization(initializer_name, means.copy())
        if self.config.verbose:
            print(f"Fitting Hamerly k-means with {k} clusters on {n} samples "
                  f"(init={initializer_name}, distance={self.distance.name})...")

        state = PointState(n)
        sums = ClusterAccumulators(k, dataset.dim)
        members = ClusterMembership(n, k)
        empty_clusters = set()
        reassignments = distance_computations = 0
        converged = False

        ranges = self._split(n)
        pool = ThreadPoolExecutor(max_workers=len(ranges)) if len(ranges) > 1 else None
        try:
            iteration = 0
            while self.config.unbounded or iteration < self.max_iter:
                if iteration == 0:
                    changed, dists = self._pass(
                        pool, ranges, members, sums,
                        initial_assign, data, means, state, self.distance)
                else:
                    separation, dists = compute_separation(means, self.distance)
                    changed, pass_dists = self._pass(
                        pool, ranges, members, sums,
                        assign_to_nearest_cluster, data, means, separation, state, self.distance)
                    dists += pass_dists
                    reassignments += changed
                distance_computations += dists
                logger.debug("Iteration %d: %d reassignments, %d distance computations",
                             iteration, changed, dists)

                if changed == 0:
                    converged = True
                    self._notify(iteration, changed, dists, state, means, 0.0)
                    break

                new_means, empty = sums.means(means)
                if empty:
                    empty_clusters.update(empty)
                    logger.warning("Iteration %d: clusters %s have no members, keeping their "
                                   "previous centroids", iteration, empty)
                    if self.observer is not None:
                        self.observer.on_empty_clusters(iteration, empty)
                delta, max_move = centroid_movement(means, new_means, self.distance)
                relax_bounds(state, delta, max_move)
                means = new_means
                self._notify(iteration, changed, dists, state, means, max_move)

                if self.config.verbose and (iteration + 1) % 10 == 0:
                    print(f"Iteration {iteration + 1}, reassigned: {changed}")
                iteration += 1
        finally:
            if pool is not None:
                pool.shutdown()

        if self.config.verbose:
            if converged:
                print(f"Converged after {iteration} iterations")
            else:
                print(f"Stopped after {iteration} iterations without converging")
        if self.observer is not None:
            self.observer.on_finish(iteration, converged, distance_computations)

        return build_result(
            dataset.ids,
            data,
            state.assignment.copy(),
            members,
            means,
            varstat=self.config.varstat,
            n_iter=iteration,
            converged=converged,
            reassignments=reassignments,
            distance_computations=distance_computations,
            empty_clusters=sorted(empty_clusters),
        )

    def _split(self, n: int) -> List[Tuple[int, int]]:
        """Contiguous, disjoint point ranges, one per worker."""
        n_jobs = min(self.config.n_jobs, n)
        bounds = np.linspace(0, n, n_jobs + 1).astype(int)
        return [(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]

    @staticmethod
    def _pass(pool, ranges, members, sums, step, *args) -> Tuple[int, int]:
        """Run ``step`` over every range and merge the partial results.

        Workers see the centroids and separation table as frozen snapshots
        and write per-point state only inside their own range. The merge
        into the shared accumulators and membership sets happens here,
        after all workers finished.
        """
        if pool is None:
            partials = [step(*args, start=a, stop=b) for a, b in ranges]
        else:
            futures = [pool.submit(step, *args, start=a, stop=b) for a, b in ranges]
            partials = [f.result() for f in futures]
        changed = dists = 0
        for delta, part_changed, part_dists in partials:
            sums.merge(delta)
            for point, source, target in delta.moves:
                if source < 0:
                    members.add(target, point)
                else:
                    members.move(point, source, target)
            changed += part_changed
            dists += part_dists
        return changed, dists

    def _notify(self, iteration, changed, dists, state, means, max_move) -> None:
        if self.observer is None:
            return
        self.observer.on_iteration(IterationStats(
            iteration=iteration,
            reassignments=changed,
            distance_computations=dists,
            labels=state.assignment.copy(),
            centroids=means.copy(),
            max_move=max_move,
        ))


def run(
    points,
    k: int,
    max_iter: int = 0,
    initializer: Union[str, Initializer, np.ndarray] = "k-means++",
    distance: Union[Distance, str, callable, None] = None,
    **kwargs,
) -> ClusteringResult:
    """Cluster ``points`` with Hamerly's k-means in one call.

    See :class:`HamerlyKMeans` for the keyword arguments.
    """
    return HamerlyKMeans(k, max_iter=max_iter, init=initializer, distance=distance, **kwargs).run(points)
