import unittest
import warnings
from contextlib import nullcontext

import numpy as np
from sklearn.datasets import make_blobs

from kmeans import (
    ConfigurationError,
    CosineDistance,
    DataError,
    HamerlyKMeans,
    KMeansConfig,
    LloydKMeans,
    ManhattanDistance,
    NonMetricDistanceWarning,
    StatisticsRecorder,
    run,
)


def squared_objective(data, labels, centroids):
    diff = data - centroids[labels]
    return float(np.einsum('ij,ij->', diff, diff))


class TestHamerlyKMeans(unittest.TestCase):
    def _create_blobs(self, n=400, dim=4, centers=6, std=2.5, seed=11):
        data, _ = make_blobs(
            n_samples=n, n_features=dim, centers=centers, cluster_std=std, random_state=seed
        )
        return data

    def _assert_partition(self, result, n):
        ids = [i for cluster in result.clusters for i in cluster.ids]
        self.assertEqual(len(ids), n)
        self.assertEqual(len(set(ids)), n)
        for c, cluster in enumerate(result.clusters):
            self.assertTrue(np.array_equal(cluster.mean, result.centroids[c]))
            for i in cluster.ids:
                self.assertEqual(result.labels[result.ids.index(i)], c)

    def test_empty_dataset(self):
        result = HamerlyKMeans(k=3).run(np.empty((0, 2)))
        self.assertTrue(result.is_empty)
        self.assertEqual(len(result), 0)
        self.assertEqual(result.centroids.shape, (0, 2))
        self.assertEqual(HamerlyKMeans(k=3).run({}).clusters, [])

    def test_single_point(self):
        result = HamerlyKMeans(k=1).run([[3.0, 4.0]])
        self.assertTrue(result.converged)
        self.assertEqual(result.n_iter, 1)
        self.assertEqual(result.clusters[0].ids, [0])
        self.assertTrue(np.array_equal(result.centroids[0], [3.0, 4.0]))

    def test_two_separated_groups(self):
        data = np.array([[0, 0], [0, 1], [1, 0], [10, 10], [10, 11], [11, 10]], dtype=float)
        for init in ([[0, 0], [10, 10]], [[1, 0], [10, 11]], [[0, 1], [11, 10]]):
            result = HamerlyKMeans(k=2, init=np.array(init, dtype=float)).run(data)
            self.assertTrue(result.converged)
            self.assertLessEqual(result.n_iter, 3)
            self.assertEqual(sorted(result.clusters[0].ids), [0, 1, 2])
            self.assertEqual(sorted(result.clusters[1].ids), [3, 4, 5])
            self.assertTrue(np.allclose(result.centroids[0], [1 / 3, 1 / 3]))
            self.assertTrue(np.allclose(result.centroids[1], [31 / 3, 31 / 3]))

    def test_identical_points(self):
        data = np.tile([1.0, 2.0, 3.0], (10, 1))
        for k in (1, 2, 4):
            with self.assertLogs('kmeans.hamerly', level='WARNING') if k > 1 else nullcontext():
                result = HamerlyKMeans(k=k, init='first').run(data)
            self.assertTrue(result.converged)
            self.assertEqual(result.n_iter, 1)
            self.assertEqual(result.reassignments, 0)
            self.assertEqual(len(result.clusters[0]), 10)
            self.assertEqual(result.empty_clusters, list(range(1, k)))
            for c in range(k):
                self.assertTrue(np.array_equal(result.centroids[c], [1.0, 2.0, 3.0]))

    def test_matches_lloyd(self):
        data = self._create_blobs()
        for distance in (None, 'euclidean', ManhattanDistance()):
            init = data[:6].copy()
            hamerly = HamerlyKMeans(k=6, init=init, distance=distance).run(data)
            lloyd = LloydKMeans(k=6, init=init, distance=distance).run(data)
            self.assertTrue(np.array_equal(hamerly.labels, lloyd.labels))
            self.assertTrue(np.allclose(hamerly.centroids, lloyd.centroids))
            self.assertEqual(hamerly.n_iter, lloyd.n_iter)
            self.assertEqual(hamerly.reassignments, lloyd.reassignments)
            self.assertLess(hamerly.distance_computations, lloyd.distance_computations)
            self._assert_partition(hamerly, len(data))

    def test_matches_lloyd_with_tied_distances(self):
        # Integer grid: many points sit exactly between two centroids
        data = np.array([[i, j] for i in range(6) for j in range(6)], dtype=float)
        for seed in range(20):
            hamerly = HamerlyKMeans(k=4, init='random', random_state=seed).run(data)
            lloyd = LloydKMeans(k=4, init='random', random_state=seed).run(data)
            self.assertTrue(np.array_equal(hamerly.labels, lloyd.labels), f"seed {seed}")
            self.assertEqual(hamerly.n_iter, lloyd.n_iter, f"seed {seed}")
            self.assertTrue(np.array_equal(hamerly.centroids, lloyd.centroids), f"seed {seed}")
            self.assertEqual(hamerly.inertia, lloyd.inertia, f"seed {seed}")

    def test_objective_never_increases(self):
        data = self._create_blobs(n=600, centers=8, seed=5)
        recorder = StatisticsRecorder(keep_history=True)
        result = HamerlyKMeans(k=8, init='random', random_state=0, observer=recorder).run(data)
        objectives = [
            squared_objective(data, stats.labels, stats.centroids) for stats in recorder.history
        ]
        self.assertGreater(len(objectives), 2)
        for before, after in zip(objectives, objectives[1:]):
            self.assertLessEqual(after, before * (1 + 1e-12))
        self.assertAlmostEqual(objectives[-1], result.inertia)

    def test_statistics(self):
        data = self._create_blobs()
        recorder = StatisticsRecorder()
        result = HamerlyKMeans(k=6, init='k-means++', random_state=1, observer=recorder).run(data)
        stats = recorder.get_stats()
        self.assertEqual(stats['initialization'], 'k-means++')
        self.assertEqual(stats['iterations'], result.n_iter)
        self.assertTrue(stats['converged'])
        self.assertEqual(stats['distance_computations'], result.distance_computations)
        self.assertEqual(stats['reassignments'][0], len(data))
        self.assertEqual(stats['reassignments'][-1], 0)
        self.assertEqual(sum(stats['reassignments'][1:]), result.reassignments)
        self.assertEqual(sum(stats['distance_computations_per_iteration']),
                         result.distance_computations)

    def test_max_iter_exhausted(self):
        data = self._create_blobs(n=500, centers=8, std=4.0)
        result = HamerlyKMeans(k=8, max_iter=2, init='random', random_state=3).run(data)
        self.assertFalse(result.converged)
        self.assertEqual(result.n_iter, 2)
        self._assert_partition(result, len(data))

    def test_unbounded_iterations(self):
        data = self._create_blobs()
        result = HamerlyKMeans(k=6, max_iter=-1, random_state=2).run(data)
        self.assertTrue(result.converged)

    def test_parallel_matches_sequential(self):
        data = self._create_blobs(n=1000, centers=10, seed=7)
        init = data[:10].copy()
        sequential = HamerlyKMeans(k=10, init=init).run(data)
        for n_jobs in (2, 3, 8):
            parallel = HamerlyKMeans(k=10, init=init, n_jobs=n_jobs).run(data)
            self.assertTrue(np.array_equal(parallel.labels, sequential.labels))
            self.assertTrue(np.allclose(parallel.centroids, sequential.centroids))
            self.assertEqual(parallel.n_iter, sequential.n_iter)
            self.assertEqual(parallel.distance_computations, sequential.distance_computations)
            self._assert_partition(parallel, len(data))

    def test_more_jobs_than_points(self):
        data = np.array([[0.0], [1.0], [10.0]])
        result = HamerlyKMeans(k=2, init=np.array([[0.0], [10.0]]), n_jobs=16).run(data)
        self.assertEqual(sorted(result.clusters[0].ids), [0, 1])

    def test_mapping_input_keeps_ids(self):
        points = {
            'a': [0.0, 0.0], 'b': [0.0, 1.0], 'c': [1.0, 0.0],
            'x': [10.0, 10.0], 'y': [10.0, 11.0], 'z': [11.0, 10.0],
        }
        result = HamerlyKMeans(k=2, init=np.array([[0.0, 0.0], [10.0, 10.0]])).run(points)
        self.assertEqual(result.ids, ['a', 'b', 'c', 'x', 'y', 'z'])
        self.assertEqual(sorted(result.clusters[0].ids), ['a', 'b', 'c'])
        self.assertEqual(sorted(result.clusters[1].ids), ['x', 'y', 'z'])

    def test_varstat(self):
        data = np.array([[0, 0], [0, 2], [10, 10], [10, 12]], dtype=float)
        init = np.array([[0, 0], [10, 10]], dtype=float)
        result = HamerlyKMeans(k=2, init=init, varstat=True).run(data)
        self.assertAlmostEqual(result.clusters[0].variance_sum, 2.0)
        self.assertAlmostEqual(result.clusters[1].variance_sum, 2.0)
        self.assertAlmostEqual(result.inertia, 4.0)
        self.assertIsNone(HamerlyKMeans(k=2, init=init).run(data).clusters[0].variance_sum)

    def test_invalid_k(self):
        self.assertRaises(ConfigurationError, HamerlyKMeans, k=0)
        self.assertRaises(ConfigurationError, HamerlyKMeans, k=-2)
        self.assertRaises(ConfigurationError, HamerlyKMeans, k=2.5)
        with self.assertRaises(ConfigurationError):
            HamerlyKMeans(k=4).run(np.zeros((3, 2)))

    def test_invalid_data(self):
        with self.assertRaises(DataError):
            HamerlyKMeans(k=1).run([[0.0, np.nan]])
        with self.assertRaises(DataError):
            HamerlyKMeans(k=1).run({'a': [0.0, 1.0], 'b': [1.0]})
        with self.assertRaises(DataError):
            HamerlyKMeans(k=1).run([1.0, 2.0, 3.0])
        # Points without coordinates are not an empty dataset
        with self.assertRaises(DataError):
            HamerlyKMeans(k=1).run([[], []])
        with self.assertRaises(DataError):
            HamerlyKMeans(k=1).run({'a': [], 'b': []})

    def test_invalid_initial_means(self):
        data = np.zeros((5, 2))
        with self.assertRaises(ConfigurationError):
            HamerlyKMeans(k=2, init=np.zeros((2, 3))).run(data)
        with self.assertRaises(ConfigurationError):
            HamerlyKMeans(k=2, init=np.array([[0.0, 0.0], [np.inf, 0.0]])).run(data)
        with self.assertRaises(ConfigurationError):
            HamerlyKMeans(k=2, init='bogus')

    def test_non_metric_distance_warns(self):
        data = np.abs(self._create_blobs(n=100)) + 1.0
        with self.assertWarns(NonMetricDistanceWarning):
            driver = HamerlyKMeans(k=3, distance=CosineDistance(), init='first')
        result = driver.run(data)
        self._assert_partition(result, len(data))
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            HamerlyKMeans(k=3)
            HamerlyKMeans(k=3, distance='euclidean')

    def test_from_config(self):
        data = self._create_blobs()
        config = KMeansConfig(k=6, init=data[:6].copy(), varstat=True)
        result = HamerlyKMeans.from_config(config).run(data)
        expected = HamerlyKMeans(k=6, init=data[:6].copy()).run(data)
        self.assertTrue(np.array_equal(result.labels, expected.labels))
        self.assertIsNotNone(result.clusters[0].variance_sum)

    def test_run_function(self):
        data = self._create_blobs()
        result = run(data, 6, max_iter=0, initializer='first')
        expected = LloydKMeans(k=6, init='first').run(data)
        self.assertTrue(np.array_equal(result.labels, expected.labels))


if __name__ == "__main__":
    unittest.main()
