"""Simple example clustering vectors with Hamerly's k-means.

Uses SIFT learn vectors when ``sift/sift_learn.fvecs`` is present, synthetic
data otherwise.
"""

import logging
import os

import numpy as np

from kmeans import KMeans, StatisticsRecorder


def load_sift_data_or_synthetic(dim: int = 128, n: int = 10000) -> np.ndarray:
    base_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'sift', 'sift_learn.fvecs')
    if os.path.exists(base_path):
        raw = np.fromfile(base_path, dtype=np.int32)
        d = raw[0]
        raw = raw.reshape(-1, d + 1)
        return raw[:, 1:].view(np.float32).astype(np.float64)
    return np.random.default_rng(0).normal(size=(n, dim))


def simple_example():
    """Simple example demonstrating K-means usage."""
    print("🎯 Simple Hamerly K-means Example")
    print("=" * 50)

    X = load_sift_data_or_synthetic()[:2000]
    print(f"Using {X.shape[0]} samples with {X.shape[1]} features")

    recorder = StatisticsRecorder()
    kmeans = KMeans(
        n_clusters=20,
        max_iters=200,
        n_init=3,
        random_state=42,
        observer=recorder,
        verbose=True,
    )
    kmeans.fit(X)

    info = kmeans.get_cluster_info()
    print(f"\nResults:")
    print(f"  Final inertia: {info['inertia']:.2f}")
    print(f"  Iterations: {info['n_iterations']}")
    print(f"  Distance computations: {info['distance_computations']}")
    print(f"  Unpruned cost would be: {(info['n_iterations'] + 1) * X.shape[0] * 20}")
    print(f"\nCluster distribution:")
    print(f"  Average cluster size: {info['avg_cluster_size']:.1f}")
    print(f"  Largest cluster: {info['max_cluster_size']}")
    print(f"  Smallest cluster: {info['min_cluster_size']}")
    print(f"  Reassignments per iteration (all runs): {recorder.stats['reassignments']}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    simple_example()
