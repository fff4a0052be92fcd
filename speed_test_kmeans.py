#!/usr/bin/env python3
"""
Speed test for Hamerly K-means against the unpruned Lloyd baseline
"""

import time
import numpy as np
from sklearn.datasets import make_blobs

from kmeans import HamerlyKMeans, LloydKMeans, KMeansPlusPlusInitializer, SquaredEuclideanDistance


def speed_test_kmeans():
    """Compare distance computations and wall time on different dataset sizes."""
    print("🚀 K-means Speed Test - Hamerly vs Lloyd")
    print("=" * 60)

    # Test configurations
    test_configs = [
        {'n_samples': 1000, 'n_features': 32, 'n_clusters': 10},
        {'n_samples': 5000, 'n_features': 32, 'n_clusters': 20},
        {'n_samples': 10000, 'n_features': 64, 'n_clusters': 50},
    ]

    for config in test_configs:
        print(f"\nTest: {config['n_samples']} samples, {config['n_features']} features, {config['n_clusters']} clusters")
        print("-" * 50)

        X, _ = make_blobs(
            n_samples=config['n_samples'],
            n_features=config['n_features'],
            centers=config['n_clusters'],
            cluster_std=2.0,
            random_state=42,
        )
        # Same starting centroids for both algorithms
        init = KMeansPlusPlusInitializer(random_state=42).choose_initial_means(
            X, config['n_clusters'], SquaredEuclideanDistance())

        results = {}
        for name, algorithm in (('Lloyd', LloydKMeans), ('Hamerly', HamerlyKMeans)):
            start_time = time.time()
            result = algorithm(k=config['n_clusters'], init=init).run(X)
            elapsed_time = time.time() - start_time
            results[name] = result

            print(f"{name:>8}: {elapsed_time:.2f}s, {result.n_iter} iterations, "
                  f"{result.distance_computations} distance computations, "
                  f"inertia {result.inertia:.2f}")

        saved = 1.0 - results['Hamerly'].distance_computations / results['Lloyd'].distance_computations
        same = np.array_equal(results['Hamerly'].labels, results['Lloyd'].labels)
        print(f"   Distance computations saved: {saved:.1%}")
        print(f"   Identical clustering: {'✅' if same else '❌'}")


if __name__ == "__main__":
    speed_test_kmeans()
    print("\n🎉 Speed test completed!")
