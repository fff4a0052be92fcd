import numpy as np
import pytest
from sklearn.datasets import make_blobs


@pytest.fixture
def separated_blobs():
    """Five tight, far apart clusters and one seed point from each."""
    data, labels = make_blobs(
        n_samples=500, n_features=8, centers=5, cluster_std=0.3,
        center_box=(-50.0, 50.0), random_state=3,
    )
    seeds = np.array([data[np.flatnonzero(labels == c)[0]] for c in range(5)])
    return data, labels, seeds


@pytest.fixture
def overlapping_blobs():
    """Overlapping clusters, so that points keep moving for a few iterations."""
    data, _ = make_blobs(
        n_samples=400, n_features=4, centers=6, cluster_std=2.5, random_state=11,
    )
    return data
