"""
K-means clustering accelerated with Hamerly's bounds.

    >>> import numpy as np
    >>> from kmeans import HamerlyKMeans
    >>>
    >>> data = np.random.random((1000, 10))
    >>> result = HamerlyKMeans(k=5, random_state=42).run(data)
    >>> result.labels.shape
    (1000,)
"""

from .version import __version__
from .config import KMeansConfig
from .exceptions import (
    KMeansError,
    ConfigurationError,
    DataError,
    NotFittedError,
    NonMetricDistanceWarning,
)
from .distance import (
    Distance,
    EuclideanDistance,
    SquaredEuclideanDistance,
    ManhattanDistance,
    CosineDistance,
    CallableDistance,
    as_distance,
)
from .initialization import (
    Initializer,
    RandomInitializer,
    FirstKInitializer,
    KMeansPlusPlusInitializer,
    PredefinedInitializer,
    get_initializer,
)
from .dataset import Dataset
from .result import ClusteringResult, KMeansModel
from .statistics import IterationStats, KMeansObserver, StatisticsRecorder
from .hamerly import HamerlyKMeans, run
from .lloyd import LloydKMeans
from .kmeans import KMeans

__all__ = [
    "__version__",
    "KMeansConfig",
    "KMeansError",
    "ConfigurationError",
    "DataError",
    "NotFittedError",
    "NonMetricDistanceWarning",
    "Distance",
    "EuclideanDistance",
    "SquaredEuclideanDistance",
    "ManhattanDistance",
    "CosineDistance",
    "CallableDistance",
    "as_distance",
    "Initializer",
    "RandomInitializer",
    "FirstKInitializer",
    "KMeansPlusPlusInitializer",
    "PredefinedInitializer",
    "get_initializer",
    "Dataset",
    "ClusteringResult",
    "KMeansModel",
    "IterationStats",
    "KMeansObserver",
    "StatisticsRecorder",
    "HamerlyKMeans",
    "run",
    "LloydKMeans",
    "KMeans",
]
