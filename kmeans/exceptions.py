"""Exceptions raised by the k-means package."""


class KMeansError(ValueError):
    """Base class for all k-means errors."""


class ConfigurationError(KMeansError):
    """Invalid parameters, rejected before any clustering state is built."""


class DataError(KMeansError):
    """The dataset cannot be clustered (non-finite values, ragged vectors)."""


class NotFittedError(KMeansError):
    """An estimator was used before ``fit`` was called."""


class NonMetricDistanceWarning(UserWarning):
    """The distance does not guarantee the triangle inequality.

    Bound pruning still runs, but its results are only exact when the
    distance is a metric.
    """
