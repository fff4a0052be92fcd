"""
Configuration for k-means runs.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Union

import numpy as np

from .exceptions import ConfigurationError


@dataclass
class KMeansConfig:
    """Parameters shared by the Hamerly driver and the estimator facade."""
    # Number of clusters
    k: int = 8
    # Iteration budget, <= 0 means run until convergence
    max_iter: int = 0
    # Initializer name, initializer object or explicit (k, d) means
    init: Any = "k-means++"
    random_state: Optional[Union[int, np.random.RandomState]] = None

    # Compute the within-cluster variance sum for every cluster model
    varstat: bool = False
    # Worker threads for a reassignment pass
    n_jobs: int = 1
    verbose: bool = False

    def __post_init__(self):
        """Validate parameters that do not depend on the dataset."""
        if isinstance(self.k, bool) or not isinstance(self.k, (int, np.integer)):
            raise ConfigurationError(f"k must be an integer, got {self.k!r}")
        if self.k <= 0:
            raise ConfigurationError(f"k must be positive, got {self.k}")
        if isinstance(self.max_iter, bool) or not isinstance(self.max_iter, (int, np.integer)):
            raise ConfigurationError(f"max_iter must be an integer, got {self.max_iter!r}")
        if isinstance(self.n_jobs, bool) or not isinstance(self.n_jobs, (int, np.integer)):
            raise ConfigurationError(f"n_jobs must be an integer, got {self.n_jobs!r}")
        if self.n_jobs < 1:
            raise ConfigurationError(f"n_jobs must be at least 1, got {self.n_jobs}")
        self.k = int(self.k)
        self.max_iter = int(self.max_iter)
        self.n_jobs = int(self.n_jobs)

    @property
    def unbounded(self) -> bool:
        return self.max_iter <= 0

    def check_k(self, n_samples: int) -> None:
        """Reject ``k > n`` once the dataset size is known."""
        if self.k > n_samples:
            raise ConfigurationError(
                f"k={self.k} must not exceed the number of points ({n_samples})"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
