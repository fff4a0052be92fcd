"""
Dataset normalization: stable point ids plus a dense float64 matrix.
"""

from __future__ import annotations

from typing import Hashable, List, Mapping, Sequence, Union

import numpy as np

from .exceptions import DataError


class Dataset(object):
    """An ordered, immutable collection of points with stable ids.

    Args:
        data: Array of shape ``(n, d)``.
        ids: One id per row. Defaults to the row indices.
    """

    def __init__(self, data: np.ndarray, ids: Sequence[Hashable] = None) -> None:
        if ids is None:
            ids = np.arange(data.shape[0])
        if len(ids) != data.shape[0]:
            raise DataError(f"Got {len(ids)} ids for {data.shape[0]} points")
        self.data = data
        self.ids = ids

    @classmethod
    def from_input(cls, points: Union["Dataset", np.ndarray, Mapping, Sequence]) -> "Dataset":
        """Build a dataset from an array-like or an ``{id: vector}`` mapping.

        Raises:
            DataError: If the vectors are ragged, not 2-D or not finite.
        """
        if isinstance(points, Dataset):
            return points
        if isinstance(points, Mapping):
            ids: List[Hashable] = list(points.keys())
            vectors = [np.asarray(points[key], dtype=np.float64) for key in ids]
            if not vectors:
                return cls(np.empty((0, 0), dtype=np.float64), ids)
            dims = {v.shape for v in vectors}
            if len(dims) != 1:
                raise DataError(f"Vectors have inconsistent shapes: {sorted(dims)}")
            return cls(_check_matrix(np.vstack(vectors)), ids)
        try:
            data = np.array(points, dtype=np.float64)
        except ValueError as e:
            raise DataError(f"Cannot convert points to a matrix: {e}") from e
        if data.size == 0 and data.shape[0] == 0:
            dim = data.shape[1] if data.ndim == 2 else 0
            return cls(np.empty((0, dim), dtype=np.float64))
        return cls(_check_matrix(data))

    def __len__(self) -> int:
        return self.data.shape[0]

    @property
    def dim(self) -> int:
        return self.data.shape[1]


def _check_matrix(data: np.ndarray) -> np.ndarray:
    if data.ndim != 2:
        raise DataError(f"Points must form a 2-D (n, d) matrix, got shape {data.shape}")
    if data.shape[1] == 0:
        raise DataError(f"Points must have at least one coordinate, got shape {data.shape}")
    if not np.isfinite(data).all():
        raise DataError("Points must not contain NaN or infinite values")
    return data
