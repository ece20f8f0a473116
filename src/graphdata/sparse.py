"""Occupancy-aware sparse storage.

Stored positions matter on their own: a stored zero is a non-missing entry
while an absent position is missing. ``SparseVector`` keeps this distinction
for 1-D data and scipy ``csc_matrix`` keeps it for 2-D data, as long as
matrices are assembled from coordinates rather than filtered from dense
arrays.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Union

import numpy as np
import scipy.sparse as sp


class SparseVector:
    """1-D sparse vector with explicit stored positions (0-based storage)."""

    __slots__ = ("size", "indices", "data")

    def __init__(
        self,
        size: int,
        indices: Iterable[int] = (),
        data: Iterable[Any] = (),
        *,
        dtype: Any = None,
    ) -> None:
        size = int(size)
        if size < 0:
            raise ValueError(f"SparseVector size must be >= 0, got {size}.")
        idx = np.array(
            indices if isinstance(indices, np.ndarray) else list(indices),
            dtype=np.int64,
        ).reshape(-1)
        values = np.array(
            data if isinstance(data, np.ndarray) else list(data), dtype=dtype
        ).reshape(-1)
        if idx.shape != values.shape:
            raise ValueError(
                f"SparseVector got {idx.size} indices but {values.size} values."
            )
        if idx.size:
            if idx.min() < 0 or idx.max() >= size:
                raise ValueError(
                    f"SparseVector indices must fall within [0, {size}), "
                    f"got {idx.min()}..{idx.max()}."
                )
            order = np.argsort(idx, kind="stable")
            idx = idx[order]
            values = values[order]
            duplicated = idx[1:][np.diff(idx) == 0]
            if duplicated.size:
                raise ValueError(
                    f"SparseVector index {int(duplicated[0])} is stored twice."
                )
        self.size = size
        self.indices = idx
        self.data = values

    @classmethod
    def from_dense(cls, values: Any) -> "SparseVector":
        array = np.asarray(values)
        if array.ndim != 1:
            raise ValueError(f"Expected a 1-D array, got shape {array.shape}.")
        nonzero = np.flatnonzero(array)
        return cls(array.size, nonzero, array[nonzero], dtype=array.dtype)

    @classmethod
    def from_scipy(cls, value: Any) -> "SparseVector":
        coo = sp.coo_array(value)
        if coo.ndim != 1:
            raise ValueError(f"Expected a 1-D sparse array, got shape {coo.shape}.")
        coo.sum_duplicates()
        return cls(coo.shape[0], coo.coords[0], coo.data, dtype=coo.dtype)

    @property
    def shape(self) -> tuple[int]:
        return (self.size,)

    @property
    def ndim(self) -> int:
        return 1

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    @property
    def nnz(self) -> int:
        return int(self.indices.size)

    def toarray(self) -> np.ndarray:
        result = np.zeros(self.size, dtype=self.dtype)
        result[self.indices] = self.data
        return result

    def positions(self) -> list[int]:
        """Stored positions as 1-based node indices."""
        return (self.indices + 1).tolist()

    def items(self) -> Iterator[tuple[int, Any]]:
        """Yield (0-based index, value) pairs for every stored entry."""
        return zip(self.indices.tolist(), self.data.tolist())

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, index: int) -> Any:
        if index < 0:
            index += self.size
        if not 0 <= index < self.size:
            raise IndexError(f"SparseVector index {index} out of range.")
        loc = int(np.searchsorted(self.indices, index))
        if loc < self.indices.size and self.indices[loc] == index:
            return self.data[loc].item()
        return self.dtype.type(0).item()

    def __repr__(self) -> str:
        entries = ["·"] * self.size
        for index, value in self.items():
            entries[index] = repr(value)
        if len(entries) > 12:
            entries = entries[:11] + ["...", entries[-1]]
        return f"SparseVector([{', '.join(entries)}], dtype={self.dtype})"


SparseArray = Union[SparseVector, sp.spmatrix, sp.sparray]
Position = Union[int, tuple[int, int]]


def is_sparse_matrix(value: Any) -> bool:
    return sp.issparse(value) and len(value.shape) == 2


def is_sparse_vector(value: Any) -> bool:
    return isinstance(value, SparseVector)


def is_sparse(value: Any) -> bool:
    return is_sparse_vector(value) or is_sparse_matrix(value)


def _matrix_coordinates(matrix: Any) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    # Converting to CSC sums duplicated coordinates but keeps stored zeros.
    coo = sp.csc_matrix(matrix).tocoo()
    order = np.lexsort((coo.row, coo.col))
    return coo.row[order], coo.col[order], coo.data[order]


def stored_positions(value: Any) -> list[Position]:
    """0-based stored positions, column-major for matrices."""
    if is_sparse_vector(value):
        return value.indices.tolist()
    if is_sparse_matrix(value):
        rows, cols, _ = _matrix_coordinates(value)
        return list(zip(rows.tolist(), cols.tolist()))
    raise TypeError(f"Expected a sparse vector or matrix, got {type(value).__name__}.")


def stored_items(value: Any) -> list[tuple[Position, Any]]:
    """0-based (position, value) pairs, column-major for matrices."""
    if is_sparse_vector(value):
        return list(value.items())
    if is_sparse_matrix(value):
        rows, cols, data = _matrix_coordinates(value)
        return list(zip(zip(rows.tolist(), cols.tolist()), data.tolist()))
    raise TypeError(f"Expected a sparse vector or matrix, got {type(value).__name__}.")


def one_based(position: Position) -> Position:
    if isinstance(position, tuple):
        return tuple(index + 1 for index in position)
    return position + 1


def sparse_matrix(
    shape: tuple[int, int],
    positions: Sequence[tuple[int, int]],
    values: Sequence[Any],
    dtype: Any,
) -> sp.csc_matrix:
    """Assemble a CSC matrix storing exactly the given 0-based positions."""
    rows = np.fromiter((i for i, _ in positions), dtype=np.int64, count=len(positions))
    cols = np.fromiter((j for _, j in positions), dtype=np.int64, count=len(positions))
    data = np.asarray(values, dtype=dtype).reshape(-1)
    return sp.csc_matrix((data, (rows, cols)), shape=shape, dtype=dtype)


__all__ = [
    "SparseVector",
    "SparseArray",
    "Position",
    "is_sparse",
    "is_sparse_matrix",
    "is_sparse_vector",
    "stored_positions",
    "stored_items",
    "one_based",
    "sparse_matrix",
]
