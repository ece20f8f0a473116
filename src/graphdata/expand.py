"""Expansion of checked values into their final dense or sparse arrays.

Inputs are assumed to have passed the checks in ``graphdata.check``. The few
failures left here are size mismatches between values and templates that
only become visible while expanding.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional, Union

import numpy as np
import scipy.sparse as sp

from graphdata.containers import BinMap, is_adjacency, is_map
from graphdata.display import plural
from graphdata.errors import InternalError, SchemaError, SizeMismatchError
from graphdata.spaces import Indexed, Space, as_edge_space, as_space
from graphdata.sparse import (
    SparseVector,
    is_sparse,
    is_sparse_matrix,
    is_sparse_vector,
    sparse_matrix,
    stored_positions,
)
from graphdata.types import KeyKind, is_real

Cases = Union[Mapping[str, Callable[[], Any]], Iterable[tuple[str, Callable[[], Any]]]]


def _of(name: Optional[str]) -> str:
    return "" if name is None else f" for '{name}'"


def _context(name: Optional[str], **context: Any) -> dict[str, Any]:
    if name is not None:
        context["field"] = name
    return context


# ==========================================================================================
# Presets.


def build_from_label(name: str, value: str, cases: Cases) -> Any:
    """Evaluate the case matching an already checked label."""
    pairs = cases.items() if isinstance(cases, Mapping) else cases
    for label, build in pairs:
        if label == value:
            return build()
    raise InternalError(
        f"Incorrectly checked label for '{name}': {value!r}. "
        "This is a bug in graphdata. "
        "Consider reporting it if you can reproduce it with a minimal example.",
        context={"field": name, "value": value},
    )


def expand_if_label(name: str, value: Any, cases: Cases) -> Any:
    if not isinstance(value, str):
        return value
    return build_from_label(name, value, cases)


# ==========================================================================================
# Scalars.


def _scalar_dtype(scalar: Any) -> np.dtype:
    return np.asarray(scalar).dtype


def to_size(scalar: Any, shape: Union[int, tuple[int, ...]]) -> np.ndarray:
    if isinstance(shape, int):
        shape = (shape,)
    return np.full(shape, scalar, dtype=_scalar_dtype(scalar))


def to_template(scalar: Any, template: Any) -> Any:
    """Set exactly the template's stored positions to the scalar."""
    dtype = _scalar_dtype(scalar)
    if is_sparse_vector(template):
        return SparseVector(
            template.size,
            template.indices,
            np.full(template.nnz, scalar, dtype=dtype),
            dtype=dtype,
        )
    positions = stored_positions(template)
    return sparse_matrix(
        template.shape, positions, np.full(len(positions), scalar, dtype=dtype), dtype
    )


# ==========================================================================================
# Vectors.


def sparse_from_values(values: Any, template: Any, *, name: Optional[str] = None) -> Any:
    """Fill the template's stored positions with values, in template order.

    Matrices are filled column by column.
    """
    values = np.asarray(values)
    positions = stored_positions(template)
    v, e = values.size, len(positions)
    if v != e:
        which = "Not enough" if v < e else "Too many"
        raise SizeMismatchError(
            f"{which} values provided ({v}){_of(name)} to fill the given template "
            f"({e} required).",
            context=_context(name, provided=v, required=e),
        )
    if is_sparse_vector(template):
        return SparseVector(template.size, positions, values, dtype=values.dtype)
    return sparse_matrix(template.shape, positions, values, values.dtype)


def _broadcast(
    vector: Any,
    template: Any,
    axis: int,
    what: str,
    other: str,
    name: Optional[str],
) -> Any:
    vector = np.asarray(vector)
    if not is_sparse_matrix(template):
        raise SchemaError(
            f"Broadcasting a {what} needs a sparse matrix template, "
            f"got {type(template).__name__}."
        )
    given, expected = vector.size, int(template.shape[1 - axis])
    if given != expected:
        raise SizeMismatchError(
            f"{what.capitalize()} size mismatch{_of(name)}: {given} value{plural(given)} "
            f"input, but {expected} {other}{plural(expected)} in template.",
            context=_context(name, provided=given, required=expected),
        )
    positions = stored_positions(template)
    # Rows take their value from the column index and columns from the row index.
    data = [vector[position[1 - axis]] for position in positions]
    return sparse_matrix(template.shape, positions, data, vector.dtype)


def from_row(row: Any, n_rows: Any, *, name: Optional[str] = None) -> Any:
    """Repeat the row, either n_rows times or over a sparse template."""
    if isinstance(n_rows, (int, np.integer)):
        return np.tile(np.asarray(row), (int(n_rows), 1))
    return _broadcast(row, n_rows, 0, "row", "column", name)


def from_col(col: Any, n_cols: Any, *, name: Optional[str] = None) -> Any:
    """Repeat the column, either n_cols times or over a sparse template."""
    if isinstance(n_cols, (int, np.integer)):
        return np.tile(np.asarray(col).reshape(-1, 1), (1, int(n_cols)))
    return _broadcast(col, n_cols, 1, "column", "row", name)


# ==========================================================================================
# Maps and adjacency lists.


def _node_space(space: Any) -> Space:
    try:
        return as_space(space)
    except (TypeError, ValueError) as exc:
        raise SchemaError(f"Invalid reference space: {exc}") from exc


def _entries(lst: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(lst, BinMap):
        return ((key, True) for key in lst)
    return lst.items()


def _position(space: Space, key: Any) -> int:
    # Integer keys index into labeled spaces by position too.
    if isinstance(key, str):
        return space.position(key)
    return int(key)


def to_dense_vector(
    lst: Any, index: Any = None, *, name: Optional[str] = None
) -> np.ndarray:
    """Fully populated vector, assuming every reference is given."""
    if index is None:
        if isinstance(lst, BinMap):
            raise SchemaError("A reference index is needed to expand a binary map.")
        if lst.key_kind is KeyKind.LABEL:
            raise SchemaError("A reference index is needed to expand label keys.")
        space: Space = Indexed(len(lst))
    else:
        space = _node_space(index)
        if not isinstance(lst, BinMap) and len(lst) != len(space):
            raise SizeMismatchError(
                f"Cannot produce a dense vector{_of(name)} with {len(lst)} values "
                f"and {len(space)} references.",
                context=_context(name, provided=len(lst), required=len(space)),
            )
    result = np.zeros(len(space), dtype=lst.dtype.numpy_dtype)
    for key, value in _entries(lst):
        result[_position(space, key) - 1] = value
    return result


def to_sparse_vector(lst: Any, index: Any) -> SparseVector:
    """Sparse vector over the space, unlisted positions left missing."""
    space = _node_space(index)
    indices, data = [], []
    for key, value in _entries(lst):
        indices.append(_position(space, key) - 1)
        data.append(value)
    return SparseVector(len(space), indices, data, dtype=lst.dtype.numpy_dtype)


def to_sparse_matrix(adj: Any, i_index: Any, j_index: Any = None) -> sp.csc_matrix:
    """Sparse matrix over the edge space, unlisted edges left missing."""
    try:
        source, target = as_edge_space(i_index if j_index is None else (i_index, j_index))
    except (TypeError, ValueError) as exc:
        raise SchemaError(f"Invalid reference space: {exc}") from exc
    positions, data = [], []
    for outer, sub in adj.items():
        i = _position(source, outer) - 1
        for inner, value in _entries(sub):
            positions.append((i, _position(target, inner) - 1))
            data.append(value)
    dtype = adj.dtype.numpy_dtype
    return sparse_matrix((len(source), len(target)), positions, data, dtype)


# ==========================================================================================
# Dispatch.


def _template_space(template: Any, ndim: int) -> Any:
    shape = tuple(int(dim) for dim in template.shape)
    if len(shape) != ndim:
        raise SchemaError(
            f"Template has {len(shape)} dimension(s) but {ndim} are needed here."
        )
    return shape[0] if ndim == 1 else shape


def _broadcast_extent(shape: Any, space: Any, axis: int) -> int:
    if shape is not None:
        return int(shape[axis])
    if space is not None:
        source, target = as_edge_space(space)
        return len(source if axis == 0 else target)
    raise SchemaError("Broadcasting a vector needs a size, a space or a template.")


def expand(
    value: Any,
    *,
    shape: Optional[tuple[int, ...]] = None,
    template: Any = None,
    space: Any = None,
    dense: bool = False,
    values: bool = False,
    broadcast: Optional[str] = None,
    name: Optional[str] = None,
) -> Any:
    """Expand a checked value into its final array.

    Scalars fill the template's stored positions, or the whole shape. With
    ``values``, a vector fills the template's stored positions. With
    ``broadcast`` set to "row" or "col", a vector is repeated over a matrix.
    Maps and adjacency lists become sparse arrays over the space (or the
    template size). With ``dense`` and no template, maps become dense vectors;
    a dense map over a template is stored at the template positions it covers.
    """
    if isinstance(value, str) or is_sparse(value):
        return value
    if is_real(value):
        if template is not None:
            return to_template(value, template)
        if shape is not None:
            return to_size(value, shape)
        if space is not None:
            return to_size(value, len(_node_space(space)))
        return value
    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            return value
        if broadcast == "row":
            if template is not None:
                return from_row(value, template, name=name)
            return from_row(value, _broadcast_extent(shape, space, 0), name=name)
        if broadcast == "col":
            if template is not None:
                return from_col(value, template, name=name)
            return from_col(value, _broadcast_extent(shape, space, 1), name=name)
        if broadcast is not None:
            raise SchemaError(
                f"Invalid broadcast direction: {broadcast!r}. Expected 'row' or 'col'."
            )
        if values and template is not None:
            return sparse_from_values(value, template, name=name)
        return value
    if is_map(value):
        index = space
        if index is None and template is not None:
            index = _template_space(template, 1)
        if dense and template is None:
            return to_dense_vector(value, index, name=name)
        if index is None:
            raise SchemaError("Expanding a map needs a space or a template.")
        return to_sparse_vector(value, index)
    if is_adjacency(value):
        index = space
        if index is None and template is not None:
            index = _template_space(template, 2)
        if index is None:
            raise SchemaError("Expanding an adjacency list needs a space or a template.")
        return to_sparse_matrix(value, index)
    raise SchemaError(f"Cannot expand value of type {type(value).__name__}.")


__all__ = [
    "build_from_label",
    "expand_if_label",
    "to_size",
    "to_template",
    "sparse_from_values",
    "from_row",
    "from_col",
    "to_dense_vector",
    "to_sparse_vector",
    "to_sparse_matrix",
    "expand",
]
