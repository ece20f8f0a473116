"""Conversion of raw user input into canonical graph data.

Each candidate target is tried in the caller's order by the strategy
registered for its shape. A strategy returns None when the input is not
applicable, ``Same`` when the input already is canonical (the caller then
keeps an alias to its own object) or ``Converted`` wrapping a fresh value.
Strategies raise TypeError/ValueError when an applicable input fails to
convert.

Accepted implicit conversions:

  - real -> float, integer -> int, integer -> bool (0 or 1 only),
    element-wise over vectors, matrices, sparse vectors and sparse matrices
  - str subclasses -> str labels
  - vector -> sparse vector, matrix -> sparse matrix
  - any mapping or iterable of (key, value) pairs -> Map
  - any iterable of keys, or a boolean mask -> BinMap
  - any iterable of (key, sub-map) pairs -> Adjacency / BinAdjacency
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
import logging
from typing import Any, ClassVar, Optional

import numpy as np
import scipy.sparse as sp

from graphdata.aliases import Shape, Target, as_targets
from graphdata.config import get_config
from graphdata.containers import Adjacency, BinAdjacency, BinMap, Map
from graphdata.display import describe, scalar_repr
from graphdata.errors import DuplicateKeyError, TypeConversionError
from graphdata.registry import Registry, register, resolve_converter
from graphdata.sparse import SparseVector, is_sparse_matrix
from graphdata.types import ElementType, KeyKind, is_real, key_kind_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conversion:
    value: Any
    target: Optional[Target] = None

    aliased: ClassVar[bool] = False


@dataclass(frozen=True)
class Same(Conversion):
    """The input already is canonical and is returned as-is."""

    aliased: ClassVar[bool] = True


@dataclass(frozen=True)
class Converted(Conversion):
    """A new canonical value built from the input."""


# ==========================================================================================
# Scalars.


def _convert_label(value: Any, target: Target, **_: Any) -> Optional[Conversion]:
    if not isinstance(value, str):
        return None
    if type(value) is str:
        return Same(value)
    return Converted(str(value))


def _convert_scalar(value: Any, target: Target, **_: Any) -> Optional[Conversion]:
    dtype = target.dtype
    if not dtype.accepts_scalar(value):
        return None
    if dtype.is_canonical_scalar(value):
        return Same(value)
    return Converted(dtype.cast_scalar(value))


# ==========================================================================================
# Dense and sparse arrays.


def _is_number(value: Any) -> bool:
    return is_real(value)


def _dense_input(value: Any, ndim: int) -> Optional[np.ndarray]:
    # Tuples are left to key-value pairs: only arrays and lists are dense input.
    if isinstance(value, np.ndarray):
        return value if value.ndim == ndim else None
    if not isinstance(value, list):
        return None
    if ndim == 1:
        if not all(_is_number(entry) for entry in value):
            return None
        return np.array(value)
    if not value or not all(isinstance(row, list) for row in value):
        return None
    width = len(value[0])
    if any(len(row) != width for row in value):
        return None
    if not all(_is_number(entry) for row in value for entry in row):
        return None
    return np.array(value).reshape(len(value), width)


def _convert_dense(value: Any, target: Target, ndim: int) -> Optional[Conversion]:
    array = _dense_input(value, ndim)
    if array is None:
        return None
    if array is not value and array.size == 0:
        return Converted(np.empty(array.shape, dtype=target.dtype.numpy_dtype))
    if not target.dtype.accepts_kind(array.dtype.kind):
        return None
    if array is value and array.dtype == target.dtype.numpy_dtype:
        return Same(value)
    return Converted(target.dtype.cast_array(array, copy=array is value))


def _convert_vector(value: Any, target: Target, **_: Any) -> Optional[Conversion]:
    return _convert_dense(value, target, 1)


def _convert_matrix(value: Any, target: Target, **_: Any) -> Optional[Conversion]:
    return _convert_dense(value, target, 2)


def _cast_sparse_vector(vector: SparseVector, dtype: ElementType) -> SparseVector:
    return SparseVector(
        vector.size, vector.indices, dtype.cast_array(vector.data), dtype=dtype.numpy_dtype
    )


def _convert_sparse_vector(value: Any, target: Target, **_: Any) -> Optional[Conversion]:
    dtype = target.dtype
    if isinstance(value, SparseVector):
        if not dtype.accepts_kind(value.dtype.kind):
            return None
        if value.dtype == dtype.numpy_dtype:
            return Same(value)
        return Converted(_cast_sparse_vector(value, dtype))
    if sp.issparse(value) and len(value.shape) == 1:
        if not dtype.accepts_kind(value.dtype.kind):
            return None
        return Converted(_cast_sparse_vector(SparseVector.from_scipy(value), dtype))
    array = _dense_input(value, 1)
    if array is None or not dtype.accepts_kind(array.dtype.kind):
        return None
    return Converted(SparseVector.from_dense(dtype.cast_array(array)))


def _convert_sparse_matrix(value: Any, target: Target, **_: Any) -> Optional[Conversion]:
    dtype = target.dtype
    if is_sparse_matrix(value):
        if not dtype.accepts_kind(value.dtype.kind):
            return None
        if type(value) is sp.csc_matrix and value.dtype == dtype.numpy_dtype:
            return Same(value)
        matrix = sp.csc_matrix(value, copy=True)
        matrix.data = dtype.cast_array(matrix.data)
        return Converted(matrix)
    array = _dense_input(value, 2)
    if array is None or not dtype.accepts_kind(array.dtype.kind):
        return None
    return Converted(sp.csc_matrix(dtype.cast_array(array)))


# ==========================================================================================
# Maps and adjacency lists.


def _iterate(value: Any, what: str) -> Iterable[Any]:
    if isinstance(value, Mapping):
        return value.items()
    if isinstance(value, (str, bytes)):
        raise TypeError(f"{what} input needs to be an iterable collection, not a string.")
    try:
        return iter(value)
    except TypeError:
        raise TypeError(f"{what} input needs to be iterable.") from None


def _split_pair(pair: Any) -> tuple[Any, Any]:
    if isinstance(pair, (str, bytes)):
        raise ValueError(f"Not a key-value pair: {describe(pair)}.")
    try:
        key, value = pair
    except (TypeError, ValueError):
        raise ValueError(f"Not a key-value pair: {describe(pair)}.") from None
    return key, value


def _infer_kind(key: Any, expected: Optional[KeyKind]) -> KeyKind:
    kind = key_kind_of(key)
    if kind is None:
        raise TypeError(
            f"Cannot convert key to integer or label: received {describe(key)}."
        )
    if expected is not None and kind is not expected:
        raise TypeError(
            f"Expected '{expected}' keys, got '{kind}' instead "
            f"(inferred from first key: {describe(key)})."
        )
    return kind


def _convert_key(kind: KeyKind, key: Any) -> Any:
    if key_kind_of(key) is not kind:
        raise TypeError(f"Map key cannot be converted to '{kind}': received {describe(key)}.")
    return int(key) if kind is KeyKind.INDEX else str(key)


def _convert_value(dtype: ElementType, value: Any, key: Any) -> Any:
    if not dtype.accepts_scalar(value):
        raise TypeError(
            f"Map value at key {scalar_repr(key)} cannot be converted to '{dtype}': "
            f"received {describe(value)}."
        )
    try:
        return dtype.cast_scalar(value)
    except ValueError as exc:
        raise ValueError(
            f"Map value at key {scalar_repr(key)} cannot be converted to '{dtype}': {exc}"
        ) from exc


def _duplicate(key: Any) -> DuplicateKeyError:
    return DuplicateKeyError(f"Duplicated key: {scalar_repr(key)}.", context={"key": key})


def _empty_kind(expected: Optional[KeyKind]) -> KeyKind:
    # Key kind cannot be inferred from empty input.
    if expected is not None:
        return expected
    return KeyKind.from_any(get_config().default_key_kind)


def build_map(
    value: Any,
    dtype: Any,
    *,
    expected_kind: Optional[KeyKind] = None,
) -> Map:
    dtype = ElementType.from_any(dtype)
    result: Optional[Map] = None
    for pair in _iterate(value, "Key-value mapping"):
        key, entry = _split_pair(pair)
        if result is None:
            result = Map(_infer_kind(key, expected_kind), dtype)
        key = _convert_key(result.key_kind, key)
        if key in result:
            raise _duplicate(key)
        result[key] = _convert_value(dtype, entry, key)
    if result is None:
        result = Map(_empty_kind(expected_kind), dtype)
    return result


def _mask_positions(value: Any) -> Optional[list[int]]:
    """1-based true positions when the value is a boolean mask."""
    if isinstance(value, SparseVector) and value.dtype.kind == "b":
        return [index + 1 for index, flag in value.items() if flag]
    if isinstance(value, np.ndarray) and value.ndim == 1 and value.dtype.kind == "b":
        return (np.flatnonzero(value) + 1).tolist()
    if (
        isinstance(value, list)
        and value
        and all(isinstance(entry, (bool, np.bool_)) for entry in value)
    ):
        return [index for index, flag in enumerate(value, start=1) if flag]
    return None


def build_binmap(value: Any, *, expected_kind: Optional[KeyKind] = None) -> BinMap:
    positions = _mask_positions(value)
    if positions is not None:
        if expected_kind is KeyKind.LABEL:
            raise TypeError("A boolean mask can only produce index keys, not labels.")
        return BinMap(KeyKind.INDEX, positions)
    if isinstance(value, Mapping):
        raise TypeError(
            f"Binary mapping input needs to be an iterable of keys, "
            f"not a key-value mapping: {describe(value)}."
        )
    result: Optional[BinMap] = None
    for key in _iterate(value, "Binary mapping"):
        if result is None:
            result = BinMap(_infer_kind(key, expected_kind))
        key = _convert_key(result.key_kind, key)
        if key in result:
            raise _duplicate(key)
        result.add(key)
    if result is None:
        result = BinMap(_empty_kind(expected_kind))
    return result


def _submap(value: Any, dtype: ElementType, kind: KeyKind, key: Any, binary: bool) -> Any:
    try:
        if binary:
            # Singletons are unambiguous: `a => b` reads as `a => [b]`.
            if key_kind_of(value) is kind:
                value = [value]
            return build_binmap(value, expected_kind=kind)
        return build_map(value, dtype, expected_kind=kind)
    except DuplicateKeyError as exc:
        raise DuplicateKeyError(
            f"Error while parsing adjacency list input at key {scalar_repr(key)}: {exc}",
            context=exc.context,
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Error while parsing adjacency list input at key {scalar_repr(key)}: {exc}"
        ) from exc


def _bool_matrix_rows(value: Any) -> Optional[list[tuple[int, list[int]]]]:
    """1-based (row, true columns) pairs when the value is a boolean matrix."""
    if is_sparse_matrix(value) and value.dtype.kind == "b":
        coo = sp.coo_matrix(value)
        order = np.lexsort((coo.col, coo.row))
        rows: dict[int, list[int]] = {}
        for i, j, flag in zip(
            coo.row[order].tolist(), coo.col[order].tolist(), coo.data[order].tolist()
        ):
            if flag:
                rows.setdefault(i + 1, []).append(j + 1)
        return list(rows.items())
    if isinstance(value, np.ndarray) and value.ndim == 2 and value.dtype.kind == "b":
        result = []
        for i, row in enumerate(value, start=1):
            columns = (np.flatnonzero(row) + 1).tolist()
            if columns:
                result.append((i, columns))
        return result
    return None


def build_adjacency(
    value: Any,
    dtype: Any = None,
    *,
    binary: bool = False,
    expected_kind: Optional[KeyKind] = None,
) -> Any:
    element = ElementType.BOOL if binary else ElementType.from_any(dtype)
    if binary:
        rows = _bool_matrix_rows(value)
        if rows is not None:
            if expected_kind is KeyKind.LABEL:
                raise TypeError("A boolean matrix can only produce index keys, not labels.")
            return BinAdjacency(
                KeyKind.INDEX, ((i, BinMap(KeyKind.INDEX, js)) for i, js in rows)
            )
    what = "Binary adjacency list" if binary else "Adjacency list"
    result: Any = None
    for pair in _iterate(value, what):
        key, sub = _split_pair(pair)
        if result is None:
            kind = _infer_kind(key, expected_kind)
            result = BinAdjacency(kind) if binary else Adjacency(kind, element)
        key = _convert_key(result.key_kind, key)
        sub = _submap(sub, element, result.key_kind, key, binary)
        if key in result:
            raise _duplicate(key)
        result[key] = sub
    if result is None:
        kind = _empty_kind(expected_kind)
        result = BinAdjacency(kind) if binary else Adjacency(kind, element)
    return result


def _kind_matches(value: Any, expected: Optional[KeyKind]) -> bool:
    return expected is None or value.key_kind is expected


def _convert_map(
    value: Any,
    target: Target,
    *,
    expected_kind: Optional[KeyKind] = None,
    **_: Any,
) -> Optional[Conversion]:
    if target.binary:
        if type(value) is BinMap and _kind_matches(value, expected_kind):
            return Same(value)
        return Converted(build_binmap(value, expected_kind=expected_kind))
    if (
        type(value) is Map
        and value.dtype is target.dtype
        and _kind_matches(value, expected_kind)
    ):
        return Same(value)
    return Converted(build_map(value, target.dtype, expected_kind=expected_kind))


def _convert_adjacency(
    value: Any,
    target: Target,
    *,
    expected_kind: Optional[KeyKind] = None,
    **_: Any,
) -> Optional[Conversion]:
    if target.binary:
        if type(value) is BinAdjacency and _kind_matches(value, expected_kind):
            return Same(value)
        return Converted(build_adjacency(value, binary=True, expected_kind=expected_kind))
    if (
        type(value) is Adjacency
        and value.dtype is target.dtype
        and _kind_matches(value, expected_kind)
    ):
        return Same(value)
    return Converted(build_adjacency(value, target.dtype, expected_kind=expected_kind))


register("converter", Shape.LABEL.value, _convert_label)
register("converter", Shape.SCALAR.value, _convert_scalar)
register("converter", Shape.VECTOR.value, _convert_vector)
register("converter", Shape.MATRIX.value, _convert_matrix)
register("converter", Shape.SPARSE_VECTOR.value, _convert_sparse_vector)
register("converter", Shape.SPARSE_MATRIX.value, _convert_sparse_matrix)
register("converter", Shape.MAP.value, _convert_map)
register("converter", Shape.ADJACENCY.value, _convert_adjacency)


# ==========================================================================================
# Entry points.


def _either_targets(targets: tuple[Target, ...]) -> str:
    names = [str(target) for target in targets]
    if len(names) == 1:
        return names[0]
    return "either " + ", ".join(names[:-1]) + " or " + names[-1]


def convert_result(
    value: Any,
    targets: Any,
    dtype: Any = None,
    *,
    name: str = "value",
    expected_kind: Optional[KeyKind] = None,
    registry: Optional[Registry] = None,
) -> Conversion:
    """Convert to the first applicable target, keeping track of aliasing.

    ``targets`` is a sequence of ``Target`` or an alias specification resolved
    with ``dtype``.
    """
    targets = as_targets(targets, dtype)
    if expected_kind is not None:
        expected_kind = KeyKind.from_any(expected_kind)
    for target in targets:
        strategy = resolve_converter(target.shape.value, registry=registry)
        try:
            result = strategy(value, target, expected_kind=expected_kind)
        except DuplicateKeyError as exc:
            raise DuplicateKeyError(
                f"Error while attempting to convert '{name}' to {target}: {exc}",
                context={"field": name, **exc.context},
            ) from exc
        except (TypeError, ValueError, OverflowError) as exc:
            raise TypeConversionError(
                f"Error while attempting to convert '{name}' to {target}: {exc} "
                f"Received {describe(value)}.",
                context={"field": name, "target": str(target)},
            ) from exc
        if result is None:
            continue
        logger.debug(
            "Converted '%s' to %s (%s).",
            name,
            target,
            "aliased" if result.aliased else "new value",
        )
        return replace(result, target=target)
    raise TypeConversionError(
        f"Could not convert '{name}' to {_either_targets(targets)}. "
        f"The value received is {describe(value)}.",
        context={"field": name, "targets": [str(target) for target in targets]},
    )


def convert(
    value: Any,
    targets: Any,
    dtype: Any = None,
    *,
    name: str = "value",
    expected_kind: Optional[KeyKind] = None,
    registry: Optional[Registry] = None,
) -> Any:
    """Canonical value for the first applicable target.

    The input object itself is returned when no conversion was needed.
    """
    return convert_result(
        value,
        targets,
        dtype,
        name=name,
        expected_kind=expected_kind,
        registry=registry,
    ).value


__all__ = [
    "Conversion",
    "Same",
    "Converted",
    "build_map",
    "build_binmap",
    "build_adjacency",
    "convert_result",
    "convert",
]
