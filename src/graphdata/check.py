"""Structural checks of converted values against reference spaces and templates.

Stored positions of templates are compared regardless of the values stored,
so a stored zero in a template still allows data at its position:

    value \\ template   missing   stored
    missing            ok        ok
    stored             error     ok

Every check returns None on success and raises an ``InputError`` subclass
naming the field otherwise. API misuse (inconsistent space and template,
label data without an index) raises ``SchemaError``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, Optional, Union

import numpy as np

from graphdata.containers import AnyList, is_adjacency, is_list
from graphdata.display import either, elided_list, scalar_repr
from graphdata.errors import (
    LabelError,
    MissingReferenceError,
    ReferenceNotInTemplateError,
    ReferenceOutOfSpaceError,
    SchemaError,
    SizeMismatchError,
    TemplateViolationError,
    UnsupportedCheckError,
    ValueCheckError,
)
from graphdata.spaces import (
    EdgeSpace,
    Indexed,
    Labeled,
    Space,
    as_edge_space,
    as_indexed,
    as_space,
    inspace,
    is_empty,
    is_space_pair,
    space_shape,
    to_position,
)
from graphdata.sparse import (
    is_sparse,
    is_sparse_matrix,
    is_sparse_vector,
    one_based,
    stored_items,
    stored_positions,
)
from graphdata.types import KeyKind, is_real

Expected = Union[int, None, tuple[Optional[int], ...]]


# ==========================================================================================
# Labels.


def check_label(name: str, value: str, allowed: Iterable[str]) -> None:
    allowed = list(allowed)
    if value not in allowed:
        raise LabelError(
            f"Invalid label received for '{name}': {value!r}. "
            f"Expected {either(allowed)} instead.",
            context={"field": name, "value": value, "allowed": allowed},
        )


# ==========================================================================================
# Sizes.


def _as_expected(expected: Expected) -> tuple[Optional[int], ...]:
    if expected is None or isinstance(expected, int):
        return (expected,)
    return tuple(expected)


def _format_shape(shape: tuple[Optional[int], ...]) -> str:
    dims = ["Any" if dim is None else str(dim) for dim in shape]
    if len(dims) == 1:
        return f"({dims[0]},)"
    return "(" + ", ".join(dims) + ")"


def same_size(actual: tuple[int, ...], expected: tuple[Optional[int], ...]) -> bool:
    if len(actual) != len(expected):
        return False
    return all(e is None or a == e for a, e in zip(actual, expected))


def check_size(name: str, value: Any, expected: Expected) -> None:
    """Compare shapes; a None expected dimension matches any size."""
    expected = _as_expected(expected)
    shape = getattr(value, "shape", None)
    if shape is None:
        shape = np.shape(value)
    actual = tuple(int(dim) for dim in shape)
    if not same_size(actual, expected):
        raise SizeMismatchError(
            f"Invalid size for parameter '{name}': "
            f"expected {_format_shape(expected)}, got {_format_shape(actual)}.",
            context={"field": name, "expected": expected, "actual": actual},
        )


# ==========================================================================================
# Templates.


def _index_repr(position: Any) -> str:
    if isinstance(position, tuple):
        return "[" + ", ".join(str(index) for index in position) + "]"
    return f"[{position}]"


def check_template(name: str, value: Any, template: Any, item: str) -> None:
    """Every stored entry of the sparse value must be stored in the template."""
    check_size(name, value, tuple(template.shape))
    allowed = stored_positions(template)
    allowed_set = set(allowed)
    level = "edge" if is_sparse_matrix(template) else "node"
    for position, entry in stored_items(value):
        if position in allowed_set:
            continue
        position = one_based(position)
        raise TemplateViolationError(
            f"Non-missing value found for '{name}' "
            f"at {level} index {_index_repr(position)} ({scalar_repr(entry)}), "
            f"but the template for '{item}' only allows values "
            f"at the following indices:\n  "
            f"{elided_list(one_based(p) for p in allowed)}",
            context={"field": name, "position": position, "value": entry},
        )


# ==========================================================================================
# References in maps and adjacency lists.


def _level(lst: AnyList) -> str:
    return "edge" if is_adjacency(lst) else "node"


def _reftype(lst: AnyList, plural: bool = False) -> str:
    if lst.key_kind is KeyKind.INDEX:
        return "indices" if plural else "index"
    return "labels" if plural else "label"


def _normalize_space(
    lst: AnyList, space: Any, template: Any
) -> Union[Space, EdgeSpace, None]:
    adjacency = is_adjacency(lst)
    if space is None:
        return None
    try:
        if adjacency:
            space = as_edge_space(space)
        elif is_space_pair(space):
            raise SchemaError(
                f"Reference space for node data cannot be a pair: {space!r}."
            )
        else:
            space = as_space(space)
    except (TypeError, ValueError) as exc:
        raise SchemaError(f"Invalid reference space: {exc}") from exc
    members = space if adjacency else (space,)
    if lst.key_kind is KeyKind.LABEL:
        if not all(isinstance(member, Labeled) for member in members):
            raise SchemaError(
                f"Reference space is invalid to check label references: {space!r}."
            )
    else:
        indexed = tuple(as_indexed(member) for member in members)
        space = indexed if adjacency else indexed[0]
    if template is not None:
        expected = tuple(int(dim) for dim in template.shape)
        if space_shape(space) != expected:
            raise SchemaError(
                f"Inconsistent template size {_format_shape(expected)} "
                f"vs. reference space {_format_shape(space_shape(space))}."
            )
    return space


def _space_from_template(lst: AnyList, template: Any) -> Union[Space, EdgeSpace]:
    if template is None:
        raise SchemaError("Cannot infer reference space if no template is given.")
    if lst.key_kind is KeyKind.LABEL:
        raise SchemaError("No index provided for checking label references.")
    shape = tuple(int(dim) for dim in template.shape)
    if is_adjacency(lst):
        return Indexed(shape[0]), Indexed(shape[1])
    return Indexed(shape[0])


def _outspace(ref: Any, space: Union[Space, EdgeSpace]) -> str:
    if isinstance(space, tuple):
        i, j = ref
        ref, space = (j, space[1]) if inspace(i, space[0]) else (i, space[0])
    if isinstance(space, Indexed):
        return (
            f"Index {scalar_repr(ref)} does not fall within "
            f"the valid range {space.describe()}."
        )
    return f"Expected {either(space.references(), sort=True)}, got instead: {ref!r}."


def _checked_accesses(lst: AnyList) -> Iterator[Any]:
    # Outer keys of empty adjacency rows are references too.
    if not is_adjacency(lst):
        yield from lst
        return
    for outer, sub in lst.items():
        if not len(sub):
            yield (outer, None)
        for inner in sub:
            yield (outer, inner)


def _in_space(ref: Any, space: Union[Space, EdgeSpace]) -> bool:
    if isinstance(space, tuple) and ref[1] is None:
        return inspace(ref[0], space[0])
    return inspace(ref, space)


def _display_ref(ref: Any) -> str:
    if isinstance(ref, tuple) and ref[1] is None:
        return scalar_repr(ref[0])
    if isinstance(ref, tuple):
        return "(" + ", ".join(scalar_repr(member) for member in ref) + ")"
    return scalar_repr(ref)


def _check_in_space(name: str, lst: AnyList, space: Any, item: str) -> None:
    level, rt = _level(lst), _reftype(lst)
    if is_empty(space) and len(lst):
        first = next(_checked_accesses(lst))
        raise ReferenceOutOfSpaceError(
            f"No possible valid {level} {rt} in '{name}' like {_display_ref(first)}: "
            f"the reference space for '{item}' is empty.",
            context={"field": name, "reference": first},
        )
    for ref in _checked_accesses(lst):
        if _in_space(ref, space):
            continue
        if isinstance(space, tuple) and ref[1] is None:
            ref, space = ref[0], space[0]
        raise ReferenceOutOfSpaceError(
            f"Invalid '{item}' {level} {rt} in '{name}'. {_outspace(ref, space)}",
            context={"field": name, "reference": ref},
        )


def _check_templated(
    name: str, lst: AnyList, space: Any, template: Any, item: str
) -> None:
    level, rt, rts = _level(lst), _reftype(lst), _reftype(lst, plural=True)
    allowed = [one_based(position) for position in stored_positions(template)]
    allowed_set = set(allowed)
    for ref in _checked_accesses(lst):
        if isinstance(ref, tuple) and ref[1] is None:
            continue
        position = to_position(ref, space)
        if position in allowed_set:
            continue
        if isinstance(space, tuple):
            targets = space[1]
            valids = [targets.reference(j) for i, j in allowed if i == position[0]]
            if valids:
                hint = (
                    f"Valid edges target {rts} for source {ref[0]!r} "
                    f"in this template are:\n  {elided_list(valids)}"
                )
            else:
                hint = (
                    f"This template allows no valid edge targets {rts} "
                    f"for source {ref[0]!r}."
                )
        else:
            valids = [space.reference(p) for p in allowed]
            hint = f"Valid nodes {rts} for this template are:\n  {elided_list(valids)}"
        raise ReferenceNotInTemplateError(
            f"Invalid '{item}' {level} {rt} in '{name}': {_display_ref(ref)}. {hint}",
            context={"field": name, "reference": ref, "valid": valids},
        )


def _needles(space: Any, template: Any) -> Iterator[Any]:
    if isinstance(space, tuple):
        source, target = space
        return ((i, j) for i in source.references() for j in target.references())
    if template is None:
        return space.references()
    return (space.reference(one_based(p)) for p in stored_positions(template))


def _check_missing(name: str, lst: AnyList, space: Any, template: Any, item: str) -> None:
    given = set(_checked_accesses(lst))
    for needle in _needles(space, template):
        if needle in given:
            continue
        raise MissingReferenceError(
            f"Missing '{item}' {_level(lst)} {_reftype(lst)} in '{name}': "
            f"no value specified for {_display_ref(needle)}.",
            context={"field": name, "reference": needle},
        )


def check_list_refs(
    name: str,
    lst: AnyList,
    item: str,
    *,
    space: Any = None,
    template: Any = None,
    dense: bool = False,
) -> None:
    """Check every reference of a map or adjacency list.

    The space is taken from ``space`` when given, otherwise inferred from the
    template size. Integer lists accept a labeled space by its length, label
    lists require one. Adjacency lists accept a single space for both ends.
    With ``dense``, every reference of the space (or template) must be given.
    """
    if not is_list(lst):
        raise SchemaError(
            f"Expected a map or adjacency list for '{name}', got {type(lst).__name__}."
        )
    adjacency = is_adjacency(lst)
    if dense and lst.binary:
        raise SchemaError(
            f"Dense checking of binary lists is not supported ('{name}')."
        )
    if template is not None:
        if not is_sparse(template):
            raise SchemaError(
                f"Template for '{item}' must be a sparse vector or matrix, "
                f"got {type(template).__name__}."
            )
        expected_ndim = 2 if adjacency else 1
        if len(template.shape) != expected_ndim:
            raise SchemaError(
                f"Template for '{item}' has {len(template.shape)} dimension(s) "
                f"but '{name}' needs {expected_ndim}."
            )
    if dense and adjacency and template is not None:
        raise UnsupportedCheckError(
            f"Dense checking of adjacency lists against a template is not supported "
            f"('{name}')."
        )
    if space is None and lst.key_kind is KeyKind.LABEL:
        raise SchemaError("No index provided for checking label references.")
    space = _normalize_space(lst, space, template)
    if space is None:
        space = _space_from_template(lst, template)
    _check_in_space(name, lst, space, item)
    if template is not None:
        _check_templated(name, lst, space, template, item)
    if dense:
        _check_missing(name, lst, space, template, item)


# ==========================================================================================
# Conditional variants, applied only when the value has the given shape.


def check_if_label(name: str, value: Any, allowed: Iterable[str]) -> bool:
    if not isinstance(value, str):
        return False
    check_label(name, value, allowed)
    return True


def check_size_if_vector(name: str, value: Any, expected: Expected) -> bool:
    if not (isinstance(value, np.ndarray) and value.ndim == 1):
        return False
    check_size(name, value, expected)
    return True


def check_size_if_matrix(name: str, value: Any, expected: Expected) -> bool:
    if not (isinstance(value, np.ndarray) and value.ndim == 2):
        return False
    check_size(name, value, expected)
    return True


def check_template_if_sparse(name: str, value: Any, template: Any, item: str) -> bool:
    if not is_sparse(value):
        return False
    check_template(name, value, template, item)
    return True


def check_refs_if_list(
    name: str,
    value: Any,
    item: str,
    *,
    space: Any = None,
    template: Any = None,
    dense: bool = False,
) -> bool:
    if not is_list(value):
        return False
    check_list_refs(name, value, item, space=space, template=template, dense=dense)
    return True


# ==========================================================================================
# Value predicates.


def _node_entries(value: Any) -> Iterator[tuple[Any, Any]]:
    if isinstance(value, np.ndarray) and value.ndim == 1:
        return zip(range(1, value.size + 1), value.tolist())
    if is_sparse_vector(value):
        return ((index + 1, entry) for index, entry in value.items())
    if is_list(value) and not is_adjacency(value) and not value.binary:
        return iter(value.items())
    raise SchemaError(f"Cannot check node values of {type(value).__name__}.")


def _edge_entries(value: Any) -> Iterator[tuple[Any, Any]]:
    if isinstance(value, np.ndarray) and value.ndim == 2:
        return (
            ((i + 1, j + 1), value[i, j].item())
            for i in range(value.shape[0])
            for j in range(value.shape[1])
        )
    if is_sparse_matrix(value):
        return ((one_based(p), entry) for p, entry in stored_items(value))
    if is_adjacency(value) and not value.binary:
        return (
            ((outer, inner), entry)
            for outer, sub in value.items()
            for inner, entry in sub.items()
        )
    raise SchemaError(f"Cannot check edge values of {type(value).__name__}.")


def _check_entries(
    name: str,
    value: Any,
    predicate: Callable[[Any], bool],
    message: str,
    entries: Callable[[Any], Iterator[tuple[Any, Any]]],
    level: str,
) -> None:
    if is_real(value):
        if not predicate(value):
            raise ValueCheckError(
                f"Invalid value for '{name}': {scalar_repr(value)}. {message}",
                context={"field": name, "value": value},
            )
        return
    for ref, entry in entries(value):
        if predicate(entry):
            continue
        raise ValueCheckError(
            f"Invalid value for '{name}' at {level} {_display_ref(ref)}: "
            f"{scalar_repr(entry)}. {message}",
            context={"field": name, "reference": ref, "value": entry},
        )


def check_nodes(
    name: str, value: Any, predicate: Callable[[Any], bool], message: str
) -> None:
    """Apply the predicate to a scalar or every non-missing node entry."""
    _check_entries(name, value, predicate, message, _node_entries, "node")


def check_edges(
    name: str, value: Any, predicate: Callable[[Any], bool], message: str
) -> None:
    """Apply the predicate to a scalar or every non-missing edge entry."""
    _check_entries(name, value, predicate, message, _edge_entries, "edge")


__all__ = [
    "check_label",
    "same_size",
    "check_size",
    "check_template",
    "check_list_refs",
    "check_if_label",
    "check_size_if_vector",
    "check_size_if_matrix",
    "check_template_if_sparse",
    "check_refs_if_list",
    "check_nodes",
    "check_edges",
]
