"""Rendering helpers for error messages."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

import numpy as np
import scipy.sparse as sp

from graphdata.config import get_config
from graphdata.containers import BinMap, is_adjacency, is_list
from graphdata.sparse import SparseVector

_MAX_REPR = 200


def scalar_repr(value: Any) -> str:
    if isinstance(value, np.generic):
        value = value.item()
    return repr(value)


def join_elided(
    values: Iterable[Any],
    sep: str = ", ",
    last_sep: Optional[str] = None,
    *,
    max: Optional[int] = None,
) -> str:
    """Join item reprs, keeping only the first and last ones of long sequences."""
    limit = get_config().max_display if max is None else max
    items = [scalar_repr(value) for value in values]
    if len(items) > limit:
        items = items[: limit - 1] + ["...", items[-1]]
    if last_sep is None or len(items) < 2:
        return sep.join(items)
    return sep.join(items[:-1]) + last_sep + items[-1]


def either(values: Iterable[Any], *, sort: bool = False) -> str:
    values = list(values)
    if sort:
        values = sorted(values, key=lambda value: (str(type(value)), value))
    if len(values) == 1:
        return scalar_repr(values[0])
    limit = get_config().max_alternatives
    return "either " + join_elided(values, ", ", " or ", max=limit)


def elided_list(values: Iterable[Any]) -> str:
    return "[" + join_elided(values, max=get_config().max_alternatives) + "]"


def plural(n: int) -> str:
    return "" if n == 1 else "s"


def display_short(lst: Any) -> str:
    if is_adjacency(lst):
        inner = ", ".join(
            f"{scalar_repr(key)}: {display_short(sub)}" for key, sub in lst.items()
        )
        return "{" + inner + "}"
    if isinstance(lst, BinMap):
        return "{" + ", ".join(scalar_repr(key) for key in lst) + "}"
    return "{" + ", ".join(
        f"{scalar_repr(key)}: {scalar_repr(value)}" for key, value in lst.items()
    ) + "}"


def display_long(lst: Any, *, level: int = 0) -> str:
    def indent(n: int) -> str:
        return "\n" + "  " * (level + n)

    lines = ["{"]
    if is_adjacency(lst):
        for key, sub in lst.items():
            nested = display_long(sub, level=level + 1)
            lines.append(f"{indent(1)}{scalar_repr(key)} => {nested},")
    elif isinstance(lst, BinMap):
        for key in lst:
            lines.append(f"{indent(1)}{scalar_repr(key)},")
    else:
        for key, value in lst.items():
            lines.append(f"{indent(1)}{scalar_repr(key)} => {scalar_repr(value)},")
    lines.append(indent(0) + "}")
    return "".join(lines)


def short_repr(value: Any) -> str:
    if is_list(value):
        text = display_short(value)
    elif isinstance(value, np.ndarray):
        text = np.array2string(value, separator=", ", threshold=20)
    elif sp.issparse(value):
        dims = "x".join(str(dim) for dim in value.shape)
        text = f"<{dims} sparse matrix with {value.nnz} stored entries>"
    elif isinstance(value, SparseVector):
        text = repr(value)
    else:
        text = scalar_repr(value)
    if len(text) > _MAX_REPR:
        text = text[: _MAX_REPR - 3] + "..."
    return text


def describe(value: Any) -> str:
    """Value and type, as shown in conversion errors."""
    return f"{short_repr(value)} ::{type(value).__name__}"


__all__ = [
    "scalar_repr",
    "join_elided",
    "either",
    "elided_list",
    "plural",
    "display_short",
    "display_long",
    "short_repr",
    "describe",
]
