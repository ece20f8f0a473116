"""Shape aliases for field declarations.

Not every input shape is expected for every field. A field may for instance
accept a scalar or a sparse matrix, but not a map. Allowed shapes are declared
with compact aliases resolved here into ordered conversion targets:

  - Label ~ Symbol ~ Sym ~ Y
  - Scalar ~ Scal ~ S
  - Vector ~ Vec ~ V
  - Matrix ~ Mat ~ M
  - SparseVector ~ SpVec ~ N (for 'nodes')
  - SparseMatrix ~ SpMat ~ E (for 'edges')
  - Map ~ K                  (for 'keys')
  - Adjacency ~ Adj ~ A

Single letters can be packed into one word: "YSN" means label, scalar or
sparse vector. Longer names are separated with '+', ',' or spaces, possibly
within braces: "{Sym, Scal, SpVec}" or "label+scalar+sparse-vector".

Use ``BINARY`` instead of an element type to select the presence-only
variants of maps and adjacency lists.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
import re
from typing import Any, Optional, Union

from graphdata.errors import SchemaError
from graphdata.types import BINARY, ElementType


class Shape(Enum):
    LABEL = "label"
    SCALAR = "scalar"
    VECTOR = "vector"
    MATRIX = "matrix"
    SPARSE_VECTOR = "sparse-vector"
    SPARSE_MATRIX = "sparse-matrix"
    MAP = "map"
    ADJACENCY = "adjacency"

    def __str__(self) -> str:
        return self.value


ALIASES: dict[Shape, tuple[str, ...]] = {
    Shape.LABEL: ("Label", "Symbol", "Sym", "Y", "label"),
    Shape.SCALAR: ("Scalar", "Scal", "S", "scalar"),
    Shape.VECTOR: ("Vector", "Vec", "V", "vector"),
    Shape.MATRIX: ("Matrix", "Mat", "M", "matrix"),
    Shape.SPARSE_VECTOR: ("SparseVector", "SpVec", "N", "sparse-vector"),
    Shape.SPARSE_MATRIX: ("SparseMatrix", "SpMat", "E", "sparse-matrix"),
    Shape.MAP: ("Map", "K", "map"),
    Shape.ADJACENCY: ("Adjacency", "Adj", "A", "adjacency"),
}

REVERSE_ALIASES: dict[str, Shape] = {
    alias: shape for shape, aliases in ALIASES.items() for alias in aliases
}

_SEPARATORS = re.compile(r"[\s,+|]+")


def format_alias_table() -> str:
    return "\n".join(
        f"  {shape.name}: {', '.join(aliases)}" for shape, aliases in ALIASES.items()
    )


@dataclass(frozen=True)
class Target:
    """One concrete shape a field value may be converted to."""

    shape: Shape
    dtype: Optional[ElementType] = None
    binary: bool = False

    def describe(self) -> str:
        if self.shape is Shape.LABEL:
            return "label"
        if self.shape is Shape.MAP:
            if self.binary:
                return "binary key-value map"
            return f"key-value map for '{self.dtype}' data"
        if self.shape is Shape.ADJACENCY:
            if self.binary:
                return "binary adjacency list"
            return f"adjacency list for '{self.dtype}' data"
        return f"{self.dtype} {self.shape.value.replace('-', ' ')}"

    def __str__(self) -> str:
        return self.describe()


def _lookup(token: str) -> Shape:
    shape = REVERSE_ALIASES.get(token)
    if shape is None:
        raise SchemaError(
            f"Invalid type alias: {token!r} is not a valid alias among:\n"
            f"{format_alias_table()}",
            context={"token": token},
        )
    return shape


def parse_aliases(spec: Union[str, Shape, Sequence[Any]]) -> tuple[Shape, ...]:
    """Expand an alias specification into shapes, in declaration order."""
    if isinstance(spec, Shape):
        return (spec,)
    if isinstance(spec, str):
        text = spec.strip()
        if text.startswith("{") and text.endswith("}"):
            text = text[1:-1]
        tokens = [token for token in _SEPARATORS.split(text) if token]
        # Assume packed single letters when one unknown word is given.
        if len(tokens) == 1 and tokens[0] not in REVERSE_ALIASES:
            tokens = list(tokens[0])
    elif isinstance(spec, Sequence):
        tokens = list(spec)
    else:
        raise SchemaError(
            f"Invalid type alias specification: {spec!r}. "
            f"Expected a string or a sequence of aliases among:\n{format_alias_table()}"
        )
    if not tokens:
        raise SchemaError(
            f"Empty type alias specification. Expected aliases among:\n"
            f"{format_alias_table()}"
        )
    return tuple(
        token if isinstance(token, Shape) else _lookup(str(token)) for token in tokens
    )


def resolve_aliases(
    spec: Union[str, Shape, Sequence[Any]],
    dtype: Any = None,
) -> tuple[Target, ...]:
    """Resolve aliases into targets parameterized by the element type.

    Labels are never parameterized. With ``BINARY``, maps and adjacency lists
    become their presence-only variants and other shapes hold booleans.
    """
    shapes = parse_aliases(spec)
    if dtype is None:
        if any(shape is not Shape.LABEL for shape in shapes):
            raise SchemaError(
                f"No element type provided for {', '.join(map(str, shapes))}."
            )
        return tuple(Target(shape) for shape in shapes)
    binary = isinstance(dtype, str) and dtype == BINARY
    if binary:
        element = ElementType.BOOL
    else:
        try:
            element = ElementType.from_any(dtype)
        except ValueError as exc:
            raise SchemaError(f"Invalid element type specification: {exc}") from exc
    targets = []
    for shape in shapes:
        if shape is Shape.LABEL:
            targets.append(Target(shape))
        else:
            listed = binary and shape in (Shape.MAP, Shape.ADJACENCY)
            targets.append(Target(shape, element, listed))
    return tuple(targets)


def as_targets(spec: Any, dtype: Any = None) -> tuple[Target, ...]:
    if isinstance(spec, Target):
        return (spec,)
    if (
        isinstance(spec, Sequence)
        and not isinstance(spec, str)
        and spec
        and all(isinstance(target, Target) for target in spec)
    ):
        return tuple(spec)
    return resolve_aliases(spec, dtype)


__all__ = [
    "Shape",
    "ALIASES",
    "REVERSE_ALIASES",
    "Target",
    "format_alias_table",
    "parse_aliases",
    "resolve_aliases",
    "as_targets",
]
