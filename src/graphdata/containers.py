"""Maps and adjacency lists over node references.

Integer references are 1-based node indices, labels are strings. One
collection never mixes both kinds, and adjacency sub-maps share the kind of
their outer keys.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Union

from graphdata.spaces import Indexed, Labeled, Space
from graphdata.types import ElementType, KeyKind


def _render(pairs: Iterable[tuple[Any, Any]]) -> str:
    return "{" + ", ".join(f"{key!r}: {value!r}" for key, value in pairs) + "}"


class Map(dict):
    """Ordered key -> value mapping with uniform key kind and element type."""

    binary = False

    def __init__(
        self,
        key_kind: Union[KeyKind, str],
        dtype: Any,
        items: Iterable[tuple[Any, Any]] = (),
    ) -> None:
        super().__init__(items)
        self.key_kind = KeyKind.from_any(key_kind)
        self.dtype = ElementType.from_any(dtype)

    def __repr__(self) -> str:
        return f"Map[{self.key_kind}, {self.dtype}]({_render(self.items())})"


class BinMap:
    """Ordered set of keys sharing one key kind."""

    binary = True

    def __init__(self, key_kind: Union[KeyKind, str], keys: Iterable[Any] = ()) -> None:
        self.key_kind = KeyKind.from_any(key_kind)
        self._keys: dict[Any, None] = dict.fromkeys(keys)

    @property
    def dtype(self) -> ElementType:
        return ElementType.BOOL

    def add(self, key: Any) -> None:
        self._keys[key] = None

    def __contains__(self, key: Any) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[Any]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BinMap):
            return self.key_kind == other.key_kind and list(self) == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        keys = ", ".join(repr(key) for key in self)
        return f"BinMap[{self.key_kind}]({{{keys}}})"


class Adjacency(dict):
    """Ordered outer key -> Map of (inner key -> value)."""

    binary = False

    def __init__(
        self,
        key_kind: Union[KeyKind, str],
        dtype: Any,
        items: Iterable[tuple[Any, Map]] = (),
    ) -> None:
        super().__init__(items)
        self.key_kind = KeyKind.from_any(key_kind)
        self.dtype = ElementType.from_any(dtype)

    def __repr__(self) -> str:
        pairs = ((key, _Raw(_render(sub.items()))) for key, sub in self.items())
        return f"Adjacency[{self.key_kind}, {self.dtype}]({_render(pairs)})"


class BinAdjacency(dict):
    """Ordered outer key -> BinMap of inner keys."""

    binary = True

    def __init__(
        self,
        key_kind: Union[KeyKind, str],
        items: Iterable[tuple[Any, BinMap]] = (),
    ) -> None:
        super().__init__(items)
        self.key_kind = KeyKind.from_any(key_kind)

    @property
    def dtype(self) -> ElementType:
        return ElementType.BOOL

    def __repr__(self) -> str:
        pairs = (
            (key, _Raw("{" + ", ".join(repr(k) for k in sub) + "}"))
            for key, sub in self.items()
        )
        return f"BinAdjacency[{self.key_kind}]({_render(pairs)})"


class _Raw(str):
    def __repr__(self) -> str:
        return str(self)


AnyMap = Union[Map, BinMap]
AnyAdjacency = Union[Adjacency, BinAdjacency]
AnyList = Union[Map, BinMap, Adjacency, BinAdjacency]

MAP_TYPES = (Map, BinMap)
ADJACENCY_TYPES = (Adjacency, BinAdjacency)
LIST_TYPES = MAP_TYPES + ADJACENCY_TYPES


def is_map(value: Any) -> bool:
    return isinstance(value, MAP_TYPES)


def is_adjacency(value: Any) -> bool:
    return isinstance(value, ADJACENCY_TYPES)


def is_list(value: Any) -> bool:
    return isinstance(value, LIST_TYPES)


# ==========================================================================================
# References found in lists.


def _unique(items: Iterable[Any]) -> list[Any]:
    return list(dict.fromkeys(items))


def refs_outer(lst: AnyAdjacency) -> list[Any]:
    return list(lst.keys())


def refs_inner(lst: AnyAdjacency) -> list[Any]:
    return _unique(ref for sub in lst.values() for ref in sub)


def refs(lst: AnyList) -> list[Any]:
    """All references in the list, in order of appearance.

    Adjacency lists are assumed to use one space for both ends here.
    """
    if is_adjacency(lst):
        return _unique(
            ref for outer, sub in lst.items() for ref in (outer, *sub)
        )
    return list(lst)


def nrefs(lst: AnyList) -> int:
    return len(refs(lst))


def nrefs_outer(lst: AnyAdjacency) -> int:
    return len(refs_outer(lst))


def nrefs_inner(lst: AnyAdjacency) -> int:
    return len(refs_inner(lst))


def _extent(found: list[Any], kind: KeyKind) -> int:
    # Integer references are assumed contiguous, labels cannot be guessed.
    if kind is KeyKind.INDEX:
        return max(found, default=0)
    return len(found)


def nrefspace(lst: AnyList) -> int:
    return _extent(refs(lst), lst.key_kind)


def nrefspace_outer(lst: AnyAdjacency) -> int:
    return _extent(refs_outer(lst), lst.key_kind)


def nrefspace_inner(lst: AnyAdjacency) -> int:
    return _extent(refs_inner(lst), lst.key_kind)


def _space(found: list[Any], kind: KeyKind) -> Space:
    if kind is KeyKind.INDEX:
        return Indexed(max(found, default=0))
    return Labeled(tuple(found))


def refspace(lst: AnyList) -> Space:
    """Smallest reference space compatible with the list."""
    return _space(refs(lst), lst.key_kind)


def refspace_outer(lst: AnyAdjacency) -> Space:
    return _space(refs_outer(lst), lst.key_kind)


def refspace_inner(lst: AnyAdjacency) -> Space:
    return _space(refs_inner(lst), lst.key_kind)


def accesses(lst: AnyList) -> Iterator[Any]:
    """Keys of a map, (outer, inner) pairs of an adjacency list."""
    if is_adjacency(lst):
        return ((outer, inner) for outer, sub in lst.items() for inner in sub)
    return iter(lst)


__all__ = [
    "Map",
    "BinMap",
    "Adjacency",
    "BinAdjacency",
    "AnyMap",
    "AnyAdjacency",
    "AnyList",
    "MAP_TYPES",
    "ADJACENCY_TYPES",
    "LIST_TYPES",
    "is_map",
    "is_adjacency",
    "is_list",
    "refs",
    "refs_outer",
    "refs_inner",
    "nrefs",
    "nrefs_outer",
    "nrefs_inner",
    "nrefspace",
    "nrefspace_outer",
    "nrefspace_inner",
    "refspace",
    "refspace_outer",
    "refspace_inner",
    "accesses",
]
