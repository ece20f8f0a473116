"""Reference spaces: the valid node (or edge) identifiers data is checked against."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from graphdata.types import KeyKind, key_kind_of


@dataclass(frozen=True)
class Indexed:
    """Integer positions 1..n."""

    n: int

    def __post_init__(self) -> None:
        if key_kind_of(self.n) is not KeyKind.INDEX:
            raise TypeError(f"Indexed space size must be an integer, got {self.n!r}.")
        object.__setattr__(self, "n", int(self.n))
        if self.n < 0:
            raise ValueError(f"Indexed space size must be >= 0, got {self.n}.")

    @property
    def kind(self) -> KeyKind:
        return KeyKind.INDEX

    def __len__(self) -> int:
        return self.n

    def __contains__(self, ref: Any) -> bool:
        return key_kind_of(ref) is KeyKind.INDEX and 0 < ref <= self.n

    def references(self) -> Iterator[int]:
        return iter(range(1, self.n + 1))

    def position(self, ref: int) -> int:
        return int(ref)

    def reference(self, position: int) -> int:
        return position

    def describe(self) -> str:
        return f"1..{self.n}"


@dataclass(frozen=True)
class Labeled:
    """Order-preserving bijection between labels and positions 1..len."""

    labels: tuple[str, ...]
    _positions: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        labels = tuple(self.labels)
        positions: dict[str, int] = {}
        for position, label in enumerate(labels, start=1):
            if not isinstance(label, str):
                raise TypeError(f"Space labels must be strings, got {label!r}.")
            if label in positions:
                raise ValueError(f"Label {label!r} appears twice in the space.")
            positions[label] = position
        object.__setattr__(self, "labels", labels)
        object.__setattr__(self, "_positions", positions)

    @classmethod
    def from_index(cls, index: Mapping[str, int]) -> "Labeled":
        """Build from a label -> 1-based position mapping."""
        ordered = sorted(index.items(), key=lambda pair: pair[1])
        positions = [position for _, position in ordered]
        if positions != list(range(1, len(positions) + 1)):
            raise ValueError(
                "Label index positions must cover 1..n exactly once, "
                f"got {sorted(positions)}."
            )
        return cls(tuple(str(label) for label, _ in ordered))

    @property
    def kind(self) -> KeyKind:
        return KeyKind.LABEL

    @property
    def index(self) -> dict[str, int]:
        return dict(self._positions)

    def __len__(self) -> int:
        return len(self.labels)

    def __contains__(self, ref: Any) -> bool:
        return isinstance(ref, str) and ref in self._positions

    def references(self) -> Iterator[str]:
        return iter(self.labels)

    def position(self, ref: str) -> int:
        return self._positions[ref]

    def reference(self, position: int) -> str:
        return self.labels[position - 1]

    def describe(self) -> str:
        return f"{len(self.labels)} labels"


Space = Union[Indexed, Labeled]
EdgeSpace = tuple[Space, Space]


def as_space(value: Any) -> Space:
    """Normalize an int, label sequence or label index into a reference space."""
    if isinstance(value, (Indexed, Labeled)):
        return value
    if isinstance(value, bool):
        raise TypeError(f"Invalid reference space: {value!r}.")
    if key_kind_of(value) is KeyKind.INDEX:
        return Indexed(int(value))
    if isinstance(value, Mapping):
        return Labeled.from_index(value)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return Labeled(tuple(value))
    raise TypeError(f"Invalid reference space: {value!r}.")


def is_space_pair(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and not any(isinstance(member, str) for member in value)
    )


def as_edge_space(value: Any) -> EdgeSpace:
    """Normalize a (source, target) pair, or one space reused for both ends."""
    if is_space_pair(value):
        source, target = value
        return as_space(source), as_space(target)
    space = as_space(value)
    return space, space


def as_indexed(space: Space) -> Indexed:
    return space if isinstance(space, Indexed) else Indexed(len(space))


def is_empty(space: Union[Space, EdgeSpace]) -> bool:
    if isinstance(space, tuple):
        return any(is_empty(member) for member in space)
    return len(space) == 0


def inspace(ref: Any, space: Union[Space, EdgeSpace]) -> bool:
    if isinstance(space, tuple):
        return all(inspace(member, sub) for member, sub in zip(ref, space))
    return ref in space


def to_position(ref: Any, space: Union[Space, EdgeSpace]) -> Any:
    """1-based position(s) of a reference already known to lie in its space."""
    if isinstance(space, tuple):
        return tuple(to_position(member, sub) for member, sub in zip(ref, space))
    return space.position(ref)


def space_shape(space: Union[Space, EdgeSpace]) -> tuple[int, ...]:
    if isinstance(space, tuple):
        return tuple(len(member) for member in space)
    return (len(space),)


__all__ = [
    "Indexed",
    "Labeled",
    "Space",
    "EdgeSpace",
    "as_space",
    "as_edge_space",
    "as_indexed",
    "is_space_pair",
    "is_empty",
    "inspace",
    "to_position",
    "space_shape",
]
