"""Element and key kinds shared by every ingestion stage."""

from __future__ import annotations

from enum import Enum
import numbers
from typing import Any, Optional

import numpy as np

# Marker selecting presence-only maps and adjacency lists.
BINARY = "bin"


class KeyKind(str, Enum):
    INDEX = "index"
    LABEL = "label"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_any(cls, value: Any) -> "KeyKind":
        if isinstance(value, KeyKind):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise ValueError(
                f"Unknown key kind: {value!r}. Expected 'index' or 'label'."
            ) from exc


def key_kind_of(key: Any) -> Optional[KeyKind]:
    """Kind of a raw map key, or None when it is neither an index nor a label."""
    if isinstance(key, (bool, np.bool_)):
        return None
    if isinstance(key, numbers.Integral):
        return KeyKind.INDEX
    if isinstance(key, str):
        return KeyKind.LABEL
    return None


def is_real(value: Any) -> bool:
    if isinstance(value, (str, bytes)):
        return False
    return isinstance(value, (numbers.Real, np.bool_))


def is_integral(value: Any) -> bool:
    return isinstance(value, (numbers.Integral, np.bool_))


class ElementType(Enum):
    """Numeric element type of canonical values."""

    FLOAT = "float"
    INT = "int"
    BOOL = "bool"

    def __str__(self) -> str:
        return self.value

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(_NUMPY_DTYPES[self])

    @property
    def python_type(self) -> type:
        return _PYTHON_TYPES[self]

    @classmethod
    def from_any(cls, value: Any) -> "ElementType":
        if isinstance(value, ElementType):
            return value
        # bool first: it is an int subclass.
        if value is bool:
            return cls.BOOL
        if value is int:
            return cls.INT
        if value is float:
            return cls.FLOAT
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError as exc:
                raise ValueError(
                    f"Unknown element type: {value!r}. Expected float, int or bool."
                ) from exc
        try:
            dtype = np.dtype(value)
        except TypeError as exc:
            raise ValueError(f"Unknown element type: {value!r}.") from exc
        for element, expected in _NUMPY_DTYPES.items():
            if dtype == np.dtype(expected):
                return element
        raise ValueError(
            f"Unsupported element type: {dtype}. Expected float64, int64 or bool."
        )

    def accepts_scalar(self, value: Any) -> bool:
        if self is ElementType.FLOAT:
            return is_real(value)
        return is_integral(value)

    def accepts_kind(self, kind: str) -> bool:
        return kind in _ACCEPTED_KINDS[self]

    def is_canonical_scalar(self, value: Any) -> bool:
        return type(value) is self.python_type

    def cast_scalar(self, value: Any) -> Any:
        if self is ElementType.BOOL:
            if value not in (0, 1):
                raise ValueError(f"Cannot convert {value!r} to bool: expected 0 or 1.")
            return bool(value)
        return self.python_type(value)

    def cast_array(self, values: np.ndarray, *, copy: bool = True) -> np.ndarray:
        if self is ElementType.BOOL and values.dtype.kind != "b":
            invalid = values[(values != 0) & (values != 1)]
            if invalid.size:
                raise ValueError(
                    f"Cannot convert {invalid.flat[0].item()!r} to bool: expected 0 or 1."
                )
        return values.astype(self.numpy_dtype, copy=copy)


_NUMPY_DTYPES = {
    ElementType.FLOAT: np.float64,
    ElementType.INT: np.int64,
    ElementType.BOOL: np.bool_,
}

_PYTHON_TYPES = {
    ElementType.FLOAT: float,
    ElementType.INT: int,
    ElementType.BOOL: bool,
}

_ACCEPTED_KINDS = {
    ElementType.FLOAT: "biuf",
    ElementType.INT: "biu",
    ElementType.BOOL: "biu",
}


__all__ = [
    "BINARY",
    "KeyKind",
    "ElementType",
    "key_kind_of",
    "is_real",
    "is_integral",
]
