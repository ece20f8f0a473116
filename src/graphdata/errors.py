"""Error hierarchy for graphdata."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class GraphDataError(Exception):
    """Base exception for graphdata failures."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return f"{self}: {self.context}"


class ConfigError(GraphDataError):
    """Configuration loading or validation error."""


class SchemaError(GraphDataError):
    """Invalid field declaration or misuse of the checking API."""


class UnsupportedCheckError(SchemaError, NotImplementedError):
    """Requested check has no defined semantics."""


class InternalError(GraphDataError):
    """Inconsistent internal state, a bug rather than a user error."""


class InputError(GraphDataError):
    """User-supplied graph data is invalid."""


class TypeConversionError(InputError):
    """No candidate shape accepts the value, or the chosen one failed."""


class DuplicateKeyError(InputError):
    """The same key is given twice in a map or adjacency sub-map."""


class SizeMismatchError(InputError):
    """Array dimensions differ from the expected ones."""


class TemplateViolationError(InputError):
    """Non-missing entry found outside the template's stored positions."""


class ReferenceOutOfSpaceError(InputError):
    """Node or edge reference outside its reference space."""


class ReferenceNotInTemplateError(InputError):
    """Reference inside its space but not allowed by the template."""


class MissingReferenceError(InputError):
    """Dense data lacks a value for one reference."""


class LabelError(InputError):
    """Unexpected preset label."""


class ValueCheckError(InputError):
    """A data entry fails its value predicate."""


__all__ = [
    "GraphDataError",
    "ConfigError",
    "SchemaError",
    "UnsupportedCheckError",
    "InternalError",
    "InputError",
    "TypeConversionError",
    "DuplicateKeyError",
    "SizeMismatchError",
    "TemplateViolationError",
    "ReferenceOutOfSpaceError",
    "ReferenceNotInTemplateError",
    "MissingReferenceError",
    "LabelError",
    "ValueCheckError",
]
