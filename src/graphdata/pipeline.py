"""Per-field convert -> check -> expand driver."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
import logging
from typing import Any, Optional, Union

import numpy as np

from graphdata.aliases import Shape, Target, resolve_aliases
from graphdata.check import (
    check_label,
    check_list_refs,
    check_size,
    check_template,
)
from graphdata.config import FieldConfig, GraphDataConfig
from graphdata.containers import is_list
from graphdata.convert import convert_result
from graphdata.errors import SchemaError
from graphdata.expand import build_from_label, expand
from graphdata.logging_utils import run_with_error_handling
from graphdata.spaces import as_edge_space, as_space, space_shape
from graphdata.sparse import is_sparse

logger = logging.getLogger(__name__)

Presets = Mapping[str, Callable[[], Any]]

_BROADCASTS = (None, "row", "col")
_EDGE_SHAPES = (Shape.MATRIX, Shape.SPARSE_MATRIX, Shape.ADJACENCY)


@dataclass(frozen=True)
class FieldSpec:
    """Declaration of one graph-data field."""

    name: str
    shapes: Any
    dtype: Any = None
    item: Optional[str] = None
    dense: bool = False
    size: Optional[tuple[Optional[int], ...]] = None
    values: bool = False
    broadcast: Optional[str] = None
    labels: tuple[str, ...] = ()
    targets: tuple[Target, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise SchemaError(f"Field name must be a non-empty string, got {self.name!r}.")
        if self.broadcast not in _BROADCASTS:
            raise SchemaError(
                f"Invalid broadcast for field '{self.name}': {self.broadcast!r}. "
                "Expected 'row' or 'col'."
            )
        object.__setattr__(self, "targets", resolve_aliases(self.shapes, self.dtype))
        object.__setattr__(self, "labels", tuple(self.labels))
        if self.size is not None and not isinstance(self.size, tuple):
            object.__setattr__(self, "size", (self.size,))

    @property
    def edges(self) -> bool:
        # Broadcast vectors fill matrices.
        if self.broadcast is not None:
            return True
        return any(target.shape in _EDGE_SHAPES for target in self.targets)

    @property
    def item_name(self) -> str:
        return self.item or self.name

    @classmethod
    def from_config(cls, cfg: Union[FieldConfig, Mapping[str, Any]]) -> "FieldSpec":
        def read(key: str, default: Any = None) -> Any:
            if isinstance(cfg, Mapping):
                return cfg.get(key, default)
            return getattr(cfg, key, default)

        return cls(
            name=read("name"),
            shapes=read("shapes"),
            dtype=read("dtype"),
            item=read("item"),
            dense=bool(read("dense", False)),
            values=bool(read("values", False)),
            broadcast=read("broadcast"),
            labels=tuple(read("labels") or ()),
        )


def field_specs(cfg: GraphDataConfig) -> list[FieldSpec]:
    return [FieldSpec.from_config(entry) for entry in cfg.fields]


@dataclass(frozen=True)
class IngestResult:
    value: Any
    shape: Shape
    aliased: bool = False


def _expected_size(
    spec: FieldSpec,
    size: Optional[tuple[Optional[int], ...]],
    template: Any,
    space: Any,
) -> Optional[tuple[Optional[int], ...]]:
    if size is not None:
        return size
    if template is not None:
        return tuple(int(dim) for dim in template.shape)
    if space is None:
        return None
    try:
        if spec.edges:
            return space_shape(as_edge_space(space))
        return space_shape(as_space(space))
    except (TypeError, ValueError) as exc:
        raise SchemaError(f"Invalid reference space for '{spec.name}': {exc}") from exc


def check_value(
    spec: FieldSpec,
    value: Any,
    *,
    space: Any = None,
    template: Any = None,
    size: Optional[tuple[Optional[int], ...]] = None,
    labels: Sequence[str] = (),
) -> None:
    """Run the structural checks matching the converted value's shape."""
    name, item = spec.name, spec.item_name
    if isinstance(value, str):
        allowed = labels or spec.labels
        if allowed:
            check_label(name, value, allowed)
        return
    if is_list(value):
        check_list_refs(
            name, value, item, space=space, template=template, dense=spec.dense
        )
        return
    if is_sparse(value) and template is not None:
        check_template(name, value, template, item)
        return
    if not (is_sparse(value) or isinstance(value, np.ndarray)):
        return
    expected = _expected_size(spec, size, template, space)
    if expected is None:
        return
    if value.ndim == 1 and spec.values and template is not None:
        # Counted against the template's stored positions while expanding.
        return
    if value.ndim == 1 and spec.broadcast is not None:
        # Rows span the columns of the matrix, columns span its rows.
        axis = 1 if spec.broadcast == "row" else 0
        if len(expected) == 2:
            check_size(name, value, expected[axis])
        return
    check_size(name, value, expected)


def ingest(
    value: Any,
    spec: FieldSpec,
    *,
    space: Any = None,
    template: Any = None,
    size: Optional[tuple[Optional[int], ...]] = None,
    presets: Optional[Presets] = None,
) -> IngestResult:
    """Convert, check and expand one field value.

    Labels are checked against the preset names (or the field's declared
    labels) and replaced by the matching preset's value before expansion.
    """
    size = size if size is not None else spec.size
    conversion = convert_result(value, spec.targets, name=spec.name)
    converted = conversion.value
    labels = tuple(presets) if presets else spec.labels
    check_value(spec, converted, space=space, template=template, size=size, labels=labels)
    if isinstance(converted, str) and presets:
        converted = build_from_label(spec.name, converted, presets)
    shape = _expected_size(spec, size, template, space)
    if shape is not None and None in shape:
        shape = None
    result = expand(
        converted,
        shape=shape,
        template=template,
        space=space,
        dense=spec.dense,
        values=spec.values,
        broadcast=spec.broadcast,
        name=spec.name,
    )
    aliased = conversion.aliased and result is value
    logger.debug(
        "Ingested field '%s' as %s%s.",
        spec.name,
        conversion.target,
        " (aliased)" if aliased else "",
    )
    return IngestResult(result, conversion.target.shape, aliased)


def ingest_fields(
    values: Mapping[str, Any],
    specs: Sequence[FieldSpec],
    *,
    spaces: Optional[Mapping[str, Any]] = None,
    templates: Optional[Mapping[str, Any]] = None,
    presets: Optional[Mapping[str, Presets]] = None,
    show_traceback: bool = False,
) -> dict[str, IngestResult]:
    """Ingest every declared field present in ``values``.

    Spaces, templates and presets are looked up by field name. The first
    failing field aborts the whole run after being logged.
    """
    spaces = spaces or {}
    templates = templates or {}
    presets = presets or {}
    results: dict[str, IngestResult] = {}
    for spec in specs:
        if spec.name not in values:
            logger.debug("Field '%s' not provided, skipped.", spec.name)
            continue
        results[spec.name] = run_with_error_handling(
            ingest,
            values[spec.name],
            spec,
            space=spaces.get(spec.name),
            template=templates.get(spec.name),
            presets=presets.get(spec.name),
            logger=logger,
            show_traceback=show_traceback,
            context={"field": spec.name},
        )
    return results


__all__ = [
    "FieldSpec",
    "IngestResult",
    "field_specs",
    "check_value",
    "ingest",
    "ingest_fields",
]
