"""Conversion, checking and expansion of user-supplied graph data."""

from graphdata.aliases import Shape, Target, resolve_aliases
from graphdata.containers import Adjacency, BinAdjacency, BinMap, Map
from graphdata.convert import Converted, Same, convert, convert_result
from graphdata.check import (
    check_edges,
    check_label,
    check_list_refs,
    check_nodes,
    check_size,
    check_template,
)
from graphdata.errors import GraphDataError, InputError, SchemaError
from graphdata.expand import expand
from graphdata.pipeline import FieldSpec, IngestResult, ingest, ingest_fields
from graphdata.spaces import Indexed, Labeled
from graphdata.sparse import SparseVector
from graphdata.types import BINARY, ElementType, KeyKind

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BINARY",
    "Shape",
    "Target",
    "resolve_aliases",
    "Map",
    "BinMap",
    "Adjacency",
    "BinAdjacency",
    "Same",
    "Converted",
    "convert",
    "convert_result",
    "check_size",
    "check_template",
    "check_label",
    "check_list_refs",
    "check_nodes",
    "check_edges",
    "expand",
    "FieldSpec",
    "IngestResult",
    "ingest",
    "ingest_fields",
    "GraphDataError",
    "InputError",
    "SchemaError",
    "Indexed",
    "Labeled",
    "SparseVector",
    "ElementType",
    "KeyKind",
]
