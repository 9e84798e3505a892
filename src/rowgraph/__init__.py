"""
rowgraph
========

Graph element operations (search, insert, update, delete, deferred
property fill) translated onto relational tables through SQLAlchemy Core.

Public API:

- RowController          : runs typed queries against a SchemaSet.
- RowVertexSchema        : label <-> table mapping for vertices.
- RowEdgeSchema          : label <-> table mapping for edges.
- SchemaSet              : ordered, immutable collection of schemas.
- Vertex, Edge, DeferredVertex, Direction, ElementKind : graph elements.
- predicates             : predicate tree factory (has, within, and_, or_, ...).
- SearchQuery, SearchEdgesQuery, AddVertexQuery, AddEdgeQuery,
  PropertyQuery, RemoveQuery, DeferredVertexQuery : typed queries.

All other modules in this package are considered internal implementation details.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from . import predicates
from .controller import RowController
from .exceptions import (
    EdgeAlreadyExistsError,
    ElementAlreadyExistsError,
    NoSchemaError,
    RowGraphError,
    StorageError,
    UnmappableRowError,
    VertexAlreadyExistsError,
)
from .query import (
    AddEdgeQuery,
    AddVertexQuery,
    DeferredVertexQuery,
    PropertyQuery,
    RemoveQuery,
    SearchEdgesQuery,
    SearchQuery,
)
from .schemas import Row, RowEdgeSchema, RowSchema, RowVertexSchema, SchemaSet
from .structure import ID, LABEL, DeferredVertex, Direction, Edge, Element, ElementKind, Vertex

try:
    __version__ = version("rowgraph")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "predicates",
    "RowController",
    "RowGraphError",
    "ElementAlreadyExistsError",
    "VertexAlreadyExistsError",
    "EdgeAlreadyExistsError",
    "NoSchemaError",
    "UnmappableRowError",
    "StorageError",
    "SearchQuery",
    "SearchEdgesQuery",
    "AddVertexQuery",
    "AddEdgeQuery",
    "PropertyQuery",
    "RemoveQuery",
    "DeferredVertexQuery",
    "Row",
    "RowSchema",
    "RowVertexSchema",
    "RowEdgeSchema",
    "SchemaSet",
    "ID",
    "LABEL",
    "Element",
    "Vertex",
    "Edge",
    "DeferredVertex",
    "Direction",
    "ElementKind",
]
