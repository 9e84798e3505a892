from __future__ import annotations

"""Typed query objects handed to the row controller by the traversal layer."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from .predicates import PredicatesHolder, empty
from .structure import DeferredVertex, Direction, Element, ElementKind, Vertex


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """
    Search for vertices or edges matching ``predicates``.

    A negative ``limit`` means unbounded.
    """

    return_type: ElementKind
    predicates: PredicatesHolder = field(default_factory=empty)
    limit: int = -1

    @classmethod
    def vertices(cls, predicates: PredicatesHolder | None = None, limit: int = -1) -> "SearchQuery":
        return cls(ElementKind.VERTEX, predicates if predicates is not None else empty(), limit)

    @classmethod
    def edges(cls, predicates: PredicatesHolder | None = None, limit: int = -1) -> "SearchQuery":
        return cls(ElementKind.EDGE, predicates if predicates is not None else empty(), limit)


@dataclass(frozen=True, slots=True)
class SearchEdgesQuery:
    """Edges touching ``vertices`` in ``direction`` and matching ``predicates``."""

    vertices: Sequence[Vertex]
    direction: Direction
    predicates: PredicatesHolder = field(default_factory=empty)
    limit: int = -1

    return_type: ElementKind = ElementKind.EDGE


@dataclass(frozen=True, slots=True)
class AddVertexQuery:
    """``properties`` may carry ``~id`` and ``~label`` entries."""

    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AddEdgeQuery:
    out_vertex: Optional[Vertex]
    in_vertex: Optional[Vertex]
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PropertyQuery:
    element: Element


@dataclass(frozen=True, slots=True)
class RemoveQuery:
    elements: Sequence[Element]


@dataclass(frozen=True, slots=True)
class DeferredVertexQuery:
    vertices: Sequence[DeferredVertex]


__all__ = [
    "SearchQuery",
    "SearchEdgesQuery",
    "AddVertexQuery",
    "AddEdgeQuery",
    "PropertyQuery",
    "RemoveQuery",
    "DeferredVertexQuery",
]
