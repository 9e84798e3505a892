from __future__ import annotations

"""In-memory graph elements read and written by the row controller."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

# Reserved keys addressing identity and label inside predicate trees.
ID = "~id"
LABEL = "~label"


class ElementKind(str, Enum):
    VERTEX = "vertex"
    EDGE = "edge"


class Direction(str, Enum):
    OUT = "out"
    IN = "in"
    BOTH = "both"


@dataclass(eq=False)
class Element:
    """
    Base graph element: identity, label and a property map.

    Equality and hashing go by (kind, id), which is also the identity used
    to deduplicate search results across backing tables.
    """

    id: Any
    label: str
    properties: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[ElementKind]

    def value(self, key: str) -> Any:
        if key == ID:
            return self.id
        if key == LABEL:
            return self.label
        return self.properties.get(key)

    def property(self, key: str, value: Any) -> None:
        if key in (ID, LABEL):
            raise ValueError(f"{key!r} is not a mutable property")
        self.properties[key] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return self.kind is other.kind and self.id == other.id

    def __hash__(self) -> int:
        return hash((self.kind, self.id))

    def __repr__(self) -> str:
        return f"{self.kind.value}[{self.label}:{self.id}]"


@dataclass(eq=False, repr=False)
class Vertex(Element):
    kind: ClassVar[ElementKind] = ElementKind.VERTEX


@dataclass(eq=False, repr=False)
class DeferredVertex(Vertex):
    """
    Vertex known only by identity (and usually label) until its properties
    are batch-loaded by ``RowController.fetch_properties``.
    """

    deferred: bool = True

    def load_properties(self, vertex: Vertex) -> None:
        self.label = vertex.label
        self.properties.clear()
        self.properties.update(vertex.properties)
        self.deferred = False


@dataclass(eq=False, repr=False)
class Edge(Element):
    out_vertex: Optional[Vertex] = None
    in_vertex: Optional[Vertex] = None

    kind: ClassVar[ElementKind] = ElementKind.EDGE

    def vertex(self, direction: Direction) -> Optional[Vertex]:
        if direction is Direction.OUT:
            return self.out_vertex
        if direction is Direction.IN:
            return self.in_vertex
        raise ValueError("an edge has no single vertex in direction BOTH")


__all__ = [
    "ID",
    "LABEL",
    "ElementKind",
    "Direction",
    "Element",
    "Vertex",
    "DeferredVertex",
    "Edge",
]
