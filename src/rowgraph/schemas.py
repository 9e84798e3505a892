from __future__ import annotations

"""
Label <-> table mappings.

A schema pairs one label with one relational table: an identity column,
a property -> column mapping and (for edges) the endpoint columns. It
converts elements to rows, rows back to elements, and restates
property-level predicate trees in terms of its own columns.

Several schemas may serve the same label (horizontal partitioning or
heterogeneous storage); ``SchemaSet`` keeps them in registration order,
which is also the tie-break order used by the result mapper.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from .predicates import (
    HasContainer,
    PredicatesHolder,
    abort,
    and_,
    empty,
    or_,
    predicate,
    within,
)
from .structure import (
    ID,
    LABEL,
    DeferredVertex,
    Direction,
    Edge,
    Element,
    ElementKind,
    Vertex,
)


@dataclass(frozen=True, slots=True)
class Row:
    """Table-ready snapshot of an element; ``fields`` starts with the id column."""

    id_field: str
    id: Any
    fields: Mapping[str, Any]

    def assignments(self) -> Dict[str, Any]:
        """Column values to SET on update: everything except the identity column."""
        return {k: v for k, v in self.fields.items() if k != self.id_field}


class RowSchema:
    element_kind: ClassVar[ElementKind]

    def __init__(
        self,
        table: str,
        label: str,
        id_column: str = "id",
        properties: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Parameters
        ----------
        table:
            Name of the backing table.
        label:
            Label of every element stored in ``table``.
        id_column:
            Identity column; holds ``Element.id``.
        properties:
            Property key -> column name. A property mapped onto the identity
            column is ignored when writing; the element id always wins.
        """
        self.table = table
        self.label = label
        self.id_column = id_column
        self.properties: Dict[str, str] = dict(properties or {})

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(label={self.label!r}, table={self.table!r})"

    # ------------------------------------------------------------------ #
    # Shape
    # ------------------------------------------------------------------ #
    @property
    def columns(self) -> Tuple[str, ...]:
        """All columns this schema reads and writes, identity first."""
        cols = [self.id_column]
        for col in self.properties.values():
            if col not in cols:
                cols.append(col)
        return tuple(cols)

    def accepts(self, element: Element) -> bool:
        return element.kind is self.element_kind and element.label == self.label

    def is_consistent(self, fields: Mapping[str, Any]) -> bool:
        """True when a result row carries every column of this schema."""
        return all(col in fields for col in self.columns)

    def column_for(self, key: str) -> Optional[str]:
        if key == ID:
            return self.id_column
        return self.properties.get(key)

    # ------------------------------------------------------------------ #
    # Element -> row
    # ------------------------------------------------------------------ #
    def to_fields(self, element: Element) -> Dict[str, Any]:
        fields: Dict[str, Any] = {self.id_column: element.id}
        for key, col in self.properties.items():
            if col == self.id_column:
                continue
            fields[col] = element.properties.get(key)
        return fields

    def to_row(self, element: Element) -> Row:
        return Row(self.id_column, element.id, self.to_fields(element))

    # ------------------------------------------------------------------ #
    # Row -> element
    # ------------------------------------------------------------------ #
    def to_element(self, fields: Mapping[str, Any]) -> Optional[Element]:
        """Rebuild an element, or None when the row does not fit this schema."""
        if not self.is_consistent(fields) or fields[self.id_column] is None:
            return None
        props = {
            key: fields[col]
            for key, col in self.properties.items()
            if col != self.id_column and fields[col] is not None
        }
        return self._create(fields[self.id_column], props, fields)

    def _create(self, element_id: Any, props: Dict[str, Any], fields: Mapping[str, Any]) -> Optional[Element]:
        raise NotImplementedError

    # ------------------------------------------------------------------ #
    # Predicates
    # ------------------------------------------------------------------ #
    def to_predicates(self, holder: PredicatesHolder) -> PredicatesHolder:
        """
        Restate a property-level tree over this schema's columns.

        Label leaves are decided here (the label is fixed per table); leaves
        on keys this schema has no column for make its branch unsatisfiable.
        """
        return holder.map_leaves(self._restate)

    def _restate(self, has: HasContainer) -> PredicatesHolder:
        if has.key == LABEL:
            return empty() if has.test(self.label) else abort()
        col = self.column_for(has.key)
        if col is None:
            return abort()
        return predicate(has.with_key(col))

    def id_predicates(self, elements: Iterable[Element]) -> PredicatesHolder:
        """``id_column IN (...)`` over the given elements this schema accepts."""
        ids = _unique(e.id for e in elements if self.accepts(e))
        return within(self.id_column, ids)


class RowVertexSchema(RowSchema):
    element_kind: ClassVar[ElementKind] = ElementKind.VERTEX

    def _create(self, element_id: Any, props: Dict[str, Any], fields: Mapping[str, Any]) -> Vertex:
        return Vertex(element_id, self.label, props)

    def to_predicates_for_vertices(self, vertices: Iterable[Vertex]) -> PredicatesHolder:
        """Identity lookup for placeholder vertices carrying this schema's label."""
        return self.id_predicates(vertices)


class RowEdgeSchema(RowSchema):
    element_kind: ClassVar[ElementKind] = ElementKind.EDGE

    def __init__(
        self,
        table: str,
        label: str,
        id_column: str = "id",
        properties: Optional[Mapping[str, str]] = None,
        *,
        out_vertex_column: str = "out_id",
        in_vertex_column: str = "in_id",
        out_vertex_label: str = "vertex",
        in_vertex_label: str = "vertex",
    ) -> None:
        super().__init__(table, label, id_column, properties)
        self.out_vertex_column = out_vertex_column
        self.in_vertex_column = in_vertex_column
        self.out_vertex_label = out_vertex_label
        self.in_vertex_label = in_vertex_label

    @property
    def columns(self) -> Tuple[str, ...]:
        cols = list(super().columns)
        for col in (self.out_vertex_column, self.in_vertex_column):
            if col not in cols:
                cols.append(col)
        return tuple(cols)

    def to_fields(self, element: Element) -> Dict[str, Any]:
        if not isinstance(element, Edge):
            raise TypeError(f"{self!r} cannot store {element!r}")
        fields = super().to_fields(element)
        fields[self.out_vertex_column] = element.out_vertex.id if element.out_vertex else None
        fields[self.in_vertex_column] = element.in_vertex.id if element.in_vertex else None
        return fields

    def _create(self, element_id: Any, props: Dict[str, Any], fields: Mapping[str, Any]) -> Optional[Edge]:
        out_id = fields[self.out_vertex_column]
        in_id = fields[self.in_vertex_column]
        if out_id is None or in_id is None:
            return None
        # Endpoint columns are structural, not properties.
        for col in (self.out_vertex_column, self.in_vertex_column):
            for key, mapped in self.properties.items():
                if mapped == col:
                    props.pop(key, None)
        return Edge(
            element_id,
            self.label,
            props,
            out_vertex=DeferredVertex(out_id, self.out_vertex_label),
            in_vertex=DeferredVertex(in_id, self.in_vertex_label),
        )

    def to_predicates_for_edges(
        self,
        vertices: Sequence[Vertex],
        direction: Direction,
        predicates: PredicatesHolder,
    ) -> PredicatesHolder:
        """
        "Edge touches one of ``vertices`` in ``direction``" AND ``predicates``.
        """
        out_touch = within(
            self.out_vertex_column,
            _unique(v.id for v in vertices if v.label == self.out_vertex_label),
        )
        in_touch = within(
            self.in_vertex_column,
            _unique(v.id for v in vertices if v.label == self.in_vertex_label),
        )
        if direction is Direction.OUT:
            touch = out_touch
        elif direction is Direction.IN:
            touch = in_touch
        else:
            touch = or_(out_touch, in_touch)
        return and_(touch, self.to_predicates(predicates))


class SchemaSet:
    """
    Immutable, ordered collection of vertex and edge schemas.

    Order is registration order and is never re-sorted: the result mapper
    resolves rows matching several schemas to the first one in this order.
    """

    def __init__(self, schemas: Iterable[RowSchema]) -> None:
        self._schemas: Tuple[RowSchema, ...] = tuple(schemas)
        self._vertex_schemas: Tuple[RowVertexSchema, ...] = tuple(
            s for s in self._schemas if isinstance(s, RowVertexSchema)
        )
        self._edge_schemas: Tuple[RowEdgeSchema, ...] = tuple(
            s for s in self._schemas if isinstance(s, RowEdgeSchema)
        )

    @property
    def vertex_schemas(self) -> Tuple[RowVertexSchema, ...]:
        return self._vertex_schemas

    @property
    def edge_schemas(self) -> Tuple[RowEdgeSchema, ...]:
        return self._edge_schemas

    def get(self, kind: ElementKind) -> Tuple[RowSchema, ...]:
        if kind is ElementKind.VERTEX:
            return self._vertex_schemas
        return self._edge_schemas

    def __iter__(self) -> Iterator[RowSchema]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)


def _unique(values: Iterable[Any]) -> list[Any]:
    return list(dict.fromkeys(values))


__all__ = [
    "Row",
    "RowSchema",
    "RowVertexSchema",
    "RowEdgeSchema",
    "SchemaSet",
]
