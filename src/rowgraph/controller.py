from __future__ import annotations

from itertools import chain, islice
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Type
from uuid import uuid4

from sqlalchemy import delete, literal_column, select, table, update
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from .config import ControllerSettings
from .db import insert_ignore, table_clause
from .exceptions import (
    EdgeAlreadyExistsError,
    ElementAlreadyExistsError,
    NoSchemaError,
    VertexAlreadyExistsError,
)
from .logs import getLogger
from .predicates import PredicatesHolder, or_
from .query import (
    AddEdgeQuery,
    AddVertexQuery,
    DeferredVertexQuery,
    PropertyQuery,
    RemoveQuery,
    SearchEdgesQuery,
    SearchQuery,
)
from .results import ElementMapper
from .schemas import RowSchema, SchemaSet
from .structure import ID, LABEL, DeferredVertex, Edge, Element, ElementKind, Vertex
from .translator import PredicatesTranslator, translate

logger = getLogger(__name__)


class RowController:
    """
    Runs graph element operations against the tables of a ``SchemaSet``.

    Responsibilities:

    - Search: restate the caller's predicates per schema, OR them, translate
      once, SELECT from every backing table and merge the rows into a lazy,
      identity-deduplicated element stream.
    - Insert/update/delete: one statement per applicable schema.
    - Deferred loading: one batched lookup filling placeholder vertices.

    Notes:
    - Stateless between calls; the session (or connection) is shared and the
      caller owns its transaction.
    - Multi-schema mutations are not atomic: they stop at the first failing
      statement and earlier statements are left to the caller's transaction.
    - Insert relies on the identity column being the only unique constraint
      that can block an insert; zero affected rows means "already exists".
    """

    def __init__(
        self,
        session: Session | Connection,
        schema_set: SchemaSet,
        translator: PredicatesTranslator = translate,
        *,
        settings: Optional[ControllerSettings] = None,
        dialect_name: Optional[str] = None,
    ) -> None:
        """
        Parameters
        ----------
        session:
            Statement execution context (ORM Session or Core Connection).
        schema_set:
            Ordered vertex and edge schemas; the order decides which schema
            builds an element when a row fits several.
        translator:
            Column-level predicate tree -> condition list.
        settings:
            Controller section of the app settings; defaults apply if omitted.
        dialect_name:
            Overrides the dialect detected from the session's bind.
        """
        self._session = session
        self._schema_set = schema_set
        self._translator = translator
        self._settings = settings or ControllerSettings()
        self._dialect_name = dialect_name

        logger.info(
            "RowController created with vertex schemas=%s edge schemas=%s",
            list(schema_set.vertex_schemas),
            list(schema_set.edge_schemas),
        )

    @property
    def schema_set(self) -> SchemaSet:
        return self._schema_set

    @property
    def dialect_name(self) -> str:
        if self._dialect_name is None:
            get_bind = getattr(self._session, "get_bind", None)
            bind = get_bind() if callable(get_bind) else self._session
            self._dialect_name = bind.dialect.name
        return self._dialect_name

    # ------------------------------------------------------------------ #
    # Search
    # ------------------------------------------------------------------ #
    def search(self, query: SearchQuery) -> Iterator[Element]:
        schemas = self._schema_set.get(query.return_type)
        per_schema = [schema.to_predicates(query.predicates) for schema in schemas]
        return self._search(or_(*per_schema), schemas, query.limit, _live_tables(schemas, per_schema))

    def search_edges(self, query: SearchEdgesQuery) -> Iterator[Edge]:
        """Edges touching any of the query's vertices in its direction."""
        schemas = self._schema_set.edge_schemas
        per_schema = [
            schema.to_predicates_for_edges(query.vertices, query.direction, query.predicates)
            for schema in schemas
        ]
        return self._search(  # type: ignore[return-value]
            or_(*per_schema), schemas, query.limit, _live_tables(schemas, per_schema)
        )

    def _search(
        self,
        predicates: PredicatesHolder,
        schemas: Sequence[RowSchema],
        limit: int,
        tables: Optional[Sequence[str]] = None,
    ) -> Iterator[Element]:
        """
        Translate once, SELECT per table, map each row with its own table's
        schemas first (then the rest of the set) and drop later rows whose
        identity was already yielded.

        ``tables`` defaults to every table of ``schemas``.
        """
        if not schemas or predicates.is_aborted:
            logger.debug("Search short-circuited: schemas=%d aborted=%s", len(schemas), predicates.is_aborted)
            return iter(())

        conditions = self._translator(predicates)
        mapper = ElementMapper(schemas)
        if tables is None:
            tables = _live_tables(schemas)

        elements = self._distinct(
            chain.from_iterable(self._select(name, conditions, mapper, limit) for name in tables)
        )
        if limit >= 0:
            return islice(elements, limit)
        return elements

    def _select(
        self,
        table_name: str,
        conditions: List[ColumnElement[bool]],
        mapper: ElementMapper,
        limit: int,
    ) -> Iterator[Element]:
        # Generator: the statement is only issued once the caller pulls this table.
        stmt = select(literal_column("*")).select_from(table(table_name)).where(*conditions)
        if limit >= 0 and self._settings.push_down_limit:
            stmt = stmt.limit(limit)

        logger.debug("SELECT * FROM %s with %d condition(s)", table_name, len(conditions))
        result = self._session.execute(stmt)
        for row in result.mappings():
            yield mapper(row, table_name)

    @staticmethod
    def _distinct(elements: Iterable[Element]) -> Iterator[Element]:
        seen: set[Any] = set()
        for element in elements:
            if element.id in seen:
                continue
            seen.add(element.id)
            yield element

    # ------------------------------------------------------------------ #
    # Insert
    # ------------------------------------------------------------------ #
    def add_vertex(self, query: AddVertexQuery) -> Vertex:
        properties = dict(query.properties)
        vertex = Vertex(
            self._new_id(properties),
            properties.pop(LABEL, self._settings.default_vertex_label),
            properties,
        )
        self.insert(vertex)
        return vertex

    def add_edge(self, query: AddEdgeQuery) -> Edge:
        properties = dict(query.properties)
        edge = Edge(
            self._new_id(properties),
            properties.pop(LABEL, self._settings.default_edge_label),
            properties,
            out_vertex=query.out_vertex,
            in_vertex=query.in_vertex,
        )
        self.insert(edge)
        return edge

    @staticmethod
    def _new_id(properties: Dict[str, Any]) -> Any:
        element_id = properties.pop(ID, None)
        return uuid4().hex if element_id is None else element_id

    def insert(self, element: Element) -> Element:
        """
        Persist ``element`` once per schema accepting its kind and label.

        Raises VertexAlreadyExistsError / EdgeAlreadyExistsError when a table
        already holds the identity; rows written to earlier schemas stay.
        """
        error: Type[ElementAlreadyExistsError] = (
            VertexAlreadyExistsError if element.kind is ElementKind.VERTEX else EdgeAlreadyExistsError
        )
        schemas = self._applicable(element)
        if not schemas:
            raise NoSchemaError(f"no {element.kind.value} schema accepts label {element.label!r}")

        for schema in schemas:
            row = schema.to_row(element)
            stmt = insert_ignore(table_clause(schema.table, row.fields), row.fields, self.dialect_name)
            result = self._session.execute(stmt)
            logger.debug("INSERT into %s id=%r affected %s row(s)", schema.table, row.id, result.rowcount)
            if result.rowcount == 0:
                raise error(element.id)
        return element

    # ------------------------------------------------------------------ #
    # Update
    # ------------------------------------------------------------------ #
    def property(self, query: PropertyQuery) -> None:
        """Rewrite the element's row in every applicable table, by identity."""
        element = query.element
        for schema in self._applicable(element):
            row = schema.to_row(element)
            assignments = row.assignments()
            if not assignments:
                continue
            target = table_clause(schema.table, row.fields)
            stmt = update(target).where(target.c[row.id_field] == row.id).values(assignments)
            result = self._session.execute(stmt)
            if result.rowcount == 0:
                logger.debug("UPDATE %s id=%r matched no row; skipped", schema.table, row.id)

    # ------------------------------------------------------------------ #
    # Delete
    # ------------------------------------------------------------------ #
    def remove(self, query: RemoveQuery) -> None:
        elements = list(query.elements)
        if not elements:
            return

        for kind in ElementKind:
            members = [e for e in elements if e.kind is kind]
            if not members:
                continue
            for schema in self._schema_set.get(kind):
                predicates = schema.id_predicates(members)
                if predicates.is_aborted:
                    continue
                stmt = delete(table(schema.table)).where(*self._translator(predicates))
                result = self._session.execute(stmt)
                logger.debug("DELETE from %s removed %s row(s)", schema.table, result.rowcount)

    # ------------------------------------------------------------------ #
    # Deferred vertices
    # ------------------------------------------------------------------ #
    def fetch_properties(self, query: DeferredVertexQuery) -> None:
        """
        Fill placeholder vertices in place with one batched lookup.

        Placeholders without a matching row stay deferred.
        """
        pending = [v for v in query.vertices if v.deferred]
        schemas = self._schema_set.vertex_schemas
        per_schema = [schema.to_predicates_for_vertices(pending) for schema in schemas]
        predicates = or_(*per_schema)
        if predicates.is_aborted or predicates.is_empty:
            return

        by_id: Dict[Any, List[DeferredVertex]] = {}
        for vertex in pending:
            by_id.setdefault(vertex.id, []).append(vertex)

        loaded = 0
        for vertex in self._search(predicates, schemas, -1, _live_tables(schemas, per_schema)):
            for placeholder in by_id.get(vertex.id, ()):
                placeholder.load_properties(vertex)
                loaded += 1
        logger.debug("Loaded %d of %d deferred vertices", loaded, len(pending))

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _applicable(self, element: Element) -> List[RowSchema]:
        return [s for s in self._schema_set.get(element.kind) if s.accepts(element)]


def _live_tables(
    schemas: Sequence[RowSchema],
    predicates: Optional[Sequence[PredicatesHolder]] = None,
) -> List[str]:
    """
    Distinct table names in schema order, leaving out tables whose schema
    restated the query as unsatisfiable (nothing there can match).
    """
    if predicates is None:
        return list(dict.fromkeys(s.table for s in schemas))
    return list(dict.fromkeys(s.table for s, p in zip(schemas, predicates) if not p.is_aborted))


__all__ = ["RowController"]
