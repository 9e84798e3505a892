from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from .exceptions import UnmappableRowError
from .schemas import RowSchema
from .structure import Element


class ElementMapper:
    """
    Maps a relational result row back to a graph element.

    When the table a row was read from is known, that table's schemas are
    tried first, then the remaining ones. Within each group schemas keep
    the ``SchemaSet`` order and the first one whose columns are all present
    in the row builds the element, so rows fitting several schemas resolve
    deterministically.
    """

    def __init__(self, schemas: Sequence[RowSchema]) -> None:
        self._schemas = tuple(schemas)

    @property
    def schemas(self) -> tuple[RowSchema, ...]:
        return self._schemas

    def candidates(self, table: Optional[str] = None) -> tuple[RowSchema, ...]:
        if table is None:
            return self._schemas
        own = tuple(s for s in self._schemas if s.table == table)
        return own + tuple(s for s in self._schemas if s.table != table)

    def schema_for(self, row: Mapping[str, Any], table: Optional[str] = None) -> RowSchema:
        for schema in self.candidates(table):
            if schema.is_consistent(row):
                return schema
        raise UnmappableRowError(row)

    def __call__(self, row: Mapping[str, Any], table: Optional[str] = None) -> Element:
        element = self.schema_for(row, table).to_element(row)
        if element is None:
            # Columns fit but identity (or an edge endpoint) is NULL.
            raise UnmappableRowError(row)
        return element


__all__ = ["ElementMapper"]
