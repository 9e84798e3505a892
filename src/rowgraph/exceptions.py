from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError

from .structure import ElementKind

# Failures surfaced by statement execution propagate unchanged.
StorageError = SQLAlchemyError


class RowGraphError(Exception):
    """Base exception for row controller failures."""
    pass


class ElementAlreadyExistsError(RowGraphError):
    """
    Raised when an insert affected zero rows.

    Assumes the identity column is the only unique constraint able to
    block an insert on the backing tables.
    """

    def __init__(self, element_id: Any, kind: ElementKind) -> None:
        super().__init__(f"{kind.value} with id already exists: {element_id!r}")
        self.element_id = element_id
        self.kind = kind


class VertexAlreadyExistsError(ElementAlreadyExistsError):
    def __init__(self, element_id: Any) -> None:
        super().__init__(element_id, ElementKind.VERTEX)


class EdgeAlreadyExistsError(ElementAlreadyExistsError):
    def __init__(self, element_id: Any) -> None:
        super().__init__(element_id, ElementKind.EDGE)


class NoSchemaError(RowGraphError):
    """No schema in the set accepts an element for persistence."""
    pass


class UnmappableRowError(RowGraphError):
    """No schema in the set is consistent with a result row's columns."""

    def __init__(self, row: Mapping[str, Any]) -> None:
        super().__init__(f"no schema matches row with columns {sorted(row.keys())}")
        self.row = dict(row)


__all__ = [
    "StorageError",
    "RowGraphError",
    "ElementAlreadyExistsError",
    "VertexAlreadyExistsError",
    "EdgeAlreadyExistsError",
    "UnmappableRowError",
    "NoSchemaError",
]
