from __future__ import annotations

from typing import Any, List, Protocol

from sqlalchemy import and_, column, false, or_
from sqlalchemy.sql.elements import ColumnElement

from .predicates import HasContainer, Operator, PredicatesHolder, Clause


class PredicatesTranslator(Protocol):
    """Turns a column-level predicate tree into a linear condition list."""

    def __call__(self, holder: PredicatesHolder) -> List[ColumnElement[bool]]:
        ...


def translate_has(has: HasContainer) -> ColumnElement[bool]:
    """
    Translate a single leaf into a SQLAlchemy condition.

    The column is referenced by name only (``sqlalchemy.column``) so the same
    condition can be reused against every table sharing that column name.
    """
    col: ColumnElement[Any] = column(has.key)
    op, value = has.operator, has.value

    if op is Operator.EQ:
        return col.is_(None) if value is None else col == value
    if op is Operator.NEQ:
        return col.is_not(None) if value is None else col != value
    if op is Operator.LT:
        return col < value
    if op is Operator.LTE:
        return col <= value
    if op is Operator.GT:
        return col > value
    if op is Operator.GTE:
        return col >= value
    if op is Operator.WITHIN:
        return col.in_(list(value))
    if op is Operator.WITHOUT:
        return col.not_in(list(value))
    if op is Operator.BETWEEN:
        lo, hi = value
        return and_(col >= lo, col < hi)
    if op is Operator.INSIDE:
        lo, hi = value
        return and_(col > lo, col < hi)
    if op is Operator.OUTSIDE:
        lo, hi = value
        return or_(col < lo, col > hi)
    if op is Operator.STARTING_WITH:
        return col.startswith(value, autoescape=True)
    if op is Operator.CONTAINING:
        return col.contains(value, autoescape=True)
    raise ValueError(f"cannot translate operator {op!r}")


def _translate_node(holder: PredicatesHolder) -> ColumnElement[bool]:
    parts = [translate_has(h) for h in holder.predicates]
    parts.extend(_translate_node(child) for child in holder.children)
    if len(parts) == 1:
        return parts[0]
    if holder.clause is Clause.OR:
        return or_(*parts)
    return and_(*parts)


def translate(holder: PredicatesHolder) -> List[ColumnElement[bool]]:
    """
    Default translator: table-agnostic, stateless.

    - empty holder   -> []           (no WHERE clause)
    - aborted holder -> [false()]
    - AND holder     -> one condition per leaf / child (implicitly AND-ed)
    - OR holder      -> a single OR condition
    """
    if holder.is_aborted:
        return [false()]
    if holder.is_empty:
        return []
    if holder.clause is Clause.AND:
        conditions = [translate_has(h) for h in holder.predicates]
        conditions.extend(_translate_node(child) for child in holder.children)
        return conditions
    return [_translate_node(holder)]


__all__ = ["PredicatesTranslator", "translate", "translate_has"]
