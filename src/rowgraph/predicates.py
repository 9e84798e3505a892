from __future__ import annotations

"""
Boolean predicate trees over element properties.

A ``PredicatesHolder`` is an AND/OR combination of ``HasContainer`` leaves
and nested holders. Two degenerate holders carry meaning of their own:

  - empty:   no constraints at all, matches every element.
  - aborted: unsatisfiable, matches nothing; operations receiving an
             aborted tree return without touching storage.

Holders are immutable; build them through the factory functions at the
bottom of this module so that empty/aborted operands collapse correctly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Tuple


class Operator(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    WITHIN = "within"
    WITHOUT = "without"
    BETWEEN = "between"      # lo <= x < hi
    INSIDE = "inside"        # lo < x < hi
    OUTSIDE = "outside"      # x < lo or x > hi
    STARTING_WITH = "starting_with"
    CONTAINING = "containing"

    def test(self, value: Any, operand: Any) -> bool:
        """Evaluate the comparison in Python (used for statically known keys)."""
        if self is Operator.EQ:
            return value == operand
        if self is Operator.NEQ:
            return value != operand
        if value is None:
            if self is Operator.WITHIN:
                return None in operand
            if self is Operator.WITHOUT:
                return None not in operand
            return False
        if self is Operator.LT:
            return value < operand
        if self is Operator.LTE:
            return value <= operand
        if self is Operator.GT:
            return value > operand
        if self is Operator.GTE:
            return value >= operand
        if self is Operator.WITHIN:
            return value in operand
        if self is Operator.WITHOUT:
            return value not in operand
        if self is Operator.BETWEEN:
            lo, hi = operand
            return lo <= value < hi
        if self is Operator.INSIDE:
            lo, hi = operand
            return lo < value < hi
        if self is Operator.OUTSIDE:
            lo, hi = operand
            return value < lo or value > hi
        if self is Operator.STARTING_WITH:
            return str(value).startswith(operand)
        if self is Operator.CONTAINING:
            return operand in str(value)
        raise ValueError(f"unsupported operator {self!r}")


@dataclass(frozen=True, slots=True)
class HasContainer:
    """Atomic condition ``key <operator> value``."""

    key: str
    operator: Operator
    value: Any

    def test(self, value: Any) -> bool:
        return self.operator.test(value, self.value)

    def with_key(self, key: str) -> "HasContainer":
        return HasContainer(key, self.operator, self.value)


class Clause(str, Enum):
    AND = "and"
    OR = "or"
    ABORT = "abort"


@dataclass(frozen=True, slots=True)
class PredicatesHolder:
    clause: Clause
    predicates: Tuple[HasContainer, ...] = ()
    children: Tuple["PredicatesHolder", ...] = ()

    @property
    def is_aborted(self) -> bool:
        return self.clause is Clause.ABORT

    @property
    def is_empty(self) -> bool:
        return not self.is_aborted and not self.predicates and not self.children

    @property
    def has_predicates(self) -> bool:
        return bool(self.predicates)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def iter_predicates(self) -> Iterable[HasContainer]:
        """All leaves of the tree, depth first."""
        yield from self.predicates
        for child in self.children:
            yield from child.iter_predicates()

    def map_leaves(
        self, func: Callable[[HasContainer], "PredicatesHolder"]
    ) -> "PredicatesHolder":
        """
        Rebuild the tree replacing every leaf with ``func(leaf)``.

        The result is assembled through ``and_``/``or_`` so leaves mapped to
        ``empty()`` or ``abort()`` collapse the tree accordingly.
        """
        if self.is_aborted or self.is_empty:
            return self
        parts = [func(leaf) for leaf in self.predicates]
        parts.extend(child.map_leaves(func) for child in self.children)
        combine = and_ if self.clause is Clause.AND else or_
        return combine(*parts)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_EMPTY = PredicatesHolder(Clause.AND)
_ABORT = PredicatesHolder(Clause.ABORT)


def empty() -> PredicatesHolder:
    return _EMPTY


def abort() -> PredicatesHolder:
    return _ABORT


def predicate(has: HasContainer) -> PredicatesHolder:
    if has.operator is Operator.WITHIN and not has.value:
        return abort()
    if has.operator is Operator.WITHOUT and not has.value:
        return empty()
    return PredicatesHolder(Clause.AND, (has,))


def has(key: str, operator: Operator | str, value: Any) -> PredicatesHolder:
    return predicate(HasContainer(key, Operator(operator), value))


def within(key: str, values: Iterable[Any]) -> PredicatesHolder:
    return predicate(HasContainer(key, Operator.WITHIN, tuple(values)))


def _combine(clause: Clause, holders: Iterable[PredicatesHolder]) -> PredicatesHolder:
    predicates: list[HasContainer] = []
    children: list[PredicatesHolder] = []
    for holder in holders:
        if holder.clause is clause or len(holder.predicates) + len(holder.children) == 1:
            # Same clause (or a single operand): flatten into this level.
            predicates.extend(holder.predicates)
            children.extend(holder.children)
        else:
            children.append(holder)
    return PredicatesHolder(clause, tuple(predicates), tuple(children))


def and_(*holders: PredicatesHolder) -> PredicatesHolder:
    """
    Conjunction: any aborted operand aborts, empty operands drop out.
    """
    if any(h.is_aborted for h in holders):
        return abort()
    remaining = _dedupe(h for h in holders if not h.is_empty)
    if not remaining:
        return empty()
    if len(remaining) == 1:
        return remaining[0]
    return _combine(Clause.AND, remaining)


def or_(*holders: PredicatesHolder) -> PredicatesHolder:
    """
    Disjunction: aborted operands drop out, an empty operand matches all.

    The disjunction of nothing is unsatisfiable, so ``or_()`` aborts.
    """
    remaining = _dedupe(h for h in holders if not h.is_aborted)
    if not remaining:
        return abort()
    if any(h.is_empty for h in remaining):
        return empty()
    if len(remaining) == 1:
        return remaining[0]
    return _combine(Clause.OR, remaining)


def from_has_containers(
    clause: Clause, has_containers: Iterable[HasContainer]
) -> PredicatesHolder:
    parts = [predicate(h) for h in has_containers]
    return and_(*parts) if clause is Clause.AND else or_(*parts)


def _dedupe(holders: Iterable[PredicatesHolder]) -> list[PredicatesHolder]:
    # Preserves first-seen order; identical per-schema trees collapse.
    seen: list[PredicatesHolder] = []
    for holder in holders:
        if holder in seen:
            continue
        seen.append(holder)
    return seen


__all__ = [
    "Operator",
    "HasContainer",
    "Clause",
    "PredicatesHolder",
    "empty",
    "abort",
    "predicate",
    "has",
    "within",
    "and_",
    "or_",
    "from_has_containers",
]
