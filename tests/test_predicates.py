from __future__ import annotations

import pytest

from rowgraph import predicates as P
from rowgraph.predicates import Clause, HasContainer, Operator


def test_or_of_nothing_is_aborted() -> None:
    assert P.or_().is_aborted


def test_or_drops_aborted_operands() -> None:
    leaf = P.has("name", "eq", "marko")
    assert P.or_(P.abort(), leaf) == leaf


def test_or_with_empty_operand_matches_everything() -> None:
    assert P.or_(P.empty(), P.has("name", "eq", "marko")).is_empty


def test_and_with_aborted_operand_aborts() -> None:
    assert P.and_(P.has("age", "gt", 3), P.abort()).is_aborted


def test_and_drops_empty_operands() -> None:
    leaf = P.has("age", "gt", 3)
    assert P.and_(P.empty(), leaf) == leaf
    assert P.and_().is_empty


def test_within_empty_set_is_unsatisfiable() -> None:
    assert P.within("id", []).is_aborted


def test_without_empty_set_is_unconstrained() -> None:
    assert P.has("id", Operator.WITHOUT, ()).is_empty


def test_and_flattens_leaves() -> None:
    holder = P.and_(P.has("a", "eq", 1), P.has("b", "eq", 2))
    assert holder.clause is Clause.AND
    assert [h.key for h in holder.predicates] == ["a", "b"]
    assert not holder.has_children


def test_or_collapses_identical_operands() -> None:
    leaf = P.has("name", "eq", "lop")
    assert P.or_(leaf, P.has("name", "eq", "lop")) == leaf


def test_nested_mixed_clauses_keep_structure() -> None:
    inner = P.or_(P.has("a", "eq", 1), P.has("b", "eq", 2))
    holder = P.and_(P.has("c", "eq", 3), inner)
    assert holder.clause is Clause.AND
    assert [h.key for h in holder.predicates] == ["c"]
    assert holder.children == (inner,)
    assert [h.key for h in holder.iter_predicates()] == ["c", "a", "b"]


def test_map_leaves_drops_aborted_or_branch() -> None:
    holder = P.or_(P.has("a", "eq", 1), P.has("b", "eq", 2))

    def only_a(has: HasContainer) -> P.PredicatesHolder:
        return P.predicate(has) if has.key == "a" else P.abort()

    assert holder.map_leaves(only_a) == P.has("a", "eq", 1)


def test_from_has_containers() -> None:
    leaves = [HasContainer("a", Operator.EQ, 1), HasContainer("b", Operator.EQ, 2)]
    holder = P.from_has_containers(Clause.OR, leaves)
    assert holder.clause is Clause.OR
    assert len(holder.predicates) == 2


@pytest.mark.parametrize(
    "op, value, operand, expected",
    [
        (Operator.EQ, "person", "person", True),
        (Operator.NEQ, "person", "person", False),
        (Operator.WITHIN, "person", ("person", "software"), True),
        (Operator.WITHOUT, "person", ("software",), True),
        (Operator.BETWEEN, 5, (5, 10), True),
        (Operator.INSIDE, 5, (5, 10), False),
        (Operator.OUTSIDE, 11, (5, 10), True),
        (Operator.STARTING_WITH, "person", "per", True),
        (Operator.CONTAINING, "software", "twa", True),
        (Operator.GT, None, 3, False),
    ],
)
def test_operator_python_evaluation(op, value, operand, expected) -> None:
    assert op.test(value, operand) is expected
