from __future__ import annotations

from rowgraph import predicates as P
from rowgraph.predicates import Operator
from rowgraph.translator import translate, translate_has
from rowgraph.predicates import HasContainer


def render(condition) -> str:
    return str(condition.compile(compile_kwargs={"literal_binds": True}))


def test_empty_holder_has_no_conditions() -> None:
    assert translate(P.empty()) == []


def test_aborted_holder_translates_to_single_false() -> None:
    conditions = translate(P.abort())
    assert len(conditions) == 1


def test_and_holder_yields_one_condition_per_leaf() -> None:
    conditions = translate(P.and_(P.has("age", "gt", 30), P.has("name", "eq", "marko")))
    assert [render(c) for c in conditions] == ["age > 30", "name = 'marko'"]


def test_or_holder_yields_single_condition() -> None:
    conditions = translate(P.or_(P.has("age", "lt", 18), P.has("age", "gt", 65)))
    assert len(conditions) == 1
    assert render(conditions[0]) == "age < 18 OR age > 65"


def test_within_translates_to_in() -> None:
    assert render(translate_has(HasContainer("id", Operator.WITHIN, ("a", "b")))) == "id IN ('a', 'b')"


def test_eq_none_translates_to_is_null() -> None:
    assert render(translate_has(HasContainer("name", Operator.EQ, None))) == "name IS NULL"


def test_between_is_half_open() -> None:
    assert render(translate_has(HasContainer("age", Operator.BETWEEN, (10, 20)))) == "age >= 10 AND age < 20"
