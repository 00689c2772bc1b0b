from __future__ import annotations

import pytest

from tests.support.harness import (
    KappaInternalError,
    KpBool,
    KpNumber,
    KpPair,
    free_variables,
    nest_sums,
)
from kappa_ref.eval.subst import substitute
from kappa_ref.syntax import (
    Bind,
    Boolean,
    Head,
    IfThenElse,
    Less,
    Number,
    Pair,
    Sum,
    Tail,
    Variable,
    children,
    depth,
)

X = Variable("x")
Y = Variable("y")
ONE = KpNumber(1.0)

SUBSTITUTIONS = [
    pytest.param(X, Number(1.0), id="variable-match"),
    pytest.param(Y, Y, id="variable-other"),
    pytest.param(Number(7.0), Number(7.0), id="number-untouched"),
    pytest.param(Boolean(False), Boolean(False), id="boolean-untouched"),
    pytest.param(Sum(X, Y), Sum(Number(1.0), Y), id="sum"),
    pytest.param(Less(Y, X), Less(Y, Number(1.0)), id="less"),
    pytest.param(
        IfThenElse(X, X, Y),
        IfThenElse(Number(1.0), Number(1.0), Y),
        id="if-all-branches",
    ),
    pytest.param(Pair(X, X), Pair(Number(1.0), Number(1.0)), id="pair"),
    pytest.param(Head(X), Head(Number(1.0)), id="head"),
    pytest.param(Tail(X), Tail(Number(1.0)), id="tail"),
    pytest.param(
        Bind("x", X, X),
        Bind("x", Number(1.0), X),
        id="bind-shadows-body-not-rhs",
    ),
    pytest.param(
        Bind("y", X, Sum(X, Y)),
        Bind("y", Number(1.0), Sum(Number(1.0), Y)),
        id="bind-other-name",
    ),
    pytest.param(
        Bind("y", Number(0.0), Bind("x", Number(2.0), X)),
        Bind("y", Number(0.0), Bind("x", Number(2.0), X)),
        id="bind-nested-shadow",
    ),
]


@pytest.mark.parametrize("expr, expected", SUBSTITUTIONS)
def test_substitute(expr, expected) -> None:
    assert substitute("x", ONE, expr) == expected


def test_substitute_pair_value_becomes_literal() -> None:
    value = KpPair(KpBool(True), KpNumber(-0.0))

    result = substitute("x", value, Head(X))

    assert result == Head(Pair(Boolean(True), Number(-0.0)))


def test_substitute_leaves_original_untouched() -> None:
    expr = Sum(X, X)

    substitute("x", ONE, expr)

    assert expr == Sum(X, X)


def test_substitute_rejects_foreign_nodes() -> None:
    with pytest.raises(KappaInternalError):
        substitute("x", ONE, Sum(X, ("not", "a", "node")))  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "expr, expected",
    [
        pytest.param(X, {"x"}, id="variable"),
        pytest.param(Number(1.0), set(), id="number"),
        pytest.param(Sum(X, Y), {"x", "y"}, id="sum"),
        pytest.param(Bind("x", Number(1.0), X), set(), id="bind-closes-body"),
        pytest.param(Bind("x", X, X), {"x"}, id="bind-rhs-is-outer"),
        pytest.param(Bind("x", Number(1.0), Pair(X, Y)), {"y"}, id="bind-partial"),
        pytest.param(IfThenElse(X, Y, Variable("λ")), {"x", "y", "λ"}, id="if"),
    ],
)
def test_free_variables(expr, expected) -> None:
    assert free_variables(expr) == frozenset(expected)


def test_children_and_depth() -> None:
    expr = Bind("x", Number(1.0), IfThenElse(X, Head(Y), Boolean(True)))

    assert children(expr) == (Number(1.0), IfThenElse(X, Head(Y), Boolean(True)))
    assert children(X) == ()
    assert depth(X) == 0
    assert depth(expr) == 3


def test_depth_of_very_deep_tree() -> None:
    assert depth(nest_sums(5000)) == 5000
