"""Expression nodes for the kappa language.

Nodes are frozen dataclasses so trees are immutable once built and compare
structurally. `Variable` doubles as the name carrier: strings never show up
as runtime values.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple
from typing_extensions import TypeAlias


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Boolean:
    value: bool


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Sum:
    lhs: 'Expr'
    rhs: 'Expr'


@dataclass(frozen=True)
class Less:
    lhs: 'Expr'
    rhs: 'Expr'


@dataclass(frozen=True)
class Bind:
    name: str
    bound: 'Expr'
    body: 'Expr'


@dataclass(frozen=True)
class IfThenElse:
    test: 'Expr'
    then: 'Expr'
    orelse: 'Expr'


@dataclass(frozen=True)
class Pair:
    first: 'Expr'
    second: 'Expr'


@dataclass(frozen=True)
class Head:
    pair: 'Expr'


@dataclass(frozen=True)
class Tail:
    pair: 'Expr'


Expr: TypeAlias = (
    Number
    | Boolean
    | Variable
    | Sum
    | Less
    | Bind
    | IfThenElse
    | Pair
    | Head
    | Tail
)


def children(expr: Expr) -> Tuple[Expr, ...]:
    match expr:
        case Sum(lhs=lhs, rhs=rhs) | Less(lhs=lhs, rhs=rhs):
            return (lhs, rhs)
        case Bind(bound=bound, body=body):
            return (bound, body)
        case IfThenElse(test=test, then=then, orelse=orelse):
            return (test, then, orelse)
        case Pair(first=first, second=second):
            return (first, second)
        case Head(pair=inner) | Tail(pair=inner):
            return (inner,)
        case _:
            return ()


def depth(expr: Expr) -> int:
    """Height of `expr`, leaves being 0. Walks with an explicit stack."""
    deepest = 0
    stack: List[Tuple[Expr, int]] = [(expr, 0)]

    while stack:
        node, level = stack.pop()
        deepest = max(deepest, level)
        stack.extend((child, level + 1) for child in children(node))

    return deepest
