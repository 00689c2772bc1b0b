"""Render expressions and values back to kappa's s-expression syntax."""
from __future__ import annotations

from .syntax import (
    Bind,
    Boolean,
    Expr,
    Head,
    IfThenElse,
    Less,
    Number,
    Pair,
    Sum,
    Tail,
    Variable,
)
from .types import KpBool, KpNumber, KpPair, KpValue, format_number


def render(expr: Expr) -> str:
    match expr:
        case Number(value=num):
            return format_number(num)
        case Boolean(value=b):
            return "true" if b else "false"
        case Variable(name=name):
            return name
        case Sum(lhs=lhs, rhs=rhs):
            return f"(+ {render(lhs)} {render(rhs)})"
        case Less(lhs=lhs, rhs=rhs):
            return f"(<= {render(lhs)} {render(rhs)})"
        case Bind(name=name, bound=bound, body=body):
            return f"(let ({name} {render(bound)}) {render(body)})"
        case IfThenElse(test=test, then=then, orelse=orelse):
            return f"(if {render(test)} {render(then)} {render(orelse)})"
        case Pair(first=first, second=second):
            return f"(pair {render(first)} {render(second)})"
        case Head(pair=inner):
            return f"(head {render(inner)})"
        case Tail(pair=inner):
            return f"(tail {render(inner)})"
        case _:
            return repr(expr)


def render_value(value: KpValue) -> str:
    match value:
        case KpNumber(value=num):
            return format_number(num)
        case KpBool(value=b):
            return "true" if b else "false"
        case KpPair(first=first, second=second):
            return f"(pair {render_value(first)} {render_value(second)})"
        case _:
            return repr(value)

