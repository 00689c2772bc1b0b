from __future__ import annotations

from ..syntax import (
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
from ..types import KappaInternalError, KpValue, value_to_expr


def substitute(name: str, value: KpValue, expr: Expr) -> Expr:
    """Replace every unshadowed `Variable(name)` in `expr` with the literal form of `value`.

    `value` is closed, so nothing it introduces can be captured by a binder in
    `expr` and bound names never need renaming.
    """
    match expr:
        case Number() | Boolean():
            return expr
        case Variable(name=ref):
            return value_to_expr(value) if ref == name else expr
        case Sum(lhs=lhs, rhs=rhs):
            return Sum(substitute(name, value, lhs), substitute(name, value, rhs))
        case Less(lhs=lhs, rhs=rhs):
            return Less(substitute(name, value, lhs), substitute(name, value, rhs))
        case Bind(name=inner, bound=bound, body=body):
            # the right-hand side sits in the outer scope; the body is cut off
            # when the binder shadows `name`
            new_bound = substitute(name, value, bound)
            new_body = body if inner == name else substitute(name, value, body)
            return Bind(inner, new_bound, new_body)
        case IfThenElse(test=test, then=then, orelse=orelse):
            return IfThenElse(
                substitute(name, value, test),
                substitute(name, value, then),
                substitute(name, value, orelse),
            )
        case Pair(first=first, second=second):
            return Pair(substitute(name, value, first), substitute(name, value, second))
        case Head(pair=inner_pair):
            return Head(substitute(name, value, inner_pair))
        case Tail(pair=inner_pair):
            return Tail(substitute(name, value, inner_pair))
        case _:
            raise KappaInternalError(f"Cannot substitute into {type(expr).__name__}")
