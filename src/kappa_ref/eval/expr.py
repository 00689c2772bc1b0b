from __future__ import annotations

from typing import Callable

from ..syntax import Expr, Less, Sum
from ..types import KappaTypeError, KpBool, KpNumber, KpValue, host_type_name

EvalFunc = Callable[[Expr], KpValue]

# CPython's wording for a binary operator neither operand implements.
# The reference host reaches these by running the real operators.
ADD_MISMATCH = "unsupported operand type(s) for +: '{}' and '{}'"
LEQ_MISMATCH = "'<=' not supported between instances of '{}' and '{}'"


def mismatch_message(template: str, lhs: KpValue, rhs: KpValue) -> str:
    return template.format(host_type_name(lhs), host_type_name(rhs))


def eval_sum(node: Sum, eval_func: EvalFunc) -> KpValue:
    lhs = eval_func(node.lhs)
    rhs = eval_func(node.rhs)

    match (lhs, rhs):
        case (KpNumber(value=a), KpNumber(value=b)):
            return KpNumber(a + b)
        case _:
            raise KappaTypeError(mismatch_message(ADD_MISMATCH, lhs, rhs))


def eval_less(node: Less, eval_func: EvalFunc) -> KpValue:
    lhs = eval_func(node.lhs)
    rhs = eval_func(node.rhs)

    match (lhs, rhs):
        case (KpNumber(value=a), KpNumber(value=b)):
            return KpBool(a <= b)
        case _:
            raise KappaTypeError(mismatch_message(LEQ_MISMATCH, lhs, rhs))
