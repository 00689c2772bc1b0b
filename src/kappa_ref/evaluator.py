from __future__ import annotations

from typing import Callable

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
from .types import (
    KappaFreeVariable,
    KappaInternalError,
    KappaRuntimeError,
    KpBool,
    KpNumber,
    KpValue,
    is_kp_value,
)
from .utils import attach_py_trace, check_nesting

from .eval.bind import eval_bind
from .eval.control import eval_if
from .eval.expr import eval_less, eval_sum
from .eval.pairs import eval_head, eval_pair, eval_tail

EvalFunc = Callable[[Expr], KpValue]

# ---------------- Public API ----------------

def eval_expr(expr: Expr) -> KpValue:
    """Evaluate a closed expression by substitution.

    Raises a `KappaRuntimeError` subclass for every failure class, including
    an internal error for trees nested deeper than `MAX_NESTING`.
    """
    try:
        check_nesting(expr)
        result = eval_node(expr)
    except KappaRuntimeError as e:
        attach_py_trace(e)
        raise

    if not is_kp_value(result):
        raise KappaInternalError(f"Evaluation produced no value for {type(expr).__name__}")

    return result

# ---------------- Core evaluator ----------------

def eval_node(n: Expr) -> KpValue:
    handler = _NODE_DISPATCH.get(type(n))
    if handler is not None:
        return handler(n)

    match n:
        case Number(value=num):
            return KpNumber(num)
        case Boolean(value=b):
            return KpBool(b)
        case Variable(name=name):
            # bound names are substituted away before evaluation reaches them
            raise KappaFreeVariable(name)
        case _:
            raise KappaInternalError(f"Unknown node: {type(n).__name__}")

_NODE_DISPATCH: dict[type, EvalFunc] = {
    Sum: lambda n: eval_sum(n, eval_node),
    Less: lambda n: eval_less(n, eval_node),
    Bind: lambda n: eval_bind(n, eval_node),
    IfThenElse: lambda n: eval_if(n, eval_node),
    Pair: lambda n: eval_pair(n, eval_node),
    Head: lambda n: eval_head(n, eval_node),
    Tail: lambda n: eval_tail(n, eval_node),
}
