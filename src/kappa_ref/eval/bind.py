from __future__ import annotations

from typing import Callable

from ..syntax import Bind, Expr
from ..types import KpValue
from .subst import substitute

EvalFunc = Callable[[Expr], KpValue]


def eval_bind(node: Bind, eval_func: EvalFunc) -> KpValue:
    """Call-by-value `let`: evaluate the bound expression, splice it into the body."""
    value = eval_func(node.bound)

    return eval_func(substitute(node.name, value, node.body))
