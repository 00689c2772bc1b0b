from __future__ import annotations

from typing import Callable

from ..syntax import Expr, IfThenElse
from ..types import KappaNonBooleanTest, KpBool, KpValue

EvalFunc = Callable[[Expr], KpValue]


def eval_if(node: IfThenElse, eval_func: EvalFunc) -> KpValue:
    test = eval_func(node.test)

    if not isinstance(test, KpBool):
        raise KappaNonBooleanTest()

    return eval_func(node.then if test.value else node.orelse)
