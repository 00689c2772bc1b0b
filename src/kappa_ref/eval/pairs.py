from __future__ import annotations

from typing import Callable

from ..syntax import Expr, Head, Pair, Tail
from ..types import KappaNotAPair, KpPair, KpValue

EvalFunc = Callable[[Expr], KpValue]


def eval_pair(node: Pair, eval_func: EvalFunc) -> KpPair:
    first = eval_func(node.first)
    second = eval_func(node.second)

    return KpPair(first, second)


def _require_pair(value: KpValue, op: str) -> KpPair:
    if isinstance(value, KpPair):
        return value

    raise KappaNotAPair(op)


def eval_head(node: Head, eval_func: EvalFunc) -> KpValue:
    return _require_pair(eval_func(node.pair), "head").first


def eval_tail(node: Tail, eval_func: EvalFunc) -> KpValue:
    return _require_pair(eval_func(node.pair), "tail").second
