"""Reference evaluator backed by CPython itself.

An expression is translated to Python source and run with `eval` inside a
`HostContext`. Arithmetic and comparison use Python's own `+` and `<=`, so
their type errors come straight from the interpreter. The kappa evaluator has
to reproduce that text on its own.

Host objects: numbers are `float`, booleans are `Boolean` members (Python's
`bool` is an `int` and would happily add), pairs are `Pair` (no `+`, no
ordering). Only `if`, `head` and `tail` need explicit guards, because Python
would otherwise accept any test value or fail with an attribute error.
"""
from __future__ import annotations

import enum
import math
import re
import unicodedata
from dataclasses import dataclass
from types import CodeType
from typing import Any, Dict, Optional

from . import syntax
from .syntax import Expr
from .types import (
    KappaFreeVariable,
    KappaInternalError,
    KappaNonBooleanTest,
    KappaNotAPair,
    KappaRuntimeError,
    KappaTypeError,
    KpBool,
    KpNumber,
    KpPair,
    KpValue,
)
from .utils import attach_py_trace, check_nesting

NAME_PREFIX = "v_"

# translations a context keeps compiled before starting over
COMPILE_CACHE_SIZE = 4096

_NAME_ERROR_RE = re.compile(r"name '(?P<name>[^']+)' is not defined")


class Boolean(enum.Enum):
    TRUE = True
    FALSE = False


@dataclass(frozen=True)
class Pair:
    first: Any
    second: Any


def _test(value: Any) -> bool:
    if not isinstance(value, Boolean):
        raise KappaNonBooleanTest()

    return value is Boolean.TRUE


def _head(value: Any) -> Any:
    if not isinstance(value, Pair):
        raise KappaNotAPair("head")

    return value.first


def _tail(value: Any) -> Any:
    if not isinstance(value, Pair):
        raise KappaNotAPair("tail")

    return value.second


def _base_namespace() -> Dict[str, Any]:
    return {
        "__builtins__": {},
        "_boolean": Boolean,
        "_pair": Pair,
        "_test": _test,
        "_head": _head,
        "_tail": _tail,
    }


class HostContext:
    """Isolated namespace the translated programs run in, plus their code objects.

    Translations are compiled once per context and reused. `reset` drops the
    cache, the counter and any rebinding of the helpers, and starts over.
    """

    def __init__(self, cache_size: int = COMPILE_CACHE_SIZE) -> None:
        self.cache_size = cache_size
        self.namespace: Dict[str, Any] = _base_namespace()
        self.compiled: Dict[str, CodeType] = {}
        self.evaluations = 0

    def reset(self) -> None:
        self.namespace = _base_namespace()
        self.compiled = {}
        self.evaluations = 0

    def code_for(self, source: str) -> CodeType:
        code = self.compiled.get(source)
        if code is not None:
            return code

        try:
            code = compile(source, "<kappa-host>", "eval")
        except SyntaxError as exc:
            raise KappaInternalError(f"Host rejected translation: {exc.msg}") from exc

        if len(self.compiled) >= self.cache_size:
            self.compiled.clear()
        self.compiled[source] = code

        return code

    def evaluate(self, source: str) -> Any:
        code = self.code_for(source)

        self.evaluations += 1
        return eval(code, self.namespace)

# ---------------- Translation ----------------

def host_name(name: str) -> str:
    ident = NAME_PREFIX + name

    # CPython NFKC-normalises identifiers; a name that changes would come
    # back from a NameError under a different spelling
    if not ident.isidentifier() or unicodedata.normalize("NFKC", ident) != ident:
        raise KappaInternalError(f"Cannot translate identifier '{name}'")

    return ident


def _unprefix(ident: str) -> str:
    if ident.startswith(NAME_PREFIX):
        return ident[len(NAME_PREFIX):]

    return ident


def translate(expr: Expr) -> str:
    """Python source for `expr`; every compound form is parenthesised."""
    match expr:
        case syntax.Number(value=num):
            num = float(num)
            if not math.isfinite(num):
                raise KappaInternalError(f"Cannot translate number {num!r}")
            return f"({num!r})"
        case syntax.Boolean(value=b):
            return "_boolean.TRUE" if b else "_boolean.FALSE"
        case syntax.Variable(name=name):
            return host_name(name)
        case syntax.Sum(lhs=lhs, rhs=rhs):
            return f"({translate(lhs)} + {translate(rhs)})"
        case syntax.Less(lhs=lhs, rhs=rhs):
            return f"_boolean({translate(lhs)} <= {translate(rhs)})"
        case syntax.Bind(name=name, bound=bound, body=body):
            return f"(lambda {host_name(name)}: {translate(body)})({translate(bound)})"
        case syntax.IfThenElse(test=test, then=then, orelse=orelse):
            return f"({translate(then)} if _test({translate(test)}) else {translate(orelse)})"
        case syntax.Pair(first=first, second=second):
            return f"_pair({translate(first)}, {translate(second)})"
        case syntax.Head(pair=inner):
            return f"_head({translate(inner)})"
        case syntax.Tail(pair=inner):
            return f"_tail({translate(inner)})"
        case _:
            raise KappaInternalError(f"Unknown node: {type(expr).__name__}")


def from_host(obj: Any) -> KpValue:
    match obj:
        case Boolean():
            return KpBool(obj is Boolean.TRUE)
        case float():
            return KpNumber(obj)
        case Pair(first=first, second=second):
            return KpPair(from_host(first), from_host(second))
        case _:
            raise KappaInternalError(f"Host produced unexpected {type(obj).__name__}")


def _missing_name(exc: NameError) -> str:
    name = getattr(exc, "name", None)
    if name:
        return str(name)

    m = _NAME_ERROR_RE.search(str(exc))
    if m is None:
        raise KappaInternalError(f"Unrecognised host failure: {exc}") from exc

    return m.group("name")

# ---------------- Public API ----------------

def reference_eval(expr: Expr, context: Optional[HostContext] = None) -> KpValue:
    """Evaluate `expr` on the host, raising the same failures `eval_expr` does."""
    if context is None:
        context = HostContext()

    try:
        check_nesting(expr)
        source = translate(expr)

        try:
            result = context.evaluate(source)
        except NameError as exc:
            raise KappaFreeVariable(_unprefix(_missing_name(exc))) from exc
        except TypeError as exc:
            raise KappaTypeError(str(exc)) from exc

        return from_host(result)
    except KappaRuntimeError as e:
        attach_py_trace(e)
        raise
