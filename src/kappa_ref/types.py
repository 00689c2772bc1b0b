from __future__ import annotations

import math
from dataclasses import dataclass
from types import TracebackType
from typing import Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard

from .syntax import Boolean, Expr, Number, Pair

# ---------- Value Model ----------

def format_number(num: float) -> str:
    v = float(num)

    # -0.0 keeps its sign so printed programs read back identically
    if v == 0 and math.copysign(1.0, v) < 0:
        return "-0.0"

    return str(int(v)) if v.is_integer() else repr(v)

@dataclass(frozen=True)
class KpNumber:
    value: float
    def __repr__(self) -> str:
        return format_number(self.value)

@dataclass(frozen=True)
class KpBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class KpPair:
    first: 'KpValue'
    second: 'KpValue'
    def __repr__(self) -> str:
        return f"(pair {self.first!r} {self.second!r})"

KpValue: TypeAlias = KpNumber | KpBool | KpPair

_KP_VALUE_TYPES: Tuple[type, ...] = (KpNumber, KpBool, KpPair)

def is_kp_value(value: object) -> TypeGuard[KpValue]:
    return isinstance(value, _KP_VALUE_TYPES)

def value_to_expr(value: KpValue) -> Expr:
    """Literal form of an evaluated value; evaluating it gives the value back."""
    match value:
        case KpNumber(value=num):
            return Number(num)
        case KpBool(value=b):
            return Boolean(b)
        case KpPair(first=first, second=second):
            return Pair(value_to_expr(first), value_to_expr(second))
        case _:
            raise KappaInternalError(f"Unexpected value type {type(value).__name__}")

# Names the reference host gives its runtime objects. Type-mismatch messages
# quote these, so they have to agree with kappa_ref.host.
HOST_TYPE_NAMES = {
    KpNumber: "float",
    KpBool: "Boolean",
    KpPair: "Pair",
}

def host_type_name(value: KpValue) -> str:
    try:
        return HOST_TYPE_NAMES[type(value)]
    except KeyError:
        raise KappaInternalError(f"Unexpected value type {type(value).__name__}") from None

# ---------- Exceptions ----------

class KappaRuntimeError(Exception):
    kind = "runtime"
    py_trace: Optional[TracebackType]

    def __init__(self, message: str):
        super().__init__(message)
        self.py_trace = None

class KappaFreeVariable(KappaRuntimeError):
    kind = "free-variable"

    def __init__(self, name: str):
        super().__init__(f"Free variable '{name}'")
        self.name = name

class KappaNonBooleanTest(KappaRuntimeError):
    kind = "non-boolean-test"

    def __init__(self) -> None:
        super().__init__("If test must be a boolean")

class KappaTypeError(KappaRuntimeError):
    kind = "type-mismatch"

class KappaNotAPair(KappaRuntimeError):
    kind = "not-a-pair"

    def __init__(self, op: str):
        super().__init__(f"{op} expects a pair")
        self.op = op

class KappaInternalError(KappaRuntimeError):
    kind = "internal"

class KappaParseError(Exception):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        msg = super().__str__()

        if self.line is None:
            return msg

        if self.column is None:
            return f"{msg} (line {self.line})"

        return f"{msg} (line {self.line}, col {self.column})"

class KappaMismatchError(AssertionError):
    """Raised by the differential runner at the first disagreement."""
    def __init__(self, verdict: object, trial: int, seed: Optional[int] = None):
        super().__init__(getattr(verdict, "detail", str(verdict)))
        self.verdict = verdict
        self.trial = trial
        self.seed = seed
