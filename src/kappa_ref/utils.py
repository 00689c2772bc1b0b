from __future__ import annotations

import os as _os
import sys
from dataclasses import dataclass
from typing import Optional

from .syntax import Expr, depth
from .types import KappaInternalError, KappaRuntimeError

DEBUG_PY_TRACE_ENV = "KAPPA_DEBUG_PY_TRACE"

DEFAULT_TRIALS = 1000
DEFAULT_DEPTH = 4

# Deepest expression either evaluator accepts. The host form of an `if` test
# costs two parenthesis levels and CPython stops at 200.
MAX_NESTING = 64


def envvar_value_by_name(name: str) -> Optional[str]:
    """Get the current value of an env var by name, or None if missing."""
    return _os.environ.get(name)


def debug_py_trace_enabled() -> bool:
    return bool(envvar_value_by_name(DEBUG_PY_TRACE_ENV))


def attach_py_trace(exc: KappaRuntimeError) -> None:
    """Keep the Python traceback on `exc` when KAPPA_DEBUG_PY_TRACE is set.

    Must be called from inside the `except` block handling `exc`.
    """
    if exc.py_trace is None and debug_py_trace_enabled():
        exc.py_trace = sys.exc_info()[2]


def check_nesting(expr: Expr) -> None:
    levels = depth(expr)
    if levels > MAX_NESTING:
        raise KappaInternalError(
            f"Expression nests {levels} levels; the limit is {MAX_NESTING}"
        )


def envvar_int(name: str, default: Optional[int]) -> Optional[int]:
    """Integer env var; missing or malformed values fall back to `default`."""
    raw = envvar_value_by_name(name)
    if raw is None or not raw.strip():
        return default

    try:
        return int(raw.strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class FuzzConfig:
    """Knobs for a differential fuzzing campaign."""

    trials: int = DEFAULT_TRIALS
    depth: int = DEFAULT_DEPTH
    seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> FuzzConfig:
        trials = envvar_int("KAPPA_TRIALS", DEFAULT_TRIALS)
        max_depth = envvar_int("KAPPA_DEPTH", DEFAULT_DEPTH)

        return cls(
            trials=max(0, trials if trials is not None else DEFAULT_TRIALS),
            depth=(
                max_depth
                if max_depth is not None and 0 <= max_depth <= MAX_NESTING
                else DEFAULT_DEPTH
            ),
            seed=envvar_int("KAPPA_SEED", None),
        )
