"""Differential oracle: run both evaluators and compare value or error text."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .evaluator import eval_expr
from .generator import ExprGenerator
from .host import HostContext, reference_eval
from .printer import render, render_value
from .syntax import Expr
from .types import KappaMismatchError, KappaRuntimeError, KpValue
from .utils import MAX_NESTING


@dataclass(frozen=True)
class Success:
    value: KpValue


@dataclass(frozen=True)
class Failure:
    message: str


Outcome = Union[Success, Failure]


def render_outcome(outcome: Outcome) -> str:
    if isinstance(outcome, Success):
        return f"value {render_value(outcome.value)}"

    return f"error: {outcome.message}"


def safe(fn: Callable[[Expr], KpValue]) -> Callable[[Expr], Outcome]:
    """Adapt an evaluator so every failure comes back as a `Failure` result.

    Classified failures keep their exact text; anything else is tagged with
    its exception type so it still shows up in the verdict.
    """
    def run(expr: Expr) -> Outcome:
        try:
            return Success(fn(expr))
        except KappaRuntimeError as exc:
            return Failure(str(exc))
        except Exception as exc:
            return Failure(f"{type(exc).__name__}: {exc}")

    return run


@dataclass(frozen=True)
class Verdict:
    expr: Expr
    reference: Outcome
    interpreter: Outcome

    @property
    def passed(self) -> bool:
        return self.reference == self.interpreter

    @property
    def detail(self) -> str:
        return "\n".join([
            "evaluators disagree",
            f"  expr:        {render(self.expr)}",
            f"  reference:   {render_outcome(self.reference)}",
            f"  interpreter: {render_outcome(self.interpreter)}",
        ])


def check(expr: Expr, context: Optional[HostContext] = None) -> Verdict:
    if context is None:
        context = HostContext()

    reference = safe(lambda e: reference_eval(e, context))(expr)
    interpreter = safe(eval_expr)(expr)

    return Verdict(expr, reference, interpreter)


@dataclass(frozen=True)
class TrialReport:
    trials: int
    depth: int
    seed: int


def run_trials(
    trials: int,
    depth: int,
    seed: Optional[int] = None,
    context: Optional[HostContext] = None,
) -> TrialReport:
    """Generate and check `trials` expressions; raise at the first disagreement.

    Each expression starts from an empty scope. Without a seed a fresh one is
    drawn so the report can still name it.
    """
    if depth > MAX_NESTING:
        raise ValueError(f"depth must be at most {MAX_NESTING}")

    if seed is None:
        seed = random.randrange(2**32)

    if context is None:
        context = HostContext()

    gen = ExprGenerator(seed=seed)

    for trial in range(trials):
        verdict = check(gen.generate(depth), context)

        if not verdict.passed:
            raise KappaMismatchError(verdict, trial, seed)

    return TrialReport(trials=trials, depth=depth, seed=seed)
