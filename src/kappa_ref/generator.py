"""Depth-bounded, scope-aware random expressions for differential testing.

The literal pools are deliberately tiny and lopsided: zero, negative zero,
negatives and fractions for the numbers, and a non-ASCII letter in the name
alphabet. The point is to hit type errors and edge cases often, not to look
like real programs.
"""
from __future__ import annotations

import random
from typing import AbstractSet, Callable, Dict, FrozenSet, List, Optional, Sequence

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

NUMBER_POOL: Sequence[float] = (0.0, -0.0, 1.0, -1.0, 0.5, -2.25, 3.0, 42.0)
BOOLEAN_POOL: Sequence[bool] = (True, False)
NAME_ALPHABET: Sequence[str] = ("a", "b", "x", "y", "λ")

# chance that a variable leaf ignores the scope and names something unbound
FREE_VARIABLE_RATE = 0.1
# chance that a `Bind` reuses a name already in scope instead of a fresh one
SHADOW_RATE = 0.25

LEAF_FORMS = ("number", "boolean", "variable")
NODE_FORMS = LEAF_FORMS + ("sum", "less", "bind", "if", "pair", "head", "tail")


class ExprGenerator:
    """Random `Expr` source; all randomness flows through one `random.Random`."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        if rng is None:
            rng = random.Random(seed)

        self.seed = seed
        self.rng = rng
        self._builders: Dict[str, Callable[[int, FrozenSet[str]], Expr]] = {
            "number": lambda _d, _s: self.number(),
            "boolean": lambda _d, _s: self.boolean(),
            "variable": lambda _d, scope: self.variable(scope),
            "sum": lambda d, scope: Sum(self.generate(d, scope), self.generate(d, scope)),
            "less": lambda d, scope: Less(self.generate(d, scope), self.generate(d, scope)),
            "bind": self._bind,
            "if": lambda d, scope: IfThenElse(
                self.generate(d, scope), self.generate(d, scope), self.generate(d, scope)
            ),
            "pair": lambda d, scope: Pair(self.generate(d, scope), self.generate(d, scope)),
            "head": lambda d, scope: Head(self.generate(d, scope)),
            "tail": lambda d, scope: Tail(self.generate(d, scope)),
        }

    def generate(self, depth: int, scope: AbstractSet[str] = frozenset()) -> Expr:
        if depth < 0:
            raise ValueError("depth must be non-negative")

        names = frozenset(scope)
        form = self.rng.choice(NODE_FORMS if depth > 0 else LEAF_FORMS)

        # compound builders receive the depth their children are drawn at
        return self._builders[form](max(depth - 1, 0), names)

    def number(self) -> Number:
        return Number(self.rng.choice(NUMBER_POOL))

    def boolean(self) -> Boolean:
        return Boolean(self.rng.choice(BOOLEAN_POOL))

    def variable(self, scope: FrozenSet[str]) -> Variable:
        if not scope or self.rng.random() < FREE_VARIABLE_RATE:
            return Variable(self.fresh_name(scope))

        return Variable(self.rng.choice(sorted(scope)))

    def fresh_name(self, avoid: AbstractSet[str]) -> str:
        """A name outside `avoid`, growing longer once the short ones run out."""
        length = 1

        while True:
            unused: List[str] = [
                cand for cand in _names_of_length(length) if cand not in avoid
            ]
            if unused:
                return self.rng.choice(unused)
            length += 1

    def _bind(self, depth: int, scope: FrozenSet[str]) -> Bind:
        if scope and self.rng.random() < SHADOW_RATE:
            name = self.rng.choice(sorted(scope))
        else:
            name = self.fresh_name(scope)

        bound = self.generate(depth, scope)
        body = self.generate(depth, scope | {name})

        return Bind(name, bound, body)


def _names_of_length(length: int) -> List[str]:
    names = [""]

    for _ in range(length):
        names = [prefix + ch for prefix in names for ch in NAME_ALPHABET]

    return names


def generate(depth: int, scope: AbstractSet[str] = frozenset(), rng: Optional[random.Random] = None) -> Expr:
    return ExprGenerator(rng=rng if rng is not None else random.Random()).generate(depth, scope)
