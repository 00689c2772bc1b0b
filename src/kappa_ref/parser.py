from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from lark import Lark, Token, Transformer, UnexpectedInput
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken
from lark.visitors import v_args

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
from .types import KappaParseError

GRAMMAR_PATH = Path(__file__).resolve().with_name("grammar.lark")


@v_args(inline=True)
class ExprBuilder(Transformer):
    """Turn lark parse trees into immutable `Expr` nodes."""

    def number(self, tok: Token) -> Number:
        return Number(float(tok))

    def true(self) -> Boolean:
        return Boolean(True)

    def false(self) -> Boolean:
        return Boolean(False)

    def variable(self, tok: Token) -> Variable:
        return Variable(str(tok))

    def sum(self, lhs: Expr, rhs: Expr) -> Sum:
        return Sum(lhs, rhs)

    def less(self, lhs: Expr, rhs: Expr) -> Less:
        return Less(lhs, rhs)

    def bind(self, name: Token, bound: Expr, body: Expr) -> Bind:
        return Bind(str(name), bound, body)

    def if_then_else(self, test: Expr, then: Expr, orelse: Expr) -> IfThenElse:
        return IfThenElse(test, then, orelse)

    def pair(self, first: Expr, second: Expr) -> Pair:
        return Pair(first, second)

    def head(self, inner: Expr) -> Head:
        return Head(inner)

    def tail(self, inner: Expr) -> Tail:
        return Tail(inner)


def _read_grammar(grammar_path: Optional[str] = None) -> str:
    path = Path(grammar_path) if grammar_path else GRAMMAR_PATH
    if not path.exists():
        raise FileNotFoundError(f"{path.name} not found. pass an explicit path")

    return path.read_text(encoding="utf-8")


@lru_cache(maxsize=None)
def make_parser(grammar_path: Optional[str] = None) -> Lark:
    return Lark(
        _read_grammar(grammar_path),
        parser="lalr",
        start="start",
        transformer=ExprBuilder(),
    )


def _position(value: Optional[int]) -> Optional[int]:
    return value if value is not None and value > 0 else None


def _describe(exc: UnexpectedInput, src: str) -> str:
    match exc:
        case UnexpectedEOF():
            return "Unexpected end of input"
        case UnexpectedToken(token=tok) if tok.type == "$END":
            return "Unexpected end of input"
        case UnexpectedToken(token=tok):
            return f"Unexpected token {str(tok)!r}"
        case UnexpectedCharacters(pos_in_stream=pos):
            return f"Unexpected character {src[pos]!r}"
        case _:
            return "Malformed expression"


def parse_source(src: str, grammar_path: Optional[str] = None) -> Expr:
    """Parse one kappa expression, raising `KappaParseError` on bad input."""
    parser = make_parser(grammar_path)

    try:
        return parser.parse(src)
    except UnexpectedInput as exc:
        line = _position(getattr(exc, "line", None))
        column = _position(getattr(exc, "column", None))
        raise KappaParseError(_describe(exc, src), line, column) from exc
