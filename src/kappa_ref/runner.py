from __future__ import annotations

import sys
import traceback
from dataclasses import replace
from pathlib import Path
from typing import Iterator, List, Optional

from .evaluator import eval_expr
from .oracle import check, run_trials
from .parser import parse_source
from .printer import render_value
from .types import KappaMismatchError, KappaParseError, KappaRuntimeError, KpValue
from .utils import MAX_NESTING, FuzzConfig, debug_py_trace_enabled

USAGE = """\
usage: kappa-ref [eval] SOURCE|PATH|-
       kappa-ref fuzz [--trials N] [--depth D] [--seed S]
       kappa-ref repl"""

# exit status when the two evaluators disagree, from `eval` and `fuzz` alike
EXIT_MISMATCH = 2


def run(src: str) -> KpValue:
    return eval_expr(parse_source(src))


def report_error(exc: Exception) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    tb = getattr(exc, "py_trace", None)
    if debug_py_trace_enabled() and tb is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(tb)), file=sys.stderr, end="")


def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg


def _cmd_eval(arg: Optional[str]) -> int:
    source = _load_source(arg)

    try:
        expr = parse_source(source)
    except KappaParseError as exc:
        report_error(exc)
        return 1

    verdict = check(expr)
    if not verdict.passed:
        print(verdict.detail, file=sys.stderr)
        return EXIT_MISMATCH

    try:
        value = eval_expr(expr)
    except KappaRuntimeError as exc:
        report_error(exc)
        return 1

    print(render_value(value))
    return 0


def _int_flag(flag: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise SystemExit(f"{flag} expects an integer, got {raw!r}") from None


def _parse_fuzz_args(args: List[str], config: FuzzConfig) -> FuzzConfig:
    it: Iterator[str] = iter(args)

    for token in it:
        flag, sep, value = token.partition("=")
        if flag not in ("--trials", "--depth", "--seed"):
            raise SystemExit(f"Unexpected argument: {token}")

        if not sep:
            try:
                value = next(it)
            except StopIteration:
                raise SystemExit(f"{flag} flag requires a value") from None

        number = _int_flag(flag, value)
        if flag != "--seed" and number < 0:
            raise SystemExit(f"{flag} must be non-negative")
        if flag == "--depth" and number > MAX_NESTING:
            raise SystemExit(f"--depth must be at most {MAX_NESTING}")

        config = replace(config, **{flag[2:]: number})

    return config


def _cmd_fuzz(args: List[str]) -> int:
    config = _parse_fuzz_args(args, FuzzConfig.from_env())

    try:
        report = run_trials(config.trials, config.depth, seed=config.seed)
    except KappaMismatchError as exc:
        print(str(exc), file=sys.stderr)
        print(f"  (trial {exc.trial}, seed {exc.seed})", file=sys.stderr)
        return EXIT_MISMATCH

    print(f"{report.trials} trials passed (depth {report.depth}, seed {report.seed})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    if not args:
        return _cmd_eval("-")

    cmd, rest = args[0], args[1:]

    match cmd:
        case "-h" | "--help":
            print(USAGE)
            return 0
        case "fuzz":
            return _cmd_fuzz(rest)
        case "repl":
            if rest:
                raise SystemExit(f"Unexpected argument: {rest[0]}")
            from .repl import repl  # prompt_toolkit only needed here
            repl()
            return 0
        case "eval":
            if len(rest) > 1:
                raise SystemExit(f"Unexpected argument: {rest[1]}")
            return _cmd_eval(rest[0] if rest else "-")
        case _:
            if rest:
                raise SystemExit(f"Unexpected argument: {rest[0]}")
            return _cmd_eval(cmd)


if __name__ == "__main__":
    sys.exit(main())
