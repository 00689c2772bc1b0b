from __future__ import annotations

import io

import pytest

from tests.support.harness import (
    KappaNotAPair,
    KappaParseError,
    KpBool,
    KpNumber,
    run_program,
)
from kappa_ref import oracle
from kappa_ref.runner import EXIT_MISMATCH, main
from kappa_ref.utils import (
    DEFAULT_DEPTH,
    DEFAULT_TRIALS,
    MAX_NESTING,
    FuzzConfig,
    envvar_int,
)


def test_run_evaluates_source() -> None:
    assert run_program("(let (x 5) (+ x x))") == KpNumber(10.0)


def test_run_raises_runtime_errors() -> None:
    with pytest.raises(KappaNotAPair):
        run_program("(head 1)")


def test_run_raises_parse_errors() -> None:
    with pytest.raises(KappaParseError):
        run_program("(head 1")


def test_main_prints_value(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["(pair (+ 1 2) (<= 1 0))"]) == 0

    assert capsys.readouterr().out == "(pair 3 false)\n"


def test_main_eval_subcommand(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["eval", "(if false 1 -0.0)"]) == 0

    assert capsys.readouterr().out == "-0.0\n"


def test_main_reports_runtime_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["eval", "(+ true 3)"]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == (
        "Error: unsupported operand type(s) for +: 'Boolean' and 'float'\n"
    )


def test_main_reports_parse_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["(+ 1"]) == 1

    assert capsys.readouterr().err.startswith("Error: Unexpected end of input")


def test_main_prints_traceback_when_enabled(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("KAPPA_DEBUG_PY_TRACE", "1")

    assert main(["(tail 1)"]) == 1

    err = capsys.readouterr().err
    assert err.startswith("Error: tail expects a pair\n")
    assert "Python traceback:" in err


def test_main_reads_file(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "prog.kp"
    path.write_text("; sum\n(+ 40 2)\n", encoding="utf-8")

    assert main([str(path)]) == 0
    assert capsys.readouterr().out == "42\n"


def test_main_reads_stdin(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("(<= 1 2)"))

    assert main([]) == 0
    assert capsys.readouterr().out == "true\n"


def test_main_empty_stdin_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))

    with pytest.raises(SystemExit):
        main(["-"])


def test_main_flags_disagreement(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(oracle, "eval_expr", lambda expr: KpBool(False))

    assert main(["(+ 1 2)"]) == 2
    assert capsys.readouterr().err.startswith("evaluators disagree")


def test_main_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--help"]) == 0
    assert capsys.readouterr().out.startswith("usage: kappa-ref")


def test_main_rejects_extra_arguments() -> None:
    with pytest.raises(SystemExit):
        main(["(+ 1 2)", "extra"])


def test_fuzz_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["fuzz", "--trials", "20", "--depth=3", "--seed", "7"]) == 0

    assert capsys.readouterr().out == "20 trials passed (depth 3, seed 7)\n"


def test_fuzz_reads_environment(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("KAPPA_TRIALS", "5")
    monkeypatch.setenv("KAPPA_DEPTH", "2")
    monkeypatch.setenv("KAPPA_SEED", "11")

    assert main(["fuzz"]) == 0
    assert capsys.readouterr().out == "5 trials passed (depth 2, seed 11)\n"


def test_fuzz_flags_override_environment(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("KAPPA_TRIALS", "5")

    assert main(["fuzz", "--trials=3", "--seed=1"]) == 0
    assert capsys.readouterr().out.startswith("3 trials passed")


def test_fuzz_reports_mismatch(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(oracle, "eval_expr", lambda expr: KpNumber(0.0))

    assert main(["fuzz", "--trials", "100", "--seed", "5"]) == 2

    err = capsys.readouterr().err
    assert err.startswith("evaluators disagree")
    assert "seed 5)" in err


@pytest.mark.parametrize(
    "args",
    [
        pytest.param(["--trials"], id="missing-value"),
        pytest.param(["--trials", "many"], id="not-an-integer"),
        pytest.param(["--depth=-1"], id="negative-depth"),
        pytest.param(["--depth", "65"], id="depth-past-nesting-limit"),
        pytest.param(["--verbose"], id="unknown-flag"),
    ],
)
def test_fuzz_bad_arguments(args) -> None:
    with pytest.raises(SystemExit):
        main(["fuzz", *args])


def test_fuzz_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("KAPPA_TRIALS", "KAPPA_DEPTH", "KAPPA_SEED"):
        monkeypatch.delenv(name, raising=False)

    assert FuzzConfig.from_env() == FuzzConfig(DEFAULT_TRIALS, DEFAULT_DEPTH, None)


def test_fuzz_config_ignores_malformed_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KAPPA_TRIALS", "lots")
    monkeypatch.setenv("KAPPA_DEPTH", "-3")
    monkeypatch.delenv("KAPPA_SEED", raising=False)

    config = FuzzConfig.from_env()

    assert config.trials == DEFAULT_TRIALS
    assert config.depth == DEFAULT_DEPTH
    assert config.seed is None


def test_envvar_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KAPPA_SOME_INT", " 12 ")
    assert envvar_int("KAPPA_SOME_INT", 1) == 12

    monkeypatch.setenv("KAPPA_SOME_INT", "")
    assert envvar_int("KAPPA_SOME_INT", 1) == 1


def test_fuzz_config_rejects_depth_past_nesting_limit(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("KAPPA_DEPTH", str(MAX_NESTING + 1))
    assert FuzzConfig.from_env().depth == DEFAULT_DEPTH

    monkeypatch.setenv("KAPPA_DEPTH", str(MAX_NESTING))
    assert FuzzConfig.from_env().depth == MAX_NESTING


def test_main_reports_nesting_limit(capsys: pytest.CaptureFixture[str]) -> None:
    source = "(+ " * 250 + "1" + " 1)" * 250

    assert main([source]) == 1

    captured = capsys.readouterr()
    assert captured.err == (
        f"Error: Expression nests 250 levels; the limit is {MAX_NESTING}\n"
    )


def test_disagreement_exit_code_is_shared(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(oracle, "eval_expr", lambda expr: KpBool(False))

    assert main(["(+ 1 2)"]) == EXIT_MISMATCH
    assert main(["fuzz", "--trials", "50", "--seed", "3"]) == EXIT_MISMATCH
