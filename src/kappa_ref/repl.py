"""Interactive REPL for kappa, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .evaluator import eval_expr
from .host import HostContext, reference_eval
from .oracle import Failure, Outcome, Success, render_outcome, safe
from .parser import parse_source
from .printer import render_value
from .syntax import Expr
from .runner import report_error
from .types import KappaParseError, KappaRuntimeError
from .utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/check": ("Toggle showing the reference evaluator's result", "[on|off]"),
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the host evaluation context", ""),
}

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")


@dataclass
class ReplState:
    context: HostContext = field(default_factory=HostContext)
    show_reference: bool = False


def paren_depth(text: str) -> int:
    """Unclosed '(' count, ignoring `;` comments."""
    depth = 0

    for line in text.split("\n"):
        for ch in line.split(";", 1)[0]:
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1

    return depth


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _toggle(arg: str, current: bool) -> Optional[bool]:
    if arg.lower() in _ON:
        return True
    if arg.lower() in _OFF:
        return False
    if arg == "":
        return not current

    return None


def handle_slash(line: str, state: ReplState) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        enabled = _toggle(arg, debug_py_trace_enabled())
        if enabled is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        if enabled:
            os.environ[DEBUG_PY_TRACE_ENV] = "1"
        else:
            os.environ.pop(DEBUG_PY_TRACE_ENV, None)

        print(f"Python traceback: {'on' if enabled else 'off'}")
        return True

    if cmd == "/check":
        enabled = _toggle(arg, state.show_reference)
        if enabled is None:
            print("Usage: /check [on|off]", file=sys.stderr)
            return True

        state.show_reference = enabled
        print(f"Reference check: {'on' if enabled else 'off'}")
        return True

    if cmd == "/reset":
        context = state.context
        dropped = len(context.compiled)
        runs = context.evaluations
        context.reset()
        print(f"Host context reset ({runs} evaluations, {dropped} compiled programs dropped).")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def reference_note(expr: Expr, state: ReplState, interpreter: Outcome) -> str:
    reference = safe(lambda e: reference_eval(e, state.context))(expr)

    if reference == interpreter:
        return "; reference agrees"

    return f"; reference disagrees: {render_outcome(reference)}"


def repl_eval(expr: Expr, state: ReplState) -> str:
    """Evaluate one parsed entry; returns the line to print.

    Runtime errors propagate to the caller.
    """
    value = eval_expr(expr)

    if not state.show_reference:
        return render_value(value)

    return f"{render_value(value)}    {reference_note(expr, state, Success(value))}"


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    state = ReplState()

    history = InMemoryHistory()
    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer

        # keep reading while an s-expression is still open
        if paren_depth(buf.text) > 0:
            buf.insert_text("\n  ")
            return

        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=history,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("kappa repl: Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, state):
            continue

        try:
            expr = parse_source(text)
        except KappaParseError as exc:
            report_error(exc)
            continue

        try:
            print(repl_eval(expr, state))
        except KappaRuntimeError as exc:
            report_error(exc)
            if state.show_reference:
                print(reference_note(expr, state, Failure(str(exc))), file=sys.stderr)
