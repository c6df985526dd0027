"""The interactive read-run loop."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Sequence

from minishell.environment import STATUS_KEY, Environment
from minishell.executor import ExitRequest, run_line
from minishell.prompt import get_prefix, update_last_status
from minishell.signals import setup_cmd_signals, setup_term_signals

try:
    import readline  # noqa: F401  (line editing and history for input())
except ImportError:
    readline = None


def process_input(env: Environment, read_line: Callable[[str], str | None]) -> int:
    """Read and run lines until ``read_line`` returns None or ``exit`` runs.

    ``read_line`` receives the prompt.  Returns the status the shell ends with.
    """
    env.set(STATUS_KEY, "0")
    last_status = 0
    while True:
        try:
            line = read_line(get_prefix(last_status) or "")
        except KeyboardInterrupt:
            continue
        if line is None:
            return 0
        if not line:
            continue
        setup_cmd_signals()
        try:
            last_status = run_line(line, env, last_status)
        except ExitRequest as request:
            return request.status
        finally:
            setup_term_signals()
        last_status = update_last_status(env, last_status)


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def main(argv: Sequence[str] | None = None) -> int:
    """Start the shell with the process environment."""
    env = Environment(f"{key}={value}" for key, value in os.environ.items())
    if get_prefix(0) is None:
        sys.stdout.write("failed to build the prompt!")
        sys.stdout.flush()
        return 1
    setup_term_signals()
    return process_input(env, _read_line)


if __name__ == "__main__":
    raise SystemExit(main())