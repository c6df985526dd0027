"""Signal handling for the prompt and while commands run."""

from __future__ import annotations

import signal
import sys

INTERRUPT_STATUS = 130

_last_status = -1


def _record_interrupt() -> None:
    global _last_status
    _last_status = INTERRUPT_STATUS
    sys.stdout.write("\n")
    sys.stdout.flush()


def _on_prompt_interrupt(signum, frame) -> None:
    """Drop the line being typed: move to a new line and abandon the read."""
    if signum == signal.SIGINT:
        _record_interrupt()
        raise KeyboardInterrupt


def _on_command_interrupt(signum, frame) -> None:
    if signum == signal.SIGINT:
        _record_interrupt()


def _on_command_quit(signum, frame) -> None:
    # Caught rather than ignored so that started programs get the default.
    return None


def setup_term_signals() -> None:
    """Install the handlers used while reading a line."""
    signal.signal(signal.SIGINT, _on_prompt_interrupt)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def setup_cmd_signals() -> None:
    """Install the handlers used while a command runs."""
    signal.signal(signal.SIGINT, _on_command_interrupt)
    signal.signal(signal.SIGQUIT, _on_command_quit)


def last_signal_status() -> int:
    """Return the status recorded by the last handled signal, or -1."""
    return _last_status