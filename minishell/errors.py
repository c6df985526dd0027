"""Error type and the shell's error messages on standard error."""

from __future__ import annotations

import sys


class ShellError(Exception):
    """A failure that ends a command with an exit status."""

    def __init__(self, message: str, status: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


def _emit(message: str) -> None:
    sys.stderr.write(message)
    sys.stderr.flush()


def exec_error(error: str, cmd: str | None) -> None:
    """Report ``bash: <cmd>: <error>``."""
    _emit(f"bash: {cmd or ''}: {error}\n")


def exec_error_arg(error: str, arg: str | None, cmd: str | None) -> None:
    """Report ``bash: <cmd>: <arg>: <error>``; missing parts show as a space."""
    cmd_text = cmd if cmd is not None else " "
    arg_text = arg if arg is not None else " "
    _emit(f"bash: {cmd_text}: {arg_text}: {error}\n")


def file_error(error: str, file: str) -> None:
    """Report ``bash: <file>: <error>``."""
    _emit(f"bash: {file}: {error}\n")