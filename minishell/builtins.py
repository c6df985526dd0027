"""The commands the shell runs itself: cd, echo, pwd, env, unset, export, exit."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Sequence

from minishell.environment import Environment, is_valid_env
from minishell.errors import exec_error, exec_error_arg

BUILTINS = frozenset({"cd", "pwd", "echo", "env", "unset", "export", "exit"})

_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1


def _write(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def is_builtin(name: str) -> bool:
    """Tell whether ``name`` is a command the shell runs itself."""
    return name in BUILTINS


def builtin_cd(argv: Sequence[str], env: Environment) -> int:
    """Change directory to ``argv[1]``, or to ``$HOME`` without an argument."""
    if len(argv) > 2:
        exec_error("too many arguments", "cd")
        return 1
    target = env.get("HOME") if len(argv) == 1 else argv[1]
    if target is None:
        exec_error_arg("No such file or directory", None, "cd")
        return 1
    try:
        os.chdir(target)
    except (OSError, ValueError):
        exec_error_arg("No such file or directory", target, "cd")
        return 1
    return 0


def _is_n_option(arg: str) -> bool:
    return arg.startswith("-") and all(char == "n" for char in arg[1:])


def builtin_echo(argv: Sequence[str]) -> int:
    """Print the arguments separated by spaces; leading ``-n`` options drop
    the final newline."""
    args = list(argv[1:])
    has_n = False
    text_display = False
    pieces: list[str] = []
    last = len(args) - 1
    for position, arg in enumerate(args):
        if _is_n_option(arg) and not text_display:
            has_n = True
        else:
            text_display = True
            pieces.append(arg)
        if position < last and (not has_n or position != 0):
            pieces.append(" ")
    if not has_n:
        pieces.append("\n")
    _write("".join(pieces))
    return 0


def builtin_pwd(argv: Sequence[str]) -> int:
    """Print the current directory."""
    try:
        cwd = os.getcwd()
    except OSError:
        sys.stderr.write(
            "pwd: error retrieving current directory: getcwd:"
            " cannot access parent directories: "
            "No such file or directory\n"
        )
        sys.stderr.flush()
        return 1
    _write(f"{cwd}\n")
    return 0


def builtin_env(envp: Iterable[str]) -> int:
    """Print each ``NAME=value`` entry on its own line."""
    _write("".join(f"{entry}\n" for entry in envp))
    return 0


def builtin_unset(argv: Sequence[str], env: Environment) -> int:
    """Remove each named variable."""
    for name in argv[1:]:
        env.delete(name)
    return 0


def split_assignment(text: str) -> tuple[str, str | None]:
    """Split ``NAME=value`` at the first ``=``; the value is None without one."""
    name, sep, value = text.partition("=")
    return name, (value if sep else None)


def is_valid_export(name: str) -> bool:
    """Tell whether ``name`` can be exported: a letter, then letters,
    digits or underscores."""
    if not name or not (name[0].isascii() and name[0].isalpha()):
        return False
    return is_valid_env(name)


def _export_one(arg: str, env: Environment) -> bool:
    """Apply one ``export`` argument; False when the name is invalid."""
    name, value = split_assignment(arg)
    if not is_valid_export(name):
        return False
    previous: str | None = None
    if name.endswith("+"):
        name = name[:-1]
        previous = env.get(name)
    env.delete(name)
    if value is None:
        return True
    env.set(name, previous + value if previous is not None else value)
    return True


def builtin_export(argv: Sequence[str], env: Environment) -> int:
    """Set variables from ``NAME=value`` arguments, or list them without any."""
    if len(argv) == 1:
        _write("".join(f"export {entry}\n" for entry in env.to_envp()))
        return 0
    status = 0
    for arg in argv[1:]:
        if not _export_one(arg, env):
            status = 1
            sys.stderr.write(f"bash: export: `{arg}': not a valid identifier\n")
            sys.stderr.flush()
    return status


def builtin_exit(argv: Sequence[str], last_status: int) -> int:
    """Work out the status ``exit`` ends the shell with.

    ``last_status`` of -1 means the command runs inside a pipeline: nothing
    is announced and the default status is 0.  Returns 2 for a non-numeric
    argument and 1 when there are too many arguments.
    """
    if last_status != -1:
        sys.stderr.write("exit\n")
        sys.stderr.flush()
    else:
        last_status = 0
    if len(argv) <= 1:
        return last_status
    arg = argv[1]
    has_sign = arg[:1] in ("-", "+")
    digits = arg[1:] if has_sign else arg
    if not all(char in "0123456789" for char in digits) or not digits:
        exec_error_arg("numeric argument required", arg, "exit")
        return 2
    value = int(arg)
    canonical = str(value)
    if not _LONG_MIN <= value <= _LONG_MAX or (
        canonical != digits and canonical != arg
    ):
        exec_error_arg("numeric argument required", arg, "exit")
        return 2
    if len(argv) > 2:
        exec_error("too many arguments", "exit")
        return 1
    return value