"""Running parsed lines: builtins, external programs and pipelines."""

from __future__ import annotations

import os
import signal
import stat
import sys
from collections.abc import Callable, Sequence

from minishell.builtins import (
    builtin_cd,
    builtin_echo,
    builtin_env,
    builtin_exit,
    builtin_export,
    builtin_pwd,
    builtin_unset,
    is_builtin,
)
from minishell.environment import Environment
from minishell.errors import ShellError, exec_error, file_error
from minishell.lexer import LexError
from minishell.parser import ParseError, split_line
from minishell.pathsearch import get_cmd_path, get_path
from minishell.pipeline import Pipeline, Redirection, Stage, build_pipeline

NOT_FOUND_STATUS = 127
NOT_EXECUTABLE_STATUS = 126
INTERRUPTED_STATUS = 130


class ExitRequest(Exception):
    """The shell is to end with ``status``, truncated to a process exit code."""

    def __init__(self, status: int) -> None:
        self.status = status & 0xFF
        super().__init__(f"exit {self.status}")


def check_file(cmd_path: str | None, file: str) -> int:
    """Check that a command can be run; return 0, or the failure status after
    reporting the reason."""
    if cmd_path is not None:
        needs_check = "/" in cmd_path and not cmd_path.startswith("/usr/bin/")
        found_bare = "/" not in cmd_path
    else:
        needs_check = "/" in file
        found_bare = "/" not in file
    if not needs_check:
        if found_bare:
            exec_error("command not found", file)
            return NOT_FOUND_STATUS
        return 0
    try:
        fd = os.open(file, os.O_RDONLY)
    except OSError:
        if os.access(file, os.F_OK):
            exec_error("Permission denied", file)
            return NOT_EXECUTABLE_STATUS
        exec_error("No such file or directory", file)
        return NOT_FOUND_STATUS
    try:
        try:
            mode = os.fstat(fd).st_mode
        except OSError as error:
            sys.stderr.write(f"fstat: {error.strerror}\n")
            return 0
        if not stat.S_ISREG(mode):
            exec_error("Is a directory", file)
            return NOT_EXECUTABLE_STATUS
        if not mode & stat.S_IXUSR:
            exec_error("Permission denied", file)
            return NOT_EXECUTABLE_STATUS
        return 0
    finally:
        os.close(fd)


def run_builtin(argv: Sequence[str], env: Environment) -> int:
    """Run a builtin in this process and return its status.

    ``exit`` only computes its status here, as it does inside a pipeline.
    Raises ValueError for a name that is not a builtin.
    """
    name = argv[0] if argv else ""
    if name == "cd":
        return builtin_cd(argv, env)
    if name == "pwd":
        return builtin_pwd(argv)
    if name == "echo":
        return builtin_echo(argv)
    if name == "env":
        return builtin_env(env.to_envp())
    if name == "unset":
        return builtin_unset(argv, env)
    if name == "export":
        return builtin_export(argv, env)
    if name == "exit":
        return builtin_exit(argv, -1)
    raise ValueError(f"not a builtin: {name!r}")


def _envp_mapping(envp: Sequence[str]) -> dict[str, str]:
    return dict(entry.partition("=")[::2] for entry in envp)


def _exec_program(argv: Sequence[str], env: Environment, in_pipeline: bool) -> int:
    """Replace the process with the program; return a status only on failure."""
    path = argv[0]
    envp = env.to_envp()
    if path == "":
        exec_error("command not found", None)
        return NOT_FOUND_STATUS
    cmd_path = get_cmd_path(path, get_path(envp))
    status = check_file(cmd_path, path)
    if status:
        return status
    if cmd_path is None:
        message = "Command not found" if in_pipeline else "command not found"
        exec_error(message, argv[0])
        return NOT_FOUND_STATUS
    if not os.access(cmd_path, os.X_OK):
        exec_error("command not found", path)
        return NOT_FOUND_STATUS
    try:
        os.execve(cmd_path, list(argv), _envp_mapping(envp))
    except OSError:
        exec_error("failed to exec command", argv[0])
    return 1


def _flush_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError):
            pass


def _fork(body: Callable[[], int]) -> int:
    """Start a child running ``body``; the child exits with its status."""
    _flush_streams()
    pid = os.fork()
    if pid:
        return pid
    status = 1
    sys.stdout = open(1, "w", closefd=False)
    sys.stderr = open(2, "w", closefd=False)
    try:
        status = body()
    except ShellError as error:
        status = error.status
    except BaseException:
        status = 1
    _flush_streams()
    os._exit(status & 0xFF)


def _wait(pid: int) -> int:
    _, status = os.waitpid(pid, 0)
    if os.WIFSIGNALED(status) and os.WTERMSIG(status) == signal.SIGINT:
        return INTERRUPTED_STATUS
    return os.WEXITSTATUS(status)


def _run_program(argv: Sequence[str], env: Environment) -> int:
    try:
        pid = _fork(lambda: _exec_program(argv, env, in_pipeline=False))
    except OSError:
        return 1
    return _wait(pid)


def _heredoc_interrupt(signum, frame) -> None:
    os._exit(INTERRUPTED_STATUS)


def _read_heredoc(delimiter: str) -> int:
    """Collect lines up to ``delimiter``; return a descriptor to read them."""
    read_end, write_end = os.pipe()
    signal.signal(signal.SIGINT, _heredoc_interrupt)
    with open(write_end, "w") as out:
        while True:
            try:
                line = input(">")
            except EOFError:
                break
            if line == delimiter:
                break
            out.write(f"{line}\n")
    return read_end


def _open_redirection(redirection: Redirection) -> int:
    target = redirection.target or ""
    if redirection.is_heredoc:
        return _read_heredoc(target)
    if redirection.is_infile:
        flags = os.O_RDONLY
    else:
        mode = os.O_APPEND if redirection.is_append else os.O_TRUNC
        flags = os.O_WRONLY | os.O_CREAT | mode
    try:
        return os.open(target, flags, 0o644)
    except OSError as error:
        file_error(error.strerror or str(error), target)
        raise ShellError(error.strerror or str(error), 1) from error


def _run_stage(
    stage: Stage,
    index: int,
    pipes: list[tuple[int, int]],
    env: Environment,
) -> int:
    """Body of a pipeline child: wire up its input and output, then run."""
    in_fd = pipes[index - 1][0] if index > 0 else None
    out_fd = pipes[index][1] if index < len(pipes) else None
    opened: list[int] = []
    for redirection in stage.redirections:
        fd = _open_redirection(redirection)
        opened.append(fd)
        if redirection.is_infile:
            in_fd = fd
        else:
            out_fd = fd
    if in_fd is not None:
        os.dup2(in_fd, 0)
    if out_fd is not None:
        os.dup2(out_fd, 1)
    for fd in opened + [end for pair in pipes for end in pair]:
        os.close(fd)
    command = stage.command
    if command is None or not command.argv:
        return 0
    if is_builtin(command.argv[0]):
        return run_builtin(command.argv, env)
    return _exec_program(command.argv, env, in_pipeline=True)


def _close_all(pipes: list[tuple[int, int]]) -> None:
    for pair in pipes:
        for fd in pair:
            os.close(fd)


def execute_pipeline(pipeline: Pipeline, env: Environment) -> int:
    """Run every stage in its own process; return the last stage's status.

    Raises ExitRequest(1) when pipes or processes cannot be created.
    """
    stages = list(pipeline)
    pipes: list[tuple[int, int]] = []
    try:
        for _ in range(len(stages) - 1):
            pipes.append(os.pipe())
    except OSError as error:
        _close_all(pipes)
        raise ExitRequest(1) from error
    pids: list[int] = []
    try:
        for index, stage in enumerate(stages):
            pids.append(
                _fork(lambda stage=stage, index=index: _run_stage(stage, index, pipes, env))
            )
    except OSError as error:
        _close_all(pipes)
        raise ExitRequest(1) from error
    _close_all(pipes)
    status = 0
    for pid in pids:
        status = _wait(pid)
    return status


def run_line(line: str, env: Environment, last_status: int) -> int:
    """Parse and run one input line.

    Returns the command's status, or -1 when the line could not be run and
    the status to keep is the one stored in ``?``.  Raises ExitRequest when
    the line ends the shell.
    """
    try:
        commands = split_line(line, env)
    except LexError as error:
        sys.stdout.write(f"{error.message}\n")
        sys.stdout.flush()
        return -1
    except ParseError as error:
        if error.message:
            sys.stderr.write(f"{error.message}\n")
            sys.stderr.flush()
        return -1
    if not commands:
        return -1
    pipeline = build_pipeline(commands)
    if pipeline.multi_exec:
        return execute_pipeline(pipeline, env)
    argv = commands[0].argv
    if not argv:
        return 0
    if argv[0] == "exit":
        status = builtin_exit(argv, last_status)
        if len(argv) > 2 and status == 1:
            return 1
        raise ExitRequest(status)
    if is_builtin(argv[0]):
        return run_builtin(argv, env)
    return _run_program(argv, env)