"""The prompt and the last-status bookkeeping."""

from __future__ import annotations

import os
import re

from minishell.environment import STATUS_KEY, Environment

_OK_COLOR = "\x1b[1;32m"
_FAIL_COLOR = "\x1b[1;31m"
_LABEL = "[CUSTOM] \x1b[1;33m"
_TAIL = " > \x1b[0;37m"


def _current_dir() -> str:
    try:
        return os.getcwd()
    except FileNotFoundError:
        return "--deleted--"


def get_prefix(last_status: int) -> str | None:
    """Build the coloured prompt naming the last component of the cwd.

    Returns None when the cwd has no named component (the root directory).
    """
    parts = [part for part in _current_dir().split("/") if part]
    if not parts:
        return None
    color = _OK_COLOR if last_status == 0 else _FAIL_COLOR
    return f"{color}{_LABEL}{parts[-1]}{_TAIL}"


def _leading_int(text: str | None) -> int:
    match = re.match(r"\s*([+-]?\d+)", text or "")
    return int(match.group(1)) if match else 0


def update_last_status(env: Environment, last_status: int) -> int:
    """Store a known status in ``?``; for -1 read the stored one back."""
    if last_status > -1:
        env.set(STATUS_KEY, str(last_status))
        return last_status
    return _leading_int(env.get(STATUS_KEY))