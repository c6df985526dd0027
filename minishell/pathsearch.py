"""Finding the file a command name refers to."""

from __future__ import annotations

import os
from collections.abc import Iterable

_PATH_PREFIX = "PATH="


def get_path(envp: Iterable[str]) -> str | None:
    """Return the value of the first ``PATH=`` entry, or None."""
    for entry in envp:
        if entry.startswith(_PATH_PREFIX):
            return entry[len(_PATH_PREFIX):]
    return None


def get_cmd_path(cmd: str, path: str | None) -> str | None:
    """Return ``cmd`` if it exists as given, else the first ``dir/cmd`` that
    exists in the colon-separated ``path``; None when nothing is found or
    there is no path."""
    if path is None:
        return None
    if os.access(cmd, os.F_OK):
        return cmd
    for directory in filter(None, path.split(":")):
        candidate = f"{directory}/{cmd}"
        if os.access(candidate, os.F_OK):
            return candidate
    return None