"""Shell variables and ``$`` expansion."""

from __future__ import annotations

from collections.abc import Iterable

STATUS_KEY = "?"


def _is_word_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


class Environment:
    """Shell variables by name; the ``?`` entry holds the last exit status."""

    def __init__(self, envp: Iterable[str] = ()) -> None:
        self._vars: dict[str, str] = {}
        self.register(envp)

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __len__(self) -> int:
        return len(self._vars)

    def get(self, key: str) -> str | None:
        """Return the value of ``key``, or None when it is not set."""
        return self._vars.get(key)

    def set(self, key: str, value: str) -> None:
        """Set ``key`` to ``value``, replacing any previous value."""
        self._vars[key] = value

    def delete(self, key: str) -> None:
        """Remove ``key``; removing an unset name does nothing."""
        self._vars.pop(key, None)

    def register(self, envp: Iterable[str]) -> None:
        """Load ``NAME=value`` entries; entries without ``=`` are ignored."""
        for entry in envp:
            name, sep, value = entry.partition("=")
            if not sep:
                continue
            self.delete(name)
            self._vars[name] = value

    def to_envp(self) -> list[str]:
        """Return the variables as ``NAME=value`` strings, without ``?``."""
        return [
            f"{key}={value}"
            for key, value in self._vars.items()
            if key != STATUS_KEY
        ]


def expand(text: str, env: Environment) -> str:
    """Replace ``$?`` and ``$NAME`` references in ``text``.

    After each replacement the scan starts over, so values that themselves
    contain references are expanded too.
    """
    i = 0
    while i < len(text):
        if text[i] == "$" and i + 1 < len(text):
            following = text[i + 1]
            if following == "?":
                status = env.get(STATUS_KEY)
                if status is None:
                    status = "0"
                text = text[:i] + status + text[i + 2:]
                i = 0
                continue
            if following.isascii() and following.isalnum():
                end = i + 1
                while end < len(text) and _is_word_char(text[end]):
                    end += 1
                value = env.get(text[i + 1:end])
                text = text[:i] + (value if value is not None else "") + text[end:]
                i = 0
                continue
        i += 1
    return text


def lookup_variable(text: str, env: Environment) -> str | None:
    """Return the value of the variable named at the start of ``text``."""
    if text.startswith("?"):
        return env.get(STATUS_KEY)
    end = 0
    while end < len(text) and _is_word_char(text[end]):
        end += 1
    return env.get(text[:end])


def is_valid_env(name: str | None) -> bool:
    """Tell whether ``name`` is non-empty and, after its first character,
    holds only letters, digits and underscores."""
    if not name:
        return False
    return all(_is_word_char(char) for char in name[1:])