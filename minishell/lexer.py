"""Splitting an input line into words and operator tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from minishell.environment import (
    STATUS_KEY,
    Environment,
    expand,
    is_valid_env,
    lookup_variable,
)
from minishell.errors import ShellError

_META = frozenset("&|<>;")
_WHITESPACE = frozenset(" \t\n\v\f\r")


class TokenKind(IntEnum):
    """Operators that separate the words of a line."""

    REDIRECT_INPUT = 0
    REDIRECT_OUTPUT = 1
    HEREDOC = 2
    APPEND = 3
    PIPE = 4

    @property
    def symbol(self) -> str:
        """The operator as written on the command line."""
        return _SYMBOLS[self]


_SYMBOLS = {
    TokenKind.REDIRECT_INPUT: "<",
    TokenKind.REDIRECT_OUTPUT: ">",
    TokenKind.HEREDOC: "<<",
    TokenKind.APPEND: ">>",
    TokenKind.PIPE: "|",
}


@dataclass(frozen=True)
class Token:
    """Either a word (``text`` set) or an operator (``kind`` set)."""

    text: str | None = None
    kind: TokenKind | None = None

    @classmethod
    def word(cls, text: str) -> Token:
        return cls(text=text)

    @classmethod
    def operator(cls, kind: TokenKind) -> Token:
        return cls(kind=kind)

    @property
    def is_delimiter(self) -> bool:
        return self.kind is not None


class LexError(ShellError):
    """The line cannot be split.

    ``message`` is what the shell prints on standard output.  ``status`` is
    the resulting exit status, or -1 when the stored status is kept.
    """


def is_meta(char: str) -> bool:
    """Tell whether ``char`` is one of the operator characters ``&|<>;``."""
    return char in _META


class _Scanner:
    def __init__(self, line: str, env: Environment) -> None:
        self.line = line
        self.env = env
        self.i = 0
        self.str_start = 0
        self.quote_start = 0
        self.in_single = False
        self.in_double = False
        self.prev_meta: TokenKind | None = None
        self.pretext: str | None = None
        self.tokens: list[Token] = []

    def char(self, index: int) -> str:
        if 0 <= index < len(self.line):
            return self.line[index]
        return ""

    def run(self) -> list[Token]:
        while self.char(self.i):
            if self._step():
                break
            self.i += 1
        if self.in_single or self.in_double:
            raise LexError("Quote non finished!", status=-1)
        return self.tokens

    def _step(self) -> bool:
        """Handle the character at ``i``; True ends the scan."""
        char = self.char(self.i)
        quoted = self.in_single or self.in_double
        if char == " " and self.str_start == self.i:
            self.str_start += 1
        elif is_meta(char) and not quoted:
            return self._meta()
        elif char == '"':
            self._double_quote()
        elif char == "'":
            self._single_quote()
        elif (char == " " and self.quote_start == 0) or not self.char(self.i + 1):
            return self._bare_word()
        return False

    def _concat_pretext(self, text: str) -> None:
        self.pretext = (self.pretext or "") + text

    def _start_quote(self) -> None:
        if self.i != self.str_start or self.pretext is not None:
            self._concat_pretext(
                expand(self.line[self.str_start:self.i], self.env)
            )
        self.quote_start = self.i

    def _quoted_text(self) -> str:
        return self.line[self.quote_start + 1:self.i]

    def _close_quote(self, text: str) -> None:
        if self.char(self.i + 1) in (" ", ""):
            self.tokens.append(Token.word((self.pretext or "") + text))
            self.pretext = None
        else:
            self._concat_pretext(text)
        self.str_start = self.i + 1
        self.quote_start = 0

    def _double_quote(self) -> None:
        if not self.in_single and not self.in_double:
            self._start_quote()
            self.in_double = True
        elif self.in_double:
            self._close_quote(expand(self._quoted_text(), self.env))
            self.in_double = False
        self.prev_meta = None

    def _single_quote(self) -> None:
        if not self.in_single and not self.in_double:
            self._start_quote()
            self.in_single = True
        elif self.in_single:
            self._close_quote(self._quoted_text())
            self.in_single = False
        self.prev_meta = None

    def _is_unset_reference(self, raw: str) -> bool:
        """True when ``raw`` is a lone reference to an unset variable.

        After a redirection operator that is an ambiguous redirect.
        """
        name = raw[1:]
        if not (raw.startswith("$") and is_valid_env(name)):
            return False
        if lookup_variable(name, self.env) is not None:
            return False
        if self.prev_meta is not None and self.prev_meta != TokenKind.PIPE:
            self.env.set(STATUS_KEY, "1")
            raise LexError(f"bash: {raw}: ambiguous redirect", status=1)
        return True

    def _bare_word(self) -> bool:
        """Emit the unquoted word ending at ``i``; True ends the scan."""
        if not self.char(self.str_start):
            return True
        if not self.char(self.i + 1) and self.char(self.i) != " ":
            self.i += 1
        raw = self.line[self.str_start:self.i]
        value = expand(raw, self.env)
        if not self._is_unset_reference(raw):
            self.tokens.append(Token.word((self.pretext or "") + value))
        self.pretext = None
        self.str_start = self.i + 1
        self.prev_meta = None
        return not self.char(self.i)

    def _meta(self) -> bool:
        """Emit the operator at ``i``; True ends the scan."""
        if self.i != self.str_start and self._bare_word():
            return True
        pair = self.line[self.i:self.i + 2]
        char = self.char(self.i)
        if pair == "<<":
            kind, width = TokenKind.HEREDOC, 2
        elif pair == ">>":
            kind, width = TokenKind.APPEND, 2
        elif char == "|":
            kind, width = TokenKind.PIPE, 1
        elif char == "<":
            kind, width = TokenKind.REDIRECT_INPUT, 1
        elif char == ">":
            kind, width = TokenKind.REDIRECT_OUTPUT, 1
        else:
            self.str_start = self.i + 1
            return True
        self.str_start = self.i + width
        self.tokens.append(Token.operator(kind))
        while self.char(self.str_start) in _WHITESPACE and self.char(self.str_start):
            self.str_start += 1
        self.i = self.str_start - 1
        self.prev_meta = kind
        return False


def tokenize(line: str, env: Environment) -> list[Token]:
    """Split ``line`` into words and operators, expanding variables.

    Scanning stops quietly at ``&`` or ``;``.  Raises LexError for an
    unterminated quote or an ambiguous redirect.
    """
    return _Scanner(line, env).run()