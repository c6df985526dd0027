"""Grouping tokens into commands, file names and pipe markers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from minishell.environment import STATUS_KEY, Environment
from minishell.errors import ShellError
from minishell.lexer import Token, TokenKind, tokenize

SYNTAX_ERROR_STATUS = 2


@dataclass
class Command:
    """One entry of a parsed line.

    ``operator`` is None for a command to run, a redirection kind for an
    entry holding a file name (or here-document delimiter), and
    ``TokenKind.PIPE`` for the empty marker that separates two stages.
    """

    argv: list[str] = field(default_factory=list)
    operator: TokenKind | None = None

    @property
    def argc(self) -> int:
        return len(self.argv)


class ParseError(ShellError):
    """A syntax error; ``message`` is what the shell prints on standard error.

    The message is empty for the few errors the shell reports silently.
    """

    def __init__(self, message: str, status: int = SYNTAX_ERROR_STATUS) -> None:
        super().__init__(message, status)


@dataclass
class _Draft:
    argv: list[str] = field(default_factory=list)
    operator: TokenKind | None = None
    slots: int = 0


class _Parser:
    def __init__(self, tokens: Sequence[Token], env: Environment) -> None:
        self.tokens = list(tokens)
        self.env = env
        self.pos = 0
        self.done: list[_Draft] = []
        self.current = _Draft()
        self.last_neutral: _Draft | None = None
        self.has_started = False
        self.can_error = False
        self.delimiter: TokenKind | None = None
        self.tmp: Token | None = None

    def _has(self, index: int) -> bool:
        return index < len(self.tokens)

    def run(self) -> list[Command]:
        while self._has(self.pos):
            token = self.tokens[self.pos]
            if token.is_delimiter:
                self.tmp = token
                self.can_error = False
                self.delimiter = token.kind
                if not self._delimiter():
                    break
                continue
            self._word(token)
        if self.current.slots > 0:
            self.done.append(self.current)
        return [Command(list(draft.argv), draft.operator) for draft in self.done]

    def _word(self, token: Token) -> None:
        """Add a plain word to the command it belongs to."""
        if self.last_neutral is not None:
            self.last_neutral.argv.append(token.text)
            self.last_neutral.slots += 1
        else:
            if self.current.operator is None:
                self.last_neutral = self.current
            self.has_started = True
            self.current.argv.append(token.text)
            self.current.slots += 1
        self.pos += 1

    def _delimiter(self) -> bool:
        """Handle the operator at ``pos``; False ends parsing."""
        if not self._has(self.pos + 1):
            self.can_error = True
        else:
            self._take_operand()
        self._check_errors()
        if self.delimiter != TokenKind.PIPE:
            self.done.append(self.current)
            self.current = _Draft()
        self.pos += 1
        if not self._has(self.pos):
            if self.can_error:
                raise self._syntax_error("bash: syntax error near unexpected token `newline'")
            if self.delimiter != TokenKind.PIPE:
                self.can_error = True
            return False
        return True

    def _take_operand(self) -> None:
        """Start the entry the operator introduces and give it its first word."""
        if self.current.slots != 0:
            self.done.append(self.current)
            self.current = _Draft(operator=self.tmp.kind)
        else:
            self.current.operator = self.tmp.kind
        self.tmp = self.tokens[self.pos + 1]
        if self.delimiter == TokenKind.PIPE:
            self._pipe(self.tmp)
        elif not self.tmp.is_delimiter:
            self.current.argv.append(self.tmp.text)
        self.pos += 1
        self.tmp = self.tokens[self.pos]
        self.current.slots += 1

    def _pipe(self, following: Token) -> None:
        self.last_neutral = None
        self.done.append(self.current)
        self.current = _Draft()
        if not following.is_delimiter:
            self.current.argv.append(following.text)
            self.last_neutral = self.current
        elif following.kind != TokenKind.PIPE:
            self._pipe_redirect(following)

    def _pipe_redirect(self, redirect: Token) -> None:
        """A redirection right after a pipe names the next stage's file."""
        self.delimiter = redirect.kind
        if not self._has(self.pos + 2):
            return
        self.pos += 1
        target = self.tokens[self.pos + 1]
        self.current.operator = self.delimiter
        if not target.is_delimiter:
            self.current.argv.append(target.text)
        self.tmp = self.tokens[self.pos]

    def _check_errors(self) -> None:
        tmp = self.tmp
        pipe = TokenKind.PIPE
        if (self.delimiter == pipe and not self.has_started) or (
            tmp.is_delimiter and tmp.kind == pipe and self.delimiter == pipe
        ):
            raise self._syntax_error("bash: syntax error near unexpected token `|`")
        if tmp.is_delimiter and (
            self.delimiter != pipe or not self._has(self.pos + 1)
        ):
            if tmp.kind == pipe:
                raise self._syntax_error("")
            raise self._syntax_error(
                f"bash: syntax error near unexpected token `{tmp.kind.symbol}`"
            )

    def _syntax_error(self, message: str) -> ParseError:
        self.env.set(STATUS_KEY, str(SYNTAX_ERROR_STATUS))
        return ParseError(message)


def parse(tokens: Sequence[Token], env: Environment) -> list[Command]:
    """Group ``tokens`` into commands, redirection targets and pipe markers.

    Words that follow a redirection's file name are added to the command
    they belong to.  Raises ParseError on a syntax error, after storing
    status 2 in ``?``.
    """
    return _Parser(tokens, env).run()


def split_line(line: str, env: Environment) -> list[Command]:
    """Tokenize and parse ``line``."""
    return parse(tokenize(line, env), env)