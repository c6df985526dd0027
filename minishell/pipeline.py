"""Arranging parsed commands into pipeline stages with their redirections."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from minishell.lexer import TokenKind
from minishell.parser import Command

_INPUT_KINDS = frozenset({TokenKind.REDIRECT_INPUT, TokenKind.HEREDOC})
_OUTPUT_KINDS = frozenset({TokenKind.REDIRECT_OUTPUT, TokenKind.APPEND})


@dataclass(frozen=True)
class Redirection:
    """One file a stage reads from or writes to.

    ``target`` is the file name, or the delimiter of a here-document.
    ``index`` is the position of the redirection among all of the stage's
    redirections, in the order they were written.
    """

    target: str | None
    kind: TokenKind
    index: int

    @property
    def is_infile(self) -> bool:
        return self.kind in _INPUT_KINDS

    @property
    def is_outfile(self) -> bool:
        return self.kind in _OUTPUT_KINDS

    @property
    def is_heredoc(self) -> bool:
        return self.kind == TokenKind.HEREDOC

    @property
    def is_append(self) -> bool:
        return self.kind == TokenKind.APPEND


@dataclass
class Stage:
    """A command of a pipeline together with its redirections."""

    command: Command | None = None
    infiles: list[Redirection] = field(default_factory=list)
    outfiles: list[Redirection] = field(default_factory=list)

    @property
    def redirections(self) -> list[Redirection]:
        """Input and output redirections in the order they were written."""
        return sorted(self.infiles + self.outfiles, key=lambda item: item.index)

    @property
    def has_redirections(self) -> bool:
        return bool(self.infiles or self.outfiles)


@dataclass
class Pipeline:
    """The stages of a line, separated by pipes."""

    stages: list[Stage]
    commands: list[Command] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.stages)

    def __iter__(self):
        return iter(self.stages)

    @property
    def multi_exec(self) -> bool:
        """True when the line needs the pipeline machinery: more than one
        stage, or any redirection at all."""
        return len(self.stages) > 1 or any(
            stage.has_redirections for stage in self.stages
        )

    def redirections(self, stage_index: int) -> list[Redirection]:
        """Return the redirections of one stage in the order to open them."""
        return self.stages[stage_index].redirections


def _add_entry(stage: Stage, command: Command, position: int) -> int:
    """Place ``command`` in ``stage``; return the next redirection index."""
    target = command.argv[0] if command.argv else None
    if command.operator in _INPUT_KINDS:
        stage.infiles.append(Redirection(target, command.operator, position))
        return position + 1
    if command.operator in _OUTPUT_KINDS:
        stage.outfiles.append(Redirection(target, command.operator, position))
        return position + 1
    stage.command = command
    return position


def build_pipeline(commands: Iterable[Command]) -> Pipeline:
    """Split parsed commands at pipe markers into stages.

    Within a stage, entries carrying a redirection operator become input or
    output redirections; the last plain command is the one the stage runs.
    """
    entries = list(commands)
    stages: list[Stage] = []
    current = Stage()
    position = 0
    for command in entries:
        if command.operator == TokenKind.PIPE:
            stages.append(current)
            current = Stage()
            position = 0
            continue
        position = _add_entry(current, command, position)
    stages.append(current)
    return Pipeline(stages=stages, commands=entries)