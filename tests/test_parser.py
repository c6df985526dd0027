import pytest

from minishell.environment import Environment
from minishell.lexer import LexError, Token, TokenKind
from minishell.parser import Command, ParseError, parse, split_line


@pytest.fixture
def env():
    return Environment(["USER=alice", "HOME=/home/alice"])


def test_simple_command(env):
    assert split_line("ls -l", env) == [Command(["ls", "-l"])]


def test_pipe_inserts_marker(env):
    assert split_line("a | b", env) == [
        Command(["a"]),
        Command([], TokenKind.PIPE),
        Command(["b"]),
    ]


def test_words_after_redirect_join_command(env):
    assert split_line("echo a > f b", env) == [
        Command(["echo", "a", "b"]),
        Command(["f"], TokenKind.REDIRECT_OUTPUT),
    ]


def test_leading_redirect(env):
    assert split_line("< in cat", env) == [
        Command(["in"], TokenKind.REDIRECT_INPUT),
        Command(["cat"]),
    ]


def test_redirect_alone(env):
    assert split_line("> out", env) == [Command(["out"], TokenKind.REDIRECT_OUTPUT)]


def test_pipe_followed_by_redirect(env):
    assert split_line("a | < in b", env) == [
        Command(["a"]),
        Command([], TokenKind.PIPE),
        Command(["in"], TokenKind.REDIRECT_INPUT),
        Command(["b"]),
    ]


def test_redirect_then_pipe(env):
    assert split_line("cat < in | wc", env) == [
        Command(["cat"]),
        Command(["in"], TokenKind.REDIRECT_INPUT),
        Command([], TokenKind.PIPE),
        Command(["wc"]),
    ]


def test_heredoc_and_append(env):
    assert split_line("cat << EOF >> out", env) == [
        Command(["cat"]),
        Command(["EOF"], TokenKind.HEREDOC),
        Command(["out"], TokenKind.APPEND),
    ]


def test_words_after_pipe_stage(env):
    result = split_line("a | b c", env)
    assert result[-1] == Command(["b", "c"])


def test_expansion_passes_through(env):
    assert split_line("echo $USER", env) == [Command(["echo", "alice"])]


def test_empty_token_list(env):
    assert parse([], env) == []


def test_parse_tokens_directly_with_empty_word(env):
    tokens = [Token.word("echo"), Token.word(""), Token.word("x")]
    assert parse(tokens, env) == [Command(["echo", "", "x"])]


def test_argc_matches_argv(env):
    for command in split_line("echo a b > f | wc -l", env):
        assert command.argc == len(command.argv)


@pytest.mark.parametrize("line", ["| b", "a |", "a | | b"])
def test_pipe_syntax_error(env, line):
    with pytest.raises(ParseError) as info:
        split_line(line, env)
    assert info.value.message == "bash: syntax error near unexpected token `|`"
    assert info.value.status == 2
    assert env.get("?") == "2"


@pytest.mark.parametrize(
    "line, symbol",
    [
        ("a >", ">"),
        ("a <", "<"),
        ("a <<", "<<"),
        ("a >>", ">>"),
        ("a > > b", ">"),
        ("a | >", ">"),
    ],
)
def test_redirect_syntax_error(env, line, symbol):
    with pytest.raises(ParseError) as info:
        split_line(line, env)
    assert info.value.message == f"bash: syntax error near unexpected token `{symbol}`"
    assert env.get("?") == "2"


def test_pipe_after_redirect_without_command_is_error(env):
    with pytest.raises(ParseError) as info:
        split_line("< in | wc", env)
    assert info.value.message == "bash: syntax error near unexpected token `|`"


def test_pipe_as_redirect_target_is_silent_error(env):
    with pytest.raises(ParseError) as info:
        split_line("a > | b", env)
    assert info.value.message == ""
    assert info.value.status == 2


def test_lex_error_propagates(env):
    with pytest.raises(LexError):
        split_line('echo "abc', env)


def test_successful_parse_leaves_status(env):
    env.set("?", "7")
    split_line("echo hi", env)
    assert env.get("?") == "7"