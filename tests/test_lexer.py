import pytest

from minishell.environment import Environment
from minishell.lexer import LexError, Token, TokenKind, is_meta, tokenize


@pytest.fixture
def env():
    return Environment(["USER=alice", "?=0"])


def words(tokens):
    return [tok.text if not tok.is_delimiter else tok.kind for tok in tokens]


def test_simple_words(env):
    assert words(tokenize("echo hello world", env)) == ["echo", "hello", "world"]


def test_empty_line(env):
    assert tokenize("", env) == []


def test_leading_spaces(env):
    assert words(tokenize("   ls", env)) == ["ls"]


def test_pipe(env):
    assert words(tokenize("ls | wc -l", env)) == ["ls", TokenKind.PIPE, "wc", "-l"]


def test_redirections_without_spaces(env):
    assert words(tokenize("cat<in>out", env)) == [
        "cat", TokenKind.REDIRECT_INPUT, "in", TokenKind.REDIRECT_OUTPUT, "out",
    ]


def test_heredoc_and_append(env):
    assert words(tokenize("cat << EOF >> log", env)) == [
        "cat", TokenKind.HEREDOC, "EOF", TokenKind.APPEND, "log",
    ]


def test_whitespace_after_operator_is_skipped(env):
    assert words(tokenize("cat <<\tEOF", env)) == ["cat", TokenKind.HEREDOC, "EOF"]


def test_variable_expansion(env):
    assert words(tokenize("echo $USER", env)) == ["echo", "alice"]


def test_status_expansion(env):
    assert words(tokenize("echo $?", env)) == ["echo", "0"]


def test_single_quotes_keep_dollar(env):
    assert words(tokenize("echo '$USER'", env)) == ["echo", "$USER"]


def test_double_quotes_expand_and_keep_spaces(env):
    assert words(tokenize('echo "$USER x"', env)) == ["echo", "alice x"]


def test_quoted_operator_is_a_word(env):
    assert words(tokenize('echo "a|b"', env)) == ["echo", "a|b"]


def test_adjacent_parts_are_joined(env):
    assert words(tokenize("a'b'c", env)) == ["abc"]


def test_unset_variable_word_is_dropped(env):
    assert words(tokenize("echo $NOPE hi", env)) == ["echo", "hi"]


def test_semicolon_stops_scanning(env):
    assert words(tokenize("echo a; echo b", env)) == ["echo", "a"]


def test_unterminated_quote(env):
    with pytest.raises(LexError) as info:
        tokenize("echo 'abc", env)
    assert info.value.message == "Quote non finished!"
    assert info.value.status == -1


def test_ambiguous_redirect(env):
    with pytest.raises(LexError) as info:
        tokenize("cat > $NOPE", env)
    assert info.value.message == "bash: $NOPE: ambiguous redirect"
    assert info.value.status == 1
    assert env.get("?") == "1"


def test_quoted_unset_after_redirect_is_empty_word(env):
    assert words(tokenize('cat > "$NOPE"', env)) == [
        "cat", TokenKind.REDIRECT_OUTPUT, "",
    ]


def test_unset_after_pipe_is_not_ambiguous(env):
    assert words(tokenize("ls | $NOPE", env)) == ["ls", TokenKind.PIPE]


@pytest.mark.parametrize("char", list("&|<>;"))
def test_meta_characters(char):
    assert is_meta(char) is True


@pytest.mark.parametrize("char", ["a", " ", "$", "'"])
def test_non_meta_characters(char):
    assert is_meta(char) is False


def test_token_kinds_and_symbols():
    assert TokenKind.PIPE == 4
    assert TokenKind.HEREDOC.symbol == "<<"
    assert Token.operator(TokenKind.APPEND).is_delimiter is True
    assert Token.word("x").is_delimiter is False


def test_words_never_delimiters(env):
    for tok in tokenize("a b c d", env):
        assert (tok.text is None) == tok.is_delimiter