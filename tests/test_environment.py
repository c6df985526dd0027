import pytest

from minishell.environment import Environment, expand, is_valid_env, lookup_variable


@pytest.fixture
def env():
    return Environment(["HOME=/home/u", "USER=alice", "EMPTY="])


def test_to_envp_round_trip(env):
    assert env.to_envp() == ["HOME=/home/u", "USER=alice", "EMPTY="]
    assert Environment(env.to_envp()).to_envp() == env.to_envp()


def test_status_key_is_hidden_from_envp(env):
    env.set("?", "3")
    assert env.get("?") == "3"
    assert all(not entry.startswith("?=") for entry in env.to_envp())


def test_register_splits_on_first_equal_and_skips_bare_names():
    env = Environment(["A=b=c", "NOEQUAL"])
    assert env.get("A") == "b=c"
    assert "NOEQUAL" not in env
    assert len(env) == 1


def test_register_replaces_existing(env):
    env.register(["HOME=/root"])
    assert env.get("HOME") == "/root"
    assert env.to_envp()[-1] == "HOME=/root"


def test_set_get_delete(env):
    env.set("X", "1")
    assert env.get("X") == "1"
    env.delete("X")
    assert env.get("X") is None
    env.delete("X")
    assert "X" not in env


def test_expand_variable(env):
    assert expand("$HOME/x", env) == "/home/u/x"
    assert expand("hi $USER!", env) == "hi alice!"


def test_expand_missing_variable_is_empty(env):
    assert expand("$MISSING end", env) == " end"


def test_expand_status(env):
    assert expand("$?", env) == "0"
    env.set("?", "5")
    assert expand("code $?", env) == "code 5"


def test_expand_leaves_non_references(env):
    assert expand("$", env) == "$"
    assert expand("a $ b", env) == "a $ b"
    assert expand("$_X", env) == "$_X"


def test_expand_rescans_values():
    env = Environment(["A=$B", "B=done"])
    assert expand("$A", env) == "done"


def test_lookup_variable(env):
    assert lookup_variable("HOME/rest", env) == "/home/u"
    assert lookup_variable("NOPE", env) is None
    env.set("?", "7")
    assert lookup_variable("?xyz", env) == "7"


@pytest.mark.parametrize(
    "name, expected",
    [("", False), (None, False), ("A1_", True), ("1AB", True), ("A-B", False), ("A B", False)],
)
def test_is_valid_env(name, expected):
    assert is_valid_env(name) is expected