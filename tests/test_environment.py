import pytest

from minishell.environment import get_env_value, init_shell, is_blank, set_env_var


def test_init_shell_copies_list():
    original = ["HOME=/home/user", "PATH=/bin"]
    state = init_shell(original)
    original.append("EXTRA=1")
    assert state.envp == ["HOME=/home/user", "PATH=/bin"]
    assert state.last_exit_status == 0
    assert state.should_exit is False


def test_init_shell_from_mapping():
    state = init_shell({"A": "1", "B": "two"})
    assert state.envp == ["A=1", "B=two"]


def test_get_env_value_found():
    state = init_shell(["HOME=/home/user", "PATH=/bin:/usr/bin"])
    assert get_env_value(state, "PATH") == "/bin:/usr/bin"


def test_get_env_value_missing_is_empty():
    state = init_shell(["HOME=/home/user"])
    assert get_env_value(state, "NOPE") == ""


def test_get_env_value_none_name():
    state = init_shell(["HOME=/home/user"])
    assert get_env_value(state, None) == ""


def test_get_env_value_does_not_match_prefix_of_longer_name():
    state = init_shell(["PATHX=wrong", "PATH=right"])
    assert get_env_value(state, "PATH") == "right"
    assert get_env_value(state, "PAT") == ""


def test_get_env_value_keeps_equals_in_value():
    state = init_shell(["OPTS=a=b=c"])
    assert get_env_value(state, "OPTS") == "a=b=c"


@pytest.mark.parametrize("status", [0, 1, 127, 258])
def test_question_mark_is_last_status(status):
    state = init_shell([])
    state.last_exit_status = status
    assert get_env_value(state, "?") == str(status)


def test_set_env_var_replaces_in_place():
    state = init_shell(["A=1", "B=2", "C=3"])
    set_env_var(state, "B", "new")
    assert state.envp == ["A=1", "B=new", "C=3"]


def test_set_env_var_appends_when_missing():
    state = init_shell(["A=1"])
    set_env_var(state, "OLDPWD", "")
    assert state.envp == ["A=1", "OLDPWD="]


def test_set_then_get_round_trip():
    state = init_shell([])
    set_env_var(state, "PWD", "/tmp/work")
    set_env_var(state, "PWD", "/tmp/other")
    assert get_env_value(state, "PWD") == "/tmp/other"
    assert len(state.envp) == 1


@pytest.mark.parametrize("text", [None, "", "   ", " \t\n\v\f\r"])
def test_is_blank_true(text):
    assert is_blank(text) is True


@pytest.mark.parametrize("text", ["a", "  x  ", "\tls"])
def test_is_blank_false(text):
    assert is_blank(text) is False