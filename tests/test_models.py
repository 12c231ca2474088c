import pytest

from minishell.models import (
    Command,
    RedirType,
    Redirection,
    ShellState,
    Token,
    TokenType,
)


@pytest.mark.parametrize(
    "token_type, expected",
    [
        (TokenType.WORD, False),
        (TokenType.PIPE, False),
        (TokenType.IN, True),
        (TokenType.OUT, True),
        (TokenType.APPEND_OUT, True),
        (TokenType.HEREDOC, True),
    ],
)
def test_is_redirection(token_type, expected):
    assert token_type.is_redirection is expected


@pytest.mark.parametrize(
    "token_type, redir_type",
    [
        (TokenType.IN, RedirType.IN),
        (TokenType.OUT, RedirType.OUT),
        (TokenType.APPEND_OUT, RedirType.APPEND),
        (TokenType.HEREDOC, RedirType.HEREDOC),
    ],
)
def test_redir_type_from_token(token_type, redir_type):
    assert RedirType.from_token(token_type) is redir_type


@pytest.mark.parametrize("token_type", [TokenType.WORD, TokenType.PIPE])
def test_redir_type_from_non_operator_raises(token_type):
    with pytest.raises(ValueError):
        RedirType.from_token(token_type)


def test_command_name_is_first_argument():
    cmd = Command(args=["ls", "-l"])
    assert cmd.name == "ls"


def test_command_without_args_has_no_name():
    assert Command().name is None


def test_command_defaults_are_independent():
    first = Command()
    second = Command()
    first.args.append("echo")
    first.redirections.append(Redirection(RedirType.OUT, "out"))
    assert second.args == []
    assert second.redirections == []


def test_redirection_keeps_fields():
    redir = Redirection(RedirType.HEREDOC, "EOF", expand_heredoc_content=True)
    assert redir.type is RedirType.HEREDOC
    assert redir.file == "EOF"
    assert redir.expand_heredoc_content is True


def test_token_equality():
    assert Token("|", TokenType.PIPE) == Token("|", TokenType.PIPE)
    assert Token("|", TokenType.PIPE) != Token("|", TokenType.WORD)


def test_shell_state_defaults_and_independence():
    a = ShellState()
    b = ShellState()
    a.envp.append("A=1")
    assert b.envp == []
    assert a.last_exit_status == 0
    assert a.should_exit is False